"""High-level pseudo-top producer for generator-level events."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .classify import classify_final_states, find_b_hadrons
from .clustering import FastJetClusterer, JetClusterer
from .dressing import LeptonDresser
from .jets import JetBuilder
from .models import EventInput, GenParticle, PseudoTopConfig, PseudoTopResult
from .topology import TopologyReconstructor

logger = logging.getLogger(__name__)


@dataclass
class PseudoTopProducer:
    """Run object selection, clustering and top reconstruction per event.

    The producer holds configuration only; every call builds its outputs
    from scratch, so one instance can serve any number of events.
    """

    config: PseudoTopConfig = field(default_factory=PseudoTopConfig)
    clusterer: JetClusterer = field(default_factory=FastJetClusterer)

    def produce(
        self,
        final_states: Sequence[GenParticle],
        gen_particles: Sequence[GenParticle],
        event_id: str | None = None,
    ) -> PseudoTopResult:
        """Build neutrinos, dressed leptons, jets and the pseudo-top tree.

        Workflow:
        1. Index b hadrons in the generator record.
        2. Partition stable particles into lepton candidates and neutrinos.
        3. Dress leptons with a small-cone clustering.
        4. Cluster the remaining particles plus b-hadron ghosts into jets.
        5. Reconstruct the ttbar decay tree (empty when not possible).
        """
        b_hadrons = find_b_hadrons(gen_particles)
        selection = classify_final_states(final_states, gen_particles)
        dressing = LeptonDresser(self.config, self.clusterer).dress(
            final_states, selection.lepton_candidates
        )
        jets = JetBuilder(self.config, self.clusterer).build(
            final_states,
            gen_particles,
            b_hadrons=b_hadrons,
            used_indices=dressing.used_indices,
        )
        pseudo_top = TopologyReconstructor.from_config(self.config).reconstruct(
            dressing.leptons, selection.neutrinos, jets
        )
        logger.debug(
            "Event %s: %d leptons, %d neutrinos, %d jets, %d pseudo-top particles.",
            event_id,
            len(dressing.leptons),
            len(selection.neutrinos),
            len(jets),
            len(pseudo_top),
        )
        return PseudoTopResult(
            neutrinos=selection.neutrinos,
            leptons=dressing.leptons,
            jets=jets,
            pseudo_top=pseudo_top,
            event_id=event_id,
        )

    def produce_events(self, events: Sequence[EventInput]) -> list[PseudoTopResult]:
        """Run `produce` on a list of events, keeping input order."""
        return [
            self.produce(
                final_states=event.final_states,
                gen_particles=event.gen_particles,
                event_id=event.event_id,
            )
            for event in events
        ]
