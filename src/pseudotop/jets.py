"""Hadronic jet building with ghost-associated b-hadron tagging."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Collection, Sequence

from .clustering import ClusterInput, JetClusterer, is_clusterable
from .models import STATUS_FINAL, GenParticle, PseudoTopConfig, TaggedJet
from .pid import PDG_BOTTOM, is_neutrino

logger = logging.getLogger(__name__)

GHOST_SCALE = 1e-20


@dataclass
class JetBuilder:
    """Cluster stable hadronic activity plus b-hadron ghosts into jets."""

    config: PseudoTopConfig
    clusterer: JetClusterer

    def build(
        self,
        final_states: Sequence[GenParticle],
        gen_particles: Sequence[GenParticle],
        b_hadrons: Collection[int],
        used_indices: Collection[int] = frozenset(),
    ) -> tuple[TaggedJet, ...]:
        """Return jets passing the pT/eta selection, ordered by descending pT.

        Neutrinos and constituents of dressed leptons (`used_indices`) are
        excluded. Each b hadron enters as a ghost: its direction is kept and
        its momentum scaled to `GHOST_SCALE`, so it can only tag a jet.
        """
        inputs: list[ClusterInput] = []
        for idx, p in enumerate(final_states):
            if p.status != STATUS_FINAL:
                continue
            if not is_clusterable(p.p4):
                continue
            if is_neutrino(p.pdg_id) or idx in used_indices:
                continue
            inputs.append(ClusterInput(p4=p.p4, index=idx))
        for idx in sorted(b_hadrons):
            p4 = gen_particles[idx].p4
            if not is_clusterable(p4):
                continue
            inputs.append(ClusterInput(p4=p4.scaled(GHOST_SCALE / p4.p), index=idx, is_ghost=True))

        clusters = self.clusterer.cluster(
            inputs,
            cone_size=self.config.jet_cone_size,
            min_pt=self.config.jet_min_pt,
        )
        jets: list[TaggedJet] = []
        for cluster in clusters:
            if abs(cluster.p4.eta) > self.config.jet_max_eta:
                continue
            visible = tuple(c.index for c in cluster.constituents if not c.is_ghost)
            ghosts = tuple(c.index for c in cluster.constituents if c.is_ghost)
            jets.append(
                TaggedJet(
                    p4=cluster.p4,
                    jet_area=cluster.area,
                    constituents=visible,
                    b_hadrons=ghosts,
                    pdg_id=PDG_BOTTOM if ghosts else 0,
                )
            )
        logger.debug(
            "Built %d jets (%d b-tagged) from %d inputs.",
            len(jets),
            sum(1 for j in jets if j.is_b_tagged),
            len(inputs),
        )
        return tuple(jets)
