"""Dressed-lepton building: charged leptons clustered with nearby photons."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .clustering import ClusterInput, JetClusterer, is_clusterable
from .models import DressedLepton, GenParticle, PseudoTopConfig
from .pid import is_charged_lepton

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DressingResult:
    """Dressed leptons plus every final-state index consumed by them."""

    leptons: tuple[DressedLepton, ...]
    used_indices: frozenset[int]


@dataclass
class LeptonDresser:
    """Cluster lepton/photon candidates with a small cone and keep lepton-seeded clusters."""

    config: PseudoTopConfig
    clusterer: JetClusterer

    def dress(
        self,
        final_states: Sequence[GenParticle],
        lepton_candidates: Sequence[int],
    ) -> DressingResult:
        """Build dressed leptons from the candidate final-state indices.

        Clusters failing the pT/eta selection, or made of photons only, are
        dropped and their constituents stay available for jet building.
        """
        inputs = [
            ClusterInput(p4=final_states[idx].p4, index=idx)
            for idx in lepton_candidates
            if is_clusterable(final_states[idx].p4)
        ]
        clusters = self.clusterer.cluster(
            inputs,
            cone_size=self.config.lepton_cone_size,
            min_pt=self.config.lepton_min_pt,
        )

        leptons: list[DressedLepton] = []
        used: set[int] = set()
        for cluster in clusters:
            if abs(cluster.p4.eta) > self.config.lepton_max_eta:
                continue
            donor: GenParticle | None = None
            for constituent in cluster.constituents:
                cand = final_states[constituent.index]
                if not is_charged_lepton(cand.pdg_id):
                    continue
                if donor is None or cand.p4.pt > donor.p4.pt:
                    donor = cand
            if donor is None:
                logger.debug("Dropping photon-only cluster with pt=%.3f.", cluster.p4.pt)
                continue

            constituents = tuple(c.index for c in cluster.constituents)
            leptons.append(
                DressedLepton(
                    p4=cluster.p4,
                    pdg_id=donor.pdg_id,
                    charge=int(round(donor.charge)),
                    jet_area=cluster.area,
                    constituents=constituents,
                )
            )
            used.update(constituents)
        return DressingResult(leptons=tuple(leptons), used_indices=frozenset(used))
