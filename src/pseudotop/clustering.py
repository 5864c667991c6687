"""Thin adapter between labelled 4-vectors and the FastJet clustering engine.

Both clustering passes (lepton dressing and hadronic jets) go through
`JetClusterer.cluster`; only the input set, cone size and pT threshold change.
"""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import math
from dataclasses import dataclass
from typing import Protocol, Sequence

import fastjet

from .models import LorentzVector


@dataclass(frozen=True)
class ClusterInput:
    """Clustering input with a back-reference to the collection it came from.

    `index` points into the final-state collection, or into the generator
    collection when `is_ghost` is set.
    """

    p4: LorentzVector
    index: int
    is_ghost: bool = False


@dataclass(frozen=True)
class ClusteredJet:
    """Clustering output; constituents are ordered by descending pT."""

    p4: LorentzVector
    area: float
    constituents: tuple[ClusterInput, ...]


class JetClusterer(Protocol):
    def cluster(
        self, inputs: Sequence[ClusterInput], cone_size: float, min_pt: float
    ) -> list[ClusteredJet]:
        """Cluster `inputs` and return jets above `min_pt`, sorted by descending pT."""
        ...


def is_clusterable(p4: LorentzVector) -> bool:
    """Reject 4-vectors with non-finite or non-positive transverse momentum."""
    pt = p4.pt
    return math.isfinite(pt) and pt > 0.0


@dataclass
class FastJetClusterer:
    """`JetClusterer` backed by the FastJet Python bindings (anti-kt by default)."""

    algorithm: int = fastjet.antikt_algorithm

    def cluster(
        self, inputs: Sequence[ClusterInput], cone_size: float, min_pt: float
    ) -> list[ClusteredJet]:
        if not inputs:
            return []
        pseudojets = []
        for position, item in enumerate(inputs):
            pj = fastjet.PseudoJet(item.p4.px, item.p4.py, item.p4.pz, item.p4.e)
            # user_index is the position in `inputs`, resolved back below.
            pj.set_user_index(position)
            pseudojets.append(pj)

        jet_def = fastjet.JetDefinition(self.algorithm, cone_size)
        # The sequence must outlive every constituents() call on its jets.
        sequence = fastjet.ClusterSequence(pseudojets, jet_def)
        out: list[ClusteredJet] = []
        for jet in fastjet.sorted_by_pt(sequence.inclusive_jets(min_pt)):
            constituents = tuple(
                inputs[c.user_index()] for c in fastjet.sorted_by_pt(jet.constituents())
            )
            out.append(
                ClusteredJet(
                    p4=LorentzVector(jet.px(), jet.py(), jet.pz(), jet.E()),
                    area=jet.area() if jet.has_area() else 0.0,
                    constituents=constituents,
                )
            )
        return out
