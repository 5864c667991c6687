"""Generator-record scans: b-hadron index and final-state partition."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .models import STATUS_FINAL, STATUS_INCIDENT_BEAM, GenParticle
from .pid import PDG_PHOTON, is_b_hadron, is_charged_lepton, is_neutrino

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinalStateSelection:
    """Partition of the stable final states of one event.

    `neutrinos` are sorted by descending pT; `lepton_candidates` holds the
    final-state indices of charged leptons and photons to be dressed. All
    other stable particles are left for jet building.
    """

    neutrinos: tuple[GenParticle, ...]
    lepton_candidates: tuple[int, ...]


def find_b_hadrons(gen_particles: Sequence[GenParticle]) -> frozenset[int]:
    """Return generator indices of unstable b hadrons without b-hadron daughters."""
    return frozenset(
        idx
        for idx, p in enumerate(gen_particles)
        if p.status != STATUS_FINAL and is_b_hadron(p, gen_particles)
    )


def is_from_hadron(particle: GenParticle, gen_particles: Sequence[GenParticle]) -> bool:
    """Return True if any ancestor has |pdg_id| > 100.

    Ancestors without mothers of their own (incident beam particles) are
    not considered.
    """
    stack = list(particle.mothers)
    seen: set[int] = set()
    while stack:
        idx = stack.pop()
        if idx in seen:
            continue
        seen.add(idx)
        mother = gen_particles[idx]
        if not mother.mothers:
            continue
        if abs(mother.pdg_id) > 100:
            return True
        stack.extend(mother.mothers)
    return False


def classify_final_states(
    final_states: Sequence[GenParticle],
    gen_particles: Sequence[GenParticle],
) -> FinalStateSelection:
    """Select prompt leptons, photons and neutrinos from the stable particles."""
    neutrinos: list[GenParticle] = []
    lepton_candidates: list[int] = []
    for idx, p in enumerate(final_states):
        if p.status != STATUS_FINAL:
            continue
        if not p.mothers:
            continue  # orphan
        # Particles attached directly to the incident beam are treated as hadronic.
        if gen_particles[p.mothers[0]].status == STATUS_INCIDENT_BEAM:
            continue
        if is_from_hadron(p, gen_particles):
            continue
        if is_charged_lepton(p.pdg_id) or abs(p.pdg_id) == PDG_PHOTON:
            lepton_candidates.append(idx)
        elif is_neutrino(p.pdg_id):
            neutrinos.append(p)
    neutrinos.sort(key=lambda nu: nu.p4.pt, reverse=True)
    logger.debug(
        "Selected %d lepton/photon candidates and %d neutrinos out of %d final states.",
        len(lepton_candidates),
        len(neutrinos),
        len(final_states),
    )
    return FinalStateSelection(
        neutrinos=tuple(neutrinos),
        lepton_candidates=tuple(lepton_candidates),
    )
