"""PDG particle-code helpers used by the object selection.

Codes follow the 7-digit numbering scheme `+-n nr nL nq1 nq2 nq3 nJ`; only
the quark-content digits are needed here.
"""

from __future__ import annotations

from typing import Sequence

from .models import GenParticle

PDG_DOWN = 1
PDG_UP = 2
PDG_BOTTOM = 5
PDG_TOP = 6
PDG_ELECTRON = 11
PDG_MUON = 13
PDG_PHOTON = 22
PDG_W = 24

CHARGED_LEPTONS = frozenset({PDG_ELECTRON, PDG_MUON})
NEUTRINOS = frozenset({12, 14, 16})

_NUCLEUS_CODE_MIN = 1_000_000_000


def quark_digits(abs_pdg_id: int) -> tuple[int, int, int]:
    """Return the `(nq1, nq2, nq3)` quark-content digits of a PDG code."""
    nq3 = (abs_pdg_id // 10) % 10
    nq2 = (abs_pdg_id // 100) % 10
    nq1 = (abs_pdg_id // 1000) % 10
    return nq1, nq2, nq3


def is_b_hadron_code(pdg_id: int) -> bool:
    """Return True for meson or baryon codes containing a b quark."""
    code = abs(pdg_id)
    if code <= 100:
        return False  # fundamental particles and generator internals
    if code >= _NUCLEUS_CODE_MIN:
        return False
    nq1, nq2, nq3 = quark_digits(code)
    if nq3 == 0:
        return False  # diquarks
    if nq1 == 0 and nq2 == PDG_BOTTOM:
        return True  # B mesons
    return nq1 == PDG_BOTTOM  # B baryons


def is_b_hadron(particle: GenParticle, gen_particles: Sequence[GenParticle]) -> bool:
    """Return True for a b hadron with no b-hadron daughter.

    Excited states decaying promptly into a ground-state b hadron
    (e.g. B* -> B gamma) are left out so each b quark is counted once.
    """
    if not is_b_hadron_code(particle.pdg_id):
        return False
    return not any(is_b_hadron_code(gen_particles[d].pdg_id) for d in particle.daughters)


def is_charged_lepton(pdg_id: int) -> bool:
    return abs(pdg_id) in CHARGED_LEPTONS


def is_neutrino(pdg_id: int) -> bool:
    return abs(pdg_id) in NEUTRINOS
