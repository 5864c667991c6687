"""Core data models used by the pseudo-top reconstruction.

This module defines:
- immutable kinematics (`LorentzVector`)
- generator-record particles and event containers (`GenParticle`, `EventInput`)
- clustered outputs (`DressedLepton`, `TaggedJet`)
- synthetic decay-tree particles (`PseudoParticle`)
- per-event outputs (`PseudoTopResult`)
- configurable thresholds and reference masses (`PseudoTopConfig`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any

STATUS_FINAL = 1
STATUS_DECAYED = 3
STATUS_INCIDENT_BEAM = 4


@dataclass(frozen=True)
class LorentzVector:
    """Simple 4-vector with convenience properties and addition."""

    px: float
    py: float
    pz: float
    e: float

    def __add__(self, other: "LorentzVector") -> "LorentzVector":
        """Component-wise 4-vector addition."""
        return LorentzVector(
            self.px + other.px,
            self.py + other.py,
            self.pz + other.pz,
            self.e + other.e,
        )

    def scaled(self, factor: float) -> "LorentzVector":
        """Return all four components multiplied by `factor`."""
        return LorentzVector(
            self.px * factor,
            self.py * factor,
            self.pz * factor,
            self.e * factor,
        )

    @property
    def p2(self) -> float:
        """Squared 3-momentum magnitude."""
        return self.px * self.px + self.py * self.py + self.pz * self.pz

    @property
    def p(self) -> float:
        """3-momentum magnitude."""
        return math.sqrt(self.p2)

    @property
    def pt(self) -> float:
        """Transverse momentum."""
        return math.hypot(self.px, self.py)

    @property
    def eta(self) -> float:
        """Pseudorapidity, clamped to +-1e9 along the beam axis."""
        p = self.p
        if p == abs(self.pz):
            return 1e9 if self.pz >= 0 else -1e9
        return 0.5 * math.log((p + self.pz) / (p - self.pz))

    @property
    def phi(self) -> float:
        """Azimuthal angle in (-pi, pi]."""
        if self.px == 0.0 and self.py == 0.0:
            return 0.0
        return math.atan2(self.py, self.px)

    @property
    def mass2(self) -> float:
        """Invariant mass squared."""
        return self.e * self.e - self.p2

    @property
    def mass(self) -> float:
        """Invariant mass with signed handling for small negative mass2 values."""
        m2 = self.mass2
        return m2**0.5 if m2 >= 0.0 else -((-m2) ** 0.5)


@dataclass(frozen=True)
class GenParticle:
    """One entry of a generator record.

    `mothers` and `daughters` are indices into the generator-particle
    collection of the same event. Final-state particles use the same schema
    and point into that collection as well.
    """

    p4: LorentzVector
    pdg_id: int
    charge: float = 0.0
    status: int = STATUS_FINAL
    mothers: tuple[int, ...] = ()
    daughters: tuple[int, ...] = ()


@dataclass(frozen=True)
class EventInput:
    """One event payload: full generator record plus stable final states."""

    event_id: str
    gen_particles: tuple[GenParticle, ...]
    final_states: tuple[GenParticle, ...]


@dataclass(frozen=True)
class DressedLepton:
    """Lepton cluster: charged lepton plus the photons clustered around it.

    `constituents` are final-state indices ordered by descending pT.
    """

    p4: LorentzVector
    pdg_id: int
    charge: int
    jet_area: float
    constituents: tuple[int, ...]


@dataclass(frozen=True)
class TaggedJet:
    """Hadronic jet with its heavy-flavour decision.

    `constituents` are final-state indices ordered by descending pT.
    `b_hadrons` are generator indices of the ghost hadrons clustered into it.
    """

    p4: LorentzVector
    jet_area: float
    constituents: tuple[int, ...]
    b_hadrons: tuple[int, ...] = ()
    pdg_id: int = 0

    @property
    def is_b_tagged(self) -> bool:
        """True when at least one b-hadron ghost ended up in this jet."""
        return bool(self.b_hadrons)


@dataclass(frozen=True)
class PseudoParticle:
    """Synthetic decay-tree particle; links are indices in the output list."""

    p4: LorentzVector
    pdg_id: int
    charge: float
    status: int
    mothers: tuple[int, ...] = ()
    daughters: tuple[int, ...] = ()


@dataclass(frozen=True)
class PseudoTopResult:
    """All output collections produced for one event."""

    neutrinos: tuple[GenParticle, ...]
    leptons: tuple[DressedLepton, ...]
    jets: tuple[TaggedJet, ...]
    pseudo_top: tuple[PseudoParticle, ...]
    event_id: str | None = None

    @property
    def b_jets(self) -> tuple[TaggedJet, ...]:
        return tuple(j for j in self.jets if j.is_b_tagged)

    @property
    def light_jets(self) -> tuple[TaggedJet, ...]:
        return tuple(j for j in self.jets if not j.is_b_tagged)


@dataclass(frozen=True)
class PseudoTopConfig:
    """Object-selection thresholds, cone sizes, and reference masses (GeV)."""

    lepton_min_pt: float = 20.0
    lepton_max_eta: float = 2.4
    lepton_cone_size: float = 0.1
    jet_min_pt: float = 30.0
    jet_max_eta: float = 2.4
    jet_cone_size: float = 0.4
    w_mass: float = 80.4
    t_mass: float = 172.5

    def __post_init__(self) -> None:
        for name in ("lepton_min_pt", "jet_min_pt"):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)!r}.")
        for name in (
            "lepton_max_eta",
            "jet_max_eta",
            "lepton_cone_size",
            "jet_cone_size",
            "w_mass",
            "t_mass",
        ):
            if not getattr(self, name) > 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}.")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "PseudoTopConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unknown configuration key(s): {', '.join(unknown)}. "
                f"Supported keys: {', '.join(sorted(known))}"
            )
        return cls(**{k: float(v) for k, v in data.items()})
