"""Pseudo-top decay-tree reconstruction from dressed leptons, neutrinos and jets.

Two channels are attempted, in order:
- dilepton: exactly two opposite-sign leptons and at least two neutrinos.
- semileptonic: exactly one lepton, at least one neutrino and two light jets.
Both need at least two b-tagged jets. Each W and top assignment minimizes the
summed distance of the two candidate masses to the reference masses.
"""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import logging
import math
from dataclasses import dataclass, replace
from itertools import combinations, product
from typing import Any, Callable, Hashable, Iterable, Iterator, Sequence

from .models import (
    STATUS_DECAYED,
    STATUS_FINAL,
    DressedLepton,
    GenParticle,
    LorentzVector,
    PseudoParticle,
    PseudoTopConfig,
    TaggedJet,
)
from .pid import PDG_BOTTOM, PDG_DOWN, PDG_TOP, PDG_UP, PDG_W

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MassMatch:
    """Best assignment found by `minimize_mass_residual`."""

    first: Any
    second: Any
    residual: float


def iter_ordered_pairs(n: int) -> Iterator[tuple[int, int]]:
    """Yield `(i, j)` over `range(n)` with `i != j`, both orders included."""
    for i in range(n):
        for j in range(n):
            if i != j:
                yield i, j


def iter_unordered_pairs(n: int) -> Iterator[tuple[int, int]]:
    """Yield `(i, j)` over `range(n)` with `i < j`."""
    return combinations(range(n), 2)


def minimize_mass_residual(
    pairs: Iterable[tuple[Hashable, Hashable]],
    first: Callable[[Any], LorentzVector],
    second: Callable[[Any], LorentzVector],
    first_target: float,
    second_target: float,
) -> MassMatch | None:
    """Return the pair minimizing `|m(first(a)) - m1| + |m(second(b)) - m2|`.

    Ties keep the earliest pair. Returns None when `pairs` is empty or no
    pair yields a finite residual.
    """
    best: MassMatch | None = None
    best_residual = math.inf
    for a, b in pairs:
        residual = abs(first(a).mass - first_target) + abs(second(b).mass - second_target)
        if residual < best_residual:
            best_residual = residual
            best = MassMatch(first=a, second=b, residual=residual)
    return best


@dataclass(frozen=True)
class TopDecay:
    """One `t -> W b, W -> x y` branch before flattening."""

    top: PseudoParticle
    w: PseudoParticle
    b: PseudoParticle
    w_daughters: tuple[PseudoParticle, PseudoParticle]


@dataclass(frozen=True)
class DecayTree:
    """Complete ttbar tree: the top (+2/3) branch and the antitop branch."""

    top: TopDecay
    antitop: TopDecay

    def flatten(self) -> tuple[PseudoParticle, ...]:
        """Emit the ten particles with mother/daughter indices resolved.

        Layout: t, tbar, W+, b, W+ daughters (2), W-, bbar, W- daughters (2).
        """
        out: list[PseudoParticle] = [
            replace(self.top.top, daughters=(2, 3)),
            replace(self.antitop.top, daughters=(6, 7)),
        ]
        for top_idx, branch in ((0, self.top), (1, self.antitop)):
            w_idx = len(out)
            out.append(replace(branch.w, mothers=(top_idx,), daughters=(w_idx + 2, w_idx + 3)))
            out.append(replace(branch.b, mothers=(top_idx,)))
            out.extend(replace(d, mothers=(w_idx,)) for d in branch.w_daughters)
        return tuple(out)


def _build_branch(
    sign: int,
    w_p4: LorentzVector,
    b_jet: TaggedJet,
    w_daughters: tuple[PseudoParticle, PseudoParticle],
) -> TopDecay:
    """Build a top (`sign=+1`) or antitop (`sign=-1`) branch."""
    return TopDecay(
        top=PseudoParticle(
            p4=w_p4 + b_jet.p4, pdg_id=sign * PDG_TOP, charge=sign * 2.0 / 3.0, status=STATUS_DECAYED
        ),
        w=PseudoParticle(p4=w_p4, pdg_id=sign * PDG_W, charge=float(sign), status=STATUS_DECAYED),
        b=PseudoParticle(
            p4=b_jet.p4, pdg_id=sign * PDG_BOTTOM, charge=-sign / 3.0, status=STATUS_FINAL
        ),
        w_daughters=w_daughters,
    )


def _leptonic_daughters(
    lepton: DressedLepton, neutrino: GenParticle
) -> tuple[PseudoParticle, PseudoParticle]:
    return (
        PseudoParticle(
            p4=lepton.p4, pdg_id=lepton.pdg_id, charge=float(lepton.charge), status=STATUS_FINAL
        ),
        PseudoParticle(p4=neutrino.p4, pdg_id=neutrino.pdg_id, charge=0.0, status=STATUS_FINAL),
    )


def _hadronic_daughters(
    sign: int, jet1: TaggedJet, jet2: TaggedJet
) -> tuple[PseudoParticle, PseudoParticle]:
    # W+ -> u dbar, W- -> ubar d
    return (
        PseudoParticle(
            p4=jet1.p4, pdg_id=sign * PDG_UP, charge=sign * 2.0 / 3.0, status=STATUS_FINAL
        ),
        PseudoParticle(
            p4=jet2.p4, pdg_id=-sign * PDG_DOWN, charge=sign / 3.0, status=STATUS_FINAL
        ),
    )


def _by_sign(sign: int, branch: TopDecay, other: TopDecay) -> DecayTree:
    if sign > 0:
        return DecayTree(top=branch, antitop=other)
    return DecayTree(top=other, antitop=branch)


@dataclass
class TopologyReconstructor:
    """Assign leptons, neutrinos and jets to W and top hypotheses."""

    w_mass: float
    t_mass: float

    @classmethod
    def from_config(cls, config: PseudoTopConfig) -> "TopologyReconstructor":
        return cls(w_mass=config.w_mass, t_mass=config.t_mass)

    def reconstruct(
        self,
        leptons: Sequence[DressedLepton],
        neutrinos: Sequence[GenParticle],
        jets: Sequence[TaggedJet],
    ) -> tuple[PseudoParticle, ...]:
        """Return the flattened ten-particle tree, or an empty tuple."""
        tree = self.build_tree(leptons, neutrinos, jets)
        if tree is None:
            return ()
        return tree.flatten()

    def build_tree(
        self,
        leptons: Sequence[DressedLepton],
        neutrinos: Sequence[GenParticle],
        jets: Sequence[TaggedJet],
    ) -> DecayTree | None:
        b_jets = [j for j in jets if j.is_b_tagged]
        light_jets = [j for j in jets if not j.is_b_tagged]
        if len(b_jets) < 2:
            logger.debug("No pseudo-top: %d b-tagged jets.", len(b_jets))
            return None
        if len(leptons) == 2 and len(neutrinos) >= 2:
            return self._dilepton(leptons, neutrinos, b_jets)
        if len(leptons) == 1 and len(neutrinos) >= 1:
            return self._semileptonic(leptons[0], neutrinos, light_jets, b_jets)
        logger.debug(
            "No pseudo-top channel for %d leptons and %d neutrinos.", len(leptons), len(neutrinos)
        )
        return None

    def _match_b_jets(
        self, w1: LorentzVector, w2: LorentzVector, b_jets: Sequence[TaggedJet]
    ) -> MassMatch | None:
        return minimize_mass_residual(
            iter_ordered_pairs(len(b_jets)),
            first=lambda i: w1 + b_jets[i].p4,
            second=lambda j: w2 + b_jets[j].p4,
            first_target=self.t_mass,
            second_target=self.t_mass,
        )

    def _dilepton(
        self,
        leptons: Sequence[DressedLepton],
        neutrinos: Sequence[GenParticle],
        b_jets: Sequence[TaggedJet],
    ) -> DecayTree | None:
        if leptons[0].charge * leptons[1].charge > 0:
            logger.debug("No pseudo-top: same-sign dilepton pair.")
            return None
        lep_pos, lep_neg = leptons if leptons[0].charge > 0 else (leptons[1], leptons[0])

        nu_match = minimize_mass_residual(
            iter_ordered_pairs(len(neutrinos)),
            first=lambda i: lep_pos.p4 + neutrinos[i].p4,
            second=lambda j: lep_neg.p4 + neutrinos[j].p4,
            first_target=self.w_mass,
            second_target=self.w_mass,
        )
        if nu_match is None:
            logger.debug("No pseudo-top: no lepton-neutrino assignment.")
            return None
        nu_pos = neutrinos[nu_match.first]
        nu_neg = neutrinos[nu_match.second]
        w_pos = lep_pos.p4 + nu_pos.p4
        w_neg = lep_neg.p4 + nu_neg.p4

        b_match = self._match_b_jets(w_pos, w_neg, b_jets)
        if b_match is None:
            logger.debug("No pseudo-top: no b-jet assignment.")
            return None
        logger.debug("Dilepton pseudo-top built, top residual %.3f.", b_match.residual)
        return DecayTree(
            top=_build_branch(+1, w_pos, b_jets[b_match.first], _leptonic_daughters(lep_pos, nu_pos)),
            antitop=_build_branch(
                -1, w_neg, b_jets[b_match.second], _leptonic_daughters(lep_neg, nu_neg)
            ),
        )

    def _semileptonic(
        self,
        lepton: DressedLepton,
        neutrinos: Sequence[GenParticle],
        light_jets: Sequence[TaggedJet],
        b_jets: Sequence[TaggedJet],
    ) -> DecayTree | None:
        w_match = minimize_mass_residual(
            product(range(len(neutrinos)), iter_unordered_pairs(len(light_jets))),
            first=lambda i: lepton.p4 + neutrinos[i].p4,
            second=lambda jj: light_jets[jj[0]].p4 + light_jets[jj[1]].p4,
            first_target=self.w_mass,
            second_target=self.w_mass,
        )
        if w_match is None:
            logger.debug("No pseudo-top: no leptonic/hadronic W assignment.")
            return None
        neutrino = neutrinos[w_match.first]
        jet1, jet2 = (light_jets[k] for k in w_match.second)
        w_lep = lepton.p4 + neutrino.p4
        w_had = jet1.p4 + jet2.p4

        b_match = self._match_b_jets(w_lep, w_had, b_jets)
        if b_match is None:
            logger.debug("No pseudo-top: no b-jet assignment.")
            return None
        sign = 1 if lepton.charge > 0 else -1
        leptonic = _build_branch(
            sign, w_lep, b_jets[b_match.first], _leptonic_daughters(lepton, neutrino)
        )
        hadronic = _build_branch(
            -sign, w_had, b_jets[b_match.second], _hadronic_daughters(-sign, jet1, jet2)
        )
        logger.debug("Semileptonic pseudo-top built, top residual %.3f.", b_match.residual)
        return _by_sign(sign, leptonic, hadronic)
