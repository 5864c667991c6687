"""End-to-end tests of the pseudo-top producer on a small dilepton ttbar record."""

from __future__ import annotations

import math
import unittest

from pseudotop import EventInput, GenParticle, LorentzVector, PseudoTopConfig, PseudoTopProducer


def _p4(pt: float, eta: float, phi: float, mass: float = 0.0) -> LorentzVector:
    """Build a 4-vector from collider coordinates."""
    px = pt * math.cos(phi)
    py = pt * math.sin(phi)
    pz = pt * math.sinh(eta)
    return LorentzVector(px, py, pz, math.sqrt(px * px + py * py + pz * pz + mass * mass))


def _gen(pdg_id, p4, status=1, mothers=(), daughters=(), charge=0.0) -> GenParticle:
    return GenParticle(
        p4=p4,
        pdg_id=pdg_id,
        charge=charge,
        status=status,
        mothers=tuple(mothers),
        daughters=tuple(daughters),
    )


def make_dilepton_event(event_id: str = "evt0") -> EventInput:
    """ttbar -> (mu+ nu b)(e- nubar bbar) with FSR, a B* -> B0 gamma chain and a stray photon."""
    zero = LorentzVector(0.0, 0.0, 0.0, 0.0)
    gen = [
        _gen(2212, LorentzVector(0.0, 0.0, 6500.0, 6500.0), status=4, daughters=(2, 3)),   # 0
        _gen(2212, LorentzVector(0.0, 0.0, -6500.0, 6500.0), status=4, daughters=(2, 3)),  # 1
        _gen(6, zero, status=62, mothers=(0, 1), daughters=(4, 5)),                        # 2 t
        _gen(-6, zero, status=62, mothers=(0, 1), daughters=(6, 7)),                       # 3 tbar
        _gen(24, zero, status=22, mothers=(2,), daughters=(8, 9)),                         # 4 W+
        _gen(5, zero, status=23, mothers=(2,), daughters=(12,)),                           # 5 b
        _gen(-24, zero, status=22, mothers=(3,), daughters=(10, 11)),                      # 6 W-
        _gen(-5, zero, status=23, mothers=(3,), daughters=(17,)),                          # 7 bbar
        _gen(-13, _p4(50.0, 0.0, 2.5), mothers=(4,), daughters=(20,), charge=1.0),         # 8 mu+
        _gen(14, _p4(60.0, 0.2, -1.0), mothers=(4,)),                                      # 9 nu_mu
        _gen(11, _p4(40.0, 1.0, -0.5), mothers=(6,), charge=-1.0),                         # 10 e-
        _gen(-12, _p4(30.0, -1.0, 0.0), mothers=(6,)),                                     # 11 nu_e bar
        _gen(513, _p4(72.0, 0.5, 1.0, 5.33), status=2, mothers=(5,), daughters=(13, 14)),  # 12 B*0
        _gen(511, _p4(70.0, 0.5, 1.0, 5.28), status=2, mothers=(12,), daughters=(15, 16)),  # 13 B0
        _gen(22, _p4(2.0, 0.52, 1.01), mothers=(12,)),                                     # 14 gamma
        _gen(211, _p4(40.0, 0.5, 1.0), mothers=(13,), charge=1.0),                         # 15
        _gen(-211, _p4(30.0, 0.5, 1.0), mothers=(13,), charge=-1.0),                       # 16
        _gen(-521, _p4(70.0, -0.5, -2.0, 5.28), status=2, mothers=(7,), daughters=(18, 19)),  # 17 B-
        _gen(211, _p4(50.0, -0.5, -2.0), mothers=(17,), charge=1.0),                       # 18
        _gen(-211, _p4(20.0, -0.5, -2.0), mothers=(17,), charge=-1.0),                     # 19
        _gen(22, _p4(5.0, 0.03, 2.52), mothers=(8,)),                                      # 20 FSR
        _gen(22, _p4(25.0, -1.5, 1.5), mothers=(4,)),                                      # 21 stray photon
    ]
    final_states = tuple(p for p in gen if p.status == 1)
    return EventInput(event_id=event_id, gen_particles=tuple(gen), final_states=final_states)


def _final_index(event: EventInput, pdg_id: int, pt: float) -> int:
    for idx, p in enumerate(event.final_states):
        if p.pdg_id == pdg_id and abs(p.p4.pt - pt) < 1e-9:
            return idx
    raise LookupError((pdg_id, pt))


class TestPseudoTopProducer(unittest.TestCase):
    """Validate every output collection of one reconstructed event."""

    @classmethod
    def setUpClass(cls) -> None:
        cls.event = make_dilepton_event()
        cls.result = PseudoTopProducer().produce(
            cls.event.final_states, cls.event.gen_particles, event_id=cls.event.event_id
        )

    def test_neutrinos_sorted_by_pt(self) -> None:
        self.assertEqual([nu.pdg_id for nu in self.result.neutrinos], [14, -12])
        pts = [nu.p4.pt for nu in self.result.neutrinos]
        self.assertEqual(pts, sorted(pts, reverse=True))

    def test_dressed_leptons(self) -> None:
        leptons = {lep.pdg_id: lep for lep in self.result.leptons}
        self.assertEqual(set(leptons), {-13, 11})
        muon = leptons[-13]
        self.assertEqual(muon.charge, 1)
        self.assertIn(_final_index(self.event, 22, 5.0), muon.constituents)
        self.assertGreater(muon.p4.pt, 50.0)
        self.assertEqual(leptons[11].charge, -1)

    def test_jets_are_b_tagged_by_ground_state_hadrons(self) -> None:
        self.assertEqual(len(self.result.jets), 2)
        self.assertEqual(len(self.result.b_jets), 2)
        self.assertEqual(self.result.light_jets, ())
        self.assertEqual(sorted(h for jet in self.result.jets for h in jet.b_hadrons), [13, 17])
        for jet in self.result.jets:
            self.assertEqual(jet.pdg_id, 5)
            visible = LorentzVector(0.0, 0.0, 0.0, 0.0)
            for idx in jet.constituents:
                visible = visible + self.event.final_states[idx].p4
            self.assertLess(abs(jet.p4.e - visible.e), 1e-9)

    def test_photon_from_hadron_decay_goes_to_jet(self) -> None:
        photon = _final_index(self.event, 22, 2.0)
        self.assertTrue(any(photon in jet.constituents for jet in self.result.jets))
        self.assertFalse(any(photon in lep.constituents for lep in self.result.leptons))

    def test_stray_photon_is_neither_lepton_nor_jet(self) -> None:
        photon = _final_index(self.event, 22, 25.0)
        for obj in self.result.leptons + self.result.jets:
            self.assertNotIn(photon, obj.constituents)

    def test_pseudo_top_tree(self) -> None:
        particles = self.result.pseudo_top
        self.assertEqual(len(particles), 10)
        self.assertEqual([p.pdg_id for p in particles[:5]], [6, -6, 24, 5, -13])
        self.assertEqual([p.pdg_id for p in particles[6:9]], [-24, -5, 11])
        self.assertIn(particles[5].pdg_id, (14, -12))
        self.assertEqual(particles[0].daughters, (2, 3))
        self.assertEqual(particles[2].mothers, (0,))
        self.assertEqual(particles[3].mothers, (0,))

    def test_rerun_is_identical(self) -> None:
        again = PseudoTopProducer().produce(
            self.event.final_states, self.event.gen_particles, event_id=self.event.event_id
        )
        self.assertEqual(again, self.result)

    def test_tight_jet_cut_leaves_empty_topology(self) -> None:
        result = PseudoTopProducer(config=PseudoTopConfig(jet_min_pt=71.0)).produce(
            self.event.final_states, self.event.gen_particles
        )
        self.assertLess(len(result.b_jets), 2)
        self.assertEqual(result.pseudo_top, ())
        self.assertEqual(len(result.leptons), 2)

    def test_produce_events_keeps_order(self) -> None:
        events = [make_dilepton_event("a"), make_dilepton_event("b")]
        results = PseudoTopProducer().produce_events(events)
        self.assertEqual([r.event_id for r in results], ["a", "b"])
        self.assertEqual(results[0].pseudo_top, self.result.pseudo_top)


if __name__ == "__main__":
    unittest.main()
