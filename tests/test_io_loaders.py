"""Unit tests for JSON input loaders, table export and the CLI entrypoint."""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import json
import tempfile
import unittest
from pathlib import Path

from pseudotop import PseudoTopConfig, PseudoTopProducer
from pseudotop.cli import main
from pseudotop.io import load_config_json, load_events_json, write_results_table


def _particle(pdg_id, px, py, pz, e, status=1, mothers=(), charge=0.0):
    return {
        "px": px,
        "py": py,
        "pz": pz,
        "e": e,
        "pdg_id": pdg_id,
        "status": status,
        "mothers": list(mothers),
        "charge": charge,
    }


def _payload() -> dict:
    return {
        "events": [
            {
                "event_id": "evt42",
                "gen_particles": [
                    _particle(2212, 0.0, 0.0, 6500.0, 6500.0, status=4),
                    _particle(24, 0.0, 0.0, 0.0, 80.4, status=22, mothers=(0,)),
                    _particle(-13, 40.2, 0.0, 0.0, 40.2, mothers=(1,), charge=1.0),
                    _particle(14, -40.2, 0.0, 0.0, 40.2, mothers=(1,)),
                    _particle(211, 0.0, 35.0, 0.0, 35.0, mothers=(0,), charge=1.0),
                ],
            }
        ]
    }


class TestIOLoaders(unittest.TestCase):
    """Validate parsing for event-batch and configuration JSON inputs."""

    def _write(self, tmpdir: str, name: str, payload) -> Path:
        path = Path(tmpdir) / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_load_events_json_derives_daughters_and_final_states(self) -> None:
        """Missing daughters come from mother lists; final states from status 1."""
        with tempfile.TemporaryDirectory() as tmpdir:
            [event] = load_events_json(self._write(tmpdir, "events.json", _payload()))
        self.assertEqual(event.event_id, "evt42")
        self.assertEqual(len(event.gen_particles), 5)
        self.assertEqual(event.gen_particles[1].daughters, (2, 3))
        self.assertEqual(event.gen_particles[0].daughters, (1, 4))
        self.assertEqual([p.pdg_id for p in event.final_states], [-13, 14, 211])
        self.assertEqual(event.final_states[0].mothers, (1,))
        self.assertAlmostEqual(event.final_states[0].charge, 1.0)

    def test_explicit_final_states_are_kept(self) -> None:
        payload = _payload()
        payload["events"][0]["final_states"] = [
            _particle(-13, 40.2, 0.0, 0.0, 40.2, mothers=(1,), charge=1.0),
        ]
        with tempfile.TemporaryDirectory() as tmpdir:
            [event] = load_events_json(self._write(tmpdir, "events.json", payload))
        self.assertEqual(len(event.final_states), 1)

    def test_out_of_range_mother_raises(self) -> None:
        payload = _payload()
        payload["events"][0]["gen_particles"][2]["mothers"] = [9]
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "events.json", payload)
            with self.assertRaises(ValueError):
                load_events_json(path)

    def test_missing_momentum_field_raises(self) -> None:
        payload = _payload()
        del payload["events"][0]["gen_particles"][2]["px"]
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "events.json", payload)
            with self.assertRaises(ValueError):
                load_events_json(path)

    def test_load_config_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_config_json(self._write(tmpdir, "cfg.json", {"jet_min_pt": 25, "w_mass": 80.0}))
            self.assertEqual(config, PseudoTopConfig(jet_min_pt=25.0, w_mass=80.0))
            with self.assertRaises(ValueError):
                load_config_json(self._write(tmpdir, "bad.json", {"jet_radius": 0.4}))

    def test_invalid_config_values_raise(self) -> None:
        with self.assertRaises(ValueError):
            PseudoTopConfig(jet_cone_size=0.0)
        with self.assertRaises(ValueError):
            PseudoTopConfig(lepton_min_pt=-1.0)

    def test_unsupported_table_suffix_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ValueError):
                write_results_table(Path(tmpdir) / "out.txt", [])


class TestCommandLine(unittest.TestCase):
    """Run the CLI on a one-event file and inspect the CSV table."""

    def test_cli_writes_lepton_and_neutrino_rows(self) -> None:
        import pandas as pd

        with tempfile.TemporaryDirectory() as tmpdir:
            events = Path(tmpdir) / "events.json"
            events.write_text(json.dumps(_payload()), encoding="utf-8")
            out = Path(tmpdir) / "out.csv"
            rc = main(["--events", str(events), "--out", str(out), "--jet-min-pt", "20"])
            self.assertEqual(rc, 0)
            df = pd.read_csv(out)
        self.assertEqual(sorted(set(df["collection"])), ["jets", "leptons", "neutrinos"])
        lepton = df[df["collection"] == "leptons"].iloc[0]
        self.assertEqual(lepton["pdg_id"], -13)
        self.assertAlmostEqual(lepton["pt"], 40.2, places=6)
        jet = df[df["collection"] == "jets"].iloc[0]
        self.assertFalse(jet["is_b_tagged"])


class TestExampleEvents(unittest.TestCase):
    """The shipped example file carries one full semileptonic ttbar event."""

    def test_example_events_reconstruct_one_tree(self) -> None:
        path = Path(__file__).resolve().parents[1] / "examples" / "events.json"
        results = PseudoTopProducer().produce_events(load_events_json(path))
        self.assertEqual([r.event_id for r in results], ["semilep0", "nobhad0"])
        semilep, nobhad = results
        self.assertEqual(len(semilep.b_jets), 2)
        self.assertEqual(len(semilep.light_jets), 2)
        self.assertEqual([p.pdg_id for p in semilep.pseudo_top[:6]], [6, -6, 24, 5, -13, 14])
        self.assertEqual(nobhad.pseudo_top, ())


if __name__ == "__main__":
    unittest.main()
