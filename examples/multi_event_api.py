"""Multi-event API example with a custom selection configuration.

Run from repository root without installation:
    PYTHONPATH=src python examples/multi_event_api.py
"""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


from pathlib import Path

from pseudotop import PseudoTopConfig, PseudoTopProducer
from pseudotop.io import load_events_json, write_results_table


def main() -> int:
    """Load events, build pseudo-top objects, and write a parquet table."""
    events = load_events_json("examples/events.json")
    config = PseudoTopConfig(jet_min_pt=25.0, jet_max_eta=2.5, lepton_max_eta=2.5)
    results = PseudoTopProducer(config=config).produce_events(events)
    n_trees = sum(1 for r in results if r.pseudo_top)
    out_path = Path("examples/multi_event_output.parquet")
    write_results_table(out_path, results)
    print(f"Reconstructed {n_trees}/{len(results)} pseudo-top trees, wrote {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
