"""Example custom callback: summarize reconstructed pseudo-top masses."""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import json
from pathlib import Path


def process(results, context):
    """Collect top/W masses of every complete decay tree and save a JSON report."""
    trees = [r for r in results if r.pseudo_top]
    payload = {
        "n_events": len(results),
        "n_reconstructed": len(trees),
        "events": [
            {
                "event_id": r.event_id,
                "top_mass": r.pseudo_top[0].p4.mass,
                "antitop_mass": r.pseudo_top[1].p4.mass,
                "w_plus_mass": r.pseudo_top[2].p4.mass,
                "w_minus_mass": r.pseudo_top[6].p4.mass,
            }
            for r in trees
        ],
    }
    out = Path(context["output_path"]).with_name("top_mass_summary.json")
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"Wrote {out}")
