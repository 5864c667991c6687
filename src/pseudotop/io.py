"""Input/output helpers for JSON inputs and tabular result export."""

from __future__ import annotations
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


import json
from pathlib import Path
from typing import Any

from .models import STATUS_FINAL, EventInput, GenParticle, LorentzVector, PseudoTopConfig, PseudoTopResult


def load_events_json(path: str | Path) -> list[EventInput]:
    """Load multi-event input JSON into `EventInput` objects.

    Expected shape:
    {
      "events": [
        {"event_id": "...", "gen_particles": [...], "final_states": [...]},
        ...
      ]
    }
    `final_states` is optional; when absent, stable generator particles are used.
    """
    data = _load_json(path)
    events_data = data.get("events")
    if not isinstance(events_data, list):
        raise ValueError("Events JSON must contain a list under key 'events'.")
    return [_parse_event(event, idx) for idx, event in enumerate(events_data)]


def load_config_json(path: str | Path) -> PseudoTopConfig:
    """Load a `PseudoTopConfig` from a JSON object keyed by field name."""
    return PseudoTopConfig.from_mapping(_load_json(path))


def write_results_table(path: str | Path, results: list[PseudoTopResult]) -> None:
    """Write per-object output rows into Parquet/CSV/Pickle table."""
    pd = _require_pandas()
    df = pd.DataFrame(_result_rows(results))
    out = Path(path)
    suffix = out.suffix.lower()
    if suffix == ".parquet":
        df.to_parquet(out, index=False)
    elif suffix in (".pkl", ".pickle"):
        df.to_pickle(out)
    elif suffix == ".csv":
        df.to_csv(out, index=False)
    else:
        raise ValueError(
            f"Unsupported output format '{suffix}'. Use .parquet, .csv, or .pkl"
        )


def _result_rows(results: list[PseudoTopResult]) -> list[dict[str, Any]]:
    """Flatten every output collection into DataFrame-ready row dictionaries."""
    rows: list[dict[str, Any]] = []
    for res in results:
        for idx, nu in enumerate(res.neutrinos):
            rows.append(
                _row(res.event_id, "neutrinos", idx, nu.p4, charge=nu.charge, pdg_id=nu.pdg_id, status=nu.status)
            )
        for idx, lep in enumerate(res.leptons):
            row = _row(res.event_id, "leptons", idx, lep.p4, charge=lep.charge, pdg_id=lep.pdg_id)
            row["jet_area"] = lep.jet_area
            row["n_constituents"] = len(lep.constituents)
            rows.append(row)
        for idx, jet in enumerate(res.jets):
            row = _row(res.event_id, "jets", idx, jet.p4, pdg_id=jet.pdg_id)
            row["jet_area"] = jet.jet_area
            row["n_constituents"] = len(jet.constituents)
            row["is_b_tagged"] = jet.is_b_tagged
            rows.append(row)
        for idx, part in enumerate(res.pseudo_top):
            row = _row(
                res.event_id, "pseudo_top", idx, part.p4,
                charge=part.charge, pdg_id=part.pdg_id, status=part.status,
            )
            row["mothers"] = ",".join(str(x) for x in part.mothers)
            row["daughters"] = ",".join(str(x) for x in part.daughters)
            rows.append(row)
    return rows


def _row(
    event_id: str | None,
    collection: str,
    index: int,
    p4: LorentzVector,
    charge: float | None = None,
    pdg_id: int | None = None,
    status: int | None = None,
) -> dict[str, Any]:
    return {
        "event_id": event_id,
        "collection": collection,
        "index": index,
        "px": p4.px,
        "py": p4.py,
        "pz": p4.pz,
        "energy": p4.e,
        "pt": p4.pt,
        "eta": p4.eta,
        "phi": p4.phi,
        "mass": p4.mass,
        "charge": charge,
        "pdg_id": pdg_id,
        "status": status,
    }


def _require_pandas():
    """Import pandas lazily and provide a clear installation hint on failure."""
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "pandas is required to write output tables. Install pandas and pyarrow."
        ) from exc
    return pd


def _parse_event(event: Any, idx: int) -> EventInput:
    """Parse one event object, deriving daughters and final states when absent."""
    if not isinstance(event, dict):
        raise ValueError(f"Event entry at index {idx} must be an object.")
    event_id = str(event.get("event_id", f"evt{idx}"))
    gen_data = event.get("gen_particles")
    if not isinstance(gen_data, list):
        raise ValueError(f"Event '{event_id}' must contain a list under key 'gen_particles'.")
    context = f"event '{event_id}'"
    gen = [_parse_particle_item(item, pidx, context) for pidx, item in enumerate(gen_data)]
    for pidx, p in enumerate(gen):
        _check_links(p, pidx, len(gen), context)
    if not any(p.daughters for p in gen):
        gen = _with_derived_daughters(gen)
    gen_particles = tuple(gen)

    fs_data = event.get("final_states")
    if fs_data is None:
        final_states = tuple(p for p in gen_particles if p.status == STATUS_FINAL)
    elif isinstance(fs_data, list):
        final_states = tuple(
            _parse_particle_item(item, pidx, f"{context} final states")
            for pidx, item in enumerate(fs_data)
        )
        for pidx, p in enumerate(final_states):
            _check_links(p, pidx, len(gen_particles), f"{context} final states")
    else:
        raise ValueError(f"Event '{event_id}' key 'final_states' must be a list.")
    return EventInput(event_id=event_id, gen_particles=gen_particles, final_states=final_states)


def _parse_particle_item(item: Any, idx: int, context: str) -> GenParticle:
    """Parse one particle dictionary into a `GenParticle`."""
    if not isinstance(item, dict):
        raise ValueError(f"Particle entry at index {idx} in {context} must be an object.")
    try:
        energy = item["e"] if "e" in item else item["energy"]
        p4 = LorentzVector(float(item["px"]), float(item["py"]), float(item["pz"]), float(energy))
        pdg_id = int(item["pdg_id"])
    except KeyError as exc:
        raise ValueError(f"Particle at index {idx} in {context} is missing field {exc}.") from exc
    return GenParticle(
        p4=p4,
        pdg_id=pdg_id,
        charge=float(item.get("charge", 0.0)),
        status=int(item.get("status", STATUS_FINAL)),
        mothers=_parse_index_list(item.get("mothers", []), "mothers", idx, context),
        daughters=_parse_index_list(item.get("daughters", []), "daughters", idx, context),
    )


def _parse_index_list(value: Any, key: str, idx: int, context: str) -> tuple[int, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Particle field '{key}' at index {idx} in {context} must be a list.")
    return tuple(int(x) for x in value)


def _check_links(particle: GenParticle, idx: int, n_gen: int, context: str) -> None:
    """Reject mother/daughter references outside the generator collection."""
    for ref in particle.mothers + particle.daughters:
        if not 0 <= ref < n_gen:
            raise ValueError(
                f"Particle at index {idx} in {context} references generator index {ref} "
                f"outside [0, {n_gen})."
            )


def _with_derived_daughters(gen: list[GenParticle]) -> list[GenParticle]:
    """Fill daughter lists from the mother lists of the whole record."""
    daughters: list[list[int]] = [[] for _ in gen]
    for idx, p in enumerate(gen):
        for mother in p.mothers:
            daughters[mother].append(idx)
    return [
        GenParticle(
            p4=p.p4,
            pdg_id=p.pdg_id,
            charge=p.charge,
            status=p.status,
            mothers=p.mothers,
            daughters=tuple(d),
        )
        for p, d in zip(gen, daughters, strict=True)
    ]


def _load_json(path: str | Path) -> dict[str, Any]:
    """Read and validate a JSON object document from disk."""
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"JSON document at {path} must be an object.")
    return data
