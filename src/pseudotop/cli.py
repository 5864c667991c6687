"""Command-line interface for running the pseudo-top producer on event inputs."""

from __future__ import annotations

import argparse
import dataclasses
import importlib.util
import logging
from pathlib import Path
from typing import Any

from .io import load_config_json, load_events_json, write_results_table
from .models import PseudoTopConfig, PseudoTopResult
from .producer import PseudoTopProducer

logger = logging.getLogger(__name__)

# CLI option -> PseudoTopConfig field
_CONFIG_OPTIONS = {
    "--lepton-min-pt": ("lepton_min_pt", "Minimum dressed-lepton pT."),
    "--lepton-max-eta": ("lepton_max_eta", "Maximum dressed-lepton |eta|."),
    "--lepton-cone-size": ("lepton_cone_size", "Anti-kt radius for lepton dressing."),
    "--jet-min-pt": ("jet_min_pt", "Minimum jet pT."),
    "--jet-max-eta": ("jet_max_eta", "Maximum jet |eta|."),
    "--jet-cone-size": ("jet_cone_size", "Anti-kt radius for jets."),
    "--w-mass": ("w_mass", "Reference W mass for the assignment."),
    "--t-mass": ("t_mass", "Reference top mass for the assignment."),
}


def build_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="pseudo-top",
        description="Build dressed leptons, b-tagged jets and pseudo-top decay trees from generator events.",
    )
    parser.add_argument("--events", required=True, help="Input JSON with key 'events'.")
    parser.add_argument(
        "--config",
        default=None,
        help="Optional JSON object with PseudoTopConfig fields; command-line options override it.",
    )
    for option, (dest, help_text) in _CONFIG_OPTIONS.items():
        parser.add_argument(option, dest=dest, type=float, default=None, help=help_text)
    parser.add_argument(
        "--out",
        required=True,
        help="Output table file (.parquet, .csv, .pkl).",
    )
    parser.add_argument(
        "--custom-script",
        default=None,
        help="Path to Python file with process(results, context) function.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def setup_logging(verbose: bool = False) -> None:
    """Configure process-wide logging (DEBUG with `verbose`, INFO otherwise)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def resolve_config(args: argparse.Namespace) -> PseudoTopConfig:
    """Merge the optional config file with command-line overrides."""
    config = load_config_json(args.config) if args.config else PseudoTopConfig()
    overrides = {
        dest: getattr(args, dest)
        for dest, _ in _CONFIG_OPTIONS.values()
        if getattr(args, dest) is not None
    }
    return dataclasses.replace(config, **overrides)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: load events, run producer, write table, optional custom hook."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    config = resolve_config(args)
    events = load_events_json(args.events)
    logger.info("Running on %d events from %s", len(events), args.events)

    results = PseudoTopProducer(config=config).produce_events(events)
    n_topologies = sum(1 for r in results if r.pseudo_top)
    logger.info("Reconstructed a pseudo-top tree in %d/%d events", n_topologies, len(results))
    write_results_table(args.out, results)
    logger.info("Wrote %s", args.out)

    if args.custom_script:
        run_custom_script(
            script_path=args.custom_script,
            results=results,
            context={
                "events_path": args.events,
                "config": config,
                "output_path": args.out,
            },
        )
    return 0


def run_custom_script(
    script_path: str, results: list[PseudoTopResult], context: dict[str, Any]
) -> None:
    """Execute user-supplied post-processing callback `process(results, context)`."""
    module = _load_module(script_path)
    process = getattr(module, "process", None)
    if process is None or not callable(process):
        raise ValueError(
            f"Custom script {script_path} must define callable process(results, context)."
        )
    process(results, context)


def _load_module(script_path: str):
    """Import a Python module from an arbitrary file path."""
    path = Path(script_path)
    spec = importlib.util.spec_from_file_location(path.stem, path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Cannot import custom script: {script_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


if __name__ == "__main__":
    raise SystemExit(main())
