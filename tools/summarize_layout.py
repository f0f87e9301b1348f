"""Resolve a facility config, compile it and print per-kind counts.

Usage:
  python tools/summarize_layout.py data/examples/facility_default.json --seed 7
"""

from __future__ import annotations

import json
import random
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.builders.facility.compiler import compile_layout  # noqa: E402
from src.builders.facility.diagnostics import (  # noqa: E402
    CollectingDiagnosticsSink,
    JsonlDiagnosticsSink,
)
from src.builders.facility.layout_snapshot import layout_to_snapshot  # noqa: E402
from src.builders.facility.spec.resolve import load_layout_config, resolve  # noqa: E402
from src.builders.facility.spec.types import BuildContext  # noqa: E402
from src.schema import ConfigError  # noqa: E402


def main():
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("config", type=str, nargs="?", default="")
    parser.add_argument("--preset", type=str, default="")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--diag", type=str, default="", help="append diagnostics events to this JSONL file")
    parser.add_argument("--snapshot", action="store_true", help="print the full plan snapshot as JSON")
    args = parser.parse_args()

    try:
        if args.config:
            config, resolve_diagnostics = load_layout_config(args.config)
        else:
            config, resolve_diagnostics = resolve({}, preset_id=args.preset or None)
    except (ConfigError, OSError) as exc:
        print(f"CONFIG ERROR: {exc}")
        return 2

    sink = JsonlDiagnosticsSink(args.diag) if args.diag else CollectingDiagnosticsSink()
    ctx = BuildContext(run_id=f"seed-{args.seed}", diag=sink)
    try:
        plan = compile_layout(config, random.Random(args.seed).random, ctx, resolve_diagnostics)
    except ConfigError as exc:
        print(f"CONFIG ERROR: {exc}")
        return 2

    if args.snapshot:
        print(json.dumps(layout_to_snapshot(plan), indent=2))
        return 0

    print(f"instances: {len(plan.instances)}")
    for kind, items in plan.by_kind().items():
        print(f"  {kind.value:<16} {len(items)}")
    for key in sorted(plan.metadata):
        print(f"{key}: {plan.metadata[key]}")
    if isinstance(sink, CollectingDiagnosticsSink):
        warnings = [event for event in sink.events if event.severity_label != "info"]
        for event in warnings:
            print(f"[{event.severity_label}] {event.code} {event.path} {event.reason}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
