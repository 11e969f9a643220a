#!/usr/bin/env python3
"""Command-line inspection and re-saving of snapshot files."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from .errors import SnapshotError, SnapshotFormatError
from .machine import Apple2Machine
from .config import SnapshotSettings
from .snapshot import PowerCycleHooks, SnapshotEngine
from .snapshot.units import UNIT_SLOTS
from .tracing import tracer
from .tracing_config import TracingConfig
from .yaml_helper import (
    KEY_CARD,
    KEY_FILEHDR,
    KEY_STATE,
    KEY_TAG,
    KEY_TYPE,
    KEY_UNIT,
    KEY_VERSION,
    YamlLoadHelper,
    YamlReader,
)

logger = logging.getLogger(__name__)


def describe_snapshot(pathname: str) -> Dict[str, Any]:
    """Summarise header, units and slot cards without touching a machine."""

    reader = YamlReader()
    try:
        reader.init_parser(pathname)
        if reader.get_scalar() != KEY_FILEHDR:
            raise SnapshotFormatError(f"Missing {KEY_FILEHDR}")
        header = YamlLoadHelper(reader)
        summary: Dict[str, Any] = {
            "tag": header.load_string(KEY_TAG),
            "version": header.load_uint(KEY_VERSION),
            "units": [],
        }
        units: List[Dict[str, Any]] = summary["units"]

        while True:
            key = reader.get_scalar()
            if key is None:
                break
            if key != KEY_UNIT:
                raise SnapshotFormatError(f"Unknown top-level scalar: {key}")
            loader = YamlLoadHelper(reader)
            unit: Dict[str, Any] = {
                "type": loader.load_string(KEY_TYPE),
                "version": loader.load_uint(KEY_VERSION),
            }
            if unit["type"] == UNIT_SLOTS and loader.get_sub_map(KEY_STATE):
                slots = {}
                while True:
                    slot = loader.get_map_next_slot_number()
                    if slot is None:
                        break
                    if not loader.get_sub_map(slot):
                        raise SnapshotFormatError(f"{UNIT_SLOTS}: Bad slot entry: {slot}")
                    slots[slot] = (
                        loader.load_string(KEY_CARD),
                        loader.load_uint(KEY_VERSION),
                    )
                    loader.discard()
                    loader.pop_map()
                unit["slots"] = slots
                loader.pop_map()
            loader.discard()
            units.append(unit)
        return summary
    finally:
        reader.finalise_parser()


def _cmd_info(args: argparse.Namespace) -> int:
    summary = describe_snapshot(args.path)
    print(f"{summary['tag']} v{summary['version']}")
    for unit in summary["units"]:
        print(f"  {unit['type']} v{unit['version']}")
        for slot, (card, version) in unit.get("slots", {}).items():
            print(f"    slot {slot}: {card} v{version}")
    return 0


def _cmd_convert(args: argparse.Namespace) -> int:
    machine = Apple2Machine()
    engine = SnapshotEngine(
        machine, hooks=PowerCycleHooks(machine), settings=SnapshotSettings.from_env()
    )
    engine.set_filename(args.src)
    result = engine.load_state()
    if not result.ok:
        print(f"Load failed: {result.error}", file=sys.stderr)
        return 1

    engine.set_filename(args.dst)
    result = engine.save_state()
    if not result.ok:
        print(f"Save failed: {result.error}", file=sys.stderr)
        return 1
    print(f"{args.src} → {args.dst}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Apple II snapshot tool")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--perfetto", action="store_true", help="Record a Perfetto trace"
    )
    parser.add_argument(
        "--trace-file",
        type=str,
        default=None,
        help="Perfetto trace path",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="List header, units and slot cards")
    info.add_argument("path")
    info.set_defaults(func=_cmd_info)

    convert = sub.add_parser("convert", help="Load a snapshot and save it again")
    convert.add_argument("src")
    convert.add_argument("dst")
    convert.set_defaults(func=_cmd_convert)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    tracing = TracingConfig.from_env()
    if args.perfetto:
        tracing.enable(args.trace_file)
    tracing.start()
    try:
        return args.func(args)
    except SnapshotError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        tracer.stop()


if __name__ == "__main__":
    sys.exit(main())
