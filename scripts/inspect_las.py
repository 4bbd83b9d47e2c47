#!/usr/bin/env python3
"""Print the header summary and point record layout of LAS files."""
from __future__ import annotations

import argparse
from pathlib import Path

from lassection.errors import LasSectionError
from lassection.las_header import LasHeader


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Dump LAS header and point record layout")
    p.add_argument("inputs", type=Path, nargs="+", help="LAS files")
    p.add_argument(
        "--no-layout",
        action="store_true",
        help="Only print the header summary, not the per-field offset table",
    )
    return p


def format_layout(header: LasHeader) -> str:
    section = header.to_section()
    lines = ["  Dimensions", "---------------------------------------------------------"]
    for name, slot in section.offsets.items():
        lines.append(f"  '{name}'".ljust(33) + f"--  type: {slot.data_type} offset: {slot.offset}")
    lines.append(f"  record length: {section.length}  stride: {section.stride}")
    return "\n".join(lines)


def main() -> None:
    args = get_parser().parse_args()
    failed = 0
    for path in args.inputs:
        if not path.exists():
            print(f"[skip] {path}: file not found")
            failed += 1
            continue
        try:
            header = LasHeader.read_file(path)
        except LasSectionError as e:
            print(f"[skip] {e}")
            failed += 1
            continue
        print(f"File: {path}")
        print(header.summary())
        if not args.no_layout:
            print(format_layout(header))
        print()
    if failed == len(args.inputs):
        raise SystemExit("no readable LAS file")


if __name__ == "__main__":
    main()
