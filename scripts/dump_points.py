#!/usr/bin/env python3
"""Dump selected point columns of one or more LAS files as CSV.

Files with different point formats are read through their merged schema;
columns a file does not store are written as empty cells.
"""
from __future__ import annotations

import argparse
import csv
import sys
from itertools import islice
from pathlib import Path

# Allow importing the repository-root LasScan module.
_ROOT_DIR = Path(__file__).resolve().parent.parent
if str(_ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(_ROOT_DIR))

from LasScan import LasScan  # noqa: E402

DEFAULT_COLUMNS = "id,x,y,z,intensity"


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Dump LAS point columns as CSV")
    p.add_argument("inputs", type=Path, nargs="+", help="LAS files")
    p.add_argument(
        "-c",
        "--columns",
        type=str,
        default=DEFAULT_COLUMNS,
        help=f"Comma-separated column names (default: {DEFAULT_COLUMNS})",
    )
    p.add_argument("--limit", type=int, default=None, help="Stop after this many rows")
    p.add_argument("-o", "--output", type=Path, default=None, help="CSV path (default: stdout)")
    p.add_argument("--schema", action="store_true", help="Print the merged schema and exit")
    return p


def main() -> None:
    args = get_parser().parse_args()
    columns = [c.strip() for c in args.columns.split(",") if c.strip()]
    if not columns:
        raise SystemExit("no column requested")

    scan = LasScan(args.inputs)
    if not scan.sections:
        raise SystemExit("no readable LAS file")
    print(f"[scan] {len(scan.sections)} files, {scan.count} records, {len(scan.skipped)} skipped", file=sys.stderr)

    if args.schema:
        for f in scan.data_schema.fields:
            print(f"{f.name}\t{f.data_type}\t{'nullable' if f.nullable else 'required'}")
        return

    rows = scan.scan(columns)
    if args.limit is not None:
        rows = islice(rows, max(0, args.limit))

    out = open(args.output, "w", newline="", encoding="utf-8") if args.output else sys.stdout
    try:
        w = csv.writer(out)
        w.writerow(columns)
        n = 0
        for row in rows:
            w.writerow(["" if v is None else v for v in row])
            n += 1
    finally:
        if args.output:
            out.close()
    print(f"[done] {n} rows", file=sys.stderr)


if __name__ == "__main__":
    main()
