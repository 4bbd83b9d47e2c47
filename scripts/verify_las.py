#!/usr/bin/env python3
"""Cross-check the point decoding of a LAS file against laspy.

Reads the file once with laspy and once through its BinarySection, then
compares every dimension both readers expose under a known name.
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List, Tuple

import laspy
import numpy as np

from lassection.binary_section import BinarySection
from lassection.las_header import LasHeader

# our field name -> laspy dimension name
LASPY_DIMENSIONS: Dict[str, str] = {
    "x": "X",
    "y": "Y",
    "z": "Z",
    "intensity": "intensity",
    "user": "user_data",
    "source": "point_source_id",
    "time": "gps_time",
    "red": "red",
    "green": "green",
    "blue": "blue",
    "nir": "nir",
}


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Compare LAS decoding with laspy")
    p.add_argument("input_las", type=Path, help="LAS file")
    p.add_argument("--limit", type=int, default=None, help="Only compare the first N records")
    return p


def read_section_array(header: LasHeader, section: BinarySection, limit: int | None) -> np.ndarray:
    count = section.count if limit is None else min(section.count, max(0, limit))
    with open(header.location, "rb") as f:
        f.seek(section.offset)
        block = f.read(count * section.stride)
    return section.read_array(block)


def compare(las_path: Path, limit: int | None = None) -> List[Tuple[str, int]]:
    """Return (field, mismatching record count) for every compared field."""
    header = LasHeader.read_file(las_path)
    section = header.to_section()
    ours = read_section_array(header, section, limit)

    las = laspy.read(str(las_path))
    n = len(ours)
    dims = set(las.point_format.dimension_names)

    results: List[Tuple[str, int]] = []
    for name, dim in LASPY_DIMENSIONS.items():
        if name not in ours.dtype.names or dim not in dims:
            continue
        theirs = np.asarray(las[dim])[:n].astype(ours.dtype[name])
        mismatches = int(np.count_nonzero(ours[name] != theirs))
        results.append((name, mismatches))
    return results


def main() -> None:
    args = get_parser().parse_args()
    if not args.input_las.exists():
        raise SystemExit(f"file not found: {args.input_las}")

    results = compare(args.input_las, args.limit)
    bad = 0
    for name, mismatches in results:
        status = "ok" if mismatches == 0 else f"{mismatches} mismatches"
        print(f"[verify] {name}: {status}")
        bad += mismatches
    if not results:
        raise SystemExit("no comparable dimension")
    if bad:
        raise SystemExit(f"{bad} mismatching values")
    print("[done]")


if __name__ == "__main__":
    main()
