# Copyright 2023 WolkenVision AG. All rights reserved.
"""Scan point records across many LAS files through one unified schema.

Each input file is opened only for its header; files that are not LAS, or
use a version or point format this reader does not handle, are skipped with
a diagnostic and listed in ``LasScan.skipped``. The remaining files have
their point layouts merged into ``LasScan.data_schema``, and every scan
yields rows in that schema, with columns a file does not store set to None.
"""

from __future__ import annotations

import sys
from functools import cached_property
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

# Allow importing `scripts/lassection/*` as `lassection.*` from the repository root.
_SCRIPTS_DIR = Path(__file__).resolve().parent / "scripts"
if _SCRIPTS_DIR.exists() and str(_SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(_SCRIPTS_DIR))

from lassection.binary_section import BinarySection  # noqa: E402
from lassection.casts import can_cast  # noqa: E402
from lassection.data_types import LongType, StructType, numpy_dtype  # noqa: E402
from lassection.errors import UnsupportedCast  # noqa: E402
from lassection.las_header import LasHeader  # noqa: E402
from lassection.schema_merge import merge_all  # noqa: E402

__all__ = ["LasScan"]

# records read from disk at a time
DEFAULT_CHUNK_RECORDS = 65536


class LasScan:
    """Local, sequential scan over a set of LAS files.

    Args:
        paths: Input files.
        data_schema: Schema rows are produced in. If None, the merge of every
            readable file's schema (identity column first).
        id_name: Name of the per-file record ordinal column.
        chunk_records: Records read from disk per chunk.
    """

    def __init__(
        self,
        paths: Iterable[Path | str],
        *,
        data_schema: Optional[StructType] = None,
        id_name: str = "id",
        chunk_records: int = DEFAULT_CHUNK_RECORDS,
    ) -> None:
        self.paths = [Path(p) for p in paths]
        self.id_name = id_name
        if chunk_records <= 0:
            raise ValueError("chunk_records must be > 0")
        self.chunk_records = int(chunk_records)
        self._data_schema = data_schema

        self.headers: List[LasHeader] = []
        self.sections: List[BinarySection] = []
        self.skipped: Dict[str, Exception] = {}

        for path in self.paths:
            try:
                header = LasHeader.read_file(path)
                section = header.to_section(id_name=id_name)
            except (ValueError, OSError) as e:
                self.skipped[str(path)] = e
                print(f"[skip] {path}: {e}", file=sys.stderr)
                continue
            self.headers.append(header)
            self.sections.append(section)

    @cached_property
    def data_schema(self) -> StructType:
        """Explicit schema, or the merge of all section schemas.

        Raises IncompatibleFieldType when two files store a column with types
        that have no common representation.
        """
        if self._data_schema is not None:
            return self._data_schema
        return merge_all(section.schema for section in self.sections)

    @property
    def count(self) -> int:
        return sum(section.count for section in self.sections)

    def _selected(self, locations: Optional[Iterable[Path | str]]) -> List[BinarySection]:
        if locations is None:
            return list(self.sections)
        wanted = {str(Path(p)) for p in locations}
        return [s for s in self.sections if s.location in wanted]

    def _iter_blocks(self, section: BinarySection) -> Iterator[Tuple[int, bytes]]:
        """Yield ``(first_record_id, block)`` chunks of whole strides from ``section``."""
        found = 0
        if section.stride > 0:
            chunk = self.chunk_records * section.stride
            remaining = section.size()
            with open(section.location, "rb") as f:
                f.seek(section.offset)
                while remaining > 0:
                    want = min(chunk, remaining)
                    block = f.read(want)
                    n = (len(block) + section.stride - section.length) // section.stride
                    if n > 0:
                        yield found, block
                        found += n
                    remaining -= want
                    if len(block) < want:
                        break
        if found < section.count:
            print(
                f"[scan] {section.location}: header declares {section.count} records, found {found}",
                file=sys.stderr,
            )

    def scan(
        self,
        columns: Sequence[str],
        locations: Optional[Iterable[Path | str]] = None,
    ) -> Iterator[List]:
        """Yield one value list per record, ordered like ``columns``."""
        schema = self.data_schema
        for section in self._selected(locations):
            extract = section.column_extractor(schema, columns)
            for first_id, block in self._iter_blocks(section):
                for record_id, record in section.iter_records(block, first_id):
                    yield extract(record_id, record)

    def read_columns(
        self,
        columns: Sequence[str],
        locations: Optional[Iterable[Path | str]] = None,
    ) -> Dict[str, np.ma.MaskedArray]:
        """Vectorised read of ``columns``; records of files lacking a column are masked."""
        schema = self.data_schema
        parts: Dict[str, List[np.ma.MaskedArray]] = {name: [] for name in columns}
        targets = {}
        for name in columns:
            target = schema.get(name)
            if target is None:
                raise KeyError(f"unknown column '{name}'")
            targets[name] = numpy_dtype(target.data_type, True)

        for section in self._selected(locations):
            stored = {}
            for name in columns:
                if name == self.id_name:
                    source, stored[name] = LongType, False
                else:
                    slot = section.offsets.lookup_or_default(name)
                    source, stored[name] = slot.data_type, not slot.absent
                target = schema.field(name).data_type
                if not can_cast(source, target):
                    raise UnsupportedCast(source, target)

            for first_id, block in self._iter_blocks(section):
                arr = section.read_array(block)
                n = len(arr)
                for name in columns:
                    dtype = targets[name]
                    if name == self.id_name:
                        values = np.arange(first_id, first_id + n, dtype=np.int64).astype(dtype)
                    elif stored[name]:
                        values = arr[name].astype(dtype)
                    else:
                        parts[name].append(np.ma.masked_all(n, dtype=dtype))
                        continue
                    parts[name].append(np.ma.MaskedArray(values, mask=np.zeros(n, dtype=bool)))

        out: Dict[str, np.ma.MaskedArray] = {}
        for name in columns:
            if parts[name]:
                out[name] = np.ma.concatenate(parts[name])
            else:
                out[name] = np.ma.masked_all(0, dtype=targets[name])
        return out
