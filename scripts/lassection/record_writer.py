from __future__ import annotations

from pathlib import Path
from typing import Any, BinaryIO, Iterable, List, Optional, Sequence, Tuple

from . import field_codec
from .binary_section import BinarySection
from .data_types import StructType
from .las_header import LasHeader


class RecordWriter:
    """Write rows as fixed-layout records of ``section``.

    A row is a sequence ordered like ``data_schema`` (the section's record
    schema by default). Section fields that ``data_schema`` lacks, or holds
    with another type, are written as zero bytes.
    """

    def __init__(
        self,
        stream: BinaryIO,
        section: BinarySection,
        data_schema: Optional[StructType] = None,
    ) -> None:
        self.stream = stream
        self.section = section
        self.data_schema = data_schema if data_schema is not None else section.record_schema
        self.count = 0

        index = {f.name: (i, f.data_type) for i, f in enumerate(self.data_schema.fields)}
        self._plan: List[Tuple[int, Any]] = []
        for name, slot in section.offsets.items():
            i, data_type = index.get(name, (-1, None))
            if i < 0 or data_type != slot.data_type:
                continue
            self._plan.append((i, field_codec.writer(slot.data_type, slot.offset, section.little_endian)))

    def encode(self, row: Sequence[Any]) -> bytes:
        buf = bytearray(self.section.stride)
        for i, write in self._plan:
            value = row[i]
            if value is not None:
                write(buf, value)
        return bytes(buf)

    def write(self, row: Sequence[Any]) -> None:
        self.stream.write(self.encode(row))
        self.count += 1

    def write_all(self, rows: Iterable[Sequence[Any]]) -> int:
        for row in rows:
            self.write(row)
        return self.count

    def close(self) -> None:
        self.stream.close()


def write_las(
    path: Path | str,
    header: LasHeader,
    rows: Iterable[Sequence[Any]],
    data_schema: Optional[StructType] = None,
) -> int:
    """Write ``header`` then ``rows`` as point records. Returns the record count.

    The gap between the header and the declared point offset is zero-filled.
    The header is written as given: its point count is not rewritten.
    """
    section = header.to_section()
    with open(path, "wb") as f:
        head = header.to_bytes()
        f.write(head)
        f.write(bytes(header.pdr_offset - len(head)))
        writer = RecordWriter(f, section, data_schema)
        return writer.write_all(rows)
