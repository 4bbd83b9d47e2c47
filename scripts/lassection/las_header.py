from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Tuple

from .binary_section import BinarySection
from .data_types import StructType
from .errors import NotARecognizedFormat, UnsupportedVersion
from .point_formats import record_length, schema_for

SIGNATURE = b"LasF"

HEADER_SIZES: Dict[Tuple[int, int], int] = {(1, 2): 227, (1, 4): 375}

# Fields common to every supported version, little-endian, offsets 0..227:
#   0 signature, 4 source id, 6 global encoding, 8..16 project id parts 1-3,
#  16 project id part 4, 24 version major/minor, 26 system id, 58 software,
#  90 creation day/year, 94 header size, 96 point offset, 100 vlr count,
# 104 point format, 105 point length, 107 point count, 111 counts by return,
# 131 scale xyz, 155 offset xyz, 179 max/min x, max/min y, max/min z.
# The 64-bit counts that follow in 1.4 headers are never read and written as zero.
_LEGACY = struct.Struct("<4sHHIHH8s2B32s32s3HIIBHI5I3d3d6d")
LEGACY_HEADER_SIZE = _LEGACY.size

# integer header fields and the width they are written with
_UNSIGNED_FIELDS = (
    ("source_id", 16),
    ("global_encoding", 16),
    ("project_id1", 32),
    ("project_id2", 16),
    ("project_id3", 16),
    ("pdr_offset", 32),
    ("vlr_count", 32),
    ("pdr_length", 16),
    ("point_count", 32),
)


def _text(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("latin-1")


def _triple(values) -> Tuple[float, float, float]:
    values = tuple(float(v) for v in values)
    if len(values) != 3:
        raise ValueError(f"expected 3 values, got {len(values)}")
    return values  # type: ignore[return-value]


@dataclass(frozen=True)
class LasHeader:
    """Public header block of a LAS 1.2 / 1.4 file.

    ``pdr_offset`` and ``pdr_length`` left at 0 resolve to the header size of
    the version and the default record length of the point format.
    """

    location: str = ""
    point_count: int = 0
    point_format: int = 0
    pdr_length: int = 0
    pmin: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    pmax: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    offset: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    points_by_return: Tuple[int, int, int, int, int] = (0, 0, 0, 0, 0)
    pdr_offset: int = 0
    system_id: str = "lassection"
    software: str = "lassection"
    version: Tuple[int, int] = (1, 4)
    source_id: int = 0
    global_encoding: int = 0
    vlr_count: int = 0
    project_id1: int = 0
    project_id2: int = 0
    project_id3: int = 0
    project_id4: bytes = bytes(8)
    creation: Tuple[int, int] = (1, 1)

    def __post_init__(self) -> None:
        version = tuple(int(v) for v in self.version)
        if len(version) != 2:
            raise ValueError(f"version must be a (major, minor) pair, got {self.version!r}")
        if version not in HEADER_SIZES:
            raise UnsupportedVersion(*version)
        object.__setattr__(self, "version", version)
        # raises UnknownPointFormat
        default_length = record_length(self.point_format)

        object.__setattr__(self, "pmin", _triple(self.pmin))
        object.__setattr__(self, "pmax", _triple(self.pmax))
        object.__setattr__(self, "scale", _triple(self.scale))
        object.__setattr__(self, "offset", _triple(self.offset))

        by_return = tuple(int(n) for n in self.points_by_return)
        if len(by_return) != 5:
            raise ValueError(f"points_by_return needs 5 slots, got {len(by_return)}")
        object.__setattr__(self, "points_by_return", by_return)

        project_id4 = bytes(self.project_id4)
        if len(project_id4) != 8:
            raise ValueError(f"project_id4 must be 8 bytes, got {len(project_id4)}")
        object.__setattr__(self, "project_id4", project_id4)
        object.__setattr__(self, "creation", tuple(int(v) for v in self.creation))

        for name in ("system_id", "software"):
            if len(getattr(self, name).encode("latin-1")) > 32:
                raise ValueError(f"{name} is longer than 32 bytes")

        if self.pdr_offset <= 0:
            object.__setattr__(self, "pdr_offset", self.header_size)
        elif self.pdr_offset < self.header_size:
            raise ValueError(
                f"point data offset {self.pdr_offset} overlaps the {self.header_size}-byte header"
            )
        if self.pdr_length <= 0:
            object.__setattr__(self, "pdr_length", default_length)

        for name, bits in _UNSIGNED_FIELDS:
            value = int(getattr(self, name))
            if not 0 <= value < 1 << bits:
                raise ValueError(f"{name}={value} does not fit in {bits} unsigned bits")
            object.__setattr__(self, name, value)
        if len(self.creation) != 2:
            raise ValueError(f"creation must be a (day, year) pair, got {self.creation!r}")
        for name, values, bits in (
            ("points_by_return", self.points_by_return, 32),
            ("creation", self.creation, 16),
        ):
            if any(not 0 <= v < 1 << bits for v in values):
                raise ValueError(f"{name}={values} does not fit in {bits} unsigned bits")

    # derived layout

    @property
    def header_size(self) -> int:
        return HEADER_SIZES[self.version]

    @property
    def schema(self) -> StructType:
        return schema_for(self.point_format)

    @property
    def bounds(self) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        return self.pmin, self.pmax

    def scaled(self, x: int, y: int, z: int) -> Tuple[float, float, float]:
        """Apply scale and offset to raw integer coordinates."""
        return (
            x * self.scale[0] + self.offset[0],
            y * self.scale[1] + self.offset[1],
            z * self.scale[2] + self.offset[2],
        )

    def to_section(self, id_name: str = "id") -> BinarySection:
        return BinarySection(
            self.location,
            self.pdr_offset,
            self.point_count,
            True,
            self.schema,
            self.pdr_length,
            id_name=id_name,
        )

    # binary form

    @classmethod
    def read(cls, data: bytes, location: str = "") -> "LasHeader":
        data = bytes(data[: max(HEADER_SIZES.values())])
        if data[:4] != SIGNATURE:
            raise NotARecognizedFormat(location, "not a LAS file")
        if len(data) < LEGACY_HEADER_SIZE:
            raise NotARecognizedFormat(location, f"truncated header ({len(data)} bytes)")

        (
            _signature,
            source_id,
            global_encoding,
            project_id1,
            project_id2,
            project_id3,
            project_id4,
            major,
            minor,
            system_id,
            software,
            creation_day,
            creation_year,
            _header_size,
            pdr_offset,
            vlr_count,
            point_format,
            pdr_length,
            point_count,
            *rest,
        ) = _LEGACY.unpack_from(data, 0)
        by_return, rest = rest[:5], rest[5:]
        scale, offset, bbox = rest[0:3], rest[3:6], rest[6:12]

        if (major, minor) not in HEADER_SIZES:
            raise UnsupportedVersion(major, minor)
        if len(data) < HEADER_SIZES[(major, minor)]:
            raise NotARecognizedFormat(location, f"truncated header ({len(data)} bytes)")

        return cls(
            location=location,
            point_count=point_count,
            point_format=point_format,
            pdr_length=pdr_length,
            pmin=(bbox[1], bbox[3], bbox[5]),
            pmax=(bbox[0], bbox[2], bbox[4]),
            scale=scale,
            offset=offset,
            points_by_return=by_return,
            pdr_offset=pdr_offset,
            system_id=_text(system_id),
            software=_text(software),
            version=(major, minor),
            source_id=source_id,
            global_encoding=global_encoding,
            vlr_count=vlr_count,
            project_id1=project_id1,
            project_id2=project_id2,
            project_id3=project_id3,
            project_id4=project_id4,
            creation=(creation_day, creation_year),
        )

    @classmethod
    def read_file(cls, path: Path | str) -> "LasHeader":
        with open(path, "rb") as f:
            data = f.read(max(HEADER_SIZES.values()))
        return cls.read(data, location=str(path))

    def to_bytes(self) -> bytes:
        buf = bytearray(self.header_size)
        _LEGACY.pack_into(
            buf,
            0,
            SIGNATURE,
            self.source_id,
            self.global_encoding,
            self.project_id1,
            self.project_id2,
            self.project_id3,
            self.project_id4,
            self.version[0],
            self.version[1],
            self.system_id.encode("latin-1"),
            self.software.encode("latin-1"),
            self.creation[0],
            self.creation[1],
            self.header_size,
            self.pdr_offset,
            self.vlr_count,
            self.point_format,
            self.pdr_length,
            self.point_count,
            *self.points_by_return,
            *self.scale,
            *self.offset,
            self.pmax[0],
            self.pmin[0],
            self.pmax[1],
            self.pmin[1],
            self.pmax[2],
            self.pmin[2],
        )
        return bytes(buf)

    def write(self, stream: BinaryIO) -> None:
        stream.write(self.to_bytes())

    def summary(self) -> str:
        schema = self.schema
        project = (
            f"{self.project_id4.hex()}-0000-{self.project_id3:04d}-"
            f"{self.project_id2:04d}-{self.project_id1:08d}"
        )
        vlrs = self.vlr_count if self.vlr_count > 0 else "None"
        return f"""---------------------------------------------------------
  Header Summary
---------------------------------------------------------

  Version:                     {self.version[0]}.{self.version[1]}
  Source ID:                   {self.source_id}
  Reserved:                    {self.global_encoding}
  Project ID/GUID:             '{project}'
  System ID:                   '{self.system_id}'
  Generating Software:         '{self.software}'
  File Creation Day/Year:      {self.creation[0]}/{self.creation[1]}
  Header Byte Size             {self.header_size}
  Data Offset:                 {self.pdr_offset}
  Number Var. Length Records:  {vlrs}
  Point Data Format:           {self.point_format}
  Number of Point Records:     {self.point_count}
  Compressed:                  False
  Number of Points by Return:  {' '.join(str(n) for n in self.points_by_return)}
  Scale Factor X Y Z:          {' '.join(str(s) for s in self.scale)}
  Offset X Y Z:                {' '.join(str(o) for o in self.offset)}
  Min X Y Z:                   {self.pmin[0]:.2f} {self.pmin[1]:.2f} {self.pmin[2]:f}
  Max X Y Z:                   {self.pmax[0]:.2f} {self.pmax[1]:.2f} {self.pmax[2]:f}

---------------------------------------------------------
  Schema Summary
---------------------------------------------------------
  Point Format ID:             {self.point_format}
  Number of dimensions:        {len(schema)}
  Size in bytes:               {self.pdr_length}
"""
