"""Point data record layouts for formats 0-10.

Formats 0 and 6 are the base layouts; every other format appends extension
groups (time, color, near-infrared, waveform packet) in a fixed order.
"""
from __future__ import annotations

from typing import List, Tuple

from .data_types import (
    ByteType,
    DataType,
    DoubleType,
    FloatType,
    IntegerType,
    LongType,
    ShortType,
    StructType,
    default_size,
    struct_of,
)
from .errors import UnknownPointFormat

Fields = List[Tuple[str, DataType]]

POINT: Fields = [
    ("x", IntegerType),
    ("y", IntegerType),
    ("z", IntegerType),
    ("intensity", ShortType),
]

TIME: Fields = [("time", DoubleType)]

COLOR: Fields = [
    ("red", ShortType),
    ("green", ShortType),
    ("blue", ShortType),
]

NIR: Fields = [("nir", ShortType)]

WAVEFORM: Fields = [
    ("index", ByteType),
    ("offset", LongType),
    ("size", IntegerType),
    ("location", FloatType),
    ("xt", FloatType),
    ("yt", FloatType),
    ("zt", FloatType),
]


def _build() -> Tuple[StructType, ...]:
    f: List[Fields] = [[] for _ in range(11)]
    f[0] = POINT + [
        ("flags", ByteType),
        ("classification", ByteType),
        ("angle", ByteType),
        ("user", ByteType),
        ("source", ShortType),
    ]
    f[6] = POINT + [
        ("return", ByteType),
        ("flags", ByteType),
        ("classification", ByteType),
        ("user", ByteType),
        ("angle", ShortType),
        ("source", ShortType),
        ("time", DoubleType),
    ]
    f[1] = f[0] + TIME
    f[2] = f[0] + COLOR
    f[3] = f[1] + COLOR
    f[4] = f[1] + WAVEFORM
    f[5] = f[3] + WAVEFORM
    f[7] = f[6] + COLOR
    f[8] = f[7] + NIR
    f[9] = f[6] + WAVEFORM
    f[10] = f[8] + WAVEFORM
    return tuple(struct_of(fields, nullable=False) for fields in f)


POINT_FORMATS: Tuple[StructType, ...] = _build()
RECORD_LENGTHS: Tuple[int, ...] = tuple(default_size(s) for s in POINT_FORMATS)


def _check(code: int) -> int:
    code = int(code)
    if not 0 <= code < len(POINT_FORMATS):
        raise UnknownPointFormat(code)
    return code


def schema_for(code: int) -> StructType:
    return POINT_FORMATS[_check(code)]


def record_length(code: int) -> int:
    """Default point record byte length for a format code."""
    return RECORD_LENGTHS[_check(code)]
