"""Closed set of column data types.

Every type carries a ``kind`` tag. Merging, casting and the field codec all
dispatch on that tag rather than on the Python class of the instance.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, FrozenSet, Iterable, Iterator, Optional, Tuple, Union

import numpy as np

from .errors import UnsupportedType


class Kind(Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    BYTE = "byte"
    SHORT = "short"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    ARRAY = "array"
    MAP = "map"
    STRUCT = "struct"


# narrowest first
INTEGRAL_KINDS: Tuple[Kind, ...] = (Kind.BYTE, Kind.SHORT, Kind.INTEGER, Kind.LONG)
FRACTIONAL_KINDS: Tuple[Kind, ...] = (Kind.FLOAT, Kind.DOUBLE)
NUMERIC_KINDS: FrozenSet[Kind] = frozenset(INTEGRAL_KINDS + FRACTIONAL_KINDS)


@dataclass(frozen=True)
class PrimitiveType:
    kind: Kind

    def __post_init__(self) -> None:
        if self.kind in (Kind.ARRAY, Kind.MAP, Kind.STRUCT):
            raise ValueError(f"{self.kind.value} is not a primitive kind")

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class ArrayType:
    element_type: "DataType"
    contains_null: bool = True
    kind: ClassVar[Kind] = Kind.ARRAY

    def __str__(self) -> str:
        return f"array<{self.element_type}>"


@dataclass(frozen=True)
class MapType:
    key_type: "DataType"
    value_type: "DataType"
    value_contains_null: bool = True
    kind: ClassVar[Kind] = Kind.MAP

    def __str__(self) -> str:
        return f"map<{self.key_type},{self.value_type}>"


@dataclass(frozen=True)
class StructField:
    name: str
    data_type: "DataType"
    nullable: bool = True

    def with_nullable(self, nullable: bool) -> "StructField":
        return StructField(self.name, self.data_type, nullable)


@dataclass(frozen=True)
class StructType:
    """Ordered sequence of named fields. Doubles as a record schema."""

    fields: Tuple[StructField, ...] = ()
    kind: ClassVar[Kind] = Kind.STRUCT

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        seen = set()
        for f in self.fields:
            if f.name in seen:
                raise ValueError(f"duplicate field name '{f.name}'")
            seen.add(f.name)

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[StructField]:
        return iter(self.fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self.fields)

    def __str__(self) -> str:
        inner = ",".join(f"{f.name}:{f.data_type}" for f in self.fields)
        return f"struct<{inner}>"

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get(self, name: str) -> Optional[StructField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def field(self, name: str) -> StructField:
        f = self.get(name)
        if f is None:
            raise KeyError(name)
        return f

    def add(self, name: str, data_type: "DataType", nullable: bool = True) -> "StructType":
        return StructType(self.fields + (StructField(name, data_type, nullable),))

    def content(self) -> FrozenSet[Tuple[str, "DataType", bool]]:
        """Order-insensitive view: the set of (name, type, nullable) triples."""
        return frozenset((f.name, f.data_type, f.nullable) for f in self.fields)


DataType = Union[PrimitiveType, ArrayType, MapType, StructType]

NullType = PrimitiveType(Kind.NULL)
BooleanType = PrimitiveType(Kind.BOOLEAN)
ByteType = PrimitiveType(Kind.BYTE)
ShortType = PrimitiveType(Kind.SHORT)
IntegerType = PrimitiveType(Kind.INTEGER)
LongType = PrimitiveType(Kind.LONG)
FloatType = PrimitiveType(Kind.FLOAT)
DoubleType = PrimitiveType(Kind.DOUBLE)
StringType = PrimitiveType(Kind.STRING)


def struct_of(fields: Iterable[Tuple[str, DataType]], *, nullable: bool = False) -> StructType:
    """Build a StructType from (name, type) pairs sharing one nullability."""
    return StructType(tuple(StructField(name, t, nullable) for name, t in fields))


def is_numeric(data_type: DataType) -> bool:
    return data_type.kind in NUMERIC_KINDS


_SIZES = {
    Kind.NULL: 0,
    Kind.BOOLEAN: 1,
    Kind.BYTE: 1,
    Kind.SHORT: 2,
    Kind.INTEGER: 4,
    Kind.LONG: 8,
    Kind.FLOAT: 4,
    Kind.DOUBLE: 8,
}

_NUMPY_CODES = {
    Kind.BOOLEAN: "?",
    Kind.BYTE: "i1",
    Kind.SHORT: "i2",
    Kind.INTEGER: "i4",
    Kind.LONG: "i8",
    Kind.FLOAT: "f4",
    Kind.DOUBLE: "f8",
}


def default_size(data_type: DataType) -> int:
    """On-disk byte width of a fixed-size type."""
    if data_type.kind == Kind.STRUCT:
        return sum(default_size(f.data_type) for f in data_type.fields)
    size = _SIZES.get(data_type.kind)
    if size is None:
        raise UnsupportedType(data_type)
    return size


def numpy_dtype(data_type: DataType, little_endian: bool = True) -> np.dtype:
    code = _NUMPY_CODES.get(data_type.kind)
    if code is None:
        raise UnsupportedType(data_type)
    return np.dtype(("<" if little_endian else ">") + code)
