from __future__ import annotations

import struct
from typing import Any, Callable, Dict, Tuple

from .data_types import DataType, Kind
from .errors import UnsupportedType

Reader = Callable[[Any], Any]
Writer = Callable[[bytearray, Any], None]

_FORMATS = {
    Kind.BOOLEAN: "?",
    Kind.BYTE: "b",
    Kind.SHORT: "h",
    Kind.INTEGER: "i",
    Kind.LONG: "q",
    Kind.FLOAT: "f",
    Kind.DOUBLE: "d",
}

_STRUCTS: Dict[Tuple[Kind, bool], struct.Struct] = {
    (kind, little): struct.Struct(("<" if little else ">") + fmt)
    for kind, fmt in _FORMATS.items()
    for little in (True, False)
}


def _codec(data_type: DataType, little_endian: bool) -> struct.Struct:
    try:
        return _STRUCTS[(data_type.kind, bool(little_endian))]
    except KeyError:
        raise UnsupportedType(data_type) from None


def reader(data_type: DataType, offset: int, little_endian: bool = True) -> Reader:
    """Return ``f(buffer) -> value`` decoding ``data_type`` at ``offset``."""
    if data_type.kind == Kind.NULL:
        return lambda buf: None
    codec = _codec(data_type, little_endian)
    unpack_from = codec.unpack_from
    return lambda buf: unpack_from(buf, offset)[0]


def writer(data_type: DataType, offset: int, little_endian: bool = True) -> Writer:
    """Return ``f(buffer, value)`` encoding ``value`` at ``offset``. Null writes nothing."""
    if data_type.kind == Kind.NULL:
        return lambda buf, value: None
    codec = _codec(data_type, little_endian)
    pack_into = codec.pack_into
    return lambda buf, value: pack_into(buf, offset, value)


def decode(data_type: DataType, buf, offset: int = 0, little_endian: bool = True) -> Any:
    return reader(data_type, offset, little_endian)(buf)


def encode(data_type: DataType, value: Any, little_endian: bool = True) -> bytes:
    if data_type.kind == Kind.NULL:
        return b""
    return _codec(data_type, little_endian).pack(value)
