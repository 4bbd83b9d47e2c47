"""Tests for lassection.field_codec: single-value decode/encode at an offset."""
from __future__ import annotations

import struct

import pytest

from lassection import field_codec
from lassection.data_types import (
    ArrayType,
    BooleanType,
    ByteType,
    DoubleType,
    FloatType,
    IntegerType,
    LongType,
    NullType,
    ShortType,
    StringType,
)
from lassection.errors import UnsupportedType


class TestReader:
    @pytest.mark.parametrize(
        "data_type, fmt, value",
        [
            (ByteType, "b", -7),
            (ShortType, "h", -300),
            (IntegerType, "i", 123456789),
            (LongType, "q", -(2**40)),
            (DoubleType, "d", 3.25),
            (BooleanType, "?", True),
        ],
    )
    def test_little_and_big_endian(self, data_type, fmt, value) -> None:
        little = struct.pack("<" + fmt, value)
        big = struct.pack(">" + fmt, value)
        assert field_codec.reader(data_type, 0, True)(little) == value
        assert field_codec.reader(data_type, 0, False)(big) == value

    def test_reads_at_offset(self) -> None:
        buf = b"\xaa\xbb" + struct.pack("<h", 300) + b"\xcc"
        assert field_codec.reader(ShortType, 2)(buf) == 300

    def test_float_is_single_precision(self) -> None:
        buf = struct.pack("<f", 0.1)
        assert field_codec.reader(FloatType, 0)(buf) == pytest.approx(0.1, rel=1e-6)

    def test_null_reads_none(self) -> None:
        assert field_codec.reader(NullType, 5)(b"") is None

    def test_accepts_memoryview(self) -> None:
        buf = memoryview(struct.pack("<ii", 1, 2))
        assert field_codec.reader(IntegerType, 4)(buf) == 2


class TestWriter:
    def test_writes_at_offset(self) -> None:
        buf = bytearray(10)
        field_codec.writer(IntegerType, 2)(buf, 513)
        assert bytes(buf) == b"\x00\x00\x01\x02\x00\x00" + bytes(4)

    def test_big_endian(self) -> None:
        buf = bytearray(2)
        field_codec.writer(ShortType, 0, False)(buf, 1)
        assert bytes(buf) == b"\x00\x01"

    def test_null_writes_nothing(self) -> None:
        buf = bytearray(b"\x01\x02")
        field_codec.writer(NullType, 0)(buf, 99)
        assert bytes(buf) == b"\x01\x02"
        assert field_codec.encode(NullType, 99) == b""

    def test_encode_then_decode(self) -> None:
        data = field_codec.encode(DoubleType, -1.5)
        assert len(data) == 8
        assert field_codec.decode(DoubleType, data) == -1.5


class TestUnsupported:
    @pytest.mark.parametrize("data_type", [StringType, ArrayType(IntegerType)])
    def test_reader_rejects(self, data_type) -> None:
        with pytest.raises(UnsupportedType) as exc:
            field_codec.reader(data_type, 0)
        assert str(data_type) in str(exc.value)

    def test_writer_rejects(self) -> None:
        with pytest.raises(UnsupportedType):
            field_codec.writer(StringType, 0)
