from __future__ import annotations

import copy
from dataclasses import dataclass
from itertools import accumulate
from typing import Any, Callable, Dict, Iterator, List, Mapping, Sequence, Tuple, Union

import numpy as np

from . import casts, field_codec
from .data_types import (
    DataType,
    Kind,
    LongType,
    NullType,
    StructField,
    StructType,
    default_size,
    numpy_dtype,
)
from .errors import InvalidStride

ColumnExtractor = Callable[[int, Any], List[Any]]


@dataclass(frozen=True)
class FieldSlot:
    field: StructField
    offset: int

    @property
    def data_type(self) -> DataType:
        return self.field.data_type

    @property
    def absent(self) -> bool:
        return self.offset < 0


class FieldOffsetTable(Mapping[str, FieldSlot]):
    """Field name -> (field, byte offset within one record).

    Unknown names resolve through ``lookup_or_default`` to an absent slot:
    null type at offset -1, which always decodes to None.
    """

    def __init__(self, slots: Dict[str, FieldSlot]) -> None:
        self._slots = dict(slots)

    def __getitem__(self, name: str) -> FieldSlot:
        return self._slots[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def lookup_or_default(self, name: str) -> FieldSlot:
        slot = self._slots.get(name)
        if slot is None:
            return FieldSlot(StructField(name, NullType, True), -1)
        return slot


class BinarySection:
    """A block of ``count`` fixed-layout records starting at ``offset`` in ``location``.

    Record ``i`` starts at ``offset + i * stride``. ``stride`` defaults to the
    packed record length and may be larger when records carry trailing
    padding. The exposed ``schema`` prepends a non-null long identity column
    named ``id_name`` whose value is the ordinal of the record in the file.

    Instances are not mutated after construction except for ``offset``, which
    an owner may re-anchor before handing the section to readers.
    """

    def __init__(
        self,
        location: str,
        offset: int,
        count: int,
        little_endian: bool,
        record_schema: StructType,
        stride: int = 0,
        id_name: str = "id",
    ) -> None:
        self.location = str(location)
        self.offset = int(offset)
        self.count = int(count)
        self.little_endian = bool(little_endian)
        self.record_schema = record_schema
        self.id_name = id_name

        sizes = [default_size(f.data_type) for f in record_schema.fields]
        starts = list(accumulate(sizes, initial=0))
        self.length = starts[-1]

        stride = int(stride)
        if stride < 0 or 0 < stride < self.length:
            raise InvalidStride(stride, self.length)
        self.stride = stride if stride > 0 else self.length

        self.schema = StructType((StructField(id_name, LongType, False),) + record_schema.fields)
        self.offsets = FieldOffsetTable(
            {f.name: FieldSlot(f, start) for f, start in zip(record_schema.fields, starts)}
        )

        order = self.little_endian
        self._readers = [
            field_codec.reader(f.data_type, start, order)
            for f, start in zip(record_schema.fields, starts)
        ]
        self._writers = [
            field_codec.writer(f.data_type, start, order)
            for f, start in zip(record_schema.fields, starts)
        ]

    def __repr__(self) -> str:
        return (
            f"BinarySection({self.location!r}, offset={self.offset}, count={self.count}, "
            f"length={self.length}, stride={self.stride}, "
            f"{'little' if self.little_endian else 'big'}-endian)"
        )

    def size(self) -> int:
        """Total bytes spanned by the section."""
        return self.count * self.stride

    def record_offset(self, index: int) -> int:
        if not 0 <= index < self.count:
            raise IndexError(f"record {index} out of range [0, {self.count})")
        return self.offset + index * self.stride

    def with_offset(self, offset: int) -> "BinarySection":
        """Shallow copy re-anchored at another start offset."""
        other = copy.copy(self)
        other.offset = int(offset)
        return other

    def _check_record(self, record_bytes) -> None:
        if len(record_bytes) < self.length:
            raise ValueError(
                f"record has {len(record_bytes)} bytes, layout needs {self.length}"
            )

    # read path

    def extract_row(self, record_bytes) -> List[Any]:
        """Decode every record field, in record schema order."""
        self._check_record(record_bytes)
        return [read(record_bytes) for read in self._readers]

    def _column(self, target_schema: StructType, name: str) -> Callable[[int, Any], Any]:
        target_field = target_schema.get(name)

        if name == self.id_name:
            target_type = target_field.data_type if target_field is not None else LongType
            if target_type == LongType:
                return lambda record_id, buf: record_id
            cast = casts.caster(LongType, target_type)
            return lambda record_id, buf: cast(record_id)

        slot = self.offsets.lookup_or_default(name)
        source_type = slot.data_type
        if slot.absent or source_type.kind == Kind.NULL:
            return lambda record_id, buf: None

        target_type = target_field.data_type if target_field is not None else source_type
        read = field_codec.reader(source_type, slot.offset, self.little_endian)
        if source_type == target_type:
            return lambda record_id, buf: read(buf)
        cast = casts.caster(source_type, target_type)
        return lambda record_id, buf: cast(read(buf))

    def column_extractor(
        self, target_schema: StructType, columns: Sequence[str]
    ) -> ColumnExtractor:
        """Precompile ``f(record_id, record_bytes) -> values`` for ``columns``.

        Columns the section does not store decode to None. Columns stored with
        a different type than ``target_schema`` declares are widened, and
        ``UnsupportedCast`` is raised here when no widening exists.
        """
        getters = [self._column(target_schema, name) for name in columns]
        stored = any(name != self.id_name and name in self.offsets for name in columns)
        check = self._check_record

        def extract(record_id: int, record_bytes) -> List[Any]:
            if stored:
                check(record_bytes)
            return [get(record_id, record_bytes) for get in getters]

        return extract

    def extract_columns(
        self,
        target_schema: StructType,
        columns: Sequence[str],
        record_id: int,
        record_bytes,
    ) -> List[Any]:
        return self.column_extractor(target_schema, columns)(record_id, record_bytes)

    def iter_records(self, block, first_id: int = 0) -> Iterator[Tuple[int, memoryview]]:
        """Slice a contiguous block of records into ``(record_id, record_bytes)`` pairs.

        The last record may lack its trailing padding.
        """
        view = memoryview(block)
        if self.length == 0 or len(view) < self.length:
            return
        n = (len(view) - self.length) // self.stride + 1
        for i in range(n):
            start = i * self.stride
            yield first_id + i, view[start : start + self.length]

    def numpy_dtype(self) -> np.dtype:
        """Structured dtype of one record, itemsize = stride."""
        names, formats, offsets = [], [], []
        for name, slot in self.offsets.items():
            if slot.data_type.kind == Kind.NULL:
                continue
            names.append(name)
            formats.append(numpy_dtype(slot.data_type, self.little_endian))
            offsets.append(slot.offset)
        return np.dtype(
            {"names": names, "formats": formats, "offsets": offsets, "itemsize": self.stride}
        )

    def read_array(self, block) -> np.ndarray:
        """Vectorised decode of a contiguous block of records."""
        if self.stride == 0:
            return np.zeros(0, dtype=self.numpy_dtype())
        n, rem = divmod(len(block), self.stride)
        if rem >= self.length and rem > 0:
            block = bytes(block) + bytes(self.stride - rem)
            n += 1
        return np.frombuffer(block, dtype=self.numpy_dtype(), count=n)

    # write path

    def encode_row(self, values: Union[Sequence[Any], Mapping[str, Any]]) -> bytes:
        """Encode one row into a zero-padded ``stride``-byte record.

        ``values`` is either a sequence in record schema order or a mapping by
        field name. Missing and None values are left as zero bytes.
        """
        fields = self.record_schema.fields
        if isinstance(values, Mapping):
            values = [values.get(f.name) for f in fields]
        elif len(values) != len(fields):
            raise ValueError(f"expected {len(fields)} values, got {len(values)}")

        buf = bytearray(self.stride)
        for write, value in zip(self._writers, values):
            if value is not None:
                write(buf, value)
        return bytes(buf)
