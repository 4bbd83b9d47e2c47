"""Reconcile two record schemas into one.

A field present on both sides keeps its name, takes the promoted common type
and is nullable if either side is. A field present on one side only is carried
over as nullable: rows coming from the other layout hold null there. Left
field order wins; right-only fields are appended.

Numeric promotion (wider wins, symmetric):

    byte < short < integer < long
    float + double                     -> double
    float|double + byte|short|integer  -> double
    float|double + long                -> incompatible
"""
from __future__ import annotations

from functools import reduce
from typing import Dict, Iterable, List, Optional

from .data_types import (
    FRACTIONAL_KINDS,
    INTEGRAL_KINDS,
    ArrayType,
    DataType,
    DoubleType,
    Kind,
    MapType,
    PrimitiveType,
    StructField,
    StructType,
    is_numeric,
)
from .errors import IncompatibleFieldType


def promote_numeric(left: DataType, right: DataType) -> Optional[DataType]:
    """Common numeric type of two numeric primitives, or None if there is none."""
    lk, rk = left.kind, right.kind
    if lk in INTEGRAL_KINDS and rk in INTEGRAL_KINDS:
        wider = max(INTEGRAL_KINDS.index(lk), INTEGRAL_KINDS.index(rk))
        return PrimitiveType(INTEGRAL_KINDS[wider])
    if lk in FRACTIONAL_KINDS and rk in FRACTIONAL_KINDS:
        return left if lk == rk else DoubleType
    integral = lk if lk in INTEGRAL_KINDS else rk
    if integral == Kind.LONG:
        # no exact common representation
        return None
    return DoubleType


def merge_types(left: DataType, right: DataType, name: str = "") -> DataType:
    lk, rk = left.kind, right.kind

    if lk == Kind.ARRAY and rk == Kind.ARRAY:
        return ArrayType(
            merge_types(left.element_type, right.element_type, f"{name}[]"),
            left.contains_null or right.contains_null,
        )

    if lk == Kind.MAP and rk == Kind.MAP:
        return MapType(
            merge_types(left.key_type, right.key_type, f"{name}{{key}}"),
            merge_types(left.value_type, right.value_type, f"{name}{{}}"),
            left.value_contains_null or right.value_contains_null,
        )

    if lk == Kind.STRUCT and rk == Kind.STRUCT:
        return merge(left, right, _prefix=f"{name}." if name else "")

    if left == right:
        return left

    if lk == Kind.NULL:
        return right
    if rk == Kind.NULL:
        return left

    if is_numeric(left) and is_numeric(right):
        promoted = promote_numeric(left, right)
        if promoted is not None:
            return promoted

    raise IncompatibleFieldType(name, left, right)


def merge(left: StructType, right: StructType, *, _prefix: str = "") -> StructType:
    right_by_name: Dict[str, StructField] = {f.name: f for f in right.fields}
    left_names = set(left.names)

    fields: List[StructField] = []
    for f_left in left.fields:
        f_right = right_by_name.get(f_left.name)
        if f_right is None:
            fields.append(f_left.with_nullable(True))
            continue
        fields.append(
            StructField(
                f_left.name,
                merge_types(f_left.data_type, f_right.data_type, _prefix + f_left.name),
                f_left.nullable or f_right.nullable,
            )
        )

    for f_right in right.fields:
        if f_right.name not in left_names:
            fields.append(f_right.with_nullable(True))

    return StructType(tuple(fields))


def merge_all(schemas: Iterable[StructType]) -> StructType:
    """Left fold of ``merge`` over many schemas; empty input gives an empty schema."""
    schemas = list(schemas)
    if not schemas:
        return StructType(())
    return reduce(merge, schemas)
