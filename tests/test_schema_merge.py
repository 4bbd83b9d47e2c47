"""Tests for lassection.schema_merge: nullability widening and numeric promotion."""
from __future__ import annotations

import itertools

import pytest

from lassection.data_types import (
    ArrayType,
    BooleanType,
    ByteType,
    DoubleType,
    FloatType,
    IntegerType,
    LongType,
    MapType,
    NullType,
    ShortType,
    StringType,
    StructField,
    StructType,
    struct_of,
)
from lassection.errors import IncompatibleFieldType
from lassection.point_formats import POINT_FORMATS, schema_for
from lassection.schema_merge import merge, merge_all, merge_types


def one(name, data_type, nullable=False) -> StructType:
    return StructType((StructField(name, data_type, nullable),))


# ───────────────────── Identity and commutativity ─────────────────────


class TestAlgebra:
    @pytest.mark.parametrize("code", range(11))
    def test_merge_with_itself_is_identity(self, code) -> None:
        schema = schema_for(code)
        assert merge(schema, schema) == schema

    def test_commutative_on_content(self) -> None:
        for left, right in itertools.combinations(POINT_FORMATS, 2):
            assert merge(left, right).content() == merge(right, left).content()

    def test_order_may_differ(self) -> None:
        lr = merge(schema_for(0), schema_for(6))
        rl = merge(schema_for(6), schema_for(0))
        assert lr.names != rl.names
        assert set(lr.names) == set(rl.names)


# ───────────────────── Field bookkeeping ──────────────────────────────


class TestFields:
    def test_left_order_then_right_only(self) -> None:
        merged = merge(schema_for(0), schema_for(6))
        assert list(merged.names) == list(schema_for(0).names) + ["return", "time"]

    def test_one_sided_fields_become_nullable(self) -> None:
        merged = merge(schema_for(0), schema_for(6))
        assert merged.field("return").nullable
        assert merged.field("time").nullable
        assert not merged.field("x").nullable

    def test_shared_field_keeps_non_null(self) -> None:
        merged = merge(schema_for(1), schema_for(6))
        assert merged.field("time") == StructField("time", DoubleType, False)

    def test_nullability_is_ored(self) -> None:
        merged = merge(one("x", IntegerType, True), one("x", IntegerType, False))
        assert merged.field("x").nullable
        merged = merge(one("x", IntegerType, False), one("x", IntegerType, True))
        assert merged.field("x").nullable

    def test_angle_widens_across_layouts(self) -> None:
        merged = merge(schema_for(0), schema_for(6))
        assert merged.field("angle").data_type == ShortType

    def test_merge_all(self) -> None:
        merged = merge_all([schema_for(0), schema_for(2), schema_for(8)])
        assert "nir" in merged and merged.field("nir").nullable
        assert merged.field("red").nullable
        assert not merged.field("intensity").nullable

    def test_merge_all_empty(self) -> None:
        assert merge_all([]) == StructType(())


# ───────────────────── Promotion lattice ──────────────────────────────


class TestPromotion:
    def test_integer_and_short(self) -> None:
        merged = merge(one("x", IntegerType), one("x", ShortType))
        assert merged == one("x", IntegerType, False)

    def test_float_and_double(self) -> None:
        assert merge(one("x", FloatType), one("x", DoubleType)) == one("x", DoubleType)

    def test_long_and_float_fails(self) -> None:
        with pytest.raises(IncompatibleFieldType) as exc:
            merge(one("x", LongType), one("x", FloatType))
        assert exc.value.name == "x"
        assert exc.value.left == LongType
        assert exc.value.right == FloatType

    def test_double_and_long_fails_both_ways(self) -> None:
        with pytest.raises(IncompatibleFieldType):
            merge_types(DoubleType, LongType)
        with pytest.raises(IncompatibleFieldType):
            merge_types(LongType, DoubleType)

    @pytest.mark.parametrize(
        "left, right, expected",
        [
            (ByteType, ShortType, ShortType),
            (ByteType, LongType, LongType),
            (ShortType, LongType, LongType),
            (IntegerType, LongType, LongType),
            (FloatType, ByteType, DoubleType),
            (FloatType, IntegerType, DoubleType),
            (DoubleType, ShortType, DoubleType),
            (FloatType, FloatType, FloatType),
        ],
    )
    def test_lattice_is_symmetric(self, left, right, expected) -> None:
        assert merge_types(left, right) == expected
        assert merge_types(right, left) == expected

    def test_null_adopts_other_type(self) -> None:
        assert merge_types(NullType, IntegerType) == IntegerType
        assert merge_types(ShortType, NullType) == ShortType

    def test_identical_non_numeric(self) -> None:
        assert merge_types(StringType, StringType) == StringType
        assert merge_types(BooleanType, BooleanType) == BooleanType

    def test_different_non_numeric_fails(self) -> None:
        with pytest.raises(IncompatibleFieldType):
            merge_types(StringType, IntegerType)
        with pytest.raises(IncompatibleFieldType):
            merge(one("flag", BooleanType), one("flag", ByteType))


# ───────────────────── Nested types ───────────────────────────────────


class TestNested:
    def test_array_elements_merge(self) -> None:
        merged = merge_types(ArrayType(ShortType, False), ArrayType(IntegerType, True))
        assert merged == ArrayType(IntegerType, True)

    def test_map_keys_and_values_merge(self) -> None:
        merged = merge_types(
            MapType(ByteType, FloatType, False),
            MapType(ShortType, DoubleType, False),
        )
        assert merged == MapType(ShortType, DoubleType, False)

    def test_struct_fields_merge(self) -> None:
        left = one("p", struct_of([("a", ShortType)]))
        right = one("p", struct_of([("a", IntegerType), ("b", FloatType)]))
        merged = merge(left, right).field("p").data_type
        assert merged == StructType(
            (StructField("a", IntegerType, False), StructField("b", FloatType, True))
        )

    def test_nested_failure_names_path(self) -> None:
        left = one("p", struct_of([("a", LongType)]))
        right = one("p", struct_of([("a", DoubleType)]))
        with pytest.raises(IncompatibleFieldType) as exc:
            merge(left, right)
        assert exc.value.name == "p.a"

    def test_array_failure_names_element(self) -> None:
        with pytest.raises(IncompatibleFieldType) as exc:
            merge(one("v", ArrayType(LongType)), one("v", ArrayType(FloatType)))
        assert exc.value.name == "v[]"

    def test_array_and_primitive_fail(self) -> None:
        with pytest.raises(IncompatibleFieldType):
            merge_types(ArrayType(IntegerType), IntegerType)
