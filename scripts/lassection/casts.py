"""Table-driven numeric widening casts.

A cast from ``source`` to ``target`` exists exactly when merging the two
types yields ``target``, so every merged schema can be reached by casting
from either input.
"""
from __future__ import annotations

from typing import Any, Callable, Dict

import numpy as np

from .data_types import NUMERIC_KINDS, DataType, Kind
from .errors import UnsupportedCast
from .schema_merge import promote_numeric

Caster = Callable[[Any], Any]

_SCALARS: Dict[Kind, type] = {
    Kind.BYTE: np.int8,
    Kind.SHORT: np.int16,
    Kind.INTEGER: np.int32,
    Kind.LONG: np.int64,
    Kind.FLOAT: np.float32,
    Kind.DOUBLE: np.float64,
}


def can_cast(source: DataType, target: DataType) -> bool:
    if source == target or source.kind == Kind.NULL:
        return True
    if source.kind in NUMERIC_KINDS and target.kind in NUMERIC_KINDS:
        return promote_numeric(source, target) == target
    return False


def _identity(value: Any) -> Any:
    return value


def caster(source: DataType, target: DataType) -> Caster:
    """Precompile ``value -> value`` for one (source, target) pair."""
    if not can_cast(source, target):
        raise UnsupportedCast(source, target)
    if source == target or source.kind == Kind.NULL:
        return _identity
    scalar = _SCALARS[target.kind]

    def cast(value: Any) -> Any:
        if value is None:
            return None
        return scalar(value).item()

    return cast


def cast_value(value: Any, source: DataType, target: DataType) -> Any:
    return caster(source, target)(value)
