"""Coercion of driver-native column values into the primitive kinds an index understands.

Database drivers hand back whatever their type mapping produces: Decimal,
date, UUID, bytes, driver-specific wrappers. Everything downstream only ever
sees one of six kinds, see ValueKind.
"""

import math
import numbers
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

NormalizedValue = str | int | float | bool | datetime | None
Record = dict[str, NormalizedValue]


class ValueKind(str, Enum):
    STRING = "string"
    INT64 = "int64"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    NULL = "null"


def _to_text(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        # __str__ itself is broken; the default repr cannot fail
        return object.__repr__(value)


def normalize_value(value: Any) -> NormalizedValue:
    """Map any value onto a NormalizedValue. Never raises.

    Integers outside the signed 64-bit range, non-finite numbers and every
    unknown type fall back to their string form.
    """
    if value is None:
        return None
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return value
    if isinstance(value, numbers.Integral):
        as_int = int(value)
        return as_int if INT64_MIN <= as_int <= INT64_MAX else _to_text(value)
    if isinstance(value, (numbers.Real, Decimal)):
        try:
            as_float = float(value)
        except (ValueError, OverflowError):
            # signalling NaN and friends
            return _to_text(value)
        # JSON has no NaN or infinity
        return as_float if math.isfinite(as_float) else _to_text(value)
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        return str(value)
    return _to_text(value)


def value_kind(value: NormalizedValue) -> ValueKind:
    """Classify a normalized value. Unknown shapes count as strings."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INT64
    if isinstance(value, float):
        return ValueKind.DOUBLE
    if isinstance(value, datetime):
        return ValueKind.TIMESTAMP
    return ValueKind.STRING


def stringify_value(value: NormalizedValue) -> str:
    """Render a value for a prompt: empty for null, ISO 8601 for timestamps."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return _to_text(value)


def resolve_key_column(columns: Iterable[str], key_column: str | None) -> str | None:
    """Return the source spelling of the key column, matched case-insensitively.

    "customerid" configured against a "CustomerId" column yields "CustomerId".
    A name that matches no column is returned unchanged.
    """
    if not key_column:
        return None
    for column in columns:
        if column.lower() == key_column.lower():
            return column
    return key_column


def normalize_record(raw: Mapping[str, Any], key_column: str | None = None) -> Record:
    """Normalize every value of a row, keeping column order.

    The key column, if designated and present, is turned into a string before
    the generic pass so keys always compare as text. A null key stays null.
    """
    record = dict(raw)
    if key_column and key_column in record and record[key_column] is not None:
        record[key_column] = _to_text(record[key_column])
    return {name: normalize_value(value) for name, value in record.items()}
