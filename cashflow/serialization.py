"""Shared serialization utilities for records and derived views."""

from dataclasses import asdict, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def to_row(obj: Any, exclude: tuple[str, ...] = ()) -> dict:
    """Flatten a record into a column mapping for a database row.

    Nested dataclasses (``Address``) are inlined one level deep; enum
    members become their wire value. Decimals and dates are kept as-is so
    the database driver can adapt them natively.

    Parameters
    ----------
    obj : Any
        A dataclass instance.
    exclude : tuple[str, ...]
        Field names to leave out.

    Returns
    -------
    dict
        Column name -> value.
    """
    row: dict[str, Any] = {}
    for f in fields(obj):
        if f.name in exclude:
            continue
        value = getattr(obj, f.name)
        if is_dataclass(value):
            for inner in fields(value):
                row[inner.name] = _row_value(getattr(value, inner.name))
        else:
            row[f.name] = _row_value(value)
    return row


def _row_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif is_dataclass(value) and not isinstance(value, type):
        return dataclass_to_dict(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value
