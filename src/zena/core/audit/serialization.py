"""Conversion of model state into JSON-safe audit snapshots."""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import inspect


def to_primitive(value: Any) -> Any:
    """Serialize a value to JSON-compatible primitives.

    Args:
        value: Any value to serialize

    Returns:
        JSON-serializable representation of the value
    """
    if value is None or isinstance(value, str | int | float | bool):
        return value

    result: Any
    if isinstance(value, UUID):
        result = str(value)
    elif isinstance(value, datetime | date):
        result = value.isoformat()
    elif isinstance(value, Decimal):
        result = str(value)
    elif isinstance(value, Enum):
        result = value.value
    elif isinstance(value, Mapping):
        result = {str(k): to_primitive(v) for k, v in value.items()}
    elif isinstance(value, list | tuple | set | frozenset):
        result = [to_primitive(item) for item in value]
    else:
        result = str(value)

    return result


def snapshot(entity: Any, exclude: Iterable[str] = ()) -> dict[str, Any]:
    """Capture the loaded column values of a mapped instance.

    Unloaded or expired attributes are skipped rather than fetched, so
    this is safe to call on an async session without triggering IO.

    Args:
        entity: SQLAlchemy model instance
        exclude: Attribute names to leave out

    Returns:
        Mapping of attribute name to JSON-safe value
    """
    state = inspect(entity)
    skipped = set(exclude) | set(state.unloaded)
    return {
        attr.key: to_primitive(state.dict.get(attr.key))
        for attr in state.mapper.column_attrs
        if attr.key not in skipped
    }


def diff(old: Mapping[str, Any], new: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Reduce two snapshots to the keys whose values differ."""
    keys = [key for key in new if old.get(key) != new.get(key)]
    return {key: old.get(key) for key in keys}, {key: new[key] for key in keys}
