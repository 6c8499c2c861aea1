"""Small value helpers shared by the schema nodes."""

from __future__ import annotations

import math
from collections.abc import Mapping, Set
from datetime import date, datetime
from types import MappingProxyType
from typing import Any


class _Missing:
    """Marker for an absent value (a missing object key, an omitted input)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Missing:
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def parsed_type(value: Any) -> str:
    """Name the runtime type of a value using schema vocabulary.

    Args:
        value: Any input value

    Returns:
        Type name such as "string", "number", "object" or "missing"
    """
    if value is MISSING:
        return "missing"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "number"
    if isinstance(value, float):
        if math.isnan(value):
            return "nan"
        return "number" if math.isfinite(value) else "infinity"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bytes, bytearray)):
        return "bytes"
    if isinstance(value, (datetime, date)):
        return "date"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Set):
        return "set"
    return type(value).__name__


def is_number(value: Any) -> bool:
    """Finite int or float, excluding bool."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def same_value(left: Any, right: Any) -> bool:
    """Equality that does not confuse booleans with the integers 0 and 1."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if left is None or right is None:
        return left is right
    return bool(left == right)


def freeze(value: Any) -> Any:
    """Return a read-only view of a container value."""
    if isinstance(value, dict):
        return MappingProxyType(value)
    if isinstance(value, list):
        return tuple(value)
    if isinstance(value, set):
        return frozenset(value)
    return value


def stringify(value: Any) -> str:
    """Render a literal the way messages quote it."""
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def plain(value: Any) -> Any:
    """Convert definition values into JSON-compatible data."""
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict) and not isinstance(value, type):
        return to_dict()
    if isinstance(value, Mapping):
        return {str(key): plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, Set)):
        return [plain(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    pattern = getattr(value, "pattern", None)
    if isinstance(pattern, str):
        return pattern
    return repr(value)
