"""Strict readers for JSON wire fields.

Each reader raises ``ValueError`` (or ``KeyError`` for a missing required
field) instead of coercing, so the protocol decoder can report the message
as malformed.
"""
from typing import Any, Dict, Optional

_REQUIRED = object()


def _lookup(data: Dict[str, Any], key: str, default: Any) -> Any:
    if default is _REQUIRED:
        return data[key]
    return data.get(key, default)


def read_int(data: Dict[str, Any], key: str, default: Any = _REQUIRED) -> int:
    value = _lookup(data, key, default)
    # bool is an int subclass; JSON true/false is not a number here
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Field '{key}' must be an integer, got {value!r}")
    return value


def read_bool(data: Dict[str, Any], key: str, default: Any = _REQUIRED) -> bool:
    value = _lookup(data, key, default)
    if not isinstance(value, bool):
        raise ValueError(f"Field '{key}' must be a boolean, got {value!r}")
    return value


def read_str(data: Dict[str, Any], key: str, default: Any = _REQUIRED) -> str:
    value = _lookup(data, key, default)
    if not isinstance(value, str):
        raise ValueError(f"Field '{key}' must be a string, got {value!r}")
    return value


def read_optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    """Missing or null reads as None; anything else must be a string."""
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Field '{key}' must be a string or null, got {value!r}")
    return value
