from __future__ import annotations

from typing import Any, Iterable, Optional

from ..core.constants import ALL_OPTION
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def optional_int(value: Any, field_name: str) -> Optional[int]:
    """Parse an optional integer id; blank and "all" mean no value."""

    if value is None or value == "" or value == ALL_OPTION:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def require_int(value: Any, field_name: str) -> int:
    parsed = optional_int(value, field_name)
    if parsed is None:
        raise ValidationError(f"{field_name} is required")
    return parsed


def int_list(values: Optional[Iterable[Any]], field_name: str) -> list[int]:
    """Parse a list of ids, dropping duplicates while keeping order."""

    if values is None:
        return []
    if isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
        raise ValidationError(f"{field_name} must be a list")

    out: list[int] = []
    for v in values:
        n = require_int(v, field_name)
        if n not in out:
            out.append(n)
    return out
