from __future__ import annotations

import re
from typing import Any

from ..core.exceptions import ValidationError

_INT_PATTERN = re.compile(r"-?[0-9]+")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def _as_int(value: Any, field_name: str) -> int:
    # bool is an int subclass; "True passes" is never meant.
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        v = value.strip()
        if _INT_PATTERN.fullmatch(v):
            return int(v)
    raise ValidationError(f"{field_name} must be a whole number")


def require_positive_int(value: Any, field_name: str) -> int:
    n = _as_int(value, field_name)
    if n < 1:
        raise ValidationError(f"{field_name} must be at least 1")
    return n


def require_non_negative_int(value: Any, field_name: str) -> int:
    n = _as_int(value, field_name)
    if n < 0:
        raise ValidationError(f"{field_name} must be a whole number (0 or more)")
    return n


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()
