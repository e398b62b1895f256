from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_id(value: Any, field_name: str) -> int:
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required")
    if ident <= 0:
        raise ValidationError(f"{field_name} is required")
    return ident


def optional_id(value: Any, field_name: str) -> Optional[int]:
    """Empty string / None / 0 mean "not set" (e.g. an unassigned instructor)."""
    if value in (None, "", 0, "0"):
        return None
    return require_id(value, field_name)


def require_decimal(value: Any, field_name: str) -> Decimal:
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, AttributeError):
        raise ValidationError(f"{field_name} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    return number


def require_positive(value: Any, field_name: str, *, maximum: Optional[Decimal] = None) -> Decimal:
    number = require_decimal(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field_name} must not exceed {maximum}")
    return number


def require_non_negative(value: Any, field_name: str) -> Decimal:
    number = require_decimal(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def optional_text(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None
