from __future__ import annotations

from decimal import Decimal, InvalidOperation

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return value.strip()


def require_positive_id(value: int, field_name: str) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid", field=field_name)
    if v <= 0:
        raise ValidationError(f"{field_name} is invalid", field=field_name)
    return v


def require_non_negative(value: int, field_name: str) -> int:
    if value is None or int(value) < 0:
        raise ValidationError(f"{field_name} must be >= 0", field=field_name)
    return int(value)


def to_decimal(value, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a number", field=field_name)
