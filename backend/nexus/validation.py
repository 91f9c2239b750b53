from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any


CENTS = Decimal("0.01")

# Maximum unit price or cost: 9,999,999.99
# Line subtotals, record totals and client totalSpent are not capped
MAX_MONEY = Decimal("9999999.99")


class ValidationError(ValueError):
    """Input problem: a record is missing required data or carries bad values."""


class ConflictError(ValueError):
    """Business rule conflict (e.g., duplicate username, protected record)."""


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def coerce_money(
    value: Any,
    field: str,
    *,
    allow_negative: bool = False,
    maximum: Decimal | None = MAX_MONEY,
) -> Decimal:
    """
    Normalize a money value to a Decimal with cents precision.

    Accepts Decimal, int, float (via its repr, so 10.1 stays 10.1) and
    numeric strings. Booleans are rejected even though they are ints.
    maximum=None disables the upper bound (aggregates and totals).
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be a number")
        try:
            amount = Decimal(stripped)
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if not allow_negative and amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    if maximum is not None and abs(amount) > maximum:
        raise ValidationError(f"{field} exceeds maximum allowed value")
    return quantize_money(amount)


def coerce_int(value: Any, field: str) -> int:
    """Strict integer coercion: rejects decimals, scientific notation and bools."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{field} must be an integer, not a decimal")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    raise ValidationError(f"{field} must be an integer")


def require_text(value: Any, field: str) -> str:
    if value is None:
        raise ValidationError(f"{field} is required")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field} is required")
    return text


def optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def coerce_enum(enum_cls: type[Enum], value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}")


def money_to_json(value: Decimal) -> int | float:
    """JSON number for a cents-quantized Decimal (whole amounts stay ints)."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)
