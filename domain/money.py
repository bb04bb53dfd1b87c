"""
Domain: monetary values.

Amounts are `Decimal` throughout the core. Inputs coming from forms or JSON may
be ints, floats or strings; they are converted through `str` so that a float
like 0.1 becomes Decimal("0.1") rather than its binary expansion.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from .errors import InvalidAmountError

Amount = Union[Decimal, int, float, str]


def require_positive_amount(name: str, value: Amount) -> Decimal:
    """Convert `value` to Decimal, rejecting non-numeric, non-finite and non-positive input."""

    if isinstance(value, bool):
        raise InvalidAmountError(f"{name} must be a number, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"{name} must be a number, got {value!r}") from None

    if not amount.is_finite():
        raise InvalidAmountError(f"{name} must be finite, got {value!r}")
    if amount <= 0:
        raise InvalidAmountError(f"{name} must be positive, got {value!r}")
    return amount


def to_pennies(amount: Decimal) -> Decimal:
    """Round to whole pennies, halves away from zero."""

    return Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal) -> str:
    """Display formatting in pounds sterling, e.g. £1,234.50."""

    quantized = to_pennies(amount)
    sign = "-" if quantized < 0 else ""
    return f"{sign}£{abs(quantized):,.2f}"


__all__ = ["Amount", "require_positive_amount", "to_pennies", "format_currency"]
