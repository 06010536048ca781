"""
Fixed-Point Money Module

Parses monetary input into Decimal with explicit precision. NEVER uses float
for monetary values: float input is rejected outright rather than converted.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from datetime import date, datetime
from typing import Any, Optional, Union

from .exceptions import ValidationError

# High precision for intermediate sums; results are quantized explicitly
getcontext().prec = 28

MONEY_PLACES = 2
SHARE_PLACES = 4

ZERO = Decimal("0.00")

DecimalInput = Union[str, int, Decimal]


def quantize(value: Decimal, places: int = MONEY_PLACES) -> Decimal:
    """Round to a fixed number of places using standard half-up rounding"""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def parse_decimal(
    value: Any,
    field: str,
    places: int = MONEY_PLACES,
    minimum: Optional[Decimal] = None,
    allow_minimum: bool = True,
    maximum: Optional[Decimal] = None,
) -> Decimal:
    """
    Parse an exact decimal value.

    Args:
        value: Decimal string, int or Decimal
        field: Field name reported in validation errors
        places: Decimal places to round to (half-up)
        minimum: Optional lower bound
        allow_minimum: Whether the lower bound itself is accepted
        maximum: Optional inclusive upper bound

    Returns:
        Quantized Decimal

    Raises:
        ValidationError: value is missing, a float, malformed or out of range
    """
    if value is None:
        raise ValidationError.for_field(field, "is required")
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError.for_field(field, "must be an exact decimal string, not a float")
    if isinstance(value, str):
        value = value.strip()
    try:
        parsed = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError.for_field(field, f"invalid decimal value {value!r}")
    if not parsed.is_finite():
        raise ValidationError.for_field(field, "must be a finite number")

    try:
        parsed = quantize(parsed, places)
    except InvalidOperation:
        # more digits than the context precision holds
        raise ValidationError.for_field(field, "out of range")

    if minimum is not None:
        if parsed < minimum or (parsed == minimum and not allow_minimum):
            comparison = ">=" if allow_minimum else ">"
            raise ValidationError.for_field(field, f"must be {comparison} {minimum}")
    if maximum is not None and parsed > maximum:
        raise ValidationError.for_field(field, f"must be <= {maximum}")
    return parsed


def parse_amount(value: Any, field: str = "amount", positive: bool = False) -> Decimal:
    """Parse a non-negative (or strictly positive) 2 dp monetary amount"""
    return parse_decimal(value, field, MONEY_PLACES, minimum=Decimal("0"), allow_minimum=not positive)


def parse_signed_amount(value: Any, field: str) -> Decimal:
    """Parse a 2 dp monetary amount that may be negative (credit balances)"""
    return parse_decimal(value, field, MONEY_PLACES)


def parse_date(value: Any, field: str = "date") -> date:
    """Parse an ISO date string or date object"""
    if value is None:
        raise ValidationError.for_field(field, "is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValidationError.for_field(field, f"invalid ISO date {value!r}")


def format_money(value: Decimal) -> str:
    """Format for display"""
    return f"{quantize(value):,.2f}"
