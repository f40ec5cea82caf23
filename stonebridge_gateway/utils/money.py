"""Currency conversion utilities - balances are stored as integer cents"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any

from stonebridge_gateway.domain.exceptions import InvalidArgumentError

CENT = Decimal("0.01")
PRECISION = 34

# Largest amount a BIGINT cents column holds
MAX_CENTS = 2**63 - 1


def parse_decimal(value: Any, field: str) -> Decimal:
    """Parse a user-supplied number, rejecting NaN/Infinity and garbage"""
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError(f"{field} is required and must be a number")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidArgumentError(f"{field} must be a number") from e
    if not number.is_finite():
        raise InvalidArgumentError(f"{field} must be a finite number")
    return number


def to_cents(amount: Any, field: str = "amount") -> int:
    """
    Convert a currency amount to integer cents.

    Raises:
        InvalidArgumentError: more than 2 fractional digits, or an amount
            outside what a cents column can store
    """
    number = parse_decimal(amount, field)
    if abs(number) > Decimal(MAX_CENTS) / 100:
        raise InvalidArgumentError(f"{field} is too large")
    with localcontext() as ctx:
        ctx.prec = PRECISION
        exact = number.quantize(CENT)
        if exact != number:
            raise InvalidArgumentError(f"{field} cannot have more than 2 decimal places")
        return int(exact * 100)


def from_cents(cents: int) -> Decimal:
    """Integer cents back to a 2-place Decimal"""
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return (Decimal(cents) / 100).quantize(CENT)


def round_currency(amount: Decimal) -> Decimal:
    """Round half-up to cents; only used at presentation"""
    with localcontext() as ctx:
        # Enough digits for every integer place plus two decimals
        ctx.prec = max(PRECISION, amount.adjusted() + 3)
        rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    # -0.00 from sub-cent drift prints as "-0.00"
    return rounded.copy_abs() if rounded.is_zero() else rounded


def format_cents(cents: int) -> str:
    """Format cents as a plain 2-decimal string, e.g. 150075 -> '1500.75'"""
    return f"{from_cents(cents):.2f}"
