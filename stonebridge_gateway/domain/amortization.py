"""Fixed-payment amortization for loan and mortgage offers"""

from decimal import Decimal, localcontext
from typing import Any, List

from stonebridge_gateway.domain.exceptions import InvalidArgumentError
from stonebridge_gateway.domain.models import AmortizationResult, ScheduleRow
from stonebridge_gateway.utils.money import parse_decimal, round_currency

MONTHS_PER_YEAR = 12
PRECISION = 34

# Calculator limits
MAX_PRINCIPAL = Decimal("1000000000000")
MAX_APR = Decimal("100")
MAX_TERM_MONTHS = 1200
MAX_TERM_YEARS = MAX_TERM_MONTHS // MONTHS_PER_YEAR


def parse_term(value: Any, field: str) -> int:
    """Parse a whole number of periods; floats like '36.5' are rejected"""
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError(f"{field} is required and must be a whole number")
    try:
        term = int(str(value).strip())
    except ValueError as e:
        raise InvalidArgumentError(f"{field} must be a whole number") from e
    if term <= 0:
        raise InvalidArgumentError(f"{field} must be greater than zero")
    return term


def _validate(principal: Decimal, apr: Decimal, term_months: int) -> None:
    if principal <= 0:
        raise InvalidArgumentError("principal must be greater than zero")
    if principal > MAX_PRINCIPAL:
        raise InvalidArgumentError(f"principal cannot exceed {MAX_PRINCIPAL}")
    if apr < 0:
        raise InvalidArgumentError("apr cannot be negative")
    if apr > MAX_APR:
        raise InvalidArgumentError(f"apr cannot exceed {MAX_APR}")
    if term_months <= 0:
        raise InvalidArgumentError("term must be greater than zero")
    if term_months > MAX_TERM_MONTHS:
        raise InvalidArgumentError(f"termMonths cannot exceed {MAX_TERM_MONTHS}")


def monthly_payment(principal: Decimal, apr: Decimal, term_months: int) -> Decimal:
    """
    Standard fixed-payment formula.

    r = APR / 100 / 12
    payment = P / n                         if r == 0
    payment = P * r * (1+r)^n / ((1+r)^n - 1) otherwise
    """
    _validate(principal, apr, term_months)

    with localcontext() as ctx:
        ctx.prec = PRECISION
        try:
            rate = apr / 100 / MONTHS_PER_YEAR
            if rate == 0:
                return principal / term_months
            growth = (1 + rate) ** term_months
            return principal * rate * growth / (growth - 1)
        except ArithmeticError as e:
            raise InvalidArgumentError("principal, apr and term are too large to compute a payment") from e


def calculate_amortization(principal: Any, apr: Any, term_months: Any) -> AmortizationResult:
    """
    Main entry point: parse raw inputs and compute the payment summary.

    Values are returned unrounded; callers round with round_currency()
    when presenting them.

    Raises:
        InvalidArgumentError: non-numeric input, or principal, apr or term
            outside (0, MAX_PRINCIPAL], [0, MAX_APR], (0, MAX_TERM_MONTHS]
    """
    p = parse_decimal(principal, "principal")
    rate = parse_decimal(apr, "apr")
    n = parse_term(term_months, "termMonths")

    payment = monthly_payment(p, rate, n)
    with localcontext() as ctx:
        ctx.prec = PRECISION
        total = payment * n
        interest = total - p

    return AmortizationResult(
        principal=p,
        apr=rate,
        term_months=n,
        monthly_payment=payment,
        total_payment=total,
        total_interest=interest,
    )


def calculate_mortgage(principal: Any, apr: Any, term_years: Any) -> AmortizationResult:
    """Mortgage variant: the term is given in years and amortized monthly"""
    years = parse_term(term_years, "termYears")
    if years > MAX_TERM_YEARS:
        raise InvalidArgumentError(f"termYears cannot exceed {MAX_TERM_YEARS}")
    return calculate_amortization(principal, apr, years * MONTHS_PER_YEAR)


def amortization_schedule(principal: Decimal, apr: Decimal, term_months: int) -> List[ScheduleRow]:
    """
    Period-by-period breakdown of a fixed-payment loan.

    Each period pays the rounded monthly payment; the last period pays
    whatever balance remains so the schedule closes at exactly 0.00.
    """
    payment = round_currency(monthly_payment(principal, apr, term_months))

    rows = []
    with localcontext() as ctx:
        ctx.prec = PRECISION
        rate = apr / 100 / MONTHS_PER_YEAR
        balance = round_currency(principal)

        for period in range(1, term_months + 1):
            interest = round_currency(balance * rate)
            if period == term_months:
                principal_part = balance
            else:
                principal_part = min(payment - interest, balance)
            balance = balance - principal_part

            rows.append(
                ScheduleRow(
                    period=period,
                    payment=principal_part + interest,
                    interest=interest,
                    principal=principal_part,
                    remaining_balance=balance,
                )
            )

    return rows
