"""Unit tests for the amortization calculator"""

import pytest
from decimal import Context, Decimal, DivisionByZero, InvalidOperation, Overflow, localcontext
from stonebridge_gateway.domain.amortization import (
    MAX_APR,
    MAX_PRINCIPAL,
    MAX_TERM_MONTHS,
    amortization_schedule,
    calculate_amortization,
    calculate_mortgage,
    monthly_payment,
)
from stonebridge_gateway.domain.exceptions import InvalidArgumentError
from stonebridge_gateway.utils.money import round_currency


def test_personal_loan_reference_example():
    """25000 at 7.99% over 36 months"""
    result = calculate_amortization("25000", "7.99", "36")

    assert round_currency(result.monthly_payment) == Decimal("783.29")
    assert abs(result.monthly_payment - Decimal("783.35")) < Decimal("0.1")
    assert round_currency(result.total_payment) == Decimal("28198.58")
    assert round_currency(result.total_interest) == Decimal("3198.58")


@pytest.mark.parametrize(
    "principal, apr, months",
    [
        ("1000", "5", "12"),
        ("25000", "7.99", "36"),
        ("300000", "6.5", "360"),
        ("500.50", "12.99", "24"),
        ("1", "0.01", "1"),
    ],
)
def test_totals_are_consistent(principal, apr, months):
    """payment * n == total and total - P == interest"""
    result = calculate_amortization(principal, apr, months)

    assert abs(result.monthly_payment * result.term_months - result.total_payment) < Decimal("1e-20")
    assert abs(result.total_payment - result.principal - result.total_interest) < Decimal("1e-20")
    assert result.total_interest > 0


def test_zero_apr_is_straight_division():
    result = calculate_amortization("12000", "0", "12")

    assert result.monthly_payment == Decimal("1000")
    assert result.total_payment == Decimal("12000")
    assert round_currency(result.total_interest) == Decimal("0.00")


def test_zero_apr_rounding_never_prints_negative_zero():
    result = calculate_amortization("1000", "0", "3")

    assert f"{round_currency(result.total_interest):.2f}" == "0.00"


def test_mortgage_converts_years_to_months():
    result = calculate_mortgage("300000", "6.5", "30")

    assert result.term_months == 360
    assert round_currency(result.monthly_payment) == Decimal("1896.20")


@pytest.mark.parametrize(
    "principal, apr, months",
    [
        ("abc", "5", "12"),
        ("1000", "five", "12"),
        ("1000", "5", "twelve"),
        ("1000", "5", "12.5"),
        (None, "5", "12"),
        ("1000", None, "12"),
        ("1000", "5", None),
        ("NaN", "5", "12"),
        ("Infinity", "5", "12"),
        ("", "5", "12"),
    ],
)
def test_non_numeric_input_rejected(principal, apr, months):
    with pytest.raises(InvalidArgumentError):
        calculate_amortization(principal, apr, months)


@pytest.mark.parametrize("months", ["0", "-12"])
def test_non_positive_term_rejected(months):
    """n <= 0 never reaches the formula, including the 0% / 0 months case"""
    with pytest.raises(InvalidArgumentError):
        calculate_amortization("1000", "5", months)
    with pytest.raises(InvalidArgumentError):
        calculate_amortization("1000", "0", months)


def test_negative_apr_rejected():
    with pytest.raises(InvalidArgumentError, match="apr"):
        calculate_amortization("1000", "-1", "12")


@pytest.mark.parametrize("principal", ["-1000", "0"])
def test_non_positive_principal_rejected(principal):
    with pytest.raises(InvalidArgumentError, match="principal"):
        calculate_amortization(principal, "5", "12")


def test_mortgage_zero_years_rejected():
    with pytest.raises(InvalidArgumentError, match="termYears"):
        calculate_mortgage("300000", "6.5", "0")


@pytest.mark.parametrize(
    "principal, apr, months, field",
    [
        ("1e27", "5", "12", "principal"),
        ("1000000000000.01", "5", "12", "principal"),
        ("1000", "100.01", "12", "apr"),
        ("1000", "5", "1000000000", "termMonths"),
        ("1000", "5", "1201", "termMonths"),
    ],
)
def test_inputs_above_limits_rejected(principal, apr, months, field):
    with pytest.raises(InvalidArgumentError, match=field):
        calculate_amortization(principal, apr, months)


def test_largest_accepted_inputs_compute():
    """Upper limits together still produce a finite, presentable payment"""
    result = calculate_amortization(str(MAX_PRINCIPAL), str(MAX_APR), str(MAX_TERM_MONTHS))

    payment = round_currency(result.monthly_payment)
    assert payment > MAX_PRINCIPAL * MAX_APR / 100 / 12
    assert round_currency(result.total_interest) > 0


def test_mortgage_term_above_limit_rejected():
    with pytest.raises(InvalidArgumentError, match="termYears"):
        calculate_mortgage("300000", "50", "100000000")
    assert calculate_mortgage("300000", "6.5", "100").term_months == 1200


def test_arithmetic_overflow_reported_as_invalid_argument():
    """A context too narrow for (1+r)^n surfaces as a client error"""
    narrow = Context(prec=28, Emax=20, traps=[Overflow, InvalidOperation, DivisionByZero])
    with localcontext(narrow):
        with pytest.raises(InvalidArgumentError, match="too large"):
            monthly_payment(Decimal("1000000000000"), Decimal("100"), 1200)


def test_monthly_payment_is_deterministic():
    first = monthly_payment(Decimal("25000"), Decimal("7.99"), 36)
    second = monthly_payment(Decimal("25000"), Decimal("7.99"), 36)
    assert first == second


def test_schedule_closes_at_zero():
    rows = amortization_schedule(Decimal("25000"), Decimal("7.99"), 36)

    assert len(rows) == 36
    assert rows[-1].remaining_balance == Decimal("0.00")
    assert sum(row.principal for row in rows) == Decimal("25000.00")
    # All but the last period pay the rounded fixed payment
    assert all(row.payment == Decimal("783.29") for row in rows[:-1])
    assert abs(rows[-1].payment - Decimal("783.29")) < Decimal("0.50")


def test_schedule_interest_declines():
    rows = amortization_schedule(Decimal("10000"), Decimal("6"), 12)

    assert rows[0].interest == Decimal("50.00")  # 10000 * 0.5%
    interests = [row.interest for row in rows]
    assert interests == sorted(interests, reverse=True)


def test_schedule_zero_apr():
    rows = amortization_schedule(Decimal("1000"), Decimal("0"), 3)

    assert [row.principal for row in rows] == [Decimal("333.33"), Decimal("333.33"), Decimal("333.34")]
    assert all(row.interest == Decimal("0.00") for row in rows)
