"""Loan and mortgage application intake rules"""

import logging
from decimal import Decimal

from stonebridge_gateway.domain.exceptions import InvalidArgumentError, OutOfRangeError
from stonebridge_gateway.domain.models import LoanTerms, MortgageTerms

logger = logging.getLogger(__name__)

LOAN_SUBMITTED_MESSAGE = (
    "Loan application submitted successfully! "
    "We will review and get back to you within 2-3 business days."
)
MORTGAGE_SUBMITTED_MESSAGE = (
    "Mortgage application submitted successfully! "
    "Our team will contact you within 3-5 business days."
)


def validate_loan_terms(terms: LoanTerms, min_amount: Decimal, max_amount: Decimal) -> None:
    """
    Check a loan request against the offer's amount bounds (inclusive).

    Raises:
        OutOfRangeError: requested amount below min_amount or above max_amount
        InvalidArgumentError: non-positive term
    """
    if terms.requested_amount < min_amount or terms.requested_amount > max_amount:
        raise OutOfRangeError(
            f"Loan amount must be between ${min_amount:.2f} and ${max_amount:.2f}",
            min_amount=min_amount,
            max_amount=max_amount,
        )
    if terms.term_months <= 0:
        raise InvalidArgumentError("termMonths must be greater than zero")


def mortgage_loan_amount(price: Decimal, terms: MortgageTerms) -> Decimal:
    """
    Amount financed = price - down payment.

    Not bounded against the price: a down payment above the price yields a
    negative amount, which is recorded as-is and only logged.
    """
    if terms.term_years <= 0:
        raise InvalidArgumentError("termYears must be greater than zero")

    loan_amount = price - terms.down_payment
    if loan_amount <= 0:
        logger.warning(
            "Mortgage down payment covers the full price",
            extra={"price": str(price), "down_payment": str(terms.down_payment)},
        )
    return loan_amount
