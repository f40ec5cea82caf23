"""Domain-specific exceptions"""

from decimal import Decimal


class DomainException(Exception):
    """Base exception for domain layer"""

    status_code = 500


class InvalidArgumentError(DomainException):
    """Input is missing, malformed or outside what the operation accepts"""

    status_code = 400


class UnauthenticatedError(DomainException):
    """No verified caller identity is attached to the request"""

    status_code = 401


class NotFoundError(DomainException):
    """Account, offer or application reference does not resolve"""

    status_code = 404


class InsufficientFundsError(DomainException):
    """Transfer amount exceeds the source account balance"""

    status_code = 400


class OutOfRangeError(DomainException):
    """Requested amount lies outside the offer bounds"""

    status_code = 400

    def __init__(self, message: str, min_amount: Decimal, max_amount: Decimal):
        super().__init__(message)
        self.min_amount = min_amount
        self.max_amount = max_amount
