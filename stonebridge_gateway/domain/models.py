"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class AmortizationResult:
    """Fixed-payment loan summary, unrounded"""

    principal: Decimal
    apr: Decimal
    term_months: int
    monthly_payment: Decimal
    total_payment: Decimal
    total_interest: Decimal


@dataclass
class ScheduleRow:
    """Single period of an amortization schedule"""

    period: int
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_balance: Decimal


@dataclass
class TransferResult:
    """Outcome of a completed transfer"""

    from_account_id: int
    to_account_number: str
    amount_cents: int
    source_balance_cents: int
    debit_entry_id: int
    credit_entry_id: Optional[int]  # None when funds were retired to an unknown account


@dataclass
class LoanTerms:
    """Applicant-supplied terms for a loan offer"""

    requested_amount: Decimal
    term_months: int
    employment_status: Optional[str] = None
    annual_income: Optional[Decimal] = None
    purpose: Optional[str] = None


@dataclass
class MortgageTerms:
    """Applicant-supplied terms for a housing offer"""

    down_payment: Decimal
    term_years: int
    employment_status: Optional[str] = None
    annual_income: Optional[Decimal] = None


@dataclass
class DashboardSummary:
    """Aggregates shown on the account dashboard"""

    total_balance_cents: int
    monthly_deposits_cents: int
    monthly_expenses_cents: int
