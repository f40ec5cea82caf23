"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from stonebridge_gateway.utils.money import format_cents


class CamelModel(BaseModel):
    """JSON bodies use camelCase keys; Python code uses snake_case"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Requests


class TransferRequest(CamelModel):
    """Request body for POST /transfer"""

    from_account_id: int = Field(..., description="Source account id, owned by the caller")
    to_account_number: str = Field(..., min_length=1, max_length=50, description="Destination account number")
    amount: Decimal = Field(..., gt=0, description="Amount in dollars, at most 2 decimal places")
    description: Optional[str] = Field(None, max_length=255)


class LoanApplicationRequest(CamelModel):
    """Request body for POST /loans/{id}/apply"""

    requested_amount: Decimal = Field(..., gt=0)
    term_months: int = Field(..., gt=0)
    employment_status: Optional[str] = Field(None, max_length=50)
    annual_income: Optional[Decimal] = Field(None, ge=0)
    purpose: Optional[str] = None


class MortgageApplicationRequest(CamelModel):
    """Request body for POST /housing/{id}/apply"""

    down_payment: Decimal = Field(..., ge=0)
    term_years: int = Field(..., gt=0)
    employment_status: Optional[str] = Field(None, max_length=50)
    annual_income: Optional[Decimal] = Field(None, ge=0)


# Responses


class MessageResponse(CamelModel):
    message: str


class AccountSchema(CamelModel):
    id: int
    account_number: str
    account_type: str
    balance: str
    currency: str
    status: str
    created_at: Optional[str] = None


class AccountsResponse(CamelModel):
    accounts: List[AccountSchema]


class AccountResponse(CamelModel):
    account: AccountSchema


class TransactionSchema(CamelModel):
    """Single ledger entry"""

    id: int
    account_id: int
    type: str
    amount: str
    description: Optional[str] = None
    category: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_account: Optional[str] = None
    status: str
    created_at: Optional[str] = None


class TransactionsResponse(CamelModel):
    transactions: List[TransactionSchema]


class DashboardResponse(CamelModel):
    accounts: List[AccountSchema]
    total_balance: str
    monthly_deposits: str
    monthly_expenses: str
    recent_transactions: List[TransactionSchema]


class LoanOfferSchema(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    min_amount: str
    max_amount: str
    apr: str
    term_months: int
    features: Optional[Any] = None
    requirements: Optional[str] = None
    image_url: Optional[str] = None


class LoansResponse(CamelModel):
    loans: List[LoanOfferSchema]


class LoanResponse(CamelModel):
    loan: LoanOfferSchema


class HousingOfferSchema(CamelModel):
    id: int
    title: str
    slug: str
    location: str
    price: str
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    sqft: Optional[int] = None
    description: Optional[str] = None
    features: Optional[Any] = None
    image_url: Optional[str] = None
    property_type: Optional[str] = None
    mortgage_rate: Optional[str] = None


class HousingListResponse(CamelModel):
    housing: List[HousingOfferSchema]


class HousingResponse(CamelModel):
    housing: HousingOfferSchema


class LoanApplicationSchema(CamelModel):
    id: int
    user_id: int
    loan_id: int
    requested_amount: str
    term_months: int
    employment_status: Optional[str] = None
    annual_income: Optional[str] = None
    purpose: Optional[str] = None
    status: str
    created_at: Optional[str] = None
    loan: Optional[LoanOfferSchema] = None


class LoanApplicationResponse(CamelModel):
    message: str
    application: LoanApplicationSchema


class LoanApplicationsResponse(CamelModel):
    applications: List[LoanApplicationSchema]


class MortgageApplicationSchema(CamelModel):
    id: int
    user_id: int
    housing_offer_id: int
    down_payment: str
    loan_amount: str
    term_years: int
    employment_status: Optional[str] = None
    annual_income: Optional[str] = None
    status: str
    created_at: Optional[str] = None
    housing_offer: Optional[HousingOfferSchema] = None


class MortgageApplicationResponse(CamelModel):
    message: str
    application: MortgageApplicationSchema


class MortgageApplicationsResponse(CamelModel):
    applications: List[MortgageApplicationSchema]


class ScheduleRowSchema(CamelModel):
    """One period of an amortization schedule"""

    period: int
    payment: str
    interest: str
    principal: str
    remaining_balance: str


class LoanCalculationResponse(CamelModel):
    """Response for GET /calculate-loan; currency fields formatted to 2 decimals"""

    monthly_payment: str
    total_payment: str
    total_interest: str
    principal: str
    apr: float
    term_months: int
    schedule: Optional[List[ScheduleRowSchema]] = None


class MortgageCalculationResponse(CamelModel):
    """Response for GET /calculate-mortgage"""

    monthly_payment: str
    total_payment: str
    total_interest: str
    principal: str
    apr: float
    term_years: int
    schedule: Optional[List[ScheduleRowSchema]] = None


# ORM -> schema conversion


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _optional_cents(cents: Optional[int]) -> Optional[str]:
    return format_cents(cents) if cents is not None else None


def account_schema(account) -> AccountSchema:
    return AccountSchema(
        id=account.id,
        account_number=account.account_number,
        account_type=account.account_type,
        balance=format_cents(account.balance_cents),
        currency=account.currency,
        status=account.status,
        created_at=_iso(account.created_at),
    )


def transaction_schema(entry) -> TransactionSchema:
    return TransactionSchema(
        id=entry.id,
        account_id=entry.account_id,
        type=entry.type,
        amount=format_cents(entry.amount_cents),
        description=entry.description,
        category=entry.category,
        recipient_name=entry.recipient_name,
        recipient_account=entry.recipient_account,
        status=entry.status,
        created_at=_iso(entry.created_at),
    )


def loan_offer_schema(loan) -> LoanOfferSchema:
    return LoanOfferSchema(
        id=loan.id,
        name=loan.name,
        slug=loan.slug,
        description=loan.description,
        min_amount=format_cents(loan.min_amount_cents),
        max_amount=format_cents(loan.max_amount_cents),
        apr=f"{loan.apr:.2f}",
        term_months=loan.term_months,
        features=loan.features,
        requirements=loan.requirements,
        image_url=loan.image_url,
    )


def housing_offer_schema(offer) -> HousingOfferSchema:
    return HousingOfferSchema(
        id=offer.id,
        title=offer.title,
        slug=offer.slug,
        location=offer.location,
        price=format_cents(offer.price_cents),
        bedrooms=offer.bedrooms,
        bathrooms=offer.bathrooms,
        sqft=offer.sqft,
        description=offer.description,
        features=offer.features,
        image_url=offer.image_url,
        property_type=offer.property_type,
        mortgage_rate=f"{offer.mortgage_rate:.3f}" if offer.mortgage_rate is not None else None,
    )


def loan_application_schema(application, include_offer: bool = False) -> LoanApplicationSchema:
    return LoanApplicationSchema(
        id=application.id,
        user_id=application.user_id,
        loan_id=application.loan_id,
        requested_amount=format_cents(application.requested_amount_cents),
        term_months=application.term_months,
        employment_status=application.employment_status,
        annual_income=_optional_cents(application.annual_income_cents),
        purpose=application.purpose,
        status=application.status,
        created_at=_iso(application.created_at),
        loan=loan_offer_schema(application.loan) if include_offer else None,
    )


def mortgage_application_schema(application, include_offer: bool = False) -> MortgageApplicationSchema:
    return MortgageApplicationSchema(
        id=application.id,
        user_id=application.user_id,
        housing_offer_id=application.housing_offer_id,
        down_payment=format_cents(application.down_payment_cents),
        loan_amount=format_cents(application.loan_amount_cents),
        term_years=application.term_years,
        employment_status=application.employment_status,
        annual_income=_optional_cents(application.annual_income_cents),
        status=application.status,
        created_at=_iso(application.created_at),
        housing_offer=housing_offer_schema(application.housing_offer) if include_offer else None,
    )


def schedule_schema(rows) -> List[ScheduleRowSchema]:
    return [
        ScheduleRowSchema(
            period=row.period,
            payment=f"{row.payment:.2f}",
            interest=f"{row.interest:.2f}",
            principal=f"{row.principal:.2f}",
            remaining_balance=f"{row.remaining_balance:.2f}",
        )
        for row in rows
    ]
