"""Loan catalog, loan application and loan calculator endpoints"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from stonebridge_gateway.api.routes.schemas import (
    LoanApplicationRequest,
    LoanApplicationResponse,
    LoanApplicationsResponse,
    LoanCalculationResponse,
    LoanResponse,
    LoansResponse,
    loan_application_schema,
    loan_offer_schema,
    schedule_schema,
)
from stonebridge_gateway.api.dependencies import get_current_user_id, get_request_id
from stonebridge_gateway.infrastructure.database.session import get_db
from stonebridge_gateway.infrastructure.database.repositories import ApplicationRepository, CatalogRepository
from stonebridge_gateway.domain.amortization import amortization_schedule, calculate_amortization
from stonebridge_gateway.domain.applications import LOAN_SUBMITTED_MESSAGE, validate_loan_terms
from stonebridge_gateway.domain.exceptions import DomainException, InvalidArgumentError, NotFoundError, OutOfRangeError
from stonebridge_gateway.domain.models import LoanTerms
from stonebridge_gateway.infrastructure.observability.metrics import application_counter, calculation_counter
from stonebridge_gateway.infrastructure.observability.logging import log_application
from stonebridge_gateway.utils.money import from_cents, round_currency

router = APIRouter()


@router.get("/loans", response_model=LoansResponse)
def list_loans(db: Session = Depends(get_db)):
    loans = CatalogRepository(db).get_loans()
    return LoansResponse(loans=[loan_offer_schema(loan) for loan in loans])


@router.get("/loans/{slug}", response_model=LoanResponse)
def get_loan(slug: str, db: Session = Depends(get_db)):
    loan = CatalogRepository(db).get_loan_by_slug(slug)
    if loan is None:
        raise NotFoundError("Loan not found")
    return LoanResponse(loan=loan_offer_schema(loan))


@router.post("/loans/{loan_id}/apply", response_model=LoanApplicationResponse, status_code=201)
def apply_for_loan(
    loan_id: int,
    request_body: LoanApplicationRequest,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Submit a loan application against a catalog offer.

    The requested amount must lie within the offer's [min, max] bounds;
    the application is stored as "pending".
    """
    request_id = get_request_id(request)

    try:
        loan = CatalogRepository(db).get_loan(loan_id)
        if loan is None:
            raise NotFoundError("Loan not found")

        terms = LoanTerms(
            requested_amount=request_body.requested_amount,
            term_months=request_body.term_months,
            employment_status=request_body.employment_status,
            annual_income=request_body.annual_income,
            purpose=request_body.purpose,
        )
        validate_loan_terms(terms, from_cents(loan.min_amount_cents), from_cents(loan.max_amount_cents))

        application = ApplicationRepository(db).create_loan_application(user_id, loan.id, terms)
        db.commit()

    except OutOfRangeError:
        db.rollback()
        application_counter.labels(kind="loan", outcome="out_of_range").inc()
        raise

    except NotFoundError:
        db.rollback()
        application_counter.labels(kind="loan", outcome="not_found").inc()
        raise

    except DomainException:
        db.rollback()
        raise

    except Exception as e:
        db.rollback()
        logging.error(f"Loan application error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to submit loan application")

    application_counter.labels(kind="loan", outcome="submitted").inc()
    log_application(request_id, user_id, "loan", application.id, loan_id)

    return LoanApplicationResponse(message=LOAN_SUBMITTED_MESSAGE, application=loan_application_schema(application))


@router.get("/my-loan-applications", response_model=LoanApplicationsResponse)
def list_my_loan_applications(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    applications = ApplicationRepository(db).get_loan_applications_by_user(user_id)
    return LoanApplicationsResponse(
        applications=[loan_application_schema(a, include_offer=True) for a in applications]
    )


@router.get("/calculate-loan", response_model=LoanCalculationResponse, response_model_exclude_none=True)
def calculate_loan(
    principal: Optional[str] = Query(None),
    apr: Optional[str] = Query(None),
    term_months: Optional[str] = Query(None, alias="termMonths"),
    include_schedule: bool = Query(False, alias="schedule"),
):
    """
    Fixed monthly payment for a loan.

    Raw query strings are parsed by the calculator so every malformed
    input is reported as a 400 with an error message. schedule=true adds
    the period-by-period breakdown.
    """
    try:
        result = calculate_amortization(principal, apr, term_months)
    except InvalidArgumentError:
        calculation_counter.labels(kind="loan", outcome="invalid").inc()
        raise

    calculation_counter.labels(kind="loan", outcome="ok").inc()
    return LoanCalculationResponse(
        monthly_payment=f"{round_currency(result.monthly_payment):.2f}",
        total_payment=f"{round_currency(result.total_payment):.2f}",
        total_interest=f"{round_currency(result.total_interest):.2f}",
        principal=f"{round_currency(result.principal):.2f}",
        apr=float(result.apr),
        term_months=result.term_months,
        schedule=(
            schedule_schema(amortization_schedule(result.principal, result.apr, result.term_months))
            if include_schedule
            else None
        ),
    )
