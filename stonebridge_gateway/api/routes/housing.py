"""Housing catalog, mortgage application and mortgage calculator endpoints"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from stonebridge_gateway.api.routes.schemas import (
    HousingListResponse,
    HousingResponse,
    MortgageApplicationRequest,
    MortgageApplicationResponse,
    MortgageApplicationsResponse,
    MortgageCalculationResponse,
    housing_offer_schema,
    mortgage_application_schema,
    schedule_schema,
)
from stonebridge_gateway.api.dependencies import get_current_user_id, get_request_id
from stonebridge_gateway.infrastructure.database.session import get_db
from stonebridge_gateway.infrastructure.database.repositories import ApplicationRepository, CatalogRepository
from stonebridge_gateway.domain.amortization import amortization_schedule, calculate_mortgage
from stonebridge_gateway.domain.applications import MORTGAGE_SUBMITTED_MESSAGE, mortgage_loan_amount
from stonebridge_gateway.domain.exceptions import DomainException, InvalidArgumentError, NotFoundError
from stonebridge_gateway.domain.models import MortgageTerms
from stonebridge_gateway.infrastructure.observability.metrics import application_counter, calculation_counter
from stonebridge_gateway.infrastructure.observability.logging import log_application
from stonebridge_gateway.utils.money import from_cents, round_currency, to_cents

router = APIRouter()


@router.get("/housing", response_model=HousingListResponse)
def list_housing(db: Session = Depends(get_db)):
    offers = CatalogRepository(db).get_housing_offers()
    return HousingListResponse(housing=[housing_offer_schema(o) for o in offers])


@router.get("/housing/{slug}", response_model=HousingResponse)
def get_housing(slug: str, db: Session = Depends(get_db)):
    offer = CatalogRepository(db).get_housing_offer_by_slug(slug)
    if offer is None:
        raise NotFoundError("Housing offer not found")
    return HousingResponse(housing=housing_offer_schema(offer))


@router.post("/housing/{offer_id}/apply", response_model=MortgageApplicationResponse, status_code=201)
def apply_for_mortgage(
    offer_id: int,
    request_body: MortgageApplicationRequest,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Submit a mortgage application for a housing offer.

    loanAmount = price - downPayment, stored without bounds checks.
    """
    request_id = get_request_id(request)

    try:
        offer = CatalogRepository(db).get_housing_offer(offer_id)
        if offer is None:
            raise NotFoundError("Housing offer not found")

        terms = MortgageTerms(
            down_payment=request_body.down_payment,
            term_years=request_body.term_years,
            employment_status=request_body.employment_status,
            annual_income=request_body.annual_income,
        )
        loan_amount = mortgage_loan_amount(from_cents(offer.price_cents), terms)

        application = ApplicationRepository(db).create_mortgage_application(
            user_id, offer.id, terms, loan_amount_cents=to_cents(loan_amount, "downPayment")
        )
        db.commit()

    except NotFoundError:
        db.rollback()
        application_counter.labels(kind="mortgage", outcome="not_found").inc()
        raise

    except DomainException:
        db.rollback()
        raise

    except Exception as e:
        db.rollback()
        logging.error(f"Mortgage application error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to submit mortgage application")

    application_counter.labels(kind="mortgage", outcome="submitted").inc()
    log_application(request_id, user_id, "mortgage", application.id, offer_id)

    return MortgageApplicationResponse(
        message=MORTGAGE_SUBMITTED_MESSAGE,
        application=mortgage_application_schema(application),
    )


@router.get("/my-mortgage-applications", response_model=MortgageApplicationsResponse)
def list_my_mortgage_applications(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    applications = ApplicationRepository(db).get_mortgage_applications_by_user(user_id)
    return MortgageApplicationsResponse(
        applications=[mortgage_application_schema(a, include_offer=True) for a in applications]
    )


@router.get("/calculate-mortgage", response_model=MortgageCalculationResponse, response_model_exclude_none=True)
def calculate_mortgage_payment(
    principal: Optional[str] = Query(None),
    apr: Optional[str] = Query(None),
    term_years: Optional[str] = Query(None, alias="termYears"),
    include_schedule: bool = Query(False, alias="schedule"),
):
    """Fixed monthly payment for a mortgage; termYears is amortized monthly"""
    try:
        result = calculate_mortgage(principal, apr, term_years)
    except InvalidArgumentError:
        calculation_counter.labels(kind="mortgage", outcome="invalid").inc()
        raise

    calculation_counter.labels(kind="mortgage", outcome="ok").inc()
    return MortgageCalculationResponse(
        monthly_payment=f"{round_currency(result.monthly_payment):.2f}",
        total_payment=f"{round_currency(result.total_payment):.2f}",
        total_interest=f"{round_currency(result.total_interest):.2f}",
        principal=f"{round_currency(result.principal):.2f}",
        apr=float(result.apr),
        term_years=result.term_months // 12,
        schedule=(
            schedule_schema(amortization_schedule(result.principal, result.apr, result.term_months))
            if include_schedule
            else None
        ),
    )
