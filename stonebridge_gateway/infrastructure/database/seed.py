"""Offer catalog and demo customer seed; run as a module to create tables and load them"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from stonebridge_gateway.config import settings
from stonebridge_gateway.infrastructure.database.models import Base, HousingOffer, LoanOffer
from stonebridge_gateway.infrastructure.database.repositories import AccountRepository, UserRepository
from stonebridge_gateway.infrastructure.database.session import SessionLocal, engine
from stonebridge_gateway.infrastructure.observability.logging import setup_logging

logger = logging.getLogger(__name__)

LOAN_OFFERS: List[Dict[str, Any]] = [
    {
        "name": "Personal Loan",
        "slug": "personal-loan",
        "description": "Flexible personal loans for debt consolidation, major purchases or unexpected expenses.",
        "min_amount_cents": 100_000,
        "max_amount_cents": 5_000_000,
        "apr": "7.99",
        "term_months": 60,
        "features": ["No collateral required", "Fixed monthly payments", "No prepayment penalties"],
        "requirements": "Minimum credit score of 650, proof of income, valid ID, and active bank account.",
    },
    {
        "name": "Auto Loan",
        "slug": "auto-loan",
        "description": "Competitive rates for new and used vehicles.",
        "min_amount_cents": 500_000,
        "max_amount_cents": 10_000_000,
        "apr": "5.49",
        "term_months": 72,
        "features": ["Terms up to 72 months", "No application fees", "Refinancing options"],
        "requirements": "Minimum credit score of 620, proof of income, valid drivers license, and vehicle information.",
    },
    {
        "name": "Home Equity Loan",
        "slug": "home-equity-loan",
        "description": "Borrow against the value of your home for improvements or large expenses.",
        "min_amount_cents": 1_000_000,
        "max_amount_cents": 50_000_000,
        "apr": "6.25",
        "term_months": 180,
        "features": ["Home equity as collateral", "Fixed rates available", "Large loan amounts available"],
        "requirements": "Minimum 20% home equity, credit score of 680+, proof of income, and property appraisal.",
    },
    {
        "name": "Business Loan",
        "slug": "business-loan",
        "description": "Capital for startup costs and expansion plans.",
        "min_amount_cents": 1_000_000,
        "max_amount_cents": 25_000_000,
        "apr": "8.99",
        "term_months": 84,
        "features": ["Flexible use of funds", "No collateral for loans under $50K", "Dedicated business advisors"],
        "requirements": "Business operating for 2+ years, annual revenue of $100K+, business financial statements.",
    },
    {
        "name": "Student Loan Refinancing",
        "slug": "student-loan-refinancing",
        "description": "Combine multiple student loans into one payment at a lower rate.",
        "min_amount_cents": 500_000,
        "max_amount_cents": 20_000_000,
        "apr": "4.99",
        "term_months": 120,
        "features": ["Combine multiple loans", "No origination fees", "Cosigner release available"],
        "requirements": "Bachelor degree or higher, credit score of 650+, steady income, and good payment history.",
    },
    {
        "name": "Emergency Loan",
        "slug": "emergency-loan",
        "description": "Quick access to funds with same-day approval.",
        "min_amount_cents": 50_000,
        "max_amount_cents": 1_500_000,
        "apr": "12.99",
        "term_months": 24,
        "features": ["Same-day approval possible", "Funds within 24 hours", "Minimal documentation"],
        "requirements": "Active bank account, proof of income, valid ID, and minimum credit score of 580.",
    },
]

HOUSING_OFFERS: List[Dict[str, Any]] = [
    {
        "title": "Modern Downtown Condo",
        "slug": "modern-downtown-condo",
        "location": "New York, NY",
        "price_cents": 75_000_000,
        "bedrooms": 2,
        "bathrooms": 2,
        "sqft": 1200,
        "features": ["Floor-to-ceiling windows", "In-unit washer/dryer", "24/7 doorman"],
        "property_type": "condo",
        "mortgage_rate": "6.875",
    },
    {
        "title": "Suburban Family Home",
        "slug": "suburban-family-home",
        "location": "Austin, TX",
        "price_cents": 48_500_000,
        "bedrooms": 4,
        "bathrooms": 3,
        "sqft": 2800,
        "features": ["Open floor plan", "Large backyard", "Two-car garage"],
        "property_type": "single-family",
        "mortgage_rate": "6.625",
    },
    {
        "title": "Beachfront Paradise",
        "slug": "beachfront-paradise",
        "location": "Miami, FL",
        "price_cents": 125_000_000,
        "bedrooms": 3,
        "bathrooms": 3,
        "sqft": 2100,
        "features": ["Direct ocean views", "Private balcony", "Beach access"],
        "property_type": "condo",
        "mortgage_rate": "6.750",
    },
    {
        "title": "Mountain Retreat",
        "slug": "mountain-retreat",
        "location": "Denver, CO",
        "price_cents": 62_500_000,
        "bedrooms": 3,
        "bathrooms": 2,
        "sqft": 1950,
        "features": ["Mountain views", "Stone fireplace", "Near ski resorts"],
        "property_type": "single-family",
        "mortgage_rate": "6.500",
    },
    {
        "title": "Urban Loft",
        "slug": "urban-loft",
        "location": "Chicago, IL",
        "price_cents": 39_500_000,
        "bedrooms": 1,
        "bathrooms": 1,
        "sqft": 950,
        "features": ["Exposed brick", "High ceilings", "Rooftop access"],
        "property_type": "loft",
        "mortgage_rate": "6.875",
    },
    {
        "title": "Luxury Estate",
        "slug": "luxury-estate",
        "location": "Los Angeles, CA",
        "price_cents": 285_000_000,
        "bedrooms": 5,
        "bathrooms": 5,
        "sqft": 5200,
        "features": ["Infinity pool", "Home theater", "Guest house"],
        "property_type": "estate",
        "mortgage_rate": "6.250",
    },
]


def seed_catalog(db: Session) -> int:
    """Insert catalog offers whose slug is not present yet. Returns rows added."""
    existing_loans = {slug for (slug,) in db.query(LoanOffer.slug).all()}
    existing_housing = {slug for (slug,) in db.query(HousingOffer.slug).all()}

    added = 0
    for offer in LOAN_OFFERS:
        if offer["slug"] in existing_loans:
            continue
        db.add(LoanOffer(**{**offer, "apr": Decimal(offer["apr"])}))
        added += 1

    for offer in HOUSING_OFFERS:
        if offer["slug"] in existing_housing:
            continue
        db.add(HousingOffer(**{**offer, "mortgage_rate": Decimal(offer["mortgage_rate"])}))
        added += 1

    db.flush()
    return added


def seed_customers(db: Session, emails: Iterable[str]) -> int:
    """
    Create a customer with the default checking and savings accounts for
    each email not registered yet. Returns customers added.
    """
    users = UserRepository(db)
    accounts = AccountRepository(db)

    added = 0
    for email in emails:
        if users.get_user_by_email(email) is not None:
            continue
        user = users.create_user(email=email, first_name="Demo", last_name="Customer")
        opened = accounts.open_default_accounts(user.id)
        logger.info(
            "Customer seeded",
            extra={"step": "seed", "user_id": user.id, "account_numbers": [a.account_number for a in opened]},
        )
        added += 1

    return added


def main() -> None:
    setup_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        added = seed_catalog(db)
        customers = seed_customers(db, settings.demo_customer_emails)
        db.commit()
        logger.info("Catalog seeded", extra={"step": "seed", "rows_added": added, "customers_added": customers})
    except Exception:
        db.rollback()
        logger.exception("Catalog seed failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
