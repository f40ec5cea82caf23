"""Data access layer for accounts, ledger entries, catalog and applications"""

import secrets
from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session, joinedload

from stonebridge_gateway.config import settings
from stonebridge_gateway.infrastructure.database.models import (
    BankAccount,
    HousingOffer,
    LedgerEntry,
    LoanApplication,
    LoanOffer,
    MortgageApplication,
    User,
)
from stonebridge_gateway.domain.models import LoanTerms, MortgageTerms
from stonebridge_gateway.utils.money import to_cents

ACCOUNT_NUMBER_PREFIX = "STB"


class UserRepository:
    """Repository for customers"""

    def __init__(self, db: Session):
        self.db = db

    def create_user(self, email: str, first_name: str, last_name: str) -> User:
        db_user = User(email=email.lower(), first_name=first_name, last_name=last_name)
        self.db.add(db_user)
        self.db.flush()
        return db_user

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()


class AccountRepository:
    """Repository for bank accounts"""

    def __init__(self, db: Session):
        self.db = db

    def _new_account_number(self) -> str:
        while True:
            number = ACCOUNT_NUMBER_PREFIX + f"{secrets.randbelow(10**10):010d}"
            exists = self.db.execute(
                select(BankAccount.id).where(BankAccount.account_number == number)
            ).first()
            if exists is None:
                return number

    def open_account(self, user_id: int, account_type: str, balance_cents: int = 0) -> BankAccount:
        """Create an active account with a fresh STB account number"""
        db_account = BankAccount(
            user_id=user_id,
            account_number=self._new_account_number(),
            account_type=account_type,
            balance_cents=balance_cents,
            currency="USD",
            status="active",
        )
        self.db.add(db_account)
        self.db.flush()
        return db_account

    def open_default_accounts(self, user_id: int) -> List[BankAccount]:
        """Checking + savings with the configured starting balances"""
        return [
            self.open_account(user_id, "checking", to_cents(settings.starting_checking_balance)),
            self.open_account(user_id, "savings", to_cents(settings.starting_savings_balance)),
        ]

    def get_accounts_by_user(self, user_id: int) -> List[BankAccount]:
        return (
            self.db.query(BankAccount)
            .filter(BankAccount.user_id == user_id)
            .order_by(BankAccount.id)
            .populate_existing()
            .all()
        )

    def get_account_for_user(self, account_id: int, user_id: int) -> Optional[BankAccount]:
        """Account only if owned by user_id"""
        return (
            self.db.query(BankAccount)
            .filter(BankAccount.id == account_id, BankAccount.user_id == user_id)
            .populate_existing()
            .first()
        )


class LedgerRepository:
    """
    Balance mutations and ledger entries.

    Balances are never read from the session identity map: every balance
    change is a single UPDATE against committed state.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_account(self, account_id: int) -> Optional[BankAccount]:
        return self.db.query(BankAccount).filter(BankAccount.id == account_id).populate_existing().first()

    def get_account_by_number(self, account_number: str) -> Optional[BankAccount]:
        return (
            self.db.query(BankAccount)
            .filter(BankAccount.account_number == account_number)
            .populate_existing()
            .first()
        )

    def _balance(self, account_id: int) -> int:
        return self.db.execute(
            select(BankAccount.balance_cents).where(BankAccount.id == account_id)
        ).scalar_one()

    def lock_accounts(self, account_ids: Iterable[int]) -> None:
        """Row-lock the accounts (SELECT ... FOR UPDATE) in ascending id order"""
        self.db.execute(
            select(BankAccount.id)
            .where(BankAccount.id.in_(sorted(set(account_ids))))
            .order_by(BankAccount.id)
            .with_for_update()
        ).all()

    def debit_if_sufficient(self, account_id: int, amount_cents: int) -> Optional[int]:
        """
        Compare-and-swap debit. Returns the new balance, or None when the
        balance is lower than amount_cents (nothing is written).
        """
        result = self.db.execute(
            update(BankAccount)
            .where(BankAccount.id == account_id, BankAccount.balance_cents >= amount_cents)
            .values(
                balance_cents=BankAccount.balance_cents - amount_cents,
                version=BankAccount.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return self._balance(account_id)

    def credit(self, account_id: int, amount_cents: int) -> int:
        """In-place increment; returns the new balance"""
        self.db.execute(
            update(BankAccount)
            .where(BankAccount.id == account_id)
            .values(
                balance_cents=BankAccount.balance_cents + amount_cents,
                version=BankAccount.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return self._balance(account_id)

    def record_entry(
        self,
        account_id: int,
        entry_type: str,
        amount_cents: int,
        description: Optional[str] = None,
        category: str = "transfer",
        recipient_name: Optional[str] = None,
        recipient_account: Optional[str] = None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            account_id=account_id,
            type=entry_type,
            amount_cents=amount_cents,
            description=description,
            category=category,
            recipient_name=recipient_name,
            recipient_account=recipient_account,
            status="completed",
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_entries_by_account(self, account_id: int) -> List[LedgerEntry]:
        return (
            self.db.query(LedgerEntry)
            .filter(LedgerEntry.account_id == account_id)
            .order_by(LedgerEntry.id)
            .all()
        )

    def get_recent_entries_by_user(self, user_id: int, limit: int = 50) -> List[LedgerEntry]:
        """Most recent entries across all of a user's accounts, newest first"""
        return (
            self.db.query(LedgerEntry)
            .join(BankAccount, LedgerEntry.account_id == BankAccount.id)
            .filter(BankAccount.user_id == user_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .limit(limit)
            .all()
        )


class CatalogRepository:
    """Read-only access to loan and housing offers"""

    def __init__(self, db: Session):
        self.db = db

    def get_loans(self) -> List[LoanOffer]:
        return self.db.query(LoanOffer).order_by(LoanOffer.id).all()

    def get_loan(self, loan_id: int) -> Optional[LoanOffer]:
        return self.db.get(LoanOffer, loan_id)

    def get_loan_by_slug(self, slug: str) -> Optional[LoanOffer]:
        return self.db.query(LoanOffer).filter(LoanOffer.slug == slug).first()

    def get_housing_offers(self) -> List[HousingOffer]:
        return self.db.query(HousingOffer).order_by(HousingOffer.id).all()

    def get_housing_offer(self, offer_id: int) -> Optional[HousingOffer]:
        return self.db.get(HousingOffer, offer_id)

    def get_housing_offer_by_slug(self, slug: str) -> Optional[HousingOffer]:
        return self.db.query(HousingOffer).filter(HousingOffer.slug == slug).first()


class ApplicationRepository:
    """Repository for loan and mortgage applications"""

    def __init__(self, db: Session):
        self.db = db

    def create_loan_application(self, user_id: int, loan_id: int, terms: LoanTerms) -> LoanApplication:
        db_application = LoanApplication(
            user_id=user_id,
            loan_id=loan_id,
            requested_amount_cents=to_cents(terms.requested_amount, "requestedAmount"),
            term_months=terms.term_months,
            employment_status=terms.employment_status,
            annual_income_cents=(
                to_cents(terms.annual_income, "annualIncome") if terms.annual_income is not None else None
            ),
            purpose=terms.purpose,
            status="pending",
        )
        self.db.add(db_application)
        self.db.flush()
        return db_application

    def create_mortgage_application(
        self,
        user_id: int,
        housing_offer_id: int,
        terms: MortgageTerms,
        loan_amount_cents: int,
    ) -> MortgageApplication:
        db_application = MortgageApplication(
            user_id=user_id,
            housing_offer_id=housing_offer_id,
            down_payment_cents=to_cents(terms.down_payment, "downPayment"),
            loan_amount_cents=loan_amount_cents,
            term_years=terms.term_years,
            employment_status=terms.employment_status,
            annual_income_cents=(
                to_cents(terms.annual_income, "annualIncome") if terms.annual_income is not None else None
            ),
            status="pending",
        )
        self.db.add(db_application)
        self.db.flush()
        return db_application

    def get_loan_applications_by_user(self, user_id: int) -> List[LoanApplication]:
        return (
            self.db.query(LoanApplication)
            .options(joinedload(LoanApplication.loan))
            .filter(LoanApplication.user_id == user_id)
            .order_by(LoanApplication.id.desc())
            .all()
        )

    def get_mortgage_applications_by_user(self, user_id: int) -> List[MortgageApplication]:
        return (
            self.db.query(MortgageApplication)
            .options(joinedload(MortgageApplication.housing_offer))
            .filter(MortgageApplication.user_id == user_id)
            .order_by(MortgageApplication.id.desc())
            .all()
        )
