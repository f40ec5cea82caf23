"""SQLAlchemy ORM models for customers, accounts, ledger entries and the offer catalog"""

from sqlalchemy import Column, String, BigInteger, DateTime, Integer, ForeignKey, Numeric, Text, JSON
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    """Bank customer; credentials live with the identity provider"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    accounts = relationship("BankAccount", back_populates="user", cascade="all, delete-orphan")


class BankAccount(Base):
    """Checking or savings account; balance mutated only through transfers"""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    account_number = Column(String(20), nullable=False, unique=True)
    account_type = Column(String(50), nullable=False)
    balance_cents = Column(BigInteger, nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="USD")
    status = Column(String(20), nullable=False, default="active")
    version = Column(Integer, nullable=False, default=0)  # bumped on every balance change
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", back_populates="accounts")
    entries = relationship("LedgerEntry", back_populates="account")


class LedgerEntry(Base):
    """Immutable single-account balance movement"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # "credit" or "debit"
    amount_cents = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)
    recipient_name = Column(String(255), nullable=True)
    recipient_account = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="completed")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    account = relationship("BankAccount", back_populates="entries")


class LoanOffer(Base):
    """Catalog loan product"""

    __tablename__ = "loans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    min_amount_cents = Column(BigInteger, nullable=False)
    max_amount_cents = Column(BigInteger, nullable=False)
    apr = Column(Numeric(5, 2), nullable=False)
    term_months = Column(Integer, nullable=False)
    features = Column(JSON, nullable=True)
    requirements = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class LoanApplication(Base):
    """Loan application awaiting back-office review"""

    __tablename__ = "loan_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    loan_id = Column(Integer, ForeignKey("loans.id"), nullable=False)
    requested_amount_cents = Column(BigInteger, nullable=False)
    term_months = Column(Integer, nullable=False)
    employment_status = Column(String(50), nullable=True)
    annual_income_cents = Column(BigInteger, nullable=True)
    purpose = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loan = relationship("LoanOffer")


class HousingOffer(Base):
    """Catalog property listing"""

    __tablename__ = "housing_offers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    location = Column(String(255), nullable=False)
    price_cents = Column(BigInteger, nullable=False)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    sqft = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    features = Column(JSON, nullable=True)
    image_url = Column(Text, nullable=True)
    property_type = Column(String(50), nullable=True)
    mortgage_rate = Column(Numeric(5, 3), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class MortgageApplication(Base):
    """Mortgage application awaiting back-office review"""

    __tablename__ = "mortgage_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    housing_offer_id = Column(Integer, ForeignKey("housing_offers.id"), nullable=False)
    down_payment_cents = Column(BigInteger, nullable=False)
    loan_amount_cents = Column(BigInteger, nullable=False)
    term_years = Column(Integer, nullable=False)
    employment_status = Column(String(50), nullable=True)
    annual_income_cents = Column(BigInteger, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    housing_offer = relationship("HousingOffer")
