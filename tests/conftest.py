"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Generator

import jwt
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from stonebridge_gateway.api.main import create_app
from stonebridge_gateway.config import settings
from stonebridge_gateway.infrastructure.database.models import Base, BankAccount, User
from stonebridge_gateway.infrastructure.database.repositories import AccountRepository, UserRepository
from stonebridge_gateway.infrastructure.database.seed import seed_catalog
from stonebridge_gateway.infrastructure.database.session import get_db


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    """File-backed SQLite so several connections can share one database"""
    test_engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Create test database and session"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def _issue_token(user_id: int, ttl: timedelta = timedelta(days=7)) -> str:
    """Sign a session token the way the identity provider does"""
    expires = datetime.now(timezone.utc) + ttl
    return jwt.encode({"userId": user_id, "exp": expires}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _make_customer(db: Session, email: str) -> User:
    """Customer with the default checking + savings accounts"""
    user = UserRepository(db).create_user(email=email, first_name="Test", last_name="Customer")
    AccountRepository(db).open_default_accounts(user.id)
    db.commit()
    return user


def _account_of(db: Session, user: User, account_type: str) -> BankAccount:
    return (
        db.query(BankAccount)
        .filter(BankAccount.user_id == user.id, BankAccount.account_type == account_type)
        .populate_existing()
        .one()
    )


@pytest.fixture
def alice(db: Session) -> User:
    return _make_customer(db, "alice@example.com")


@pytest.fixture
def bob(db: Session) -> User:
    return _make_customer(db, "bob@example.com")


@pytest.fixture
def catalog(db: Session) -> None:
    seed_catalog(db)
    db.commit()


@pytest.fixture
def alice_client(client: TestClient, alice: User) -> TestClient:
    """Test client carrying alice's session cookie"""
    client.cookies.set("token", _issue_token(alice.id))
    return client


@pytest.fixture
def issue_token():
    """Token factory: issue_token(user_id, ttl=timedelta(...))"""
    return _issue_token


@pytest.fixture
def make_customer(db: Session):
    """Factory for extra customers: make_customer("carol@example.com")"""
    return lambda email: _make_customer(db, email)


@pytest.fixture
def account_of(db: Session):
    """Fresh read of a customer's account: account_of(alice, "checking")"""
    return lambda user, account_type: _account_of(db, user, account_type)
