"""Account, ledger history, dashboard and transfer endpoints"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from stonebridge_gateway.api.routes.schemas import (
    AccountResponse,
    AccountsResponse,
    DashboardResponse,
    MessageResponse,
    TransactionsResponse,
    TransferRequest,
    account_schema,
    transaction_schema,
)
from stonebridge_gateway.api.dependencies import get_current_user_id, get_request_id
from stonebridge_gateway.config import settings
from stonebridge_gateway.infrastructure.database.session import get_db
from stonebridge_gateway.infrastructure.database.repositories import AccountRepository, LedgerRepository
from stonebridge_gateway.domain.ledger import transfer_funds, summarize_activity
from stonebridge_gateway.domain.exceptions import (
    DomainException,
    InsufficientFundsError,
    InvalidArgumentError,
    NotFoundError,
)
from stonebridge_gateway.infrastructure.observability.metrics import record_transfer
from stonebridge_gateway.infrastructure.observability.logging import log_transfer
from stonebridge_gateway.utils.money import format_cents, to_cents

router = APIRouter()

TRANSFER_OUTCOMES = {
    InsufficientFundsError: "insufficient_funds",
    NotFoundError: "not_found",
    InvalidArgumentError: "invalid",
}


@router.get("/accounts", response_model=AccountsResponse)
def list_accounts(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """All accounts owned by the caller"""
    accounts = AccountRepository(db).get_accounts_by_user(user_id)
    return AccountsResponse(accounts=[account_schema(a) for a in accounts])


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(account_id: int, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    account = AccountRepository(db).get_account_for_user(account_id, user_id)
    if account is None:
        raise NotFoundError("Account not found")
    return AccountResponse(account=account_schema(account))


@router.get("/transactions", response_model=TransactionsResponse)
def list_transactions(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Most recent ledger entries across the caller's accounts, newest first"""
    entries = LedgerRepository(db).get_recent_entries_by_user(user_id, limit=settings.transaction_history_limit)
    return TransactionsResponse(transactions=[transaction_schema(e) for e in entries])


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """
    Account overview.

    Deposits and expenses are summed over the recent entries shown, not
    over a calendar month.
    """
    accounts = AccountRepository(db).get_accounts_by_user(user_id)
    recent = LedgerRepository(db).get_recent_entries_by_user(user_id, limit=settings.dashboard_recent_limit)

    summary = summarize_activity(
        (a.balance_cents for a in accounts),
        ((e.type, e.amount_cents) for e in recent),
    )

    return DashboardResponse(
        accounts=[account_schema(a) for a in accounts],
        total_balance=format_cents(summary.total_balance_cents),
        monthly_deposits=format_cents(summary.monthly_deposits_cents),
        monthly_expenses=format_cents(summary.monthly_expenses_cents),
        recent_transactions=[transaction_schema(e) for e in recent],
    )


@router.post("/transfer", response_model=MessageResponse)
def create_transfer(
    request_body: TransferRequest,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Move money from one of the caller's accounts to any account number.

    Both legs and both ledger entries commit in one transaction; any
    failure rolls the whole transfer back.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    amount_cents = 0

    try:
        amount_cents = to_cents(request_body.amount)
        result = transfer_funds(
            LedgerRepository(db),
            owner_id=user_id,
            from_account_id=request_body.from_account_id,
            to_account_number=request_body.to_account_number,
            amount_cents=amount_cents,
            description=request_body.description,
            retire_unknown_destination=settings.retire_unknown_destination,
        )
        db.commit()

    except DomainException as e:
        db.rollback()
        outcome = TRANSFER_OUTCOMES.get(type(e), "invalid")
        record_transfer(outcome)
        log_transfer(request_id, user_id, outcome, amount_cents, (time.time() - start_time) * 1000, reason=str(e))
        raise

    except Exception as e:
        db.rollback()
        record_transfer("error")
        logging.error(f"Transfer error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to complete transfer")

    record_transfer("completed", result.amount_cents, retired=result.credit_entry_id is None)
    log_transfer(request_id, user_id, "completed", result.amount_cents, (time.time() - start_time) * 1000)

    return MessageResponse(message="Transfer completed successfully")
