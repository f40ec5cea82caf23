"""Ledger mutation - money transfers between accounts"""

import logging
from typing import Iterable, Optional, Protocol, Tuple

from stonebridge_gateway.domain.exceptions import (
    InsufficientFundsError,
    InvalidArgumentError,
    NotFoundError,
)
from stonebridge_gateway.domain.models import DashboardSummary, TransferResult

logger = logging.getLogger(__name__)


class LedgerStore(Protocol):
    """Storage handle the transfer runs against; one instance = one DB transaction"""

    def get_account(self, account_id: int): ...

    def get_account_by_number(self, account_number: str): ...

    def lock_accounts(self, account_ids: Iterable[int]) -> None: ...

    def debit_if_sufficient(self, account_id: int, amount_cents: int) -> Optional[int]: ...

    def credit(self, account_id: int, amount_cents: int) -> int: ...

    def record_entry(self, account_id: int, entry_type: str, amount_cents: int, **fields): ...


def transfer_funds(
    store: LedgerStore,
    owner_id: int,
    from_account_id: int,
    to_account_number: str,
    amount_cents: int,
    description: Optional[str] = None,
    retire_unknown_destination: bool = False,
) -> TransferResult:
    """
    Move money from one of the caller's accounts to any account number.

    Flow:
    1. Resolve source account, must belong to owner_id
    2. Resolve destination by account number
    3. Lock source and destination rows
    4. Debit source with a compare-and-swap on the balance
    5. Record debit entry
    6. Credit destination and record credit entry

    The caller commits the store's transaction on success and rolls it
    back on any exception, so either every write lands or none does.

    Raises:
        InvalidArgumentError: non-positive amount or source == destination
        NotFoundError: source not owned by caller, or unknown destination
            when retire_unknown_destination is False
        InsufficientFundsError: balance lower than amount
    """
    if amount_cents <= 0:
        raise InvalidArgumentError("Transfer amount must be greater than zero")

    source = store.get_account(from_account_id)
    if source is None or source.user_id != owner_id:
        raise NotFoundError("Source account not found")

    destination = store.get_account_by_number(to_account_number)
    if destination is not None and destination.id == source.id:
        raise InvalidArgumentError("Cannot transfer to the same account")
    if destination is None and not retire_unknown_destination:
        raise NotFoundError("Destination account not found")

    # Lock order is ascending account id for every transfer
    store.lock_accounts([source.id] if destination is None else [source.id, destination.id])

    # Balance check and debit happen in one UPDATE ... WHERE balance >= amount
    new_balance = store.debit_if_sufficient(source.id, amount_cents)
    if new_balance is None:
        raise InsufficientFundsError("Insufficient funds")

    debit_entry = store.record_entry(
        source.id,
        "debit",
        amount_cents,
        description=description or "Transfer",
        recipient_account=to_account_number,
    )

    credit_entry_id = None
    if destination is not None:
        store.credit(destination.id, amount_cents)
        credit_entry = store.record_entry(
            destination.id,
            "credit",
            amount_cents,
            description=description or "Transfer received",
            recipient_account=source.account_number,
        )
        credit_entry_id = credit_entry.id
    else:
        logger.warning(
            "Transfer destination not found, funds retired",
            extra={"from_account_id": source.id, "to_account_number": to_account_number, "amount_cents": amount_cents},
        )

    return TransferResult(
        from_account_id=source.id,
        to_account_number=to_account_number,
        amount_cents=amount_cents,
        source_balance_cents=new_balance,
        debit_entry_id=debit_entry.id,
        credit_entry_id=credit_entry_id,
    )


def summarize_activity(balances_cents: Iterable[int], entries: Iterable[Tuple[str, int]]) -> DashboardSummary:
    """Total balance plus credit/debit sums over the given (type, amount_cents) entries"""
    deposits = 0
    expenses = 0
    for entry_type, amount_cents in entries:
        if entry_type == "credit":
            deposits += amount_cents
        elif entry_type == "debit":
            expenses += amount_cents

    return DashboardSummary(
        total_balance_cents=sum(balances_cents),
        monthly_deposits_cents=deposits,
        monthly_expenses_cents=expenses,
    )
