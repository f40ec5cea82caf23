"""Unit tests for the transfer ledger mutation"""

import threading

import pytest
from sqlalchemy import event
from stonebridge_gateway.domain.exceptions import InsufficientFundsError, InvalidArgumentError, NotFoundError
from stonebridge_gateway.domain.ledger import summarize_activity, transfer_funds
from stonebridge_gateway.infrastructure.database.models import BankAccount, LedgerEntry
from stonebridge_gateway.infrastructure.database.repositories import LedgerRepository


def entry_count(db) -> int:
    return db.query(LedgerEntry).count()


def test_transfer_moves_money_and_records_both_legs(db, alice, bob, account_of):
    source = account_of(alice, "checking")
    destination = account_of(bob, "savings")

    result = transfer_funds(
        LedgerRepository(db),
        owner_id=alice.id,
        from_account_id=source.id,
        to_account_number=destination.account_number,
        amount_cents=25_050,
        description="Rent share",
    )
    db.commit()

    assert account_of(alice, "checking").balance_cents == 100_000 - 25_050
    assert account_of(bob, "savings").balance_cents == 500_000 + 25_050
    assert result.source_balance_cents == 74_950

    debit = db.get(LedgerEntry, result.debit_entry_id)
    credit = db.get(LedgerEntry, result.credit_entry_id)
    assert (debit.account_id, debit.type, debit.amount_cents) == (source.id, "debit", 25_050)
    assert debit.recipient_account == destination.account_number
    assert debit.description == "Rent share"
    assert debit.category == "transfer"
    assert (credit.account_id, credit.type, credit.amount_cents) == (destination.id, "credit", 25_050)
    assert credit.recipient_account == source.account_number
    assert entry_count(db) == 2


def test_transfer_default_descriptions(db, alice, bob, account_of):
    result = transfer_funds(
        LedgerRepository(db),
        owner_id=alice.id,
        from_account_id=account_of(alice, "checking").id,
        to_account_number=account_of(bob, "checking").account_number,
        amount_cents=100,
    )
    db.commit()

    assert db.get(LedgerEntry, result.debit_entry_id).description == "Transfer"
    assert db.get(LedgerEntry, result.credit_entry_id).description == "Transfer received"


def test_transfer_bumps_account_versions(db, alice, bob, account_of):
    source = account_of(alice, "checking")
    destination = account_of(bob, "checking")
    assert (source.version, destination.version) == (0, 0)

    transfer_funds(LedgerRepository(db), alice.id, source.id, destination.account_number, 100)
    db.commit()

    assert account_of(alice, "checking").version == 1
    assert account_of(bob, "checking").version == 1


def test_transfer_between_own_accounts(db, alice, account_of):
    checking = account_of(alice, "checking")
    savings = account_of(alice, "savings")

    transfer_funds(LedgerRepository(db), alice.id, savings.id, checking.account_number, 200_000)
    db.commit()

    assert account_of(alice, "savings").balance_cents == 300_000
    assert account_of(alice, "checking").balance_cents == 300_000


def test_insufficient_funds_leaves_balances_unchanged(db, alice, bob, account_of):
    source = account_of(alice, "checking")
    destination = account_of(bob, "checking")

    with pytest.raises(InsufficientFundsError):
        transfer_funds(LedgerRepository(db), alice.id, source.id, destination.account_number, 100_001)
    db.rollback()

    assert account_of(alice, "checking").balance_cents == 100_000
    assert account_of(bob, "checking").balance_cents == 100_000
    assert entry_count(db) == 0


def test_exact_balance_can_be_transferred(db, alice, bob, account_of):
    source = account_of(alice, "checking")

    result = transfer_funds(LedgerRepository(db), alice.id, source.id, account_of(bob, "checking").account_number, 100_000)
    db.commit()

    assert result.source_balance_cents == 0
    assert account_of(alice, "checking").balance_cents == 0


def test_source_must_belong_to_caller(db, alice, bob, account_of):
    bobs_account = account_of(bob, "checking")

    with pytest.raises(NotFoundError, match="Source account not found"):
        transfer_funds(LedgerRepository(db), alice.id, bobs_account.id, account_of(alice, "checking").account_number, 100)
    db.rollback()

    assert account_of(bob, "checking").balance_cents == 100_000


def test_unknown_source_account(db, alice, account_of):
    with pytest.raises(NotFoundError):
        transfer_funds(LedgerRepository(db), alice.id, 9999, account_of(alice, "savings").account_number, 100)


def test_unknown_destination_rejected_by_default(db, alice, account_of):
    with pytest.raises(NotFoundError, match="Destination account not found"):
        transfer_funds(LedgerRepository(db), alice.id, account_of(alice, "checking").id, "STB0000000000", 100)
    db.rollback()

    assert account_of(alice, "checking").balance_cents == 100_000
    assert entry_count(db) == 0


def test_unknown_destination_retires_funds_when_enabled(db, alice, account_of):
    result = transfer_funds(
        LedgerRepository(db),
        alice.id,
        account_of(alice, "checking").id,
        "STB0000000000",
        5_000,
        retire_unknown_destination=True,
    )
    db.commit()

    assert result.credit_entry_id is None
    assert account_of(alice, "checking").balance_cents == 95_000
    assert entry_count(db) == 1


def test_transfer_to_same_account_rejected(db, alice, account_of):
    checking = account_of(alice, "checking")

    with pytest.raises(InvalidArgumentError):
        transfer_funds(LedgerRepository(db), alice.id, checking.id, checking.account_number, 100)


@pytest.mark.parametrize("amount_cents", [0, -500])
def test_non_positive_amount_rejected(db, alice, bob, account_of, amount_cents):
    with pytest.raises(InvalidArgumentError):
        transfer_funds(
            LedgerRepository(db),
            alice.id,
            account_of(alice, "checking").id,
            account_of(bob, "checking").account_number,
            amount_cents,
        )


def test_failure_after_debit_rolls_back_everything(db, alice, bob, account_of, monkeypatch):
    """A crash between the two legs must not leave the debit behind"""
    repo = LedgerRepository(db)

    def broken_credit(account_id, amount_cents):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(repo, "credit", broken_credit)

    with pytest.raises(RuntimeError):
        transfer_funds(repo, alice.id, account_of(alice, "checking").id, account_of(bob, "checking").account_number, 10_000)
    db.rollback()

    assert account_of(alice, "checking").balance_cents == 100_000
    assert account_of(bob, "checking").balance_cents == 100_000
    assert entry_count(db) == 0


def test_concurrent_transfers_never_overdraw(session_factory, db, alice, bob, account_of):
    """
    12 parallel transfers of $300 from a $1000 account: at most
    floor(1000 / 300) = 3 may succeed and the balance never goes negative.
    """
    source_id = account_of(alice, "checking").id
    destination_number = account_of(bob, "checking").account_number
    owner_id = alice.id
    amount_cents = 30_000
    workers = 12

    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def worker():
        session = session_factory()
        try:
            barrier.wait()
            transfer_funds(LedgerRepository(session), owner_id, source_id, destination_number, amount_cents)
            session.commit()
            outcome = "ok"
        except InsufficientFundsError:
            session.rollback()
            outcome = "insufficient"
        except Exception as e:
            session.rollback()
            outcome = f"error: {e}"
        finally:
            session.close()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    succeeded = outcomes.count("ok")
    db.expire_all()
    balance = db.get(BankAccount, source_id).balance_cents

    assert len(outcomes) == workers
    assert succeeded <= 100_000 // amount_cents
    assert balance >= 0
    assert balance == 100_000 - succeeded * amount_cents
    assert account_of(bob, "checking").balance_cents == 100_000 + succeeded * amount_cents
    assert db.query(LedgerEntry).filter(LedgerEntry.type == "debit").count() == succeeded
    assert db.query(LedgerEntry).filter(LedgerEntry.type == "credit").count() == succeeded


def test_accounts_locked_in_id_order_before_debit(engine, db, alice, bob, account_of):
    """Higher id to lower id still locks the lower id first"""
    source = account_of(bob, "checking")
    destination = account_of(alice, "checking")
    assert source.id > destination.id

    statements = []

    def capture(conn, cursor, statement, parameters, context, executemany):
        statements.append((statement, parameters))

    event.listen(engine, "before_cursor_execute", capture)
    try:
        transfer_funds(LedgerRepository(db), bob.id, source.id, destination.account_number, 1_000)
        db.commit()
    finally:
        event.remove(engine, "before_cursor_execute", capture)

    lock_index = next(i for i, (sql, _) in enumerate(statements) if "ORDER BY bank_accounts.id" in sql)
    update_index = next(i for i, (sql, _) in enumerate(statements) if sql.startswith("UPDATE bank_accounts"))
    assert lock_index < update_index
    assert list(statements[lock_index][1]) == [destination.id, source.id]


def test_opposite_direction_transfers_conserve_money(session_factory, db, alice, bob, account_of):
    """A->B and B->A at the same time: every cent ends up somewhere"""
    a = account_of(alice, "checking")
    b = account_of(bob, "checking")
    routes = [(alice.id, a.id, b.account_number), (bob.id, b.id, a.account_number)]
    workers = 10

    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def worker(index):
        owner_id, source_id, destination_number = routes[index % 2]
        session = session_factory()
        try:
            barrier.wait()
            transfer_funds(LedgerRepository(session), owner_id, source_id, destination_number, 10_000)
            session.commit()
            outcome = "ok"
        except Exception as e:
            session.rollback()
            outcome = f"error: {e}"
        finally:
            session.close()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    succeeded = outcomes.count("ok")
    assert len(outcomes) == workers
    assert account_of(alice, "checking").balance_cents + account_of(bob, "checking").balance_cents == 200_000
    assert db.query(LedgerEntry).filter(LedgerEntry.type == "debit").count() == succeeded
    assert db.query(LedgerEntry).filter(LedgerEntry.type == "credit").count() == succeeded


def test_summarize_activity():
    summary = summarize_activity(
        [100_000, 500_000],
        [("credit", 2_500), ("debit", 1_000), ("debit", 500), ("credit", 100)],
    )

    assert summary.total_balance_cents == 600_000
    assert summary.monthly_deposits_cents == 2_600
    assert summary.monthly_expenses_cents == 1_500
