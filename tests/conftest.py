"""
conftest.py - Shared pytest fixtures for ledger tests

Provides:
- a Ledger over an in-process MemoryBackend, working date pinned
- a funded CASH account and a member with no carried credit
- small builders for hand-made EntryLog fixtures
"""

from datetime import date
from decimal import Decimal

import pytest

from wealthshare.ledger.entry_log import EntryLog
from wealthshare.ledger.errors import PersistenceError
from wealthshare.ledger.facade import Ledger
from wealthshare.persistence.backend import MemoryBackend
from wealthshare.schemas.ledger_schemas import (
    AccountType,
    Entry,
    FundType,
    Loan,
    Member,
    TransactionType,
)

WORKING_DATE = date(2024, 3, 31)
DAY = date(2024, 3, 5)


class FlakyBackend(MemoryBackend):
    """MemoryBackend whose writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def insert(self, kind, records):
        if self.fail_writes:
            raise PersistenceError(f"insert into {kind.value} rejected")
        super().insert(kind, records)

    def update(self, kind, record_id, changes):
        if self.fail_writes:
            raise PersistenceError(f"update of {kind.value} rejected")
        super().update(kind, record_id, changes)


def D(x) -> Decimal:
    return Decimal(str(x))


def make_entry(
        entry_id,
        account_id,
        amount,
        txn_date=DAY,
        fund_type=FundType.PRINCIPAL,
        transaction_type=TransactionType.OPENING_BALANCE,
        member_id=None,
        related_loan_id=None,
):
    return Entry(
        id=entry_id,
        txn_date=txn_date,
        member_id=member_id,
        account_id=account_id,
        fund_type=fund_type,
        transaction_type=transaction_type,
        amount=D(amount),
        related_loan_id=related_loan_id,
    )


def make_loan(loan_id, member_id, principal, rate, issued_on, due_on=None):
    return Loan(
        id=loan_id,
        member_id=member_id,
        principal=D(principal),
        interest_rate=D(rate),
        issued_on=issued_on,
        due_on=due_on or issued_on,
    )


@pytest.fixture
def backend():
    return FlakyBackend()


@pytest.fixture
def ledger(backend):
    return Ledger(backend, working_date=WORKING_DATE, seed_default_accounts=False)


@pytest.fixture
def cash(ledger):
    account = ledger.add_account("Cash", AccountType.CASH)
    ledger.record_opening_balance(account.id, D(5000), FundType.PRINCIPAL, date(2024, 3, 1))
    return account


@pytest.fixture
def member(ledger):
    return ledger.add_member("Alice")


@pytest.fixture
def alice():
    return Member(id="m-alice", name="Alice", carried_credit=D(0))


@pytest.fixture
def empty_log(alice):
    return EntryLog.build(members=[alice])
