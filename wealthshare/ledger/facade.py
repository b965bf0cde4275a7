# wealthshare/ledger/facade.py
"""
Mutation API over the in-memory ledger.

Every write follows the same protocol:

  1. validate against the current in-memory state (raise, touch nothing)
  2. apply the new records to the EntryLog right away
  3. queue the matching backend write; ``flush()`` sends queued writes in
     order, and if any of them fails the reconcile strategy (a full reload
     by default) brings memory back in line with the store
"""

import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Deque, List, Optional, Tuple

from wealthshare.core.config import (
    DAILY_SHARE_CAP,
    DEFAULT_INTEREST_RATE,
    IMPORT_CHUNK_SIZE,
    LOAN_TERM_DAYS,
    SEED_DEFAULT_ACCOUNTS,
    ZERO_BALANCE_TOLERANCE,
)
from wealthshare.ledger import balances, loans, stats
from wealthshare.ledger.allocator import Allocation, allocate_contribution
from wealthshare.ledger.as_of import include
from wealthshare.ledger.entry_log import EntryLog
from wealthshare.ledger.errors import (
    AccountNotEmpty,
    EntityNotFound,
    InsufficientFunds,
    InsufficientInterestFunds,
    InvalidAmount,
    LedgerValidationError,
    OutstandingLoanExists,
    PersistenceError,
    RepaymentExceedsBalance,
    SnapshotError,
)
from wealthshare.persistence.backend import EntityKind, PersistenceBackend
from wealthshare.persistence.mapping import from_row, to_changes, to_row
from wealthshare.persistence.snapshot import export_snapshot, parse_snapshot, wipe, write_snapshot
from wealthshare.schemas.ledger_schemas import (
    Account,
    AccountBalance,
    AccountType,
    Entry,
    FundType,
    Loan,
    LoanState,
    LoanStatus,
    Member,
    MemberStats,
    TransactionType,
)
from wealthshare.utils.money import money

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS = (
    ("Cash", AccountType.CASH),
    ("Airtel Money", AccountType.MOBILE),
    ("Mpamba", AccountType.MOBILE),
    ("Bank", AccountType.BANK),
)


def _uuid() -> str:
    return str(uuid.uuid4())


@dataclass
class PendingWrite:
    description: str
    send: Callable[[PersistenceBackend], None]


def full_reload(ledger: "Ledger") -> None:
    ledger.reload()


class Ledger:
    def __init__(
            self,
            backend: PersistenceBackend,
            working_date: Optional[date] = None,
            daily_share_cap: Decimal = DAILY_SHARE_CAP,
            loan_term_days: int = LOAN_TERM_DAYS,
            default_interest_rate: Decimal = DEFAULT_INTEREST_RATE,
            seed_default_accounts: bool = SEED_DEFAULT_ACCOUNTS,
            import_chunk_size: int = IMPORT_CHUNK_SIZE,
            reconcile: Callable[["Ledger"], None] = full_reload,
            new_id: Callable[[], str] = _uuid,
    ):
        self.backend = backend
        self.log = EntryLog()
        self.daily_share_cap = money(daily_share_cap)
        self.loan_term_days = loan_term_days
        self.default_interest_rate = Decimal(str(default_interest_rate))
        self.seed_default_accounts = seed_default_accounts
        self.import_chunk_size = import_chunk_size
        self.reconcile = reconcile
        self.new_id = new_id

        self._working_date = working_date
        self._lock = threading.RLock()
        self._flush_lock = threading.Lock()
        self._pending: Deque[PendingWrite] = deque()
        self._mutations = 0

    # -------------------------------------------------
    # Working date
    # -------------------------------------------------
    @property
    def working_date(self) -> date:
        return self._working_date or date.today()

    @property
    def working_date_pinned(self) -> bool:
        return self._working_date is not None

    def set_working_date(self, value: Optional[date]) -> None:
        """``None`` goes back to following today's date."""
        self._working_date = value

    def _as_of(self, as_on: Optional[date]) -> date:
        return as_on or self.working_date

    # -------------------------------------------------
    # Lookups
    # -------------------------------------------------
    def get_member(self, member_id: str) -> Member:
        member = self.log.members.get(member_id)
        if not member:
            raise EntityNotFound("Member", member_id)
        return member

    def get_account(self, account_id: str) -> Account:
        account = self.log.accounts.get(account_id)
        if not account:
            raise EntityNotFound("Account", account_id)
        return account

    def get_loan(self, loan_id: str) -> Loan:
        loan = self.log.loans.get(loan_id)
        if not loan:
            raise EntityNotFound("Loan", loan_id)
        return loan

    def list_members(self) -> List[Member]:
        return list(self.log.members.values())

    def list_accounts(self) -> List[Account]:
        return list(self.log.accounts.values())

    def list_loans(self, member_id: Optional[str] = None) -> List[Loan]:
        if member_id:
            return self.log.member_loans(member_id)
        return list(self.log.loans.values())

    def list_entries(
            self,
            account_id: Optional[str] = None,
            member_id: Optional[str] = None,
            as_on: Optional[date] = None,
    ) -> List[Entry]:
        day = self._as_of(as_on)
        rows = [
            e for e in self.log.entries
            if include(e.txn_date, day)
            and (account_id is None or e.account_id == account_id)
            and (member_id is None or e.member_id == member_id)
        ]
        return sorted(rows, key=lambda e: e.txn_date)

    # -------------------------------------------------
    # Derived views
    # -------------------------------------------------
    def account_balance(self, account_id: str, as_on: Optional[date] = None) -> AccountBalance:
        return balances.account_balance(self.log, account_id, self._as_of(as_on))

    def loan_state(self, loan_id: str, as_on: Optional[date] = None) -> LoanState:
        return loans.loan_state(self.log, self.get_loan(loan_id), self._as_of(as_on))

    def member_stats(self, member_id: str, as_on: Optional[date] = None) -> MemberStats:
        self.get_member(member_id)
        return stats.member_stats(self.log, member_id, self._as_of(as_on))

    def available_interest(self, as_on: Optional[date] = None) -> Decimal:
        return balances.available_interest(self.log, self._as_of(as_on))

    # -------------------------------------------------
    # Members & accounts
    # -------------------------------------------------
    def add_member(self, name: str, starting_credit: Decimal = Decimal("0")) -> Member:
        if money(starting_credit) < 0:
            raise InvalidAmount("Starting credit cannot be negative")

        with self._lock:
            member = Member(id=self.new_id(), name=name, active=True, carried_credit=money(starting_credit))
            self.log.members[member.id] = member
            self._enqueue(f"add member {member.id}", _insert(EntityKind.MEMBERS, [member]))

        logger.info("Member %s added (%s)", member.id, name)
        return member

    def add_account(self, name: str, kind: AccountType, member_id: Optional[str] = None) -> Account:
        with self._lock:
            if member_id:
                self.get_member(member_id)
            if kind == AccountType.MEMBER and not member_id:
                raise LedgerValidationError("MEMBER accounts must belong to a member")

            account = Account(id=self.new_id(), name=name, kind=kind, active=True, member_id=member_id)
            self.log.accounts[account.id] = account
            self._enqueue(f"add account {account.id}", _insert(EntityKind.ACCOUNTS, [account]))

        logger.info("Account %s created (%s, %s)", account.id, name, kind.value)
        return account

    def delete_account(self, account_id: str) -> None:
        with self._lock:
            self.get_account(account_id)

            remaining = balances.account_net_total(self.log, account_id)
            if abs(remaining) > ZERO_BALANCE_TOLERANCE:
                raise AccountNotEmpty(account_id, remaining)

            del self.log.accounts[account_id]
            self._enqueue(f"delete account {account_id}", _delete(EntityKind.ACCOUNTS, account_id))

        logger.info("Account %s deleted", account_id)

    # -------------------------------------------------
    # Contributions (waterfall)
    # -------------------------------------------------
    def add_contribution(
            self,
            member_id: str,
            amount: Decimal,
            account_id: str,
            txn_date: date,
            notes: str = "",
    ) -> Allocation:
        amount = money(amount)
        if amount < 0:
            raise InvalidAmount("Contribution amount cannot be negative")

        with self._lock:
            member = self.get_member(member_id)
            self.get_account(account_id)

            allocation = allocate_contribution(
                self.log,
                member,
                amount,
                account_id,
                txn_date,
                notes,
                working_date=self.working_date,
                daily_share_cap=self.daily_share_cap,
                new_id=self.new_id,
            )

            # batch and credit go in together
            self.log.append(allocation.entries)
            self.log.members[member_id] = member.model_copy(
                update={"carried_credit": allocation.carried_credit}
            )

            if allocation.entries:
                self._enqueue(
                    f"contribution entries for member {member_id}",
                    _insert(EntityKind.TRANSACTIONS, allocation.entries),
                )
            self._enqueue(
                f"carried credit for member {member_id}",
                _update(
                    EntityKind.MEMBERS,
                    member_id,
                    to_changes(EntityKind.MEMBERS, carried_credit=allocation.carried_credit),
                ),
            )

        logger.info(
            "Contribution %s from member %s: share=%s repaid=%s carried=%s",
            amount, member_id, allocation.share, allocation.repaid, allocation.carried_credit,
        )
        return allocation

    # -------------------------------------------------
    # Loans
    # -------------------------------------------------
    def create_loan(
            self,
            member_id: str,
            principal: Decimal,
            account_id: str,
            issued_on: date,
            interest_rate: Optional[Decimal] = None,
            due_on: Optional[date] = None,
    ) -> Loan:
        principal = money(principal)
        if principal <= 0:
            raise InvalidAmount("Loan principal must be > 0")
        rate = self.default_interest_rate if interest_rate is None else Decimal(str(interest_rate))
        if rate < 0:
            raise InvalidAmount("Interest rate cannot be negative")

        due_on = due_on or issued_on + timedelta(days=self.loan_term_days)
        if due_on < issued_on:
            raise LedgerValidationError("Due date cannot be before the issue date")

        with self._lock:
            self.get_member(member_id)
            self.get_account(account_id)

            available = self.account_balance(account_id).total
            if available < principal:
                raise InsufficientFunds(account_id, available, principal)

            for existing in self.log.member_loans(member_id):
                if loans.loan_state(self.log, existing, self.working_date).status != LoanStatus.PAID:
                    raise OutstandingLoanExists(member_id, existing.id)

            loan = Loan(
                id=self.new_id(),
                member_id=member_id,
                principal=principal,
                interest_rate=rate,
                issued_on=issued_on,
                due_on=due_on,
            )
            # interest is never booked at issuance, only the principal leaves
            entry = Entry(
                id=self.new_id(),
                txn_date=issued_on,
                member_id=member_id,
                account_id=account_id,
                fund_type=FundType.PRINCIPAL,
                transaction_type=TransactionType.LOAN_GIVEN,
                amount=-principal,
                notes="Loan given to member",
            )

            self.log.loans[loan.id] = loan
            self.log.append([entry])
            self._enqueue(f"create loan {loan.id}", _insert(EntityKind.LOANS, [loan]))
            self._enqueue(f"loan entry {entry.id}", _insert(EntityKind.TRANSACTIONS, [entry]))

        logger.info("Loan %s issued to member %s: %s at %s%%", loan.id, member_id, principal, rate)
        return loan

    def add_repayment(
            self,
            loan_id: str,
            amount: Decimal,
            account_id: str,
            txn_date: date,
            notes: str = "",
    ) -> Entry:
        amount = money(amount)
        if amount <= 0:
            raise InvalidAmount("Repayment amount must be > 0")

        with self._lock:
            loan = self.get_loan(loan_id)
            self.get_account(account_id)

            state = loans.loan_state(self.log, loan, self.working_date)
            if amount > state.balance:
                raise RepaymentExceedsBalance(loan_id, state.balance, amount)

            entry = Entry(
                id=self.new_id(),
                txn_date=txn_date,
                member_id=loan.member_id,
                account_id=account_id,
                fund_type=FundType.PRINCIPAL,
                transaction_type=TransactionType.LOAN_REPAYMENT,
                amount=amount,
                related_loan_id=loan_id,
                notes=notes or "Direct repayment",
            )
            self.log.append([entry])
            self._enqueue(f"repayment {entry.id}", _insert(EntityKind.TRANSACTIONS, [entry]))

        logger.info("Repayment %s recorded on loan %s", amount, loan_id)
        return entry

    # -------------------------------------------------
    # Expenses, transfers, opening balances
    # -------------------------------------------------
    def record_expense(self, amount: Decimal, account_id: str, txn_date: date, notes: str = "") -> Entry:
        amount = money(amount)
        if amount <= 0:
            raise InvalidAmount("Expense amount must be > 0")

        with self._lock:
            self.get_account(account_id)

            available = self.available_interest()
            if available < amount:
                raise InsufficientInterestFunds(available, amount)

            entry = Entry(
                id=self.new_id(),
                txn_date=txn_date,
                account_id=account_id,
                fund_type=FundType.INTEREST,
                transaction_type=TransactionType.EXPENSE,
                amount=-amount,
                notes=notes,
            )
            self.log.append([entry])
            self._enqueue(f"expense {entry.id}", _insert(EntityKind.TRANSACTIONS, [entry]))

        logger.info("Expense %s paid from account %s", amount, account_id)
        return entry

    def transfer(
            self,
            from_account_id: str,
            to_account_id: str,
            amount: Decimal,
            fund_type: FundType,
            txn_date: date,
            notes: str = "",
    ) -> Tuple[Entry, Entry]:
        amount = money(amount)
        if amount <= 0:
            raise InvalidAmount("Transfer amount must be > 0")
        if from_account_id == to_account_id:
            raise LedgerValidationError("Cannot transfer to the same account")

        with self._lock:
            source = self.get_account(from_account_id)
            target = self.get_account(to_account_id)

            out_leg = Entry(
                id=self.new_id(),
                txn_date=txn_date,
                account_id=source.id,
                fund_type=fund_type,
                transaction_type=TransactionType.TRANSFER,
                amount=-amount,
                notes=f"Transfer to {target.name}: {notes}",
            )
            in_leg = Entry(
                id=self.new_id(),
                txn_date=txn_date,
                account_id=target.id,
                fund_type=fund_type,
                transaction_type=TransactionType.TRANSFER,
                amount=amount,
                notes=f"Transfer from {source.name}: {notes}",
            )
            # both legs travel as one batch
            self.log.append([out_leg, in_leg])
            self._enqueue(
                f"transfer {out_leg.id}/{in_leg.id}",
                _insert(EntityKind.TRANSACTIONS, [out_leg, in_leg]),
            )

        logger.info("Transfer %s %s from %s to %s", amount, fund_type.value, source.id, target.id)
        return out_leg, in_leg

    def record_opening_balance(
            self,
            account_id: str,
            amount: Decimal,
            fund_type: FundType,
            txn_date: date,
            notes: str = "",
    ) -> Entry:
        with self._lock:
            self.get_account(account_id)

            entry = Entry(
                id=self.new_id(),
                txn_date=txn_date,
                account_id=account_id,
                fund_type=fund_type,
                transaction_type=TransactionType.OPENING_BALANCE,
                amount=money(amount),
                notes=notes or "Opening Balance",
            )
            self.log.append([entry])
            self._enqueue(f"opening balance {entry.id}", _insert(EntityKind.TRANSACTIONS, [entry]))

        return entry

    def delete_entry(self, entry_id: str) -> Entry:
        """Removes one entry. No compensating entries are written."""
        with self._lock:
            entry = self.log.remove_entry(entry_id)
            if entry is None:
                raise EntityNotFound("Transaction", entry_id)
            self._enqueue(f"delete entry {entry_id}", _delete(EntityKind.TRANSACTIONS, entry_id))

        logger.info("Entry %s deleted", entry_id)
        return entry

    # -------------------------------------------------
    # Sync with the backend
    # -------------------------------------------------
    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    def _enqueue(self, description: str, send: Callable[[PersistenceBackend], None]) -> None:
        self._pending.append(PendingWrite(description, send))
        self._mutations += 1

    def _send_pending(self) -> bool:
        failed = False
        while True:
            with self._lock:
                if not self._pending:
                    break
                write = self._pending.popleft()
            try:
                write.send(self.backend)
            except PersistenceError as e:
                failed = True
                logger.warning("Failed to persist %s: %s", write.description, e)
        return not failed

    def flush(self) -> bool:
        """
        Send queued writes in order. Returns False when at least one failed,
        in which case every remaining write is still attempted and the
        reconcile strategy runs once at the end.
        """
        with self._flush_lock:
            ok = self._send_pending()

        if not ok:
            try:
                self.reconcile(self)
            except (PersistenceError, SnapshotError) as e:
                logger.error("Resync after failed write did not complete: %s", e)
        return ok

    def reload(self) -> EntryLog:
        """
        Replace the in-memory ledger with whatever the backend holds.

        The new log is fully built before it is swapped in; an unreachable
        store or a malformed row leaves the current state untouched. The
        lock is held from the first read to the swap, and a mutation made
        while reading is sent to the store and the read repeated, so no
        change is dropped by the swap.
        """
        while True:
            with self._lock:
                seen = self._mutations
                fresh = self._read_store()
                if self._mutations == seen:
                    self.log = fresh
                    if not fresh.accounts and self.seed_default_accounts:
                        self._seed_accounts()
                    break
            logger.info("Ledger changed while reloading, sending queued writes and reading again")
            self._send_pending()

        logger.info(
            "Ledger reloaded: %d members, %d accounts, %d loans, %d entries",
            len(fresh.members), len(fresh.accounts), len(fresh.loans), len(fresh.entries),
        )
        return fresh

    def _read_store(self) -> EntryLog:
        try:
            rows = {
                EntityKind.MEMBERS: self.backend.fetch_all(EntityKind.MEMBERS),
                EntityKind.ACCOUNTS: self.backend.fetch_all(EntityKind.ACCOUNTS),
                EntityKind.LOANS: self.backend.fetch_all(EntityKind.LOANS),
                EntityKind.TRANSACTIONS: self.backend.fetch_all(EntityKind.TRANSACTIONS, order_by="date"),
            }
        except PersistenceError as e:
            logger.error("Reload aborted, backend unreachable: %s", e)
            raise
        except SnapshotError as e:
            logger.error("Reload aborted, malformed stored data: %s", e)
            raise

        try:
            return EntryLog.build(
                members=[from_row(EntityKind.MEMBERS, r) for r in rows[EntityKind.MEMBERS]],
                accounts=[from_row(EntityKind.ACCOUNTS, r) for r in rows[EntityKind.ACCOUNTS]],
                loans=[from_row(EntityKind.LOANS, r) for r in rows[EntityKind.LOANS]],
                entries=[from_row(EntityKind.TRANSACTIONS, r) for r in rows[EntityKind.TRANSACTIONS]],
            )
        except (ValueError, TypeError) as e:
            # pydantic's ValidationError is a ValueError
            logger.error("Reload aborted, malformed stored data: %s", e)
            raise SnapshotError(f"Malformed stored data: {e}") from e

    def _seed_accounts(self) -> None:
        seeded = [
            Account(id=self.new_id(), name=name, kind=kind, active=True)
            for name, kind in DEFAULT_ACCOUNTS
        ]
        for account in seeded:
            self.log.accounts[account.id] = account

        logger.info("No accounts found, seeding defaults")
        try:
            self.backend.insert(EntityKind.ACCOUNTS, [to_row(a) for a in seeded])
        except PersistenceError as e:
            logger.warning("Failed to persist default accounts: %s", e)

    # -------------------------------------------------
    # Export / import / reset
    # -------------------------------------------------
    def export_snapshot(self) -> dict:
        with self._lock:
            return export_snapshot(self.log)

    def import_snapshot(self, payload) -> EntryLog:
        snap = parse_snapshot(payload)

        self.flush()
        with self._lock:
            try:
                write_snapshot(self.backend, snap, self.import_chunk_size)
            except PersistenceError as e:
                logger.warning("Import failed part way, resyncing: %s", e)
                try:
                    self.reconcile(self)
                except (PersistenceError, SnapshotError) as resync_error:
                    logger.error("Resync after failed import did not complete: %s", resync_error)
                raise

            logger.info("Snapshot imported")
            return self.reload()

    def reset(self) -> None:
        self.flush()
        with self._lock:
            wipe(self.backend)
            self.log = EntryLog()
        logger.warning("All ledger data wiped")


# -------------------------------------------------
# Backend write builders
# -------------------------------------------------
def _insert(kind: EntityKind, records) -> Callable[[PersistenceBackend], None]:
    rows = [to_row(r) for r in records]
    return lambda backend: backend.insert(kind, rows)


def _update(kind: EntityKind, record_id: str, changes: dict) -> Callable[[PersistenceBackend], None]:
    return lambda backend: backend.update(kind, record_id, changes)


def _delete(kind: EntityKind, record_id: str) -> Callable[[PersistenceBackend], None]:
    return lambda backend: backend.delete(kind, record_id)
