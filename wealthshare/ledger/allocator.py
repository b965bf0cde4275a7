# wealthshare/ledger/allocator.py
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, List

from wealthshare.core.config import DAILY_SHARE_CAP
from wealthshare.ledger.entry_log import EntryLog
from wealthshare.ledger.loans import unpaid_loans
from wealthshare.schemas.ledger_schemas import Entry, FundType, Member, TransactionType
from wealthshare.utils.money import ZERO, money

AUTO_REPAYMENT_NOTE = "Auto-repayment from extra contribution"
DAILY_SHARE_NOTE = "Daily Share"


def _uuid() -> str:
    return str(uuid.uuid4())


@dataclass
class Allocation:
    entries: List[Entry] = field(default_factory=list)
    carried_credit: Decimal = ZERO
    share: Decimal = ZERO
    repaid: Decimal = ZERO


def contributed_on(log: EntryLog, member_id: str, txn_date: date) -> Decimal:
    # literal date match, not the working-date filter
    return money(
        sum(
            (
                e.amount
                for e in log.entries
                if e.member_id == member_id
                and e.transaction_type == TransactionType.CONTRIBUTION
                and e.txn_date == txn_date
            ),
            ZERO,
        )
    )


def allocate_contribution(
        log: EntryLog,
        member: Member,
        amount: Decimal,
        account_id: str,
        txn_date: date,
        notes: str,
        working_date: date,
        daily_share_cap: Decimal = DAILY_SHARE_CAP,
        new_id: Callable[[], str] = _uuid,
) -> Allocation:
    """
    Splits ``amount`` plus the member's carried credit, in this order:

      1. daily share, up to whatever is left of ``daily_share_cap`` for
         ``txn_date``
      2. unpaid loans, oldest issue date first, never more than a loan's
         balance
      3. whatever is still left becomes the new carried credit (it REPLACES
         the old value, it is not added to it)

    Nothing is applied here; the caller appends ``entries`` and stores
    ``carried_credit`` together.
    """
    out = Allocation()

    already_today = contributed_on(log, member.id, txn_date)
    share_capacity = max(ZERO, money(daily_share_cap) - already_today)

    pool = money(money(amount) + member.carried_credit)
    share = min(share_capacity, pool)

    if share > 0:
        out.entries.append(
            Entry(
                id=new_id(),
                txn_date=txn_date,
                member_id=member.id,
                account_id=account_id,
                fund_type=FundType.PRINCIPAL,
                transaction_type=TransactionType.CONTRIBUTION,
                amount=share,
                notes=notes or DAILY_SHARE_NOTE,
            )
        )
        out.share = share

    extra = money(pool - share)

    if extra > 0:
        for loan, state in unpaid_loans(log, member.id, working_date):
            if extra <= 0:
                break

            repayment = min(extra, state.balance)
            if repayment <= 0:
                continue

            out.entries.append(
                Entry(
                    id=new_id(),
                    txn_date=txn_date,
                    member_id=member.id,
                    account_id=account_id,
                    fund_type=FundType.PRINCIPAL,
                    transaction_type=TransactionType.LOAN_REPAYMENT,
                    amount=repayment,
                    related_loan_id=loan.id,
                    notes=AUTO_REPAYMENT_NOTE,
                )
            )
            out.repaid = money(out.repaid + repayment)
            extra = money(extra - repayment)

    out.carried_credit = max(ZERO, extra)
    return out
