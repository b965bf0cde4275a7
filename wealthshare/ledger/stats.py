# wealthshare/ledger/stats.py
from datetime import date

from wealthshare.ledger.as_of import include
from wealthshare.ledger.balances import account_balance
from wealthshare.ledger.entry_log import EntryLog
from wealthshare.ledger.loans import loan_state
from wealthshare.schemas.ledger_schemas import AccountType, LoanStatus, MemberStats, TransactionType
from wealthshare.utils.money import ZERO, money


def member_stats(log: EntryLog, member_id: str, working_date: date) -> MemberStats:
    contributions = [
        e
        for e in log.entries
        if e.member_id == member_id
        and e.transaction_type == TransactionType.CONTRIBUTION
        and include(e.txn_date, working_date)
    ]

    active_loans = 0
    loan_balance = ZERO
    for loan in log.member_loans(member_id):
        if not include(loan.issued_on, working_date):
            continue
        state = loan_state(log, loan, working_date)
        if state.status != LoanStatus.PAID:
            active_loans += 1
            loan_balance += state.balance

    funds_held = ZERO
    for acc in log.accounts.values():
        if acc.member_id == member_id and acc.kind == AccountType.MEMBER:
            funds_held += account_balance(log, acc.id, working_date).total

    return MemberStats(
        total_contributed=money(sum((e.amount for e in contributions), ZERO)),
        active_loan_count=active_loans,
        total_loan_balance=money(loan_balance),
        last_contribution_date=max((e.txn_date for e in contributions), default=None),
        funds_held=money(funds_held),
    )
