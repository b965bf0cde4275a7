# wealthshare/ledger/loans.py
from datetime import date
from typing import List, Tuple

from wealthshare.ledger.as_of import include
from wealthshare.ledger.entry_log import EntryLog
from wealthshare.schemas.ledger_schemas import Loan, LoanState, LoanStatus, TransactionType
from wealthshare.utils.money import ZERO, flat_interest, money


def amount_paid(log: EntryLog, loan_id: str, working_date: date):
    return money(
        sum(
            (
                e.amount
                for e in log.entries
                if e.related_loan_id == loan_id
                and e.transaction_type == TransactionType.LOAN_REPAYMENT
                and include(e.txn_date, working_date)
            ),
            ZERO,
        )
    )


def loan_state(log: EntryLog, loan: Loan, working_date: date) -> LoanState:
    """
    Derived state of a loan at ``working_date``.

    interest  = principal * rate / 100   (flat, charged once)
    total_due = principal + interest
    balance   = total_due - repayments visible at working_date

    A negative balance (overpaid) still counts as PAID.
    """
    interest_amount = flat_interest(loan.principal, loan.interest_rate)
    total_due = money(loan.principal + interest_amount)
    paid = amount_paid(log, loan.id, working_date)
    balance = money(total_due - paid)

    if balance <= 0:
        status = LoanStatus.PAID
    elif working_date > loan.due_on:
        status = LoanStatus.OVERDUE
    else:
        status = LoanStatus.UNPAID

    return LoanState(
        interest_amount=interest_amount,
        total_due=total_due,
        amount_paid=paid,
        balance=balance,
        status=status,
    )


def unpaid_loans(log: EntryLog, member_id: str, working_date: date) -> List[Tuple[Loan, LoanState]]:
    """Member's loans that are not PAID, oldest issue date first."""
    rows = []
    for loan in log.member_loans(member_id):
        state = loan_state(log, loan, working_date)
        if state.status != LoanStatus.PAID:
            rows.append((loan, state))

    # stable sort keeps insertion order for loans issued the same day
    rows.sort(key=lambda r: r[0].issued_on)
    return rows
