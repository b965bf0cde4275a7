# wealthshare/ledger/balances.py
from datetime import date
from decimal import Decimal

from wealthshare.ledger.as_of import include
from wealthshare.ledger.entry_log import EntryLog
from wealthshare.schemas.ledger_schemas import AccountBalance, FundType, TransactionType
from wealthshare.utils.money import ZERO, money


def account_balance(log: EntryLog, account_id: str, working_date: date) -> AccountBalance:
    """
    Per-pool balance of one account as seen at ``working_date``.

    PRINCIPAL and INTEREST are folded separately; ``total`` is the only place
    they meet. Unknown accounts simply have no entries and come back as zeros.
    """
    principal = ZERO
    interest = ZERO

    for e in log.entries:
        if e.account_id != account_id or not include(e.txn_date, working_date):
            continue
        if e.fund_type == FundType.PRINCIPAL:
            principal += e.amount
        else:
            interest += e.amount

    return AccountBalance(
        principal=money(principal),
        interest=money(interest),
        total=money(principal + interest),
    )


def account_net_total(log: EntryLog, account_id: str) -> Decimal:
    # whole history, no working-date filter
    return money(sum((e.amount for e in log.entries if e.account_id == account_id), ZERO))


def available_interest(log: EntryLog, working_date: date) -> Decimal:
    """
    Shared interest pool still spendable on expenses.

    incoming  = every positive INTEREST entry
    outgoing  = size of every EXPENSE/INTEREST entry
    available = incoming - outgoing

    Expenses are stored negative; their magnitude is what gets subtracted,
    so a recorded expense can never make more interest available.
    """
    incoming = ZERO
    outgoing = ZERO

    for e in log.entries:
        if e.fund_type != FundType.INTEREST or not include(e.txn_date, working_date):
            continue
        if e.amount > 0:
            incoming += e.amount
        if e.transaction_type == TransactionType.EXPENSE:
            outgoing += abs(e.amount)

    return money(incoming - outgoing)
