# wealthshare/routers/transactions_router.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from starlette import status

from wealthshare.ledger.facade import Ledger
from wealthshare.schemas.transaction_schemas import (
    ContributionCreate,
    ContributionResult,
    EntryOut,
    ExpenseCreate,
    OpeningBalanceCreate,
    TransferCreate,
)
from wealthshare.utils.dependencies import get_ledger, http_errors

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def _out(entry) -> EntryOut:
    return EntryOut.model_validate(entry, from_attributes=True)


@router.get("", response_model=list[EntryOut])
def list_transactions(
        account_id: Optional[str] = Query(None),
        member_id: Optional[str] = Query(None),
        as_on: Optional[date] = Query(None),
        ledger: Ledger = Depends(get_ledger),
):
    return [_out(e) for e in ledger.list_entries(account_id, member_id, as_on)]


@router.get("/interest-available")
def interest_available(
        as_on: Optional[date] = Query(None),
        ledger: Ledger = Depends(get_ledger),
):
    day = as_on or ledger.working_date
    return {"as_on": day, "available": ledger.available_interest(day)}


@router.post("/contributions", response_model=ContributionResult, status_code=status.HTTP_201_CREATED)
def create_contribution(
        payload: ContributionCreate,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        allocation = ledger.add_contribution(
            member_id=payload.member_id,
            amount=payload.amount,
            account_id=payload.account_id,
            txn_date=payload.txn_date,
            notes=payload.notes,
        )
    background.add_task(ledger.flush)

    return ContributionResult(
        entries=[_out(e) for e in allocation.entries],
        share=allocation.share,
        repaid=allocation.repaid,
        carried_credit=allocation.carried_credit,
    )


@router.post("/expenses", response_model=EntryOut, status_code=status.HTTP_201_CREATED)
def create_expense(
        payload: ExpenseCreate,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        entry = ledger.record_expense(payload.amount, payload.account_id, payload.txn_date, payload.notes)
    background.add_task(ledger.flush)
    return _out(entry)


@router.post("/transfers", response_model=list[EntryOut], status_code=status.HTTP_201_CREATED)
def create_transfer(
        payload: TransferCreate,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        legs = ledger.transfer(
            from_account_id=payload.from_account_id,
            to_account_id=payload.to_account_id,
            amount=payload.amount,
            fund_type=payload.fund_type,
            txn_date=payload.txn_date,
            notes=payload.notes,
        )
    background.add_task(ledger.flush)
    return [_out(e) for e in legs]


@router.post("/opening-balances", response_model=EntryOut, status_code=status.HTTP_201_CREATED)
def create_opening_balance(
        payload: OpeningBalanceCreate,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        entry = ledger.record_opening_balance(
            payload.account_id, payload.amount, payload.fund_type, payload.txn_date, payload.notes
        )
    background.add_task(ledger.flush)
    return _out(entry)


@router.delete("/{entry_id}")
def delete_transaction(
        entry_id: str,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        ledger.delete_entry(entry_id)
    background.add_task(ledger.flush)
    return {"message": "Transaction deleted"}
