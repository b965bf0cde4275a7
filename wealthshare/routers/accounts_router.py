# wealthshare/routers/accounts_router.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from starlette import status

from wealthshare.ledger.facade import Ledger
from wealthshare.schemas.account_schemas import AccountBalanceOut, AccountCreate, AccountOut
from wealthshare.schemas.ledger_schemas import AccountType
from wealthshare.utils.dependencies import get_ledger, http_errors

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountOut, status_code=status.HTTP_201_CREATED)
def create_account(
        payload: AccountCreate,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        account = ledger.add_account(payload.name, payload.kind, payload.member_id)
    background.add_task(ledger.flush)
    return AccountOut.model_validate(account, from_attributes=True)


@router.get("", response_model=list[AccountOut])
def list_accounts(
        kind: Optional[AccountType] = Query(None),
        member_id: Optional[str] = Query(None),
        ledger: Ledger = Depends(get_ledger),
):
    rows = ledger.list_accounts()

    if kind is not None:
        rows = [a for a in rows if a.kind == kind]
    if member_id is not None:
        rows = [a for a in rows if a.member_id == member_id]

    return [AccountOut.model_validate(a, from_attributes=True) for a in rows]


@router.get("/{account_id}/balance", response_model=AccountBalanceOut)
def account_balance(
        account_id: str,
        as_on: Optional[date] = Query(None),
        ledger: Ledger = Depends(get_ledger),
):
    day = as_on or ledger.working_date
    with http_errors():
        ledger.get_account(account_id)
    bal = ledger.account_balance(account_id, day)
    return AccountBalanceOut(account_id=account_id, as_on=day, **bal.model_dump())


@router.delete("/{account_id}")
def delete_account(
        account_id: str,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        ledger.delete_account(account_id)
    background.add_task(ledger.flush)
    return {"message": "Account deleted"}
