# wealthshare/routers/loans_router.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from starlette import status

from wealthshare.ledger.facade import Ledger
from wealthshare.schemas.ledger_schemas import LoanStatus
from wealthshare.schemas.loan_schema import LoanCreate, LoanDetailOut, LoanOut, RepaymentCreate
from wealthshare.schemas.transaction_schemas import EntryOut
from wealthshare.utils.dependencies import get_ledger, http_errors

router = APIRouter(prefix="/loans", tags=["Loans"])


def _detail(ledger: Ledger, loan_id: str, day: date) -> LoanDetailOut:
    loan = ledger.get_loan(loan_id)
    state = ledger.loan_state(loan_id, day)
    return LoanDetailOut(
        **LoanOut.model_validate(loan, from_attributes=True).model_dump(),
        as_on=day,
        **state.model_dump(),
    )


# =================================================
# 🔹 STATIC ROUTES (ALWAYS FIRST)
# =================================================
@router.post("", response_model=LoanOut, status_code=status.HTTP_201_CREATED)
def create_loan(
        payload: LoanCreate,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        loan = ledger.create_loan(
            member_id=payload.member_id,
            principal=payload.principal,
            account_id=payload.account_id,
            issued_on=payload.issued_on,
            interest_rate=payload.interest_rate,
            due_on=payload.due_on,
        )
    background.add_task(ledger.flush)
    return LoanOut.model_validate(loan, from_attributes=True)


@router.get("", response_model=list[LoanDetailOut])
def list_loans(
        member_id: Optional[str] = Query(None),
        status: Optional[LoanStatus] = Query(None),
        as_on: Optional[date] = Query(None),
        ledger: Ledger = Depends(get_ledger),
):
    day = as_on or ledger.working_date

    rows = [_detail(ledger, l.id, day) for l in ledger.list_loans(member_id)]
    if status is not None:
        rows = [r for r in rows if r.status == status]

    return sorted(rows, key=lambda r: r.issued_on, reverse=True)


# =================================================
# 🔹 DYNAMIC ROUTES (LAST)
# =================================================
@router.get("/{loan_id}", response_model=LoanDetailOut)
def get_loan(
        loan_id: str,
        as_on: Optional[date] = Query(None),
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        return _detail(ledger, loan_id, as_on or ledger.working_date)


@router.post("/{loan_id}/repayments", response_model=EntryOut, status_code=status.HTTP_201_CREATED)
def create_repayment(
        loan_id: str,
        payload: RepaymentCreate,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        entry = ledger.add_repayment(
            loan_id=loan_id,
            amount=payload.amount,
            account_id=payload.account_id,
            txn_date=payload.txn_date,
            notes=payload.notes or "",
        )
    background.add_task(ledger.flush)
    return EntryOut.model_validate(entry, from_attributes=True)
