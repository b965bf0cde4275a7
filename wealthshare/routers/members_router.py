# wealthshare/routers/members_router.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from starlette import status

from wealthshare.ledger.facade import Ledger
from wealthshare.schemas.loan_schema import LoanOut
from wealthshare.schemas.member_schemas import MemberCreate, MemberOut, MemberStatsOut
from wealthshare.utils.dependencies import get_ledger, http_errors

router = APIRouter(prefix="/members", tags=["Members"])


@router.post("", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def create_member(
        payload: MemberCreate,
        background: BackgroundTasks,
        ledger: Ledger = Depends(get_ledger),
):
    with http_errors():
        member = ledger.add_member(payload.name, payload.starting_credit)
    background.add_task(ledger.flush)
    return MemberOut.model_validate(member, from_attributes=True)


@router.get("", response_model=list[MemberOut])
def list_members(
        active: Optional[bool] = Query(None),
        ledger: Ledger = Depends(get_ledger),
):
    rows = ledger.list_members()
    if active is not None:
        rows = [m for m in rows if m.active == active]
    return [MemberOut.model_validate(m, from_attributes=True) for m in sorted(rows, key=lambda m: m.name)]


@router.get("/{member_id}", response_model=MemberOut)
def get_member(member_id: str, ledger: Ledger = Depends(get_ledger)):
    with http_errors():
        member = ledger.get_member(member_id)
    return MemberOut.model_validate(member, from_attributes=True)


@router.get("/{member_id}/stats", response_model=MemberStatsOut)
def member_stats(
        member_id: str,
        as_on: Optional[date] = Query(None),
        ledger: Ledger = Depends(get_ledger),
):
    day = as_on or ledger.working_date
    with http_errors():
        stats = ledger.member_stats(member_id, day)

    return MemberStatsOut(member_id=member_id, as_on=day, **stats.model_dump())


@router.get("/{member_id}/loans", response_model=list[LoanOut])
def member_loans(member_id: str, ledger: Ledger = Depends(get_ledger)):
    with http_errors():
        ledger.get_member(member_id)
    loans = sorted(ledger.list_loans(member_id), key=lambda l: l.issued_on, reverse=True)
    return [LoanOut.model_validate(l, from_attributes=True) for l in loans]
