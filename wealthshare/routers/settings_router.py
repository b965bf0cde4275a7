# wealthshare/routers/settings_router.py
from fastapi import APIRouter, Depends

from wealthshare.ledger.facade import Ledger
from wealthshare.schemas.settings_schema import WorkingDateOut, WorkingDatePatch
from wealthshare.utils.dependencies import get_ledger

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/working-date", response_model=WorkingDateOut)
def get_working_date(ledger: Ledger = Depends(get_ledger)):
    return WorkingDateOut(working_date=ledger.working_date, pinned=ledger.working_date_pinned)


@router.put("/working-date", response_model=WorkingDateOut)
def set_working_date(payload: WorkingDatePatch, ledger: Ledger = Depends(get_ledger)):
    ledger.set_working_date(payload.working_date)
    return WorkingDateOut(working_date=ledger.working_date, pinned=ledger.working_date_pinned)
