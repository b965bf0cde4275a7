# wealthshare/schemas/loan_schema.py
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from wealthshare.schemas.ledger_schemas import LoanStatus


class LoanCreate(BaseModel):
    member_id: str
    account_id: str
    principal: Decimal = Field(gt=0)
    issued_on: date
    interest_rate: Optional[Decimal] = Field(default=None, ge=0)
    due_on: Optional[date] = None


class LoanOut(BaseModel):
    id: str
    member_id: str
    principal: Decimal
    interest_rate: Decimal
    issued_on: date
    due_on: date

    class Config:
        from_attributes = True


class LoanDetailOut(LoanOut):
    as_on: date
    interest_amount: Decimal
    total_due: Decimal
    amount_paid: Decimal
    balance: Decimal
    status: LoanStatus


class RepaymentCreate(BaseModel):
    amount: Decimal = Field(gt=0)
    account_id: str
    txn_date: date
    notes: Optional[str] = None

    @field_validator("notes", mode="before")
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None
