# wealthshare/schemas/account_schemas.py
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from wealthshare.schemas.ledger_schemas import AccountType


class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    kind: AccountType
    member_id: Optional[str] = None

    class Config:
        extra = "forbid"


class AccountOut(BaseModel):
    id: str
    name: str
    kind: AccountType
    active: bool
    member_id: Optional[str] = None

    class Config:
        from_attributes = True


class AccountBalanceOut(BaseModel):
    account_id: str
    as_on: date
    principal: Decimal
    interest: Decimal
    total: Decimal
