# wealthshare/schemas/member_schemas.py
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class MemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    starting_credit: Decimal = Field(Decimal("0"), ge=0)

    @field_validator("name", mode="before")
    def strip_name(cls, v):
        return str(v).strip() if v is not None else v

    class Config:
        extra = "forbid"


class MemberOut(BaseModel):
    id: str
    name: str
    active: bool
    carried_credit: Decimal

    class Config:
        from_attributes = True


class MemberStatsOut(BaseModel):
    member_id: str
    as_on: date
    total_contributed: Decimal
    active_loan_count: int
    total_loan_balance: Decimal
    last_contribution_date: Optional[date] = None
    funds_held: Decimal
