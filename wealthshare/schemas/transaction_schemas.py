# wealthshare/schemas/transaction_schemas.py
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from wealthshare.schemas.ledger_schemas import FundType, TransactionType


class EntryOut(BaseModel):
    id: str
    txn_date: date
    member_id: Optional[str] = None
    account_id: str
    fund_type: FundType
    transaction_type: TransactionType
    amount: Decimal
    related_loan_id: Optional[str] = None
    notes: str = ""

    class Config:
        from_attributes = True


class ContributionCreate(BaseModel):
    member_id: str
    account_id: str
    amount: Decimal = Field(ge=0)
    txn_date: date
    notes: str = ""


class ContributionResult(BaseModel):
    entries: List[EntryOut]
    share: Decimal
    repaid: Decimal
    carried_credit: Decimal


class ExpenseCreate(BaseModel):
    account_id: str
    amount: Decimal = Field(gt=0)
    txn_date: date
    notes: str = ""


class TransferCreate(BaseModel):
    from_account_id: str
    to_account_id: str
    amount: Decimal = Field(gt=0)
    fund_type: FundType = FundType.PRINCIPAL
    txn_date: date
    notes: str = ""


class OpeningBalanceCreate(BaseModel):
    account_id: str
    amount: Decimal
    fund_type: FundType = FundType.PRINCIPAL
    txn_date: date
    notes: str = ""
