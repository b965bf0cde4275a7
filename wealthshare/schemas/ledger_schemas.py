# wealthshare/schemas/ledger_schemas.py
"""
In-memory ledger records.

Field aliases follow the snapshot document format (``memberId``,
``accountId``, ``amount_given`` ...), so a record can be dumped straight
into an export and validated straight back out of one.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from wealthshare.utils.money import money


class AccountType(str, Enum):
    CASH = "CASH"
    MOBILE = "MOBILE"
    BANK = "BANK"
    MEMBER = "MEMBER"


class FundType(str, Enum):
    PRINCIPAL = "PRINCIPAL"
    INTEREST = "INTEREST"


class TransactionType(str, Enum):
    CONTRIBUTION = "CONTRIBUTION"
    LOAN_GIVEN = "LOAN_GIVEN"
    LOAN_REPAYMENT = "LOAN_REPAYMENT"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    OPENING_BALANCE = "OPENING_BALANCE"


class LoanStatus(str, Enum):
    UNPAID = "UNPAID"
    OVERDUE = "OVERDUE"
    PAID = "PAID"


# ----------------------------
# Stored records
# ----------------------------
class LedgerRecord(BaseModel):
    class Config:
        populate_by_name = True
        frozen = True
        extra = "ignore"


class Member(LedgerRecord):
    id: str
    name: str
    active: bool = True
    carried_credit: Decimal = Field(default=Decimal("0.00"), ge=0, alias="advance_credit")

    @field_validator("carried_credit")
    def quantize_credit(cls, v):
        return money(v)


class Account(LedgerRecord):
    id: str
    name: str = Field(alias="account_name")
    kind: AccountType = Field(alias="type")
    active: bool = True
    member_id: Optional[str] = Field(default=None, alias="memberId")

    @model_validator(mode="after")
    def member_account_has_owner(self):
        if self.kind == AccountType.MEMBER and not self.member_id:
            raise ValueError("MEMBER accounts must reference a member")
        return self


class Loan(LedgerRecord):
    id: str
    member_id: str = Field(alias="memberId")
    principal: Decimal = Field(alias="amount_given", gt=0)
    interest_rate: Decimal = Field(ge=0)
    issued_on: date = Field(alias="date_given")
    due_on: date = Field(alias="due_date")

    @field_validator("principal")
    def quantize_principal(cls, v):
        return money(v)

    @field_validator("issued_on", "due_on", mode="before")
    def strip_time(cls, v):
        # older exports carry the due date as a full ISO timestamp
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v


class Entry(LedgerRecord):
    id: str
    txn_date: date = Field(alias="date")
    member_id: Optional[str] = Field(default=None, alias="memberId")
    account_id: str = Field(alias="accountId")
    fund_type: FundType
    transaction_type: TransactionType
    amount: Decimal
    related_loan_id: Optional[str] = None
    notes: str = ""

    @field_validator("amount")
    def quantize_amount(cls, v):
        return money(v)

    @field_validator("notes", mode="before")
    def none_to_empty(cls, v):
        return "" if v is None else v

    @model_validator(mode="after")
    def repayment_references_loan(self):
        if self.transaction_type == TransactionType.LOAN_REPAYMENT:
            if not self.related_loan_id:
                raise ValueError("LOAN_REPAYMENT entries must reference a loan")
        elif self.related_loan_id:
            raise ValueError(f"{self.transaction_type.value} entries cannot reference a loan")
        return self


# ----------------------------
# Derived views (never stored)
# ----------------------------
class AccountBalance(BaseModel):
    principal: Decimal = Decimal("0.00")
    interest: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")


class LoanState(BaseModel):
    interest_amount: Decimal
    total_due: Decimal
    amount_paid: Decimal
    balance: Decimal
    status: LoanStatus


class MemberStats(BaseModel):
    total_contributed: Decimal = Decimal("0.00")
    active_loan_count: int = 0
    total_loan_balance: Decimal = Decimal("0.00")
    last_contribution_date: Optional[date] = None
    funds_held: Decimal = Decimal("0.00")
