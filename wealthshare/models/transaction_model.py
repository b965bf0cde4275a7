# wealthshare/models/transaction_model.py
from sqlalchemy import Column, String, Date, DateTime, Numeric, Text, ForeignKey, Index
from sqlalchemy.sql import func

from wealthshare.utils.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        Index("ix_transactions_date", "date"),
        Index("ix_transactions_member_id", "member_id"),
    )

    id = Column(String(36), primary_key=True)
    date = Column(Date, nullable=False)

    member_id = Column(String(36), ForeignKey("members.id"), nullable=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)

    # PRINCIPAL / INTEREST
    fund_type = Column(String(20), nullable=False)
    # CONTRIBUTION / LOAN_GIVEN / LOAN_REPAYMENT / EXPENSE / TRANSFER / OPENING_BALANCE
    transaction_type = Column(String(30), nullable=False)

    amount = Column(Numeric(12, 2), nullable=False)
    related_loan_id = Column(String(36), ForeignKey("loans.id"), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
