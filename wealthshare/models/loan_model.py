# wealthshare/models/loan_model.py
from sqlalchemy import Column, String, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func

from wealthshare.utils.database import Base


class Loan(Base):
    __tablename__ = "loans"

    id = Column(String(36), primary_key=True)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)

    amount_given = Column(Numeric(12, 2), nullable=False)
    interest_rate = Column(Numeric(6, 2), nullable=False, server_default="10")

    date_given = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
