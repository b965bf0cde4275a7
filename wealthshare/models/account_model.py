# wealthshare/models/account_model.py
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func

from wealthshare.utils.database import Base


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True)
    account_name = Column(String(120), nullable=False)

    # CASH / MOBILE / BANK / MEMBER
    type = Column(String(20), nullable=False)
    active = Column(Boolean, nullable=False, server_default="true")

    # only meaningful for MEMBER accounts
    member_id = Column(String(36), ForeignKey("members.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
