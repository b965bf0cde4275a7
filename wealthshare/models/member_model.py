# wealthshare/models/member_model.py
from sqlalchemy import Column, String, Boolean, Numeric, DateTime
from sqlalchemy.sql import func

from wealthshare.utils.database import Base


class Member(Base):
    __tablename__ = "members"

    id = Column(String(36), primary_key=True)
    name = Column(String(120), nullable=False)
    active = Column(Boolean, nullable=False, server_default="true")

    # leftover contribution not yet placed in any account
    advance_credit = Column(Numeric(12, 2), nullable=False, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
