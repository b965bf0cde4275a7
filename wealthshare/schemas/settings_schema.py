# wealthshare/schemas/settings_schema.py
from datetime import date
from typing import Optional

from pydantic import BaseModel


class WorkingDatePatch(BaseModel):
    # null -> follow today's date again
    working_date: Optional[date] = None


class WorkingDateOut(BaseModel):
    working_date: date
    pinned: bool
