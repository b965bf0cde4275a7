# wealthshare/ledger/as_of.py
from datetime import date


def include(record_date: date, working_date: date) -> bool:
    """True when a record dated ``record_date`` is visible at ``working_date``."""
    return record_date <= working_date
