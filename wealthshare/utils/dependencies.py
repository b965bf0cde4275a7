# wealthshare/utils/dependencies.py
from contextlib import contextmanager

from fastapi import HTTPException
from starlette import status

from wealthshare.ledger.errors import (
    EntityNotFound,
    LedgerValidationError,
    OutstandingLoanExists,
)
from wealthshare.ledger.facade import Ledger
from wealthshare.persistence.sql_backend import SqlBackend
from wealthshare.utils.database import SessionLocal

# single in-memory authority for the whole process
ledger = Ledger(SqlBackend(SessionLocal))


def get_ledger() -> Ledger:
    return ledger


@contextmanager
def http_errors():
    """Turn ledger validation failures into HTTP errors."""
    try:
        yield
    except EntityNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except OutstandingLoanExists as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except LedgerValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
