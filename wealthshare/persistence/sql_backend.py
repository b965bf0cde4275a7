# wealthshare/persistence/sql_backend.py
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

import wealthshare.models as models
from wealthshare.ledger.errors import PersistenceError, SnapshotError
from wealthshare.persistence.backend import EntityKind, PersistenceBackend

logger = logging.getLogger(__name__)

TABLES = {
    EntityKind.MEMBERS: models.Member,
    EntityKind.ACCOUNTS: models.Account,
    EntityKind.LOANS: models.Loan,
    EntityKind.TRANSACTIONS: models.Transaction,
}


def _row_to_dict(row) -> dict:
    return {c.name: getattr(row, c.key) for c in row.__table__.columns}


class SqlBackend(PersistenceBackend):
    """Backend over the SQLAlchemy tables (PostgreSQL remotely, SQLite locally)."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _session(self, action: str):
        db: Session = self.session_factory()
        try:
            yield db
            db.commit()
        except (SQLAlchemyError, TypeError) as e:
            db.rollback()
            logger.debug("SQL %s failed", action, exc_info=True)
            raise PersistenceError(f"{action} failed: {getattr(e, 'orig', None) or e}") from e
        finally:
            db.close()

    def fetch_all(self, kind, order_by=None):
        model = TABLES[kind]
        with self._session(f"fetch {kind.value}") as db:
            q = db.query(model)
            if order_by:
                q = q.order_by(getattr(model, order_by).asc())
            try:
                return [_row_to_dict(r) for r in q.all()]
            except (ValueError, TypeError) as e:
                # result processors choke on values the column type can't hold
                raise SnapshotError(f"Malformed {kind.value} row: {e}") from e

    def insert(self, kind, records):
        if not records:
            return
        model = TABLES[kind]
        with self._session(f"insert {kind.value}") as db:
            db.add_all([model(**r) for r in records])

    def update(self, kind, record_id, changes):
        model = TABLES[kind]
        with self._session(f"update {kind.value}") as db:
            n = db.query(model).filter(model.id == record_id).update(changes, synchronize_session=False)
            if n == 0:
                raise PersistenceError(f"{kind.value} row not found: {record_id}")

    def delete(self, kind, record_id=None):
        model = TABLES[kind]
        with self._session(f"delete {kind.value}") as db:
            q = db.query(model)
            if record_id is not None:
                q = q.filter(model.id == record_id)
            q.delete(synchronize_session=False)
