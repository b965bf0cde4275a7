# wealthshare/persistence/backend.py
import copy
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from wealthshare.ledger.errors import PersistenceError

Record = Dict[str, Any]


class EntityKind(str, Enum):
    MEMBERS = "members"
    ACCOUNTS = "accounts"
    LOANS = "loans"
    TRANSACTIONS = "transactions"


# parents before children
INSERT_ORDER = (EntityKind.MEMBERS, EntityKind.ACCOUNTS, EntityKind.LOANS, EntityKind.TRANSACTIONS)
WIPE_ORDER = tuple(reversed(INSERT_ORDER))


class PersistenceBackend(ABC):
    """
    Durable store behind the in-memory ledger.

    Records cross this boundary as plain dicts keyed by stored column name
    (``account_id``, ``fund_type`` ...). Write and connection failures
    surface as ``PersistenceError``; stored rows that cannot be decoded
    surface as ``SnapshotError``.
    """

    @abstractmethod
    def fetch_all(self, kind: EntityKind, order_by: Optional[str] = None) -> List[Record]:
        ...

    @abstractmethod
    def insert(self, kind: EntityKind, records: Sequence[Record]) -> None:
        """Insert zero or more records in one go."""

    @abstractmethod
    def update(self, kind: EntityKind, record_id: str, changes: Record) -> None:
        ...

    @abstractmethod
    def delete(self, kind: EntityKind, record_id: Optional[str] = None) -> None:
        """Delete one record by id, or every record of ``kind`` when no id is given."""


class MemoryBackend(PersistenceBackend):
    """Process-local store, used offline and in tests."""

    def __init__(self):
        self.tables: Dict[EntityKind, List[Record]] = {kind: [] for kind in EntityKind}

    def fetch_all(self, kind, order_by=None):
        rows = [copy.deepcopy(r) for r in self.tables[kind]]
        if order_by:
            # str keeps the sort total even over malformed values
            rows.sort(key=lambda r: str(r.get(order_by) or ""))
        return rows

    def insert(self, kind, records):
        rows = [copy.deepcopy(dict(r)) for r in records]
        ids = {r["id"] for r in self.tables[kind]}
        for r in rows:
            if r.get("id") in ids:
                raise PersistenceError(f"duplicate id {r.get('id')} in {kind.value}")
            ids.add(r.get("id"))
        self.tables[kind].extend(rows)

    def update(self, kind, record_id, changes):
        for r in self.tables[kind]:
            if r["id"] == record_id:
                r.update(copy.deepcopy(changes))
                return
        raise PersistenceError(f"{kind.value} row not found: {record_id}")

    def delete(self, kind, record_id=None):
        if record_id is None:
            self.tables[kind] = []
        else:
            self.tables[kind] = [r for r in self.tables[kind] if r["id"] != record_id]
