# wealthshare/persistence/snapshot.py
"""
Whole-ledger export / import.

The document holds the four collections plus a version tag::

    {"members": [...], "accounts": [...], "loans": [...],
     "transactions": [...], "exportedAt": "...", "version": "1.0"}

Import is destructive: the store is wiped and refilled parents first.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from wealthshare.core.config import IMPORT_CHUNK_SIZE
from wealthshare.ledger.entry_log import EntryLog
from wealthshare.ledger.errors import SnapshotError
from wealthshare.persistence.backend import INSERT_ORDER, WIPE_ORDER, EntityKind, PersistenceBackend
from wealthshare.persistence.mapping import to_row
from wealthshare.schemas.ledger_schemas import Account, Entry, Loan, Member

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"


class Snapshot(BaseModel):
    members: List[Member]
    accounts: List[Account]
    loans: List[Loan]
    transactions: List[Entry]
    exported_at: Optional[datetime] = Field(default=None, alias="exportedAt")
    version: str = SNAPSHOT_VERSION

    class Config:
        populate_by_name = True

    def collection(self, kind: EntityKind):
        return {
            EntityKind.MEMBERS: self.members,
            EntityKind.ACCOUNTS: self.accounts,
            EntityKind.LOANS: self.loans,
            EntityKind.TRANSACTIONS: self.transactions,
        }[kind]


def export_snapshot(log: EntryLog) -> dict:
    snap = Snapshot(
        members=list(log.members.values()),
        accounts=list(log.accounts.values()),
        loans=list(log.loans.values()),
        transactions=list(log.entries),
        exported_at=datetime.now(timezone.utc),
    )
    return snap.model_dump(mode="json", by_alias=True)


def parse_snapshot(payload: Union[str, bytes, dict, Any]) -> Snapshot:
    try:
        if isinstance(payload, (str, bytes)):
            payload = json.loads(payload)
        snap = Snapshot.model_validate(payload)
    except (ValueError, ValidationError) as e:
        # ValidationError is a ValueError; json errors too
        raise SnapshotError(f"Invalid snapshot: {e}") from e

    if snap.version != SNAPSHOT_VERSION:
        raise SnapshotError(f"Unsupported snapshot version: {snap.version}")
    return snap


def wipe(backend: PersistenceBackend) -> None:
    for kind in WIPE_ORDER:
        backend.delete(kind)


def chunked(rows: list, size: int):
    for i in range(0, len(rows), size):
        yield rows[i:i + size]


def write_snapshot(backend: PersistenceBackend, snap: Snapshot, chunk_size: int = IMPORT_CHUNK_SIZE) -> None:
    """Wipe the store, then insert Members -> Accounts -> Loans -> Entries in chunks."""
    wipe(backend)

    for kind in INSERT_ORDER:
        rows = [to_row(r) for r in snap.collection(kind)]
        for chunk in chunked(rows, max(1, chunk_size)):
            backend.insert(kind, chunk)
        logger.info("Imported %d %s", len(rows), kind.value)
