# wealthshare/persistence/mapping.py
from enum import Enum
from typing import Dict, Type

from wealthshare.persistence.backend import EntityKind, Record
from wealthshare.schemas.ledger_schemas import Account, Entry, LedgerRecord, Loan, Member

MODELS: Dict[EntityKind, Type[LedgerRecord]] = {
    EntityKind.MEMBERS: Member,
    EntityKind.ACCOUNTS: Account,
    EntityKind.LOANS: Loan,
    EntityKind.TRANSACTIONS: Entry,
}

# snapshot alias -> stored column, where they differ
STORED_NAMES = {
    "memberId": "member_id",
    "accountId": "account_id",
}
ALIAS_NAMES = {v: k for k, v in STORED_NAMES.items()}


def to_row(record: LedgerRecord) -> Record:
    data = record.model_dump(by_alias=True)
    return {
        STORED_NAMES.get(k, k): (v.value if isinstance(v, Enum) else v)
        for k, v in data.items()
    }


def from_row(kind: EntityKind, row: Record) -> LedgerRecord:
    """Raises ``pydantic.ValidationError`` on a malformed row."""
    data = {ALIAS_NAMES.get(k, k): v for k, v in row.items()}
    return MODELS[kind].model_validate(data)


def to_changes(kind: EntityKind, **fields) -> Record:
    """Partial update keyed by stored column names."""
    model = MODELS[kind]
    changes = {}
    for name, value in fields.items():
        alias = model.model_fields[name].alias or name
        changes[STORED_NAMES.get(alias, alias)] = value.value if isinstance(value, Enum) else value
    return changes
