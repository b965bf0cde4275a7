# wealthshare/ledger/entry_log.py
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from wealthshare.schemas.ledger_schemas import Account, Entry, Loan, Member


@dataclass
class EntryLog:
    """
    Entries in insertion order plus the registries they point into.

    Entries are only ever appended in batches or removed by id; members,
    accounts and loans are keyed by id.
    """

    members: Dict[str, Member] = field(default_factory=dict)
    accounts: Dict[str, Account] = field(default_factory=dict)
    loans: Dict[str, Loan] = field(default_factory=dict)
    entries: List[Entry] = field(default_factory=list)

    @classmethod
    def build(
            cls,
            members: Iterable[Member] = (),
            accounts: Iterable[Account] = (),
            loans: Iterable[Loan] = (),
            entries: Iterable[Entry] = (),
    ) -> "EntryLog":
        return cls(
            members={m.id: m for m in members},
            accounts={a.id: a for a in accounts},
            loans={l.id: l for l in loans},
            entries=list(entries),
        )

    def append(self, batch: Iterable[Entry]) -> None:
        self.entries.extend(batch)

    def remove_entry(self, entry_id: str) -> Optional[Entry]:
        for i, e in enumerate(self.entries):
            if e.id == entry_id:
                return self.entries.pop(i)
        return None

    def find_entry(self, entry_id: str) -> Optional[Entry]:
        return next((e for e in self.entries if e.id == entry_id), None)

    def member_loans(self, member_id: str) -> List[Loan]:
        return [l for l in self.loans.values() if l.member_id == member_id]
