"""
test_allocator.py - Contribution waterfall

Tests:
- daily share cap, carried credit replacement
- oldest-first auto repayment, never above a loan's balance
- the facade applies the batch and credit together
"""

from datetime import date

import pytest

from conftest import D, DAY, WORKING_DATE, make_entry, make_loan
from wealthshare.ledger.allocator import (
    AUTO_REPAYMENT_NOTE,
    DAILY_SHARE_NOTE,
    allocate_contribution,
    contributed_on,
)
from wealthshare.ledger.entry_log import EntryLog
from wealthshare.ledger.errors import EntityNotFound, InvalidAmount
from wealthshare.persistence.backend import EntityKind
from wealthshare.schemas.ledger_schemas import FundType, Member, TransactionType


def _ids():
    counter = iter(range(1, 1000))
    return lambda: f"t{next(counter)}"


def _allocate(log, member, amount, txn_date=DAY, notes=""):
    return allocate_contribution(
        log, member, D(amount), "cash", txn_date, notes,
        working_date=WORKING_DATE, daily_share_cap=D(1000), new_id=_ids(),
    )


class TestAllocateContribution:

    def test_amount_over_cap_becomes_carried_credit(self, empty_log, alice):
        out = _allocate(empty_log, alice, 1500)

        assert len(out.entries) == 1
        share = out.entries[0]
        assert share.transaction_type == TransactionType.CONTRIBUTION
        assert share.fund_type == FundType.PRINCIPAL
        assert share.amount == D(1000)
        assert share.notes == DAILY_SHARE_NOTE
        assert out.carried_credit == D(500)

    def test_second_contribution_same_day_skips_share(self, alice):
        log = EntryLog.build(
            members=[alice],
            entries=[make_entry(
                "c1", "cash", 1000, member_id=alice.id,
                transaction_type=TransactionType.CONTRIBUTION,
            )],
        )
        member = alice.model_copy(update={"carried_credit": D(500)})

        out = _allocate(log, member, 100)

        assert out.entries == []
        assert out.share == D(0)
        assert out.carried_credit == D(600)

    def test_full_share_leaves_loan_untouched(self, alice):
        loan = make_loan("l1", alice.id, 300, 0, date(2024, 3, 1), due_on=date(2024, 3, 31))
        log = EntryLog.build(members=[alice], loans=[loan])

        out = _allocate(log, alice, 1000)

        assert [e.transaction_type for e in out.entries] == [TransactionType.CONTRIBUTION]
        assert out.repaid == D(0)
        assert out.carried_credit == D(0)

    def test_extra_after_cap_repays_loan(self, alice):
        loan = make_loan("l1", alice.id, 300, 0, date(2024, 3, 1), due_on=date(2024, 3, 31))
        log = EntryLog.build(
            members=[alice],
            loans=[loan],
            entries=[make_entry(
                "c1", "cash", 1000, member_id=alice.id,
                transaction_type=TransactionType.CONTRIBUTION,
            )],
        )

        out = _allocate(log, alice, 50)

        assert len(out.entries) == 1
        repayment = out.entries[0]
        assert repayment.transaction_type == TransactionType.LOAN_REPAYMENT
        assert repayment.related_loan_id == "l1"
        assert repayment.amount == D(50)
        assert repayment.notes == AUTO_REPAYMENT_NOTE
        assert out.carried_credit == D(0)

    def test_oldest_loan_is_repaid_first_and_capped_at_balance(self, alice):
        older = make_loan("old", alice.id, 200, 0, date(2024, 1, 1), due_on=date(2024, 1, 31))
        newer = make_loan("new", alice.id, 500, 0, date(2024, 2, 1), due_on=date(2024, 3, 2))
        log = EntryLog.build(members=[alice], loans=[newer, older])

        out = _allocate(log, alice, 1000 + 350)

        repayments = [e for e in out.entries if e.transaction_type == TransactionType.LOAN_REPAYMENT]
        assert [(e.related_loan_id, e.amount) for e in repayments] == [("old", D(200)), ("new", D(150))]
        assert out.repaid == D(350)
        assert out.carried_credit == D(0)

    def test_leftover_after_all_loans_is_carried(self, alice):
        loan = make_loan("l1", alice.id, 100, 10, date(2024, 1, 1), due_on=date(2024, 1, 31))
        log = EntryLog.build(members=[alice], loans=[loan])

        out = _allocate(log, alice, 1500)

        assert out.repaid == D(110)
        assert out.carried_credit == D(390)

    def test_zero_amount_runs_over_carried_credit(self, empty_log, alice):
        member = alice.model_copy(update={"carried_credit": D(250)})

        out = _allocate(empty_log, member, 0)

        assert out.share == D(250)
        assert out.carried_credit == D(0)

    def test_cap_counts_only_exact_date(self, alice):
        log = EntryLog.build(
            members=[alice],
            entries=[make_entry(
                "c1", "cash", 1000, txn_date=date(2024, 3, 4), member_id=alice.id,
                transaction_type=TransactionType.CONTRIBUTION,
            )],
        )

        assert contributed_on(log, alice.id, DAY) == D(0)
        assert _allocate(log, alice, 1000).share == D(1000)

    def test_future_dated_contribution_still_counts_toward_cap(self, alice):
        later = date(2024, 5, 1)
        log = EntryLog.build(
            members=[alice],
            entries=[make_entry(
                "c1", "cash", 800, txn_date=later, member_id=alice.id,
                transaction_type=TransactionType.CONTRIBUTION,
            )],
        )

        out = _allocate(log, alice, 500, txn_date=later)

        assert out.share == D(200)
        assert out.carried_credit == D(300)

    def test_custom_notes_on_share(self, empty_log, alice):
        out = _allocate(empty_log, alice, 100, notes="March share")
        assert out.entries[0].notes == "March share"

    def test_log_is_not_touched(self, empty_log, alice):
        _allocate(empty_log, alice, 1500)
        assert empty_log.entries == []
        assert empty_log.members[alice.id].carried_credit == D(0)


class TestLedgerContribution:

    def test_scenario_over_cap_then_same_day_again(self, ledger, cash, member):
        first = ledger.add_contribution(member.id, D(1500), cash.id, DAY)
        assert [e.amount for e in first.entries] == [D(1000)]
        assert ledger.get_member(member.id).carried_credit == D(500)

        second = ledger.add_contribution(member.id, D(100), cash.id, DAY)
        assert second.entries == []
        assert ledger.get_member(member.id).carried_credit == D(600)

    def test_credit_is_replaced_not_accumulated(self, ledger, cash, member):
        ledger.add_contribution(member.id, D(1500), cash.id, DAY)
        # next day: pool = 200 + 500 all fits under the cap
        ledger.add_contribution(member.id, D(200), cash.id, date(2024, 3, 6))

        assert ledger.get_member(member.id).carried_credit == D(0)

    def test_extra_repays_loan_through_facade(self, ledger, cash, member):
        loan = ledger.create_loan(member.id, D(300), cash.id, date(2024, 3, 1), D(0))
        ledger.add_contribution(member.id, D(1000), cash.id, DAY)
        assert ledger.loan_state(loan.id).balance == D(300)

        ledger.add_contribution(member.id, D(50), cash.id, DAY)

        assert ledger.loan_state(loan.id).balance == D(250)
        assert ledger.get_member(member.id).carried_credit == D(0)
        assert ledger.account_balance(cash.id).principal == D(5000 - 300 + 1000 + 50)

    def test_starting_credit_is_used(self, ledger, cash):
        member = ledger.add_member("Bob", starting_credit=D(300))

        out = ledger.add_contribution(member.id, D(0), cash.id, DAY)

        assert out.share == D(300)
        assert ledger.get_member(member.id).carried_credit == D(0)

    def test_queues_entries_then_credit(self, ledger, cash, member, backend):
        ledger.flush()
        ledger.add_contribution(member.id, D(1500), cash.id, DAY)

        assert ledger.pending_writes == 2
        assert ledger.flush() is True
        stored = backend.tables[EntityKind.MEMBERS][0]
        assert stored["advance_credit"] == D(500)

    def test_unknown_member(self, ledger, cash):
        with pytest.raises(EntityNotFound):
            ledger.add_contribution("ghost", D(10), cash.id, DAY)

    def test_negative_amount(self, ledger, cash, member):
        with pytest.raises(InvalidAmount):
            ledger.add_contribution(member.id, D(-1), cash.id, DAY)


def test_member_model_rejects_negative_credit():
    with pytest.raises(ValueError):
        Member(id="m", name="x", carried_credit=D(-1))
