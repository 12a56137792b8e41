"""
Journal Ledger Tests
====================

Test that double-entry bookkeeping principles are enforced:
- Total Debit = Total Credit for every accepted entry
- Rejected entries leave no trace on entries or balances
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError

from crud import journal_entry as crud_journal
from crud.accounts import update_account
from errors import NotFoundError, UnbalancedEntryError, ValidationError
from models.audit_log import AuditLog
from models.journal_entry import JournalEntry
from models.journal_entry_line import JournalEntryLine
from schemas.accounts import AccountUpdate
from schemas.journal_entry import JournalEntryCreate, JournalEntryLineCreate

from .conftest import post


def balances(db, chart):
    for account in chart.values():
        db.refresh(account)
    return {key: account.balance for key, account in chart.items()}


class TestPostEntry:

    def test_balanced_entry_is_posted(self, db, chart):
        entry = post(db, date(2025, 1, 10), [(chart["cash"], 500, 0), (chart["sales"], 0, 500)])

        assert entry.status == "posted"
        assert entry.total_amount == Decimal("500.00")
        assert entry.entry_number == f"JE-20250110-{entry.id:06d}"
        assert [line.line_number for line in entry.lines] == [1, 2]

    def test_cached_balances_follow_normal_side(self, db, chart):
        post(db, date(2025, 1, 10), [(chart["cash"], 500, 0), (chart["sales"], 0, 500)])
        post(db, date(2025, 1, 12), [(chart["rent"], 120, 0), (chart["cash"], 0, 120)])

        after = balances(db, chart)
        assert after["cash"] == Decimal("380.00")
        assert after["sales"] == Decimal("500.00")
        assert after["rent"] == Decimal("120.00")

    def test_multi_line_entry(self, db, chart):
        entry = post(db, date(2025, 1, 15), [
            (chart["cash"], 700, 0),
            (chart["bank"], 300, 0),
            (chart["sales"], 0, 600),
            (chart["loan"], 0, 400),
        ])
        assert entry.total_amount == Decimal("1000.00")
        assert len(entry.lines) == 4

    def test_audit_record_shares_the_unit(self, db, chart):
        entry = post(db, date(2025, 1, 10), [(chart["cash"], 50, 0), (chart["sales"], 0, 50)])
        log = db.query(AuditLog).filter(AuditLog.action == "CREATE_JOURNAL_ENTRY").one()
        assert log.record_id == entry.id


class TestRejectedEntries:

    def test_unbalanced_entry_rejected_without_side_effects(self, db, chart):
        before = balances(db, chart)
        entries_before = db.query(JournalEntry).count()

        with pytest.raises(UnbalancedEntryError):
            post(db, date(2025, 1, 10), [(chart["cash"], 500, 0), (chart["sales"], 0, 499.99)])

        assert balances(db, chart) == before
        assert db.query(JournalEntry).count() == entries_before
        assert db.query(JournalEntryLine).count() == 0
        assert db.query(AuditLog).filter(AuditLog.action == "CREATE_JOURNAL_ENTRY").count() == 0

    def test_line_with_both_sides_rejected(self, db, chart):
        with pytest.raises(ValidationError):
            post(db, date(2025, 1, 10), [(chart["cash"], 100, 100), (chart["sales"], 100, 100)])

    def test_zero_entry_rejected(self, db, chart):
        with pytest.raises(ValidationError):
            post(db, date(2025, 1, 10), [(chart["cash"], 0, 0), (chart["sales"], 0, 0)])

    def test_unknown_account(self, db, chart):
        with pytest.raises(NotFoundError):
            crud_journal.post_entry(db, JournalEntryCreate(
                date=date(2025, 1, 10),
                lines=[
                    JournalEntryLineCreate(account_id=chart["cash"].id, debit=Decimal("10")),
                    JournalEntryLineCreate(account_id=9999, credit=Decimal("10")),
                ],
            ), "user-1")
        assert db.query(JournalEntry).count() == 0

    def test_inactive_account(self, db, chart, user_id):
        update_account(db, chart["bank"].id, AccountUpdate(status="inactive"), user_id)
        with pytest.raises(ValidationError):
            post(db, date(2025, 1, 10), [(chart["bank"], 10, 0), (chart["sales"], 0, 10)])

    def test_unbalanced_entry_does_not_disturb_later_posts(self, db, chart):
        with pytest.raises(UnbalancedEntryError):
            post(db, date(2025, 1, 10), [(chart["cash"], 10, 0), (chart["sales"], 0, 20)])
        post(db, date(2025, 1, 10), [(chart["cash"], 10, 0), (chart["sales"], 0, 10)])
        assert balances(db, chart)["cash"] == Decimal("10.00")

    def test_schema_rejects_negative_and_empty(self):
        with pytest.raises(SchemaValidationError):
            JournalEntryLineCreate(account_id=1, debit=Decimal("-5"))
        with pytest.raises(SchemaValidationError):
            JournalEntryCreate(date=date(2025, 1, 1), lines=[])


class TestQueries:

    def test_get_entry_with_ordered_lines(self, db, chart):
        entry = post(db, date(2025, 1, 10), [
            (chart["rent"], 40, 0),
            (chart["cash"], 0, 25),
            (chart["bank"], 0, 15),
        ])
        fetched = crud_journal.get_journal_entry(db, entry.id)
        assert [line.account_id for line in fetched.lines] == [chart["rent"].id, chart["cash"].id, chart["bank"].id]

    def test_missing_entry(self, db):
        with pytest.raises(NotFoundError):
            crud_journal.get_journal_entry(db, 42)

    def test_list_newest_first_with_filters(self, db, chart):
        first = post(db, date(2025, 1, 5), [(chart["cash"], 1, 0), (chart["sales"], 0, 1)])
        second = post(db, date(2025, 2, 5), [(chart["cash"], 2, 0), (chart["sales"], 0, 2)])
        third = post(db, date(2025, 3, 5), [(chart["cash"], 3, 0), (chart["sales"], 0, 3)])

        assert [e.id for e in crud_journal.get_journal_entries(db)] == [third.id, second.id, first.id]
        filtered = crud_journal.get_journal_entries(db, start_date=date(2025, 2, 1), end_date=date(2025, 2, 28))
        assert [e.id for e in filtered] == [second.id]
