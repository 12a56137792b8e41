"""
Balance Projection Tests
========================

Test the running-balance ledger statement:
- Opening balances count only lines strictly before the period
- closing = opening + signed movement of the period
- Lines replay in (date, entry, line number) order
"""

from datetime import date
from decimal import Decimal

import pytest

from crud.balances import movement_by_account, opening_balance, project_account
from errors import NotFoundError

from .conftest import make_account, post


class TestOpeningBalance:

    def test_new_account_opens_at_zero(self, db):
        cash = make_account(db, "1001", "Cash", "asset")
        assert opening_balance(db, cash.id, date(2025, 3, 1)) == Decimal("0.00")

    def test_single_line_month(self, db):
        cash = make_account(db, "1001", "Cash", "asset")
        sales = make_account(db, "4001", "Sales", "revenue")
        post(db, date(2025, 3, 5), [(cash, 100, 0), (sales, 0, 100)])

        statement = project_account(db, cash.id, date(2025, 3, 1), date(2025, 3, 31))

        assert statement.opening_balance == Decimal("0.00")
        assert len(statement.rows) == 1
        assert statement.rows[0].balance == Decimal("100.00")
        assert statement.closing_balance == Decimal("100.00")

    def test_line_on_period_start_is_not_opening(self, db, chart):
        post(db, date(2025, 3, 1), [(chart["cash"], 100, 0), (chart["sales"], 0, 100)])
        post(db, date(2025, 2, 28), [(chart["cash"], 40, 0), (chart["sales"], 0, 40)])

        assert opening_balance(db, chart["cash"].id, date(2025, 3, 1)) == Decimal("40.00")
        statement = project_account(db, chart["cash"].id, date(2025, 3, 1), date(2025, 3, 31))
        assert [row.debit for row in statement.rows] == [Decimal("100.00")]

    def test_unknown_account(self, db):
        with pytest.raises(NotFoundError):
            opening_balance(db, 404, date(2025, 1, 1))


class TestRunningBalance:

    def test_closing_is_opening_plus_movement(self, db, chart):
        post(db, date(2025, 1, 20), [(chart["cash"], 1000, 0), (chart["capital"], 0, 1000)])
        post(db, date(2025, 2, 3), [(chart["rent"], 250, 0), (chart["cash"], 0, 250)])
        post(db, date(2025, 2, 14), [(chart["cash"], 80, 0), (chart["sales"], 0, 80)])
        post(db, date(2025, 3, 1), [(chart["rent"], 5, 0), (chart["cash"], 0, 5)])

        statement = project_account(db, chart["cash"].id, date(2025, 2, 1), date(2025, 2, 28))

        assert statement.opening_balance == Decimal("1000.00")
        assert statement.total_debit == Decimal("80.00")
        assert statement.total_credit == Decimal("250.00")
        assert statement.closing_balance == (
            statement.opening_balance + statement.total_debit - statement.total_credit
        )
        assert [row.balance for row in statement.rows] == [Decimal("750.00"), Decimal("830.00")]

    def test_normal_credit_account_grows_with_credits(self, db, chart):
        post(db, date(2025, 1, 5), [(chart["cash"], 300, 0), (chart["loan"], 0, 300)])
        post(db, date(2025, 1, 25), [(chart["loan"], 100, 0), (chart["cash"], 0, 100)])

        statement = project_account(db, chart["loan"].id, date(2025, 1, 1), date(2025, 1, 31))

        assert [row.balance for row in statement.rows] == [Decimal("300.00"), Decimal("200.00")]
        assert statement.closing_balance == Decimal("200.00")

    def test_same_entry_lines_follow_line_number(self, db, chart):
        entry = post(db, date(2025, 1, 9), [
            (chart["sales"], 0, 70),
            (chart["cash"], 50, 0),
            (chart["cash"], 20, 0),
        ])

        statement = project_account(db, chart["cash"].id, date(2025, 1, 1), date(2025, 1, 31))

        assert [row.line_number for row in statement.rows] == [2, 3]
        assert [row.debit for row in statement.rows] == [Decimal("50.00"), Decimal("20.00")]
        assert [row.balance for row in statement.rows] == [Decimal("50.00"), Decimal("70.00")]
        assert all(row.entry_number == entry.entry_number for row in statement.rows)

    def test_earlier_date_replays_first(self, db, chart):
        later = post(db, date(2025, 1, 20), [(chart["cash"], 10, 0), (chart["sales"], 0, 10)])
        earlier = post(db, date(2025, 1, 2), [(chart["cash"], 30, 0), (chart["sales"], 0, 30)])

        statement = project_account(db, chart["cash"].id, date(2025, 1, 1), date(2025, 1, 31))

        assert [row.journal_entry_id for row in statement.rows] == [earlier.id, later.id]

    def test_same_date_entries_replay_in_posting_order(self, db, chart):
        first = post(db, date(2025, 1, 9), [(chart["cash"], 10, 0), (chart["sales"], 0, 10)])
        second = post(db, date(2025, 1, 9), [(chart["rent"], 4, 0), (chart["cash"], 0, 4)])

        statement = project_account(db, chart["cash"].id, date(2025, 1, 1), date(2025, 1, 31))

        assert [row.journal_entry_id for row in statement.rows] == [first.id, second.id]
        assert [row.balance for row in statement.rows] == [Decimal("10.00"), Decimal("6.00")]

    def test_statement_matches_cached_balance(self, db, chart):
        post(db, date(2025, 1, 3), [(chart["cash"], 500, 0), (chart["sales"], 0, 500)])
        post(db, date(2025, 1, 4), [(chart["rent"], 120, 0), (chart["cash"], 0, 120)])

        statement = project_account(db, chart["cash"].id, date(2000, 1, 1), date(2025, 12, 31))
        db.refresh(chart["cash"])
        assert statement.closing_balance == chart["cash"].balance


class TestMovement:

    def test_window_bounds_are_inclusive(self, db, chart):
        post(db, date(2025, 1, 1), [(chart["cash"], 1, 0), (chart["sales"], 0, 1)])
        post(db, date(2025, 1, 31), [(chart["cash"], 2, 0), (chart["sales"], 0, 2)])
        post(db, date(2025, 2, 1), [(chart["cash"], 4, 0), (chart["sales"], 0, 4)])

        movements = movement_by_account(db, start_date=date(2025, 1, 1), end_date=date(2025, 1, 31))

        assert movements[chart["cash"].id] == (Decimal("3.00"), Decimal("0.00"))
        assert movements[chart["sales"].id] == (Decimal("0.00"), Decimal("3.00"))
        assert chart["rent"].id not in movements
