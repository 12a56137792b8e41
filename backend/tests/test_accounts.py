"""
Account Registry Tests
======================

Creation, ordering, opening balances and cached balance maintenance.
"""

from datetime import date
from decimal import Decimal

import pytest

from crud import accounts as crud_accounts
from crud.financial_reports import get_balance_sheet
from errors import DuplicateAccountError, InvalidStateError, ValidationError
from models.audit_log import AuditLog
from models.journal_entry import JournalEntry
from schemas.accounts import AccountCreate, AccountUpdate

from .conftest import make_account, post


class TestCreateAccount:

    def test_create_defaults(self, db, user_id):
        account = make_account(db, "1000", "Cash", "asset")

        assert account.id is not None
        assert account.status == "active"
        assert account.currency == "BDT"
        assert account.balance == Decimal("0")
        assert account.created_by == user_id

    def test_duplicate_number_rejected(self, db):
        make_account(db, "1000", "Cash", "asset")
        with pytest.raises(DuplicateAccountError):
            make_account(db, "1000", "Petty Cash", "asset")

        assert len(crud_accounts.get_all_accounts(db)) == 1

    def test_type_aliases_are_normalised(self, db):
        account = make_account(db, "5000", "Supplies", "Expenses")
        assert account.account_type == "expense"

    def test_unknown_type_rejected_by_schema(self):
        with pytest.raises(ValueError):
            AccountCreate(account_number="9000", account_name="Odd", account_type="crypto")

    def test_audit_record_written(self, db):
        account = make_account(db, "1000", "Cash", "asset")
        log = db.query(AuditLog).filter(AuditLog.action == "CREATE_ACCOUNT").one()
        assert log.record_id == account.id


class TestListActive:

    def test_ordered_by_account_number(self, db):
        for number, name, account_type in [
            ("4000", "Sales", "revenue"),
            ("1000", "Cash", "asset"),
            ("2100", "Loan", "liability"),
            ("1010", "Bank", "asset"),
        ]:
            make_account(db, number, name, account_type)

        numbers = [a.account_number for a in crud_accounts.get_active_accounts(db)]
        assert numbers == ["1000", "1010", "2100", "4000"]

    def test_inactive_accounts_hidden(self, db, user_id):
        make_account(db, "1000", "Cash", "asset")
        old = make_account(db, "1020", "Old Till", "asset")
        crud_accounts.update_account(db, old.id, AccountUpdate(status="inactive"), user_id)

        numbers = [a.account_number for a in crud_accounts.get_active_accounts(db)]
        assert numbers == ["1000"]


class TestOpeningBalance:

    def test_asset_opening_posts_against_opening_equity(self, db):
        cash = make_account(db, "1000", "Cash", "asset",
                            opening_balance=Decimal("1000.00"), opening_date=date(2025, 1, 1))

        equity = crud_accounts.get_account_by_number(db, crud_accounts.OPENING_BALANCE_EQUITY_NUMBER)
        assert equity is not None
        assert cash.balance == Decimal("1000.00")
        assert equity.balance == Decimal("1000.00")

        entry = db.query(JournalEntry).one()
        assert entry.date == date(2025, 1, 1)
        assert entry.total_amount == Decimal("1000.00")

    def test_liability_opening_is_a_credit(self, db):
        loan = make_account(db, "2100", "Loan", "liability",
                            opening_balance=Decimal("500"), opening_date=date(2025, 1, 1))
        line = loan.lines[0]
        assert line.credit == Decimal("500.00")
        assert loan.balance == Decimal("500.00")

    def test_negative_asset_opening(self, db):
        overdraft = make_account(db, "1010", "Bank", "asset",
                                 opening_balance=Decimal("-200"), opening_date=date(2025, 1, 1))
        assert overdraft.balance == Decimal("-200.00")

    def test_balance_sheet_balances_after_openings(self, db):
        make_account(db, "1000", "Cash", "asset", opening_balance=Decimal("1500"), opening_date=date(2025, 1, 1))
        make_account(db, "2100", "Loan", "liability", opening_balance=Decimal("400"), opening_date=date(2025, 1, 1))

        sheet = get_balance_sheet(db, date(2025, 1, 31))
        assert sheet.balanced is True
        assert sheet.total_assets == Decimal("1500.00")

    def test_opening_equity_cannot_open_itself(self, db):
        with pytest.raises(ValidationError):
            make_account(db, "3900", "Opening Balance Equity", "equity", opening_balance=Decimal("10"))
        assert crud_accounts.get_account_by_number(db, "3900") is None


class TestUpdateAccount:

    def test_rename(self, db, user_id):
        account = make_account(db, "1000", "Cash", "asset")
        updated = crud_accounts.update_account(db, account.id, AccountUpdate(account_name="Cash in Hand"), user_id)
        assert updated.account_name == "Cash in Hand"
        assert updated.updated_by == user_id

    def test_type_frozen_once_posted(self, db, chart, user_id):
        post(db, date(2025, 1, 10), [(chart["cash"], 100, 0), (chart["sales"], 0, 100)])
        with pytest.raises(InvalidStateError):
            crud_accounts.update_account(db, chart["sales"].id, AccountUpdate(account_type="income"), user_id)

    def test_type_change_without_postings(self, db, user_id):
        account = make_account(db, "4100", "Services", "revenue")
        updated = crud_accounts.update_account(db, account.id, AccountUpdate(account_type="income"), user_id)
        assert updated.account_type == "income"

    def test_cannot_deactivate_with_balance(self, db, chart, user_id):
        post(db, date(2025, 1, 10), [(chart["cash"], 100, 0), (chart["sales"], 0, 100)])
        with pytest.raises(InvalidStateError):
            crud_accounts.update_account(db, chart["cash"].id, AccountUpdate(status="inactive"), user_id)
        db.refresh(chart["cash"])
        assert chart["cash"].status == "active"


class TestDefaultsAndTotals:

    def test_initialize_defaults_is_idempotent(self, db, user_id):
        first = crud_accounts.initialize_default_accounts(db, user_id)
        second = crud_accounts.initialize_default_accounts(db, user_id)

        assert len(first) == len(crud_accounts.DEFAULT_ACCOUNTS)
        assert [a.id for a in first] == [a.id for a in second]
        assert first[0].account_number == "1000"

    def test_initialize_keeps_existing_account(self, db, user_id):
        existing = make_account(db, "1000", "Till", "asset")
        crud_accounts.initialize_default_accounts(db, user_id)
        assert crud_accounts.get_account_by_number(db, "1000").account_name == "Till"
        assert crud_accounts.get_account(db, existing.id).account_name == "Till"

    def test_totals_by_type(self, db, chart):
        post(db, date(2025, 1, 10), [(chart["cash"], 300, 0), (chart["sales"], 0, 300)])
        post(db, date(2025, 1, 11), [(chart["bank"], 200, 0), (chart["loan"], 0, 200)])

        totals = {t.account_type: t.total for t in crud_accounts.account_totals_by_type(db)}
        assert totals["asset"] == Decimal("500.00")
        assert totals["liability"] == Decimal("200.00")
        assert totals["revenue"] == Decimal("300.00")


class TestBalanceDrift:

    def test_no_drift_after_posting(self, db, chart):
        post(db, date(2025, 1, 10), [(chart["rent"], 80, 0), (chart["cash"], 0, 80)])
        assert crud_accounts.find_balance_drift(db) == []

    def test_drift_reported_and_repaired(self, db, chart):
        post(db, date(2025, 1, 10), [(chart["cash"], 100, 0), (chart["sales"], 0, 100)])
        chart["cash"].balance = Decimal("999.00")
        db.commit()

        drift = crud_accounts.find_balance_drift(db)
        assert len(drift) == 1
        assert drift[0].account_number == "1000"
        assert drift[0].computed_balance == Decimal("100.00")
        assert drift[0].difference == Decimal("899.00")

        assert crud_accounts.recompute_account_balances(db) == 1
        assert crud_accounts.find_balance_drift(db) == []
        db.refresh(chart["cash"])
        assert chart["cash"].balance == Decimal("100.00")
