"""
Daily Cash Ledger Tests
=======================

Test the per-day cash balance rows:
- Folding and recomputing a single date
- Recalculation with an opening override and propagation to later dates
- Dashboard position, bank-style statement and daily summary views
"""

from datetime import date, time
from decimal import Decimal

from crud import cash_transactions as crud_cash
from crud import daily_cash_balance as crud_daily
from models.audit_log import AuditLog
from models.cash_transaction import CashTransactionType
from models.daily_cash_balance import DailyCashBalance
from schemas.cash_transactions import CashTransactionCreate
from schemas.daily_cash_balance import DailyCashRecalculate
from tasks.eod_tasks import run_eod_tasks


def approved(db, user_id, tx_date, amount, tx_type="receipt", at=time(9, 0)):
    tx = crud_cash.create_cash_transaction(db, CashTransactionCreate(
        date=tx_date,
        time=at,
        amount=Decimal(str(amount)),
        transaction_type=CashTransactionType(tx_type),
        description=f"{tx_type} {amount}",
    ), user_id)
    crud_cash.approve_cash_transaction(db, tx.id, user_id, strategy=crud_cash.STRATEGY_RECOMPUTE)
    return tx


def seed_row(db, row_date, opening, received=0, paid=0):
    row = DailyCashBalance(
        date=row_date,
        opening_balance=Decimal(str(opening)),
        cash_received=Decimal(str(received)),
        cash_paid=Decimal(str(paid)),
        closing_balance=Decimal(str(opening)) + Decimal(str(received)) - Decimal(str(paid)),
    )
    db.add(row)
    db.commit()
    return row


class TestFold:

    def test_new_row_opens_from_previous_closing(self, db, user_id):
        seed_row(db, date(2025, 2, 1), 500)

        row = crud_daily.apply_approved_transaction(db, date(2025, 2, 4), CashTransactionType.PAYMENT, Decimal("80"))
        db.commit()

        assert row.opening_balance == Decimal("500.00")
        assert row.cash_paid == Decimal("80.00")
        assert row.closing_balance == Decimal("420.00")

    def test_existing_row_accumulates(self, db, user_id):
        seed_row(db, date(2025, 2, 1), 100, received=10)

        crud_daily.apply_approved_transaction(db, date(2025, 2, 1), CashTransactionType.RECEIPT, Decimal("15"))
        db.commit()

        row = crud_daily.get_daily_balance(db, date(2025, 2, 1))
        assert row.cash_received == Decimal("25.00")
        assert row.closing_balance == Decimal("125.00")


class TestRecalculate:

    def test_opening_override_propagates(self, db, user_id):
        approved(db, user_id, date(2025, 2, 1), 100)
        approved(db, user_id, date(2025, 2, 2), 50, "payment")
        approved(db, user_id, date(2025, 2, 4), 20)

        row = crud_daily.recalculate_daily_cash(
            db, DailyCashRecalculate(date=date(2025, 2, 1), opening_balance=Decimal("1000.00")), user_id,
        )

        assert row.opening_balance == Decimal("1000.00")
        assert row.closing_balance == Decimal("1100.00")
        second = crud_daily.get_daily_balance(db, date(2025, 2, 2))
        fourth = crud_daily.get_daily_balance(db, date(2025, 2, 4))
        db.refresh(second)
        db.refresh(fourth)
        assert second.opening_balance == Decimal("1100.00")
        assert second.closing_balance == Decimal("1050.00")
        assert fourth.opening_balance == Decimal("1050.00")
        assert fourth.closing_balance == Decimal("1070.00")
        assert db.query(AuditLog).filter(AuditLog.action == "RECALCULATE_DAILY_CASH").count() == 1

    def test_recompute_heals_drifted_totals(self, db, user_id):
        approved(db, user_id, date(2025, 2, 1), 100)
        row = crud_daily.get_daily_balance(db, date(2025, 2, 1))
        row.cash_received = Decimal("999.00")
        row.closing_balance = Decimal("999.00")
        db.commit()

        row = crud_daily.recalculate_daily_cash(db, DailyCashRecalculate(date=date(2025, 2, 1)), user_id)

        assert row.cash_received == Decimal("100.00")
        assert row.closing_balance == Decimal("100.00")

    def test_first_row_keeps_its_own_opening(self, db, user_id):
        seed_row(db, date(2025, 2, 1), 300)

        row = crud_daily.recalculate_daily_cash(db, DailyCashRecalculate(date=date(2025, 2, 1)), user_id)

        assert row.opening_balance == Decimal("300.00")
        assert row.closing_balance == Decimal("300.00")

    def test_date_without_row_is_created(self, db, user_id):
        row = crud_daily.recalculate_daily_cash(db, DailyCashRecalculate(date=date(2025, 2, 9)), user_id)
        assert row.id is not None
        assert row.closing_balance == Decimal("0.00")


class TestPropagation:

    def test_chain_skips_missing_dates(self, db):
        seed_row(db, date(2025, 2, 1), 100, received=50)
        seed_row(db, date(2025, 2, 5), 0)
        seed_row(db, date(2025, 2, 9), 0)

        updated = crud_daily.propagate_daily_cash_balances(db, date(2025, 2, 2))
        db.commit()

        assert updated == 2
        assert crud_daily.get_daily_balance(db, date(2025, 2, 5)).opening_balance == Decimal("150.00")
        assert crud_daily.get_daily_balance(db, date(2025, 2, 9)).opening_balance == Decimal("150.00")

    def test_nothing_to_propagate(self, db):
        assert crud_daily.propagate_daily_cash_balances(db, date(2025, 2, 2)) == 0

    def test_eod_task_refuses_future_start(self):
        assert run_eod_tasks(date(2999, 1, 1)) == 0


class TestViews:

    def test_position_with_row_today(self, db, user_id):
        approved(db, user_id, date(2025, 2, 9), 400)
        approved(db, user_id, date(2025, 2, 10), 150, "payment")

        position = crud_daily.get_cash_position(db, today=date(2025, 2, 10))

        assert position.today.opening_balance == Decimal("400.00")
        assert position.today.closing_balance == Decimal("250.00")
        assert position.last_balance_date == date(2025, 2, 10)
        assert position.daily_change == Decimal("-150.00")
        assert position.weekly_flow.cash_in == Decimal("400.00")
        assert position.weekly_flow.cash_out == Decimal("150.00")
        assert position.weekly_flow.net == Decimal("250.00")
        assert position.today_transactions.count == 1
        assert position.today_transactions.payments == Decimal("150.00")

    def test_position_without_row_carries_last_closing(self, db, user_id):
        approved(db, user_id, date(2025, 2, 1), 400)

        position = crud_daily.get_cash_position(db, today=date(2025, 2, 20))

        assert position.today.opening_balance == Decimal("400.00")
        assert position.today.closing_balance == Decimal("400.00")
        assert position.last_balance_date == date(2025, 2, 1)
        assert position.weekly_flow.cash_in == Decimal("0.00")
        assert position.monthly_flow.cash_in == Decimal("400.00")
        assert position.today_transactions.count == 0

    def test_statement_running_balance(self, db, user_id):
        approved(db, user_id, date(2025, 1, 31), 1000)
        approved(db, user_id, date(2025, 2, 3), 200, "payment", at=time(15, 0))
        approved(db, user_id, date(2025, 2, 3), 50, at=time(9, 30))
        approved(db, user_id, date(2025, 3, 1), 7)

        statement = crud_daily.get_cash_statement(db, date(2025, 2, 1), date(2025, 2, 28))

        assert statement.opening_balance == Decimal("1000.00")
        assert [row.sl for row in statement.rows] == [1, 2]
        assert [row.credit for row in statement.rows] == [Decimal("50.00"), Decimal("0.00")]
        assert [row.debit for row in statement.rows] == [Decimal("0.00"), Decimal("200.00")]
        assert [row.balance for row in statement.rows] == [Decimal("1050.00"), Decimal("850.00")]
        assert statement.total_credit == Decimal("50.00")
        assert statement.total_debit == Decimal("200.00")
        assert statement.closing_balance == Decimal("850.00")

    def test_statement_ignores_pending(self, db, user_id):
        crud_cash.create_cash_transaction(db, CashTransactionCreate(
            date=date(2025, 2, 3), amount=Decimal("10"), transaction_type=CashTransactionType.RECEIPT,
        ), user_id)

        statement = crud_daily.get_cash_statement(db, date(2025, 2, 1), date(2025, 2, 28))

        assert statement.rows == []
        assert statement.closing_balance == Decimal("0.00")

    def test_summary_from_rows(self, db, user_id):
        approved(db, user_id, date(2025, 2, 1), 100)
        approved(db, user_id, date(2025, 2, 2), 40, "payment")

        summary = crud_daily.get_daily_summary(db, start_date=date(2025, 2, 1), end_date=date(2025, 2, 28))

        assert [row.date for row in summary.rows] == [date(2025, 2, 2), date(2025, 2, 1)]
        assert summary.rows[0].closing_balance == Decimal("60.00")
        assert summary.period_totals.net_cash_flow == Decimal("60.00")

    def test_summary_falls_back_to_transactions(self, db, user_id):
        approved(db, user_id, date(2025, 2, 1), 100)
        approved(db, user_id, date(2025, 2, 2), 40, "payment")
        db.query(DailyCashBalance).delete()
        db.commit()

        summary = crud_daily.get_daily_summary(db, start_date=date(2025, 2, 1), end_date=date(2025, 2, 28))

        assert [row.date for row in summary.rows] == [date(2025, 2, 2), date(2025, 2, 1)]
        assert summary.rows[1].total_cash_in == Decimal("100.00")
        assert summary.period_totals.total_cash_out == Decimal("40.00")
