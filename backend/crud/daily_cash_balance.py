import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud.audit_log import create_audit_log
from errors import InvalidStateError
from models.cash_transaction import CashTransaction, CashTransactionStatus, CashTransactionType
from models.daily_cash_balance import DailyCashBalance
from schemas.audit_log import AuditLogCreate
from schemas.cash_transactions import CashStatement, CashStatementRow
from schemas import daily_cash_balance as schemas
from utils.money import money, ZERO
from utils.periods import APP_TIMEZONE, today_local, days_back

logger = logging.getLogger(__name__)


def _lock_row(db: Session, balance_date: date) -> Optional[DailyCashBalance]:
    return db.query(DailyCashBalance).filter(
        DailyCashBalance.date == balance_date
    ).with_for_update().first()


def latest_closing_before(db: Session, balance_date: date) -> Tuple[Decimal, Optional[date]]:
    """Closing balance of the most recent row dated before balance_date, 0 if there is none."""
    prev = db.query(DailyCashBalance).filter(
        DailyCashBalance.date < balance_date
    ).order_by(DailyCashBalance.date.desc()).first()
    if prev is None:
        return ZERO, None
    return money(prev.closing_balance), prev.date


def approved_totals(db: Session, start_date: Optional[date] = None, end_date: Optional[date] = None,
                    before: Optional[date] = None) -> Tuple[Decimal, Decimal, int]:
    """Approved receipts, payments and transaction count within [start_date, end_date], or before a date."""
    query = db.query(
        func.coalesce(func.sum(case(
            (CashTransaction.transaction_type == CashTransactionType.RECEIPT, CashTransaction.amount),
            else_=0,
        )), 0),
        func.coalesce(func.sum(case(
            (CashTransaction.transaction_type == CashTransactionType.PAYMENT, CashTransaction.amount),
            else_=0,
        )), 0),
        func.count(CashTransaction.id),
    ).filter(CashTransaction.status == CashTransactionStatus.APPROVED)
    if start_date:
        query = query.filter(CashTransaction.date >= start_date)
    if end_date:
        query = query.filter(CashTransaction.date <= end_date)
    if before:
        query = query.filter(CashTransaction.date < before)
    row = query.one()
    return money(row[0]), money(row[1]), int(row[2] or 0)


def approved_totals_for_date(db: Session, balance_date: date) -> Tuple[Decimal, Decimal]:
    received, paid, _ = approved_totals(db, balance_date, balance_date)
    return received, paid


def apply_approved_transaction(db: Session, balance_date: date, transaction_type: CashTransactionType,
                               amount, user_id: Optional[str] = None) -> DailyCashBalance:
    """
    Fold one approved transaction into the row for its date.

    A missing row is created with the previous closing balance as its opening and
    the transaction already applied. Rows after balance_date are not touched.
    """
    amount = money(amount)
    row = _lock_row(db, balance_date)
    if row is None:
        opening, _ = latest_closing_before(db, balance_date)
        row = DailyCashBalance(
            date=balance_date,
            opening_balance=opening,
            cash_received=ZERO,
            cash_paid=ZERO,
            closing_balance=opening,
            created_by=user_id,
        )
        db.add(row)

    if transaction_type == CashTransactionType.RECEIPT:
        row.cash_received = money(row.cash_received) + amount
        row.closing_balance = money(row.closing_balance) + amount
    else:
        row.cash_paid = money(row.cash_paid) + amount
        row.closing_balance = money(row.closing_balance) - amount
    row.updated_by = user_id
    db.flush()
    return row


def recompute_date(db: Session, balance_date: date, opening_override=None,
                   user_id: Optional[str] = None) -> DailyCashBalance:
    """
    Rebuild the row for balance_date from every approved transaction on that date.

    The opening balance is the override when given, otherwise the closing of the
    latest earlier row, otherwise the row's own opening, otherwise 0.
    """
    row = _lock_row(db, balance_date)
    prev_closing, prev_date = latest_closing_before(db, balance_date)

    if opening_override is not None:
        opening = money(opening_override)
    elif prev_date is not None:
        opening = prev_closing
    elif row is not None:
        opening = money(row.opening_balance)
    else:
        opening = ZERO

    received, paid = approved_totals_for_date(db, balance_date)

    if row is None:
        row = DailyCashBalance(date=balance_date, created_by=user_id)
        db.add(row)
    row.opening_balance = opening
    row.cash_received = received
    row.cash_paid = paid
    row.closing_balance = opening + received - paid
    row.updated_by = user_id
    db.flush()
    logger.debug(f"Recomputed daily cash for {balance_date}: opening {opening}, in {received}, out {paid}")
    return row


def propagate_daily_cash_balances(db: Session, start_date: date) -> int:
    """
    Recompute every existing row dated on or after start_date, in date order.

    Each opening balance is chained from the previous row's closing. Dates
    without a row are skipped; the chain carries straight over them. Nothing is
    committed.

    Returns:
        the number of rows rewritten
    """
    rows = db.query(DailyCashBalance).filter(
        DailyCashBalance.date >= start_date
    ).order_by(DailyCashBalance.date.asc()).with_for_update().all()
    if not rows:
        return 0

    last_closing, prev_date = latest_closing_before(db, start_date)
    for row in rows:
        if prev_date is not None:
            row.opening_balance = last_closing
        received, paid = approved_totals_for_date(db, row.date)
        row.cash_received = received
        row.cash_paid = paid
        row.closing_balance = money(row.opening_balance) + received - paid
        last_closing = money(row.closing_balance)
        prev_date = row.date

    db.flush()
    logger.info(f"Propagated daily cash balances over {len(rows)} row(s) from {start_date}")
    return len(rows)


def recalculate_daily_cash(db: Session, recalc: schemas.DailyCashRecalculate, user_id: str) -> DailyCashBalance:
    """Recompute one date from approved transactions, then every later row."""
    try:
        row = recompute_date(db, recalc.date, recalc.opening_balance, user_id)
        propagated = propagate_daily_cash_balances(db, recalc.date + timedelta(days=1))
        create_audit_log(db, AuditLogCreate(
            actor_id=user_id,
            action="RECALCULATE_DAILY_CASH",
            table_name="daily_cash_balance",
            record_id=row.id,
            details=f"Recalculated daily cash for {recalc.date} ({propagated} later row(s) propagated)",
            new_values={
                "date": recalc.date.isoformat(),
                "opening_balance": str(row.opening_balance),
                "cash_received": str(row.cash_received),
                "cash_paid": str(row.cash_paid),
                "closing_balance": str(row.closing_balance),
            },
        ))
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise InvalidStateError(f"Daily cash for {recalc.date} was written concurrently; try again") from e
    except Exception as e:
        logger.error(f"Error recalculating daily cash for {recalc.date}: {e}", exc_info=True)
        db.rollback()
        raise
    db.refresh(row)
    logger.info(f"Daily cash for {recalc.date} recalculated by user {user_id}: closing {row.closing_balance}")
    return row


def get_daily_balance(db: Session, balance_date: date) -> Optional[DailyCashBalance]:
    return db.query(DailyCashBalance).filter(DailyCashBalance.date == balance_date).first()


def get_daily_balances(db: Session, balance_date: Optional[date] = None,
                       start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[DailyCashBalance]:
    query = db.query(DailyCashBalance)
    if balance_date:
        query = query.filter(DailyCashBalance.date == balance_date)
    else:
        if start_date:
            query = query.filter(DailyCashBalance.date >= start_date)
        if end_date:
            query = query.filter(DailyCashBalance.date <= end_date)
    return query.order_by(DailyCashBalance.date.desc()).all()


def get_daily_summary(db: Session, balance_date: Optional[date] = None,
                      start_date: Optional[date] = None, end_date: Optional[date] = None,
                      limit: int = 30) -> schemas.DailySummary:
    """
    Per-day cash in/out for a window, newest first.

    When no balance row falls in the window the figures are computed from the
    approved transactions directly (the last 7 days when no window is given).
    """
    if balance_date:
        start_date = end_date = balance_date

    rows = []
    balances = get_daily_balances(db, start_date=start_date, end_date=end_date)[:limit]
    for balance in balances:
        received = money(balance.cash_received)
        paid = money(balance.cash_paid)
        rows.append(schemas.DailySummaryRow(
            date=balance.date,
            opening_balance=money(balance.opening_balance),
            total_cash_in=received,
            total_cash_out=paid,
            net_cash_flow=money(balance.net_cash_flow),
            closing_balance=money(balance.closing_balance),
        ))

    if not rows:
        if not start_date or not end_date:
            end_date = today_local()
            start_date = days_back(end_date, 6)
        computed = db.query(
            CashTransaction.date,
            func.coalesce(func.sum(case(
                (CashTransaction.transaction_type == CashTransactionType.RECEIPT, CashTransaction.amount),
                else_=0,
            )), 0),
            func.coalesce(func.sum(case(
                (CashTransaction.transaction_type == CashTransactionType.PAYMENT, CashTransaction.amount),
                else_=0,
            )), 0),
        ).filter(
            CashTransaction.status == CashTransactionStatus.APPROVED,
            CashTransaction.date >= start_date,
            CashTransaction.date <= end_date,
        ).group_by(CashTransaction.date).order_by(CashTransaction.date.desc()).limit(limit).all()

        for day, cash_in, cash_out in computed:
            cash_in = money(cash_in)
            cash_out = money(cash_out)
            rows.append(schemas.DailySummaryRow(
                date=day,
                opening_balance=ZERO,
                total_cash_in=cash_in,
                total_cash_out=cash_out,
                net_cash_flow=cash_in - cash_out,
                closing_balance=ZERO,
            ))

    total_in = sum((row.total_cash_in for row in rows), ZERO)
    total_out = sum((row.total_cash_out for row in rows), ZERO)
    return schemas.DailySummary(
        rows=rows,
        period_totals=schemas.DailySummaryTotals(
            total_cash_in=total_in,
            total_cash_out=total_out,
            net_cash_flow=total_in - total_out,
        ),
    )


def _flow(db: Session, start_date: date, end_date: date) -> schemas.CashFlow:
    cash_in, cash_out, _ = approved_totals(db, start_date, end_date)
    return schemas.CashFlow(cash_in=cash_in, cash_out=cash_out, net=cash_in - cash_out)


def get_cash_position(db: Session, today: Optional[date] = None) -> schemas.CashPosition:
    """Dashboard snapshot: today's row, change against yesterday, 7 and 30 day flows."""
    today = today or today_local()
    yesterday = today - timedelta(days=1)

    row = get_daily_balance(db, today)
    last_balance_date = today if row else None
    if row is None:
        # No row yet today: carry the last known closing balance
        opening, last_balance_date = latest_closing_before(db, today)
        today_row = schemas.DailyCashBalance(
            date=today,
            opening_balance=opening,
            cash_received=ZERO,
            cash_paid=ZERO,
            closing_balance=opening,
        )
    else:
        today_row = schemas.DailyCashBalance.model_validate(row)

    yesterday_row = get_daily_balance(db, yesterday)
    yesterday_closing = money(yesterday_row.closing_balance) if yesterday_row else ZERO

    receipts, payments, count = approved_totals(db, today, today)

    return schemas.CashPosition(
        today=today_row,
        last_balance_date=last_balance_date,
        daily_change=money(today_row.closing_balance) - yesterday_closing,
        weekly_flow=_flow(db, days_back(today, 6), today),
        monthly_flow=_flow(db, days_back(today, 29), today),
        today_transactions=schemas.TodayActivity(count=count, receipts=receipts, payments=payments),
        timezone=APP_TIMEZONE,
    )


def get_cash_statement(db: Session, start_date: date, end_date: date) -> CashStatement:
    """
    Bank-style statement over approved transactions.

    Receipts are credits and payments are debits; the running balance starts
    from the net of everything approved before start_date.
    """
    receipts_before, payments_before, _ = approved_totals(db, before=start_date)
    opening = receipts_before - payments_before

    transactions = db.query(CashTransaction).filter(
        CashTransaction.status == CashTransactionStatus.APPROVED,
        CashTransaction.date >= start_date,
        CashTransaction.date <= end_date,
    ).order_by(
        CashTransaction.date.asc(),
        CashTransaction.time.asc(),
        CashTransaction.id.asc(),
    ).all()

    balance = opening
    total_debit = ZERO
    total_credit = ZERO
    rows = []
    for sl, tx in enumerate(transactions, start=1):
        amount = money(tx.amount)
        is_receipt = tx.transaction_type == CashTransactionType.RECEIPT
        credit = amount if is_receipt else ZERO
        debit = ZERO if is_receipt else amount
        balance = balance + credit - debit
        total_debit += debit
        total_credit += credit
        rows.append(CashStatementRow(
            sl=sl,
            date=tx.date,
            time=tx.time,
            transaction_code=tx.transaction_code,
            particulars=tx.description or "",
            reference_number=tx.reference_number,
            category=tx.category or "",
            payment_method=tx.payment_method or "",
            debit=debit,
            credit=credit,
            balance=balance,
            status=tx.status.value,
            created_by=tx.created_by,
            verified_by=tx.verified_by,
        ))

    return CashStatement(
        start_date=start_date,
        end_date=end_date,
        opening_balance=opening,
        rows=rows,
        total_debit=total_debit,
        total_credit=total_credit,
        closing_balance=balance,
    )


def get_daily_report(db: Session, report_date: date) -> schemas.DailyReport:
    """
    One day's cash sheet: the balance row, its approved transactions and
    payments grouped by category. A date without a row reports zeros.
    """
    row = get_daily_balance(db, report_date)
    transactions = db.query(CashTransaction).filter(
        CashTransaction.status == CashTransactionStatus.APPROVED,
        CashTransaction.date == report_date,
    ).order_by(
        CashTransaction.created_at.asc(),
        CashTransaction.id.asc(),
    ).all()

    breakdown = {}
    for tx in transactions:
        if tx.transaction_type != CashTransactionType.PAYMENT:
            continue
        count, total = breakdown.get(tx.category or "", (0, ZERO))
        breakdown[tx.category or ""] = (count + 1, total + money(tx.amount))

    return schemas.DailyReport(
        date=report_date,
        opening_balance=money(row.opening_balance) if row else ZERO,
        cash_received=money(row.cash_received) if row else ZERO,
        cash_paid=money(row.cash_paid) if row else ZERO,
        closing_balance=money(row.closing_balance) if row else ZERO,
        transactions=[
            schemas.DailyReportTransaction(
                transaction_code=tx.transaction_code,
                time=tx.time,
                transaction_type=tx.transaction_type.value,
                amount=money(tx.amount),
                description=tx.description or "",
                category=tx.category or "",
                created_by=tx.created_by,
                verified_by=tx.verified_by,
            )
            for tx in transactions
        ],
        expense_breakdown=[
            schemas.DailyReportBreakdown(category=category, count=count, total=total)
            for category, (count, total) in sorted(breakdown.items(), key=lambda item: (-item[1][1], item[0]))
        ],
    )
