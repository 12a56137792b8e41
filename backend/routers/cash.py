import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from crud import cash_transactions as crud_cash
from crud import daily_cash_balance as crud_daily_cash
from crud import expense_categories as crud_categories
from crud import money_receipts as crud_receipts
from database import get_db
from errors import NotFoundError, ValidationError
from models.cash_transaction import CashTransactionType
from schemas.cash_transactions import (
    CashTransaction, CashTransactionCreate, CashTransactionList, CashTransactionReject,
    CashApprovalResult, CashStatement,
)
from schemas.daily_cash_balance import DailyCashBalance, DailyCashRecalculate, DailySummary, CashPosition, DailyReport
from schemas.expense_categories import ExpenseAnalysis, ExpenseCategory, ExpenseCategoryCreate, ExpenseCategoryUpdate
from schemas.money_receipts import MoneyReceipt
from utils.auth_utils import require_permission, get_user_identifier
from utils.excel_export import cash_statement_workbook, daily_report_workbook
from utils.periods import now_local
from utils.receipt_utils import generate_money_receipt

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/cash",
    tags=["Cash Management"],
)


# ---------- Cash transactions ----------

@router.post("/transactions", response_model=CashTransaction, status_code=status.HTTP_201_CREATED)
def create_cash_transaction(
    transaction: CashTransactionCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "cash_transactions")),
):
    return crud_cash.create_cash_transaction(db, transaction, get_user_identifier(user))


@router.get("/transactions", response_model=CashTransactionList)
def get_cash_transactions(
    status_filter: Optional[str] = Query(None, alias="status"),
    month: Optional[str] = None,
    date: Optional[date] = None,
    transaction_type: Optional[CashTransactionType] = Query(None, alias="type"),
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "cash_transactions")),
):
    """Filter by status, month (YYYY-MM), date, type and category."""
    return crud_cash.list_cash_transactions(
        db,
        status=status_filter,
        month=month,
        transaction_date=date,
        transaction_type=transaction_type,
        category=category,
    )


@router.get("/pending-transactions", response_model=List[CashTransaction])
def get_pending_transactions(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("approve", "cash_transactions")),
):
    return crud_cash.list_pending(db)


@router.get("/transactions/{transaction_id}", response_model=CashTransaction)
def get_cash_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "cash_transactions")),
):
    return crud_cash.get_cash_transaction(db, transaction_id)


@router.post("/approve-transaction/{transaction_id}", response_model=CashApprovalResult)
def approve_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("approve", "cash_transactions")),
):
    return crud_cash.approve_cash_transaction(db, transaction_id, get_user_identifier(user))


@router.post("/reject-transaction/{transaction_id}", response_model=CashTransaction)
def reject_transaction(
    transaction_id: int,
    rejection: Optional[CashTransactionReject] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("reject", "cash_transactions")),
):
    reason = rejection.reason if rejection else None
    return crud_cash.reject_cash_transaction(db, transaction_id, get_user_identifier(user), reason)


# ---------- Daily cash ----------

@router.get("/daily-cash", response_model=List[DailyCashBalance])
def get_daily_cash(
    date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "daily_cash")),
):
    return crud_daily_cash.get_daily_balances(db, balance_date=date, start_date=start_date, end_date=end_date)


@router.post("/daily-cash", response_model=DailyCashBalance)
def recalculate_daily_cash(
    recalc: DailyCashRecalculate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("recalculate", "daily_cash")),
):
    """Recalculate a date from its approved transactions; later rows are re-chained."""
    return crud_daily_cash.recalculate_daily_cash(db, recalc, get_user_identifier(user))


@router.get("/daily-summary", response_model=DailySummary)
def get_daily_summary(
    date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "daily_cash")),
):
    return crud_daily_cash.get_daily_summary(db, balance_date=date, start_date=start_date, end_date=end_date)


@router.get("/cash-position", response_model=CashPosition)
def get_cash_position(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "daily_cash")),
):
    return crud_daily_cash.get_cash_position(db)


def _check_range(start_date: date, end_date: date):
    if start_date > end_date:
        raise ValidationError("start_date must not be after end_date")


@router.get("/statement", response_model=CashStatement)
def get_cash_statement(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "daily_cash")),
):
    _check_range(start_date, end_date)
    return crud_daily_cash.get_cash_statement(db, start_date, end_date)


@router.get("/statement/export")
def export_cash_statement(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "daily_cash")),
):
    _check_range(start_date, end_date)
    statement = crud_daily_cash.get_cash_statement(db, start_date, end_date)
    stream = cash_statement_workbook(statement)
    filename = f"cash_statement_{start_date}_{end_date}.xlsx"
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ---------- Expense categories and reports ----------

@router.get("/expense-categories", response_model=List[ExpenseCategory])
def get_expense_categories(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "expense_categories")),
):
    return crud_categories.get_expense_categories(db, include_inactive=include_inactive)


@router.post("/expense-categories", response_model=ExpenseCategory, status_code=status.HTTP_201_CREATED)
def create_expense_category(
    category: ExpenseCategoryCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("manage", "expense_categories")),
):
    return crud_categories.create_expense_category(db, category, get_user_identifier(user))


@router.post("/expense-categories/initialize-defaults", response_model=List[ExpenseCategory])
def initialize_default_expense_categories(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("manage", "expense_categories")),
):
    return crud_categories.initialize_default_expense_categories(db, get_user_identifier(user))


@router.patch("/expense-categories/{category_id}", response_model=ExpenseCategory)
def update_expense_category(
    category_id: int,
    category_update: ExpenseCategoryUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("manage", "expense_categories")),
):
    return crud_categories.update_expense_category(db, category_id, category_update, get_user_identifier(user))


@router.get("/expense-analysis", response_model=ExpenseAnalysis)
def get_expense_analysis(
    period: str = "month",
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "reports")),
):
    """Budget against approved payments per category: day, week, month (30 days) or year."""
    return crud_categories.get_expense_analysis(db, period)


@router.get("/daily-report", response_model=DailyReport)
def get_daily_report(
    date: date,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "reports")),
):
    return crud_daily_cash.get_daily_report(db, date)


@router.get("/daily-report/export")
def export_daily_report(
    date: date,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "reports")),
):
    report = crud_daily_cash.get_daily_report(db, date)
    stream = daily_report_workbook(report, get_user_identifier(user), now_local())
    filename = f"daily_cash_report_{date}.xlsx"
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ---------- Money receipts ----------

@router.get("/money-receipts", response_model=List[MoneyReceipt])
def get_money_receipts(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "cash_transactions")),
):
    return crud_receipts.get_money_receipts(db, start_date=start_date, end_date=end_date, skip=skip, limit=limit)


@router.get("/money-receipts/by-transaction/{transaction_id}", response_model=MoneyReceipt)
def get_money_receipt_by_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "cash_transactions")),
):
    receipt = crud_receipts.get_money_receipt_by_transaction(db, transaction_id)
    if receipt is None:
        raise NotFoundError(f"No money receipt for cash transaction {transaction_id}")
    return receipt


@router.get("/money-receipts/{receipt_id}", response_model=MoneyReceipt)
def get_money_receipt(
    receipt_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "cash_transactions")),
):
    return crud_receipts.get_money_receipt(db, receipt_id)


@router.get("/money-receipts/{receipt_id}/pdf")
def get_money_receipt_pdf(
    receipt_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "cash_transactions")),
):
    receipt = crud_receipts.get_money_receipt(db, receipt_id)
    content = generate_money_receipt(receipt)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename={receipt.receipt_no}.pdf"},
    )
