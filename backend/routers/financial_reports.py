from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from crud import balances as crud_balances
from crud import financial_reports as crud_financial_reports
from database import get_db
from schemas.financial_reports import TrialBalance, ProfitAndLoss, BalanceSheet
from schemas.ledger import LedgerStatement
from utils.auth_utils import require_permission
from utils.excel_export import ledger_statement_workbook
from utils.periods import resolve_period, today_local

router = APIRouter(
    prefix="/financial-reports",
    tags=["Financial Reports"],
)


@router.get("/trial-balance", response_model=TrialBalance)
def get_trial_balance(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "reports"))
):
    return crud_financial_reports.get_trial_balance(db=db, start_date=start_date, end_date=end_date)


@router.get("/profit-and-loss", response_model=ProfitAndLoss)
def get_profit_and_loss(
    period: str = "monthly",
    year: Optional[int] = None,
    month: Optional[int] = None,
    quarter: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "reports"))
):
    return crud_financial_reports.get_profit_and_loss(
        db=db,
        period=period,
        year=year,
        month=month,
        quarter=quarter,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/balance-sheet", response_model=BalanceSheet)
def get_balance_sheet(
    as_of_date: Optional[date] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "reports"))
):
    return crud_financial_reports.get_balance_sheet(db=db, as_of=as_of_date or today_local())


def _ledger(db, account_id, period, year, month, quarter, start_date, end_date) -> LedgerStatement:
    period_start, period_end = resolve_period(period, year, month, quarter, start_date, end_date)
    return crud_balances.project_account(db, account_id, period_start, period_end)


@router.get("/ledger/{account_id}", response_model=LedgerStatement)
def get_ledger(
    account_id: int,
    period: str = "custom",
    year: Optional[int] = None,
    month: Optional[int] = None,
    quarter: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "reports"))
):
    return _ledger(db, account_id, period, year, month, quarter, start_date, end_date)


@router.get("/ledger/{account_id}/export")
def export_ledger(
    account_id: int,
    period: str = "custom",
    year: Optional[int] = None,
    month: Optional[int] = None,
    quarter: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "reports"))
):
    statement = _ledger(db, account_id, period, year, month, quarter, start_date, end_date)
    stream = ledger_statement_workbook(statement)
    filename = f"ledger_{statement.account_number}_{statement.period_start}_{statement.period_end}.xlsx"
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
