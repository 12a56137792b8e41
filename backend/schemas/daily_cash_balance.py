from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt
from datetime import date
from decimal import Decimal


class DailyCashBalance(BaseModel):
    date: date
    opening_balance: Decimal
    cash_received: Decimal
    cash_paid: Decimal
    closing_balance: Decimal

    class Config:
        from_attributes = True


class DailyCashRecalculate(BaseModel):
    date: date
    opening_balance: Optional[Decimal] = Field(None, decimal_places=2)


class DailySummaryRow(BaseModel):
    date: date
    opening_balance: Decimal
    total_cash_in: Decimal
    total_cash_out: Decimal
    net_cash_flow: Decimal
    closing_balance: Decimal


class DailySummaryTotals(BaseModel):
    total_cash_in: Decimal
    total_cash_out: Decimal
    net_cash_flow: Decimal


class DailySummary(BaseModel):
    rows: List[DailySummaryRow]
    period_totals: DailySummaryTotals


class CashFlow(BaseModel):
    cash_in: Decimal
    cash_out: Decimal
    net: Decimal


class TodayActivity(BaseModel):
    count: int
    receipts: Decimal
    payments: Decimal


class CashPosition(BaseModel):
    today: DailyCashBalance
    last_balance_date: Optional[date] = None
    daily_change: Decimal
    weekly_flow: CashFlow
    monthly_flow: CashFlow
    today_transactions: TodayActivity
    timezone: str


class DailyReportTransaction(BaseModel):
    transaction_code: str
    time: Optional[dt.time] = None
    transaction_type: str
    amount: Decimal
    description: str
    category: str
    created_by: Optional[str] = None
    verified_by: Optional[str] = None


class DailyReportBreakdown(BaseModel):
    category: str
    count: int
    total: Decimal


class DailyReport(BaseModel):
    date: date
    opening_balance: Decimal
    cash_received: Decimal
    cash_paid: Decimal
    closing_balance: Decimal
    transactions: List[DailyReportTransaction]
    expense_breakdown: List[DailyReportBreakdown]
