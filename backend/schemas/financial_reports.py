from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from decimal import Decimal


# Trial Balance
class TrialBalanceRow(BaseModel):
    account_id: int
    account_number: str
    account_name: str
    account_type: str
    total_debit: Decimal
    total_credit: Decimal
    net_movement: Decimal
    balance: Decimal


class TrialBalance(BaseModel):
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    rows: List[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool


# Profit & Loss
class ProfitAndLossRow(BaseModel):
    account_id: int
    account_number: str
    account_name: str
    account_type: str
    section: str  # revenue or expense
    amount: Decimal


class ProfitAndLoss(BaseModel):
    period: str
    period_start: date
    period_end: date
    revenue: List[ProfitAndLossRow]
    expenses: List[ProfitAndLossRow]
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal

    @property
    def rows(self) -> List[ProfitAndLossRow]:
        return self.revenue + self.expenses


# Balance Sheet
class BalanceSheetRow(BaseModel):
    account_id: Optional[int] = None  # None for the computed earnings line
    account_number: str
    account_name: str
    section: str  # asset, liability or equity
    amount: Decimal


class BalanceSheet(BaseModel):
    as_of: date
    assets: List[BalanceSheetRow]
    liabilities: List[BalanceSheetRow]
    equity: List[BalanceSheetRow]
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    balanced: bool

    @property
    def rows(self) -> List[BalanceSheetRow]:
        return self.assets + self.liabilities + self.equity
