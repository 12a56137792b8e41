from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import List, Optional


class LedgerStatementRow(BaseModel):
    date: date
    entry_number: str
    journal_entry_id: int
    line_number: int
    description: Optional[str] = None
    debit: Decimal
    credit: Decimal
    balance: Decimal


class LedgerStatement(BaseModel):
    account_id: int
    account_number: str
    account_name: str
    account_type: str
    period_start: date
    period_end: date
    opening_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal
    rows: List[LedgerStatementRow]
