from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from models.cash_transaction import CashTransactionType


class MoneyReceipt(BaseModel):
    id: int
    receipt_no: str
    cash_transaction_id: int
    date: date
    amount: Decimal
    transaction_type: CashTransactionType
    counterpart_name: Optional[str] = None
    description: Optional[str] = None
    created_by: Optional[str] = None
    approved_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
