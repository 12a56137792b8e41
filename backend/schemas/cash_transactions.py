from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from models.cash_transaction import CashTransactionType, CashTransactionStatus


class CashTransactionBase(BaseModel):
    date: date
    time: Optional[dt.time] = None
    description: str = ""
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    transaction_type: CashTransactionType
    category: str = ""
    payment_method: str = ""
    counterpart_name: Optional[str] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None


class CashTransactionCreate(CashTransactionBase):
    pass


class CashTransaction(CashTransactionBase):
    id: int
    transaction_code: str
    status: CashTransactionStatus
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    journal_entry_id: Optional[int] = None

    class Config:
        from_attributes = True


class CashTransactionReject(BaseModel):
    reason: Optional[str] = None


class CashTransactionTotals(BaseModel):
    total_receipts: Decimal
    total_payments: Decimal


class CashTransactionList(BaseModel):
    transactions: List[CashTransaction]
    totals: CashTransactionTotals


class CashApprovalResult(BaseModel):
    transaction: CashTransaction
    receipt_no: str
    journal_entry_number: Optional[str] = None


# Bank-style statement
class CashStatementRow(BaseModel):
    sl: int
    date: date
    time: Optional[dt.time] = None
    transaction_code: str
    particulars: str
    reference_number: Optional[str] = None
    category: str
    payment_method: str
    debit: Decimal
    credit: Decimal
    balance: Decimal
    status: str
    created_by: Optional[str] = None
    verified_by: Optional[str] = None


class CashStatement(BaseModel):
    start_date: date
    end_date: date
    opening_balance: Decimal
    rows: List[CashStatementRow]
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal
