import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from errors import NotFoundError
from models.cash_transaction import CashTransaction
from models.money_receipt import MoneyReceipt

logger = logging.getLogger(__name__)


def make_receipt_no(tx: CashTransaction) -> str:
    # MR-YYYYMMDD-000123
    return f"MR-{tx.date.strftime('%Y%m%d')}-{tx.id:06d}"


def add_money_receipt(db: Session, tx: CashTransaction, approved_by: str) -> MoneyReceipt:
    """Add the receipt for an approved transaction; an existing one is returned unchanged."""
    existing = get_money_receipt_by_transaction(db, tx.id)
    if existing:
        return existing

    receipt = MoneyReceipt(
        receipt_no=make_receipt_no(tx),
        cash_transaction_id=tx.id,
        date=tx.date,
        amount=tx.amount,
        transaction_type=tx.transaction_type,
        counterpart_name=tx.counterpart_name,
        description=tx.description,
        approved_by=approved_by,
        created_by=tx.created_by,
    )
    db.add(receipt)
    db.flush()
    logger.info(f"Money receipt {receipt.receipt_no} issued for cash transaction {tx.transaction_code}")
    return receipt


def get_money_receipt(db: Session, receipt_id: int) -> MoneyReceipt:
    receipt = db.query(MoneyReceipt).filter(MoneyReceipt.id == receipt_id).first()
    if receipt is None:
        raise NotFoundError(f"Money receipt with id {receipt_id} not found")
    return receipt


def get_money_receipt_by_transaction(db: Session, transaction_id: int) -> Optional[MoneyReceipt]:
    return db.query(MoneyReceipt).filter(MoneyReceipt.cash_transaction_id == transaction_id).first()


def get_money_receipts(db: Session, start_date: Optional[date] = None, end_date: Optional[date] = None,
                       skip: int = 0, limit: int = 100) -> List[MoneyReceipt]:
    query = db.query(MoneyReceipt)
    if start_date:
        query = query.filter(MoneyReceipt.date >= start_date)
    if end_date:
        query = query.filter(MoneyReceipt.date <= end_date)
    return query.order_by(MoneyReceipt.date.desc(), MoneyReceipt.id.desc()).offset(skip).limit(limit).all()
