from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin
from models.cash_transaction import CashTransactionType


class MoneyReceipt(Base, TimestampMixin):
    __tablename__ = "money_receipts"

    id = Column(Integer, primary_key=True, index=True)
    receipt_no = Column(String(40), unique=True, nullable=False, index=True)
    cash_transaction_id = Column(Integer, ForeignKey("cash_transactions.id"), unique=True, nullable=False)
    date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    transaction_type = Column(Enum(CashTransactionType), nullable=False)
    counterpart_name = Column(String(150), nullable=True)
    description = Column(Text, nullable=True)
    approved_by = Column(String, nullable=True)

    cash_transaction = relationship("CashTransaction", back_populates="money_receipt")
