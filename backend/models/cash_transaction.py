from sqlalchemy import Column, Integer, String, Text, Numeric, Date, Time, DateTime, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class CashTransactionType(enum.Enum):
    RECEIPT = "receipt"
    PAYMENT = "payment"


class CashTransactionStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CANCELLED = "cancelled"


class CashTransaction(Base, TimestampMixin):
    __tablename__ = "cash_transactions"

    id = Column(Integer, primary_key=True, index=True)
    transaction_code = Column(String(50), unique=True, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=True)
    description = Column(Text, nullable=False, default="")
    amount = Column(Numeric(15, 2), CheckConstraint('amount > 0'), nullable=False)
    transaction_type = Column(Enum(CashTransactionType), nullable=False)
    category = Column(String(100), nullable=False, default="")
    payment_method = Column(String(50), nullable=False, default="")
    counterpart_name = Column(String(150), nullable=True)  # received from / paid to
    reference_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(Enum(CashTransactionStatus), nullable=False, default=CashTransactionStatus.PENDING, index=True)
    verified_by = Column(String, nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    journal_entry_id = Column(Integer, nullable=True)

    # Relationships
    money_receipt = relationship("MoneyReceipt", back_populates="cash_transaction", uselist=False)

    @property
    def is_terminal(self):
        return self.status != CashTransactionStatus.PENDING
