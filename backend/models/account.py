from sqlalchemy import Column, Integer, String, Text, Numeric
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

ASSET = "asset"
LIABILITY = "liability"
EQUITY = "equity"
REVENUE = "revenue"
INCOME = "income"
EXPENSE = "expense"
OTHER = "other"

VALID_ACCOUNT_TYPES = [ASSET, LIABILITY, EQUITY, REVENUE, INCOME, EXPENSE, OTHER]

# Balance grows with credits for these types, with debits for everything else.
NORMAL_CREDIT_TYPES = {LIABILITY, EQUITY, REVENUE, INCOME}

REVENUE_TYPES = {REVENUE, INCOME}
EXPENSE_TYPES = {EXPENSE}

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"


def is_normal_credit(account_type: str) -> bool:
    return account_type in NORMAL_CREDIT_TYPES


def signed_movement(account_type: str, debit, credit):
    """Movement on the account's normal balance side."""
    if is_normal_credit(account_type):
        return credit - debit
    return debit - credit


class Account(Base, TimestampMixin):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    account_number = Column(String(20), unique=True, nullable=False, index=True)
    account_name = Column(String(100), nullable=False)
    account_type = Column(String(20), nullable=False)  # asset, liability, equity, revenue, income, expense, other
    currency = Column(String(3), nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)
    description = Column(Text, nullable=True)
    # Cached projection of all postings, on the normal balance side.
    balance = Column(Numeric(15, 2), nullable=False, default=0)

    lines = relationship("JournalEntryLine", back_populates="account")

    @property
    def is_active(self):
        return self.status == STATUS_ACTIVE
