from sqlalchemy import Column, Integer, String, Numeric
from database import Base
from models.audit_mixin import TimestampMixin

BUDGET_PERIOD_MONTHLY = "monthly"


class ExpenseCategory(Base, TimestampMixin):
    __tablename__ = "expense_categories"

    id = Column(Integer, primary_key=True, index=True)
    category_code = Column(String(30), unique=True, nullable=False, index=True)
    # Matched against cash_transactions.category
    category_name = Column(String(100), unique=True, nullable=False)
    budget_amount = Column(Numeric(15, 2), nullable=False, default=0)
    budget_period = Column(String(20), nullable=False, default=BUDGET_PERIOD_MONTHLY)
    status = Column(String(20), nullable=False, default="active")

    @property
    def is_active(self):
        return self.status == "active"
