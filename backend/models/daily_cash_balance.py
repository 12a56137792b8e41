from sqlalchemy import Column, Date, Integer, Numeric
from sqlalchemy.ext.hybrid import hybrid_property
from database import Base
from models.audit_mixin import TimestampMixin


class DailyCashBalance(Base, TimestampMixin):
    __tablename__ = "daily_cash_balance"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, unique=True, nullable=False, index=True)
    opening_balance = Column(Numeric(15, 2), nullable=False, default=0)
    cash_received = Column(Numeric(15, 2), nullable=False, default=0)
    cash_paid = Column(Numeric(15, 2), nullable=False, default=0)
    # Stored so that "latest closing before date" is a single indexed query.
    closing_balance = Column(Numeric(15, 2), nullable=False, default=0)

    @hybrid_property
    def net_cash_flow(self):
        return (self.cash_received or 0) - (self.cash_paid or 0)
