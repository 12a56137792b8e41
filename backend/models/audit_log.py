from sqlalchemy import Column, Integer, String, DateTime, JSON, Text
from database import Base
from utils.periods import now_local


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(String, nullable=False)
    action = Column(String, nullable=False)  # e.g., 'CREATE_JOURNAL_ENTRY', 'CASH_APPROVE'
    table_name = Column(String, nullable=True)
    record_id = Column(Integer, nullable=True)
    details = Column(Text, nullable=True)
    new_values = Column(JSON)
    created_at = Column(DateTime(timezone=True), default=now_local)
