from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

ENTRY_POSTED = "posted"


class JournalEntry(Base, TimestampMixin):
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True, index=True)
    entry_number = Column(String(50), unique=True, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)
    reference_document = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default=ENTRY_POSTED)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)
    posted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    lines = relationship(
        "JournalEntryLine",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalEntryLine.line_number",
    )
