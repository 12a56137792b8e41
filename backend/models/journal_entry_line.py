from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base


class JournalEntryLine(Base):
    __tablename__ = "journal_entry_lines"

    id = Column(Integer, primary_key=True, index=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    debit = Column(Numeric(15, 2), CheckConstraint('debit >= 0'), nullable=False, default=0)
    credit = Column(Numeric(15, 2), CheckConstraint('credit >= 0'), nullable=False, default=0)
    # 1-based order inside the entry
    line_number = Column(Integer, nullable=False)

    # Relationships
    journal_entry = relationship("JournalEntry", back_populates="lines")
    account = relationship("Account", back_populates="lines")

    __table_args__ = (
        UniqueConstraint('journal_entry_id', 'line_number', name='_entry_line_number_uc'),
    )
