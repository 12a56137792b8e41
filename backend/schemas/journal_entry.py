from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal


class JournalEntryLineBase(BaseModel):
    account_id: int
    debit: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    credit: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    description: Optional[str] = None


class JournalEntryLineCreate(JournalEntryLineBase):
    pass


class JournalEntryLine(JournalEntryLineBase):
    id: int
    journal_entry_id: int
    line_number: int

    class Config:
        from_attributes = True


class JournalEntryBase(BaseModel):
    date: date
    description: Optional[str] = None
    reference_document: Optional[str] = None


class JournalEntryCreate(JournalEntryBase):
    """
    Request body for posting an entry.

    Only the line shape is checked here. The debit/credit balance check lives
    in crud.journal_entry.validate_lines so that it also guards internal callers.
    """
    lines: List[JournalEntryLineCreate]

    @field_validator('lines')
    @classmethod
    def check_lines_present(cls, lines):
        if not lines:
            raise ValueError('A journal entry needs at least one line.')
        return lines


class JournalEntry(JournalEntryBase):
    id: int
    entry_number: str
    status: str
    total_amount: Decimal
    posted_at: Optional[datetime] = None
    created_by: Optional[str] = None
    lines: List[JournalEntryLine] = []

    class Config:
        from_attributes = True
