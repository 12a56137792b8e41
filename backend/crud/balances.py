"""
Balance projection over posted journal lines.

Every report reads through these helpers so that the sign convention and the
line ordering are applied the same way everywhere.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from crud.accounts import get_account
from models.account import signed_movement
from models.journal_entry import JournalEntry, ENTRY_POSTED
from models.journal_entry_line import JournalEntryLine
from schemas.ledger import LedgerStatement, LedgerStatementRow
from utils.money import money, ZERO


def _posted_lines(db: Session):
    return db.query(JournalEntryLine).join(
        JournalEntry, JournalEntry.id == JournalEntryLine.journal_entry_id
    ).filter(JournalEntry.status == ENTRY_POSTED)


def movement_by_account(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    before: Optional[date] = None,
) -> Dict[int, Tuple[Decimal, Decimal]]:
    """
    Sum posted debits and credits per account.

    start_date and end_date are inclusive bounds; before is an exclusive upper
    bound used for opening balances. Any of them may be omitted.

    Returns:
        {account_id: (total_debit, total_credit)}
    """
    query = db.query(
        JournalEntryLine.account_id,
        func.coalesce(func.sum(JournalEntryLine.debit), 0),
        func.coalesce(func.sum(JournalEntryLine.credit), 0),
    ).join(
        JournalEntry, JournalEntry.id == JournalEntryLine.journal_entry_id
    ).filter(JournalEntry.status == ENTRY_POSTED)

    if start_date:
        query = query.filter(JournalEntry.date >= start_date)
    if end_date:
        query = query.filter(JournalEntry.date <= end_date)
    if before:
        query = query.filter(JournalEntry.date < before)

    rows = query.group_by(JournalEntryLine.account_id).all()
    return {account_id: (money(debit), money(credit)) for account_id, debit, credit in rows}


def opening_balance(db: Session, account_id: int, period_start: date) -> Decimal:
    """Balance of the account from every posted line dated strictly before period_start."""
    account = get_account(db, account_id)
    debit, credit = movement_by_account(db, before=period_start).get(account_id, (ZERO, ZERO))
    return money(signed_movement(account.account_type, debit, credit))


def project_account(db: Session, account_id: int, period_start: date, period_end: date) -> LedgerStatement:
    """
    Running-balance statement of one account over [period_start, period_end].

    Lines are replayed in (date, entry insertion order, line number) order so the
    running balance is reproducible across queries.
    """
    account = get_account(db, account_id)
    opening = opening_balance(db, account_id, period_start)

    lines = _posted_lines(db).filter(
        JournalEntryLine.account_id == account_id,
        JournalEntry.date >= period_start,
        JournalEntry.date <= period_end,
    ).order_by(
        JournalEntry.date.asc(),
        JournalEntry.id.asc(),
        JournalEntryLine.line_number.asc(),
    ).all()

    running = opening
    total_debit = ZERO
    total_credit = ZERO
    rows = []
    for line in lines:
        debit = money(line.debit)
        credit = money(line.credit)
        running += signed_movement(account.account_type, debit, credit)
        total_debit += debit
        total_credit += credit
        rows.append(LedgerStatementRow(
            date=line.journal_entry.date,
            entry_number=line.journal_entry.entry_number,
            journal_entry_id=line.journal_entry_id,
            line_number=line.line_number,
            description=line.description or line.journal_entry.description,
            debit=debit,
            credit=credit,
            balance=running,
        ))

    return LedgerStatement(
        account_id=account.id,
        account_number=account.account_number,
        account_name=account.account_name,
        account_type=account.account_type,
        period_start=period_start,
        period_end=period_end,
        opening_balance=opening,
        total_debit=total_debit,
        total_credit=total_credit,
        closing_balance=running,
        rows=rows,
    )
