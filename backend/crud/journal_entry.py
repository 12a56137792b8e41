import logging
import uuid
from datetime import date
from typing import Optional, List

from sqlalchemy.orm import Session, selectinload

from crud.audit_log import create_audit_log
from errors import NotFoundError, UnbalancedEntryError, ValidationError
from models.account import Account, signed_movement
from models.journal_entry import JournalEntry, ENTRY_POSTED
from models.journal_entry_line import JournalEntryLine
from schemas.audit_log import AuditLogCreate
from schemas.journal_entry import JournalEntryCreate
from utils.money import money, amounts_equal, ZERO
from utils.periods import now_local

logger = logging.getLogger(__name__)


def make_entry_number(entry: JournalEntry) -> str:
    # JE-YYYYMMDD-000123
    return f"JE-{entry.date.strftime('%Y%m%d')}-{entry.id:06d}"


def validate_lines(entry: JournalEntryCreate):
    """
    Check the double-entry rule before anything touches the session.

    Returns:
        (total_debit, total_credit) as 2-decimal Decimals
    """
    if not entry.lines:
        raise ValidationError("A journal entry needs at least one line.")

    total_debit = ZERO
    total_credit = ZERO
    for number, line in enumerate(entry.lines, start=1):
        debit = money(line.debit)
        credit = money(line.credit)
        if debit < 0 or credit < 0:
            raise ValidationError(f"Line {number}: debit and credit must not be negative.")
        if debit > 0 and credit > 0:
            raise ValidationError(f"Line {number}: a line carries either a debit or a credit, not both.")
        total_debit += debit
        total_credit += credit

    if not amounts_equal(total_debit, total_credit):
        raise UnbalancedEntryError(f"Debits ({total_debit}) must equal credits ({total_credit})")
    if total_debit == 0:
        raise ValidationError("A journal entry must have non-zero debit and credit amounts.")
    return total_debit, total_credit


def add_journal_entry(db: Session, entry: JournalEntryCreate, user_id: str) -> JournalEntry:
    """
    Add a balanced entry, its lines and the cached balance updates to the session.

    Nothing is committed: callers own the unit of work. post_entry() is the
    committing wrapper; account creation and cash approval call this directly so
    the entry shares their transaction.
    """
    total_debit, _ = validate_lines(entry)

    # Lock the touched accounts in id order so concurrent posts cannot interleave
    # their balance read-modify-writes.
    account_ids = sorted({line.account_id for line in entry.lines})
    accounts = db.query(Account).filter(
        Account.id.in_(account_ids)
    ).order_by(Account.id).with_for_update().all()
    accounts_by_id = {account.id: account for account in accounts}

    for account_id in account_ids:
        account = accounts_by_id.get(account_id)
        if account is None:
            raise NotFoundError(f"Account with id {account_id} not found")
        if not account.is_active:
            raise ValidationError(f"Account {account.account_number} is inactive")

    db_entry = JournalEntry(
        # Placeholder until the id is known
        entry_number=f"JE-TMP-{uuid.uuid4().hex}",
        date=entry.date,
        description=entry.description,
        reference_document=entry.reference_document,
        status=ENTRY_POSTED,
        total_amount=total_debit,
        posted_at=now_local(),
        created_by=user_id,
    )
    db.add(db_entry)
    db.flush()  # Flush to get the ID for the parent entry before creating children
    db_entry.entry_number = make_entry_number(db_entry)

    for line_number, line in enumerate(entry.lines, start=1):
        debit = money(line.debit)
        credit = money(line.credit)
        db.add(JournalEntryLine(
            journal_entry_id=db_entry.id,
            account_id=line.account_id,
            description=line.description or "",
            debit=debit,
            credit=credit,
            line_number=line_number,
        ))
        account = accounts_by_id[line.account_id]
        account.balance = money(account.balance) + signed_movement(account.account_type, debit, credit)

    create_audit_log(db, AuditLogCreate(
        actor_id=user_id,
        action="CREATE_JOURNAL_ENTRY",
        table_name="journal_entries",
        record_id=db_entry.id,
        details=f"Created journal entry: {db_entry.entry_number}",
        new_values={"date": entry.date.isoformat(), "total_amount": str(total_debit), "lines": len(entry.lines)},
    ))
    db.flush()
    return db_entry


def post_entry(db: Session, entry: JournalEntryCreate, user_id: str) -> JournalEntry:
    """Post a journal entry as one atomic unit."""
    try:
        db_entry = add_journal_entry(db, entry, user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_entry)
    logger.info(f"Journal entry {db_entry.entry_number} posted by user {user_id} ({db_entry.total_amount})")
    return db_entry


def get_journal_entry(db: Session, entry_id: int) -> JournalEntry:
    """
    Retrieves a single journal entry by its ID, lines in line-number order.
    """
    db_entry = db.query(JournalEntry).options(selectinload(JournalEntry.lines)).filter(
        JournalEntry.id == entry_id
    ).first()
    if db_entry is None:
        raise NotFoundError(f"Journal entry with id {entry_id} not found")
    return db_entry


def get_journal_entries(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100
) -> List[JournalEntry]:
    """
    Retrieves a list of journal entries with optional date filtering, newest first.
    """
    query = db.query(JournalEntry).options(selectinload(JournalEntry.lines))

    if start_date:
        query = query.filter(JournalEntry.date >= start_date)
    if end_date:
        query = query.filter(JournalEntry.date <= end_date)

    return query.order_by(JournalEntry.date.desc(), JournalEntry.id.desc()).offset(skip).limit(limit).all()
