import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from sqlalchemy import func
from sqlalchemy.orm import Session

from crud import journal_entry as journal_entry_crud
from crud.audit_log import create_audit_log
from errors import DuplicateAccountError, InvalidStateError, NotFoundError, ValidationError
from models.account import Account, STATUS_ACTIVE, STATUS_INACTIVE, EQUITY, signed_movement, is_normal_credit
from models.journal_entry import JournalEntry, ENTRY_POSTED
from models.journal_entry_line import JournalEntryLine
from schemas.accounts import AccountCreate, AccountUpdate, AccountTypeTotal, BalanceDrift
from schemas.audit_log import AuditLogCreate
from schemas.journal_entry import JournalEntryCreate, JournalEntryLineCreate
from utils import sqlalchemy_to_dict
from utils.money import money, amounts_equal, ZERO
from utils.periods import today_local

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "BDT")
OPENING_BALANCE_EQUITY_NUMBER = "3900"

DEFAULT_ACCOUNTS = [
    {"account_number": "1000", "account_name": "Cash", "account_type": "asset"},
    {"account_number": "1100", "account_name": "Accounts Receivable", "account_type": "asset"},
    {"account_number": "1200", "account_name": "Inventory", "account_type": "asset"},
    {"account_number": "1300", "account_name": "Property, Plant & Equipment", "account_type": "asset"},
    {"account_number": "2000", "account_name": "Accounts Payable", "account_type": "liability"},
    {"account_number": "2100", "account_name": "Loans Payable", "account_type": "liability"},
    {"account_number": "3000", "account_name": "Owner's Equity", "account_type": "equity"},
    {"account_number": "3100", "account_name": "Retained Earnings", "account_type": "equity"},
    {"account_number": OPENING_BALANCE_EQUITY_NUMBER, "account_name": "Opening Balance Equity", "account_type": "equity"},
    {"account_number": "4000", "account_name": "Sales Revenue", "account_type": "revenue"},
    {"account_number": "4100", "account_name": "Service Revenue", "account_type": "revenue"},
    {"account_number": "5000", "account_name": "Cost of Goods Sold", "account_type": "expense"},
    {"account_number": "5100", "account_name": "Salary Expense", "account_type": "expense"},
    {"account_number": "5200", "account_name": "Rent Expense", "account_type": "expense"},
    {"account_number": "5300", "account_name": "Utilities Expense", "account_type": "expense"},
    {"account_number": "5400", "account_name": "Marketing Expense", "account_type": "expense"},
]


def get_account(db: Session, account_id: int) -> Account:
    account = db.query(Account).filter(Account.id == account_id).first()
    if account is None:
        raise NotFoundError(f"Account with id {account_id} not found")
    return account


def get_account_by_number(db: Session, account_number: str) -> Optional[Account]:
    return db.query(Account).filter(Account.account_number == account_number).first()


def get_active_accounts(db: Session, account_type: Optional[str] = None) -> List[Account]:
    """Active accounts ordered by account number; every report relies on this order."""
    query = db.query(Account).filter(Account.status == STATUS_ACTIVE)

    if account_type:
        query = query.filter(Account.account_type == account_type)

    return query.order_by(Account.account_number.asc()).all()


def get_all_accounts(db: Session) -> List[Account]:
    return db.query(Account).order_by(Account.account_number.asc()).all()


def account_totals_by_type(db: Session) -> List[AccountTypeTotal]:
    rows = db.query(
        Account.account_type,
        func.coalesce(func.sum(Account.balance), 0).label("total"),
    ).filter(
        Account.status == STATUS_ACTIVE
    ).group_by(Account.account_type).order_by(Account.account_type).all()
    return [AccountTypeTotal(account_type=row.account_type, total=money(row.total)) for row in rows]


def add_account(db: Session, number: str, name: str, account_type: str, user_id: str,
                currency: Optional[str] = None, description: Optional[str] = None) -> Account:
    """Insert an account into the session without committing."""
    if get_account_by_number(db, number):
        raise DuplicateAccountError(f"Account number {number} already exists")

    db_account = Account(
        account_number=number,
        account_name=name,
        account_type=account_type,
        currency=currency or DEFAULT_CURRENCY,
        description=description,
        status=STATUS_ACTIVE,
        balance=ZERO,
        created_by=user_id,
    )
    db.add(db_account)
    db.flush()
    create_audit_log(db, AuditLogCreate(
        actor_id=user_id,
        action="CREATE_ACCOUNT",
        table_name="accounts",
        record_id=db_account.id,
        details=f"Created account: {number} - {name}",
        new_values=sqlalchemy_to_dict(db_account),
    ))
    return db_account


def ensure_account(db: Session, number: str, name: str, account_type: str, user_id: str) -> Account:
    """Return the account with this number, creating it if it does not exist yet."""
    existing = get_account_by_number(db, number)
    if existing:
        return existing
    logger.info(f"Creating missing account {number} ({name})")
    return add_account(db, number, name, account_type, user_id)


def _add_opening_entry(db: Session, account: Account, amount, opening_date, user_id: str):
    """Record an opening balance as a balanced entry against Opening Balance Equity."""
    equity = ensure_account(db, OPENING_BALANCE_EQUITY_NUMBER, "Opening Balance Equity", EQUITY, user_id)
    amount = money(amount)
    # Positive amounts sit on the account's normal side
    account_on_debit = (amount > 0) != is_normal_credit(account.account_type)
    value = abs(amount)
    if account_on_debit:
        lines = [
            JournalEntryLineCreate(account_id=account.id, debit=value, description="Opening balance"),
            JournalEntryLineCreate(account_id=equity.id, credit=value, description="Opening balance"),
        ]
    else:
        lines = [
            JournalEntryLineCreate(account_id=equity.id, debit=value, description="Opening balance"),
            JournalEntryLineCreate(account_id=account.id, credit=value, description="Opening balance"),
        ]
    return journal_entry_crud.add_journal_entry(db, JournalEntryCreate(
        date=opening_date or today_local(),
        description=f"Opening balance for {account.account_number} - {account.account_name}",
        lines=lines,
    ), user_id)


def create_account(db: Session, account: AccountCreate, user_id: str) -> Account:
    """
    Create an account. A non-zero opening balance is posted as an opening entry
    in the same transaction.

    Raises:
        DuplicateAccountError: the account number is taken
    """
    try:
        db_account = add_account(
            db,
            account.account_number,
            account.account_name,
            account.account_type,
            user_id,
            currency=account.currency,
            description=account.description,
        )
        if money(account.opening_balance) != 0:
            if account.account_number == OPENING_BALANCE_EQUITY_NUMBER:
                raise ValidationError("Opening Balance Equity cannot carry its own opening balance")
            _add_opening_entry(db, db_account, account.opening_balance, account.opening_date, user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_account)
    logger.info(f"Account {db_account.account_number} created by user {user_id}")
    return db_account


def _has_postings(db: Session, account_id: int) -> bool:
    return db.query(JournalEntryLine.id).filter(JournalEntryLine.account_id == account_id).first() is not None


def update_account(db: Session, account_id: int, account_update: AccountUpdate, user_id: str) -> Account:
    """
    Update name, currency, description, type or status.

    Accounts are never deleted; they are deactivated. The type is frozen once
    the account has postings, and only a zero-balance account can be deactivated.
    """
    try:
        db_account = db.query(Account).filter(Account.id == account_id).with_for_update().first()
        if db_account is None:
            raise NotFoundError(f"Account with id {account_id} not found")

        update_data = account_update.model_dump(exclude_unset=True)

        if 'account_type' in update_data and update_data['account_type'] != db_account.account_type:
            if _has_postings(db, account_id):
                raise InvalidStateError("Cannot change account type for an account that has journal postings.")

        if update_data.get('status') == STATUS_INACTIVE and db_account.status != STATUS_INACTIVE:
            if computed_balance(db, db_account) != 0:
                raise InvalidStateError("Cannot deactivate an account with a non-zero balance.")

        for key, value in update_data.items():
            setattr(db_account, key, value)
        db_account.updated_by = user_id

        create_audit_log(db, AuditLogCreate(
            actor_id=user_id,
            action="UPDATE_ACCOUNT",
            table_name="accounts",
            record_id=db_account.id,
            details=f"Updated account: {db_account.account_number}",
            new_values={key: str(value) for key, value in update_data.items()},
        ))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_account)
    logger.info(f"Account {db_account.account_number} updated by user {user_id}: {sorted(update_data)}")
    return db_account


def initialize_default_accounts(db: Session, user_id: str) -> List[Account]:
    """Seed the standard chart of accounts. Existing numbers are left alone."""
    try:
        for account_data in DEFAULT_ACCOUNTS:
            ensure_account(
                db,
                account_data["account_number"],
                account_data["account_name"],
                account_data["account_type"],
                user_id,
            )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_active_accounts(db)


def _posted_totals_by_account(db: Session):
    rows = db.query(
        JournalEntryLine.account_id,
        func.coalesce(func.sum(JournalEntryLine.debit), 0),
        func.coalesce(func.sum(JournalEntryLine.credit), 0),
    ).join(
        JournalEntry, JournalEntry.id == JournalEntryLine.journal_entry_id
    ).filter(
        JournalEntry.status == ENTRY_POSTED
    ).group_by(JournalEntryLine.account_id).all()
    return {account_id: (money(debit), money(credit)) for account_id, debit, credit in rows}


def computed_balance(db: Session, account: Account):
    """Balance of an account derived from its posted lines, on its normal side."""
    debit, credit = _posted_totals_by_account(db).get(account.id, (ZERO, ZERO))
    return money(signed_movement(account.account_type, debit, credit))


def find_balance_drift(db: Session) -> List[BalanceDrift]:
    """Accounts whose cached balance disagrees with their postings."""
    totals = _posted_totals_by_account(db)
    drift = []
    for account in get_all_accounts(db):
        debit, credit = totals.get(account.id, (ZERO, ZERO))
        computed = money(signed_movement(account.account_type, debit, credit))
        cached = money(account.balance)
        if not amounts_equal(cached, computed):
            drift.append(BalanceDrift(
                account_id=account.id,
                account_number=account.account_number,
                cached_balance=cached,
                computed_balance=computed,
                difference=cached - computed,
            ))
    return drift


def recompute_account_balances(db: Session) -> int:
    """
    Rebuild every cached balance from the posted lines.

    Returns:
        the number of accounts whose cached balance changed
    """
    try:
        totals = _posted_totals_by_account(db)
        changed = 0
        for account in db.query(Account).order_by(Account.id).with_for_update().all():
            debit, credit = totals.get(account.id, (ZERO, ZERO))
            computed = money(signed_movement(account.account_type, debit, credit))
            if money(account.balance) != computed:
                logger.warning(f"Account {account.account_number} cached balance {account.balance} corrected to {computed}")
                account.balance = computed
                changed += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    return changed
