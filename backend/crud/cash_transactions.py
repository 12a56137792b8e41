import logging
import os
import uuid
from datetime import date, timedelta
from typing import List, Optional

from dotenv import load_dotenv
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud import daily_cash_balance as crud_daily_cash
from crud import journal_entry as journal_entry_crud
from crud.accounts import ensure_account
from crud.audit_log import create_audit_log
from crud.money_receipts import add_money_receipt
from errors import InvalidStateError, NotFoundError, ValidationError
from models.account import ASSET, REVENUE, EXPENSE
from models.cash_transaction import CashTransaction, CashTransactionStatus, CashTransactionType
from schemas.audit_log import AuditLogCreate
from schemas.cash_transactions import (
    CashTransactionCreate, CashTransactionList, CashTransactionTotals, CashApprovalResult,
    CashTransaction as CashTransactionSchema,
)
from schemas.journal_entry import JournalEntryCreate, JournalEntryLineCreate
from utils import sqlalchemy_to_dict
from utils.money import money, ZERO
from utils.periods import now_local, parse_month

load_dotenv()

logger = logging.getLogger(__name__)

STRATEGY_RECOMPUTE = "recompute"
STRATEGY_FOLD = "fold"

CASH_BALANCE_STRATEGY = os.getenv("CASH_BALANCE_STRATEGY", STRATEGY_RECOMPUTE).strip().lower()
CASH_APPROVAL_POSTS_JOURNAL = os.getenv("CASH_APPROVAL_POSTS_JOURNAL", "false").strip().lower() in ("1", "true", "yes")
CASH_ACCOUNT_NUMBER = os.getenv("CASH_ACCOUNT_NUMBER", "1000")
CASH_RECEIPT_ACCOUNT_NUMBER = os.getenv("CASH_RECEIPT_ACCOUNT_NUMBER", "4000")
CASH_PAYMENT_ACCOUNT_NUMBER = os.getenv("CASH_PAYMENT_ACCOUNT_NUMBER", "5000")

# A first approval for a date can race another one creating the same daily row.
APPROVAL_ATTEMPTS = 2


def make_transaction_code(tx: CashTransaction) -> str:
    # CASH-YYYYMMDD-000123
    return f"CASH-{tx.date.strftime('%Y%m%d')}-{tx.id:06d}"


def create_cash_transaction(db: Session, transaction: CashTransactionCreate, user_id: str) -> CashTransaction:
    """Record a cash movement awaiting review. No balance is touched until approval."""
    try:
        db_tx = CashTransaction(
            transaction_code=f"CASH-TMP-{uuid.uuid4().hex}",
            date=transaction.date,
            time=transaction.time or now_local().time().replace(microsecond=0),
            description=transaction.description or "",
            amount=money(transaction.amount),
            transaction_type=transaction.transaction_type,
            category=transaction.category or "",
            payment_method=transaction.payment_method or "",
            counterpart_name=transaction.counterpart_name,
            reference_number=transaction.reference_number,
            notes=transaction.notes,
            status=CashTransactionStatus.PENDING,
            created_by=user_id,
        )
        db.add(db_tx)
        db.flush()
        db_tx.transaction_code = make_transaction_code(db_tx)

        create_audit_log(db, AuditLogCreate(
            actor_id=user_id,
            action="CREATE_CASH_TRANSACTION",
            table_name="cash_transactions",
            record_id=db_tx.id,
            details=f"Created cash {db_tx.transaction_type.value} {db_tx.transaction_code} for {db_tx.amount}",
            new_values=sqlalchemy_to_dict(db_tx),
        ))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_tx)
    logger.info(f"Cash transaction {db_tx.transaction_code} created by user {user_id}")
    return db_tx


def get_cash_transaction(db: Session, transaction_id: int) -> CashTransaction:
    db_tx = db.query(CashTransaction).filter(CashTransaction.id == transaction_id).first()
    if db_tx is None:
        raise NotFoundError(f"Cash transaction with id {transaction_id} not found")
    return db_tx


def _parse_status(status: Optional[str]) -> Optional[CashTransactionStatus]:
    if not status:
        return None
    try:
        return CashTransactionStatus(status.strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid status: {status}")


def get_cash_transactions(
    db: Session,
    status: Optional[str] = None,
    month: Optional[str] = None,
    transaction_date: Optional[date] = None,
    transaction_type: Optional[CashTransactionType] = None,
    category: Optional[str] = None,
) -> List[CashTransaction]:
    """Filter cash transactions, newest first. month is a 'YYYY-MM' string."""
    query = db.query(CashTransaction)

    status_value = _parse_status(status)
    if status_value:
        query = query.filter(CashTransaction.status == status_value)
    if month:
        month_start, month_end = parse_month(month)
        query = query.filter(CashTransaction.date >= month_start, CashTransaction.date <= month_end)
    if transaction_date:
        query = query.filter(CashTransaction.date == transaction_date)
    if transaction_type:
        query = query.filter(CashTransaction.transaction_type == transaction_type)
    if category:
        query = query.filter(CashTransaction.category == category)

    return query.order_by(
        CashTransaction.date.desc(),
        CashTransaction.time.desc(),
        CashTransaction.id.desc(),
    ).all()


def list_cash_transactions(db: Session, **filters) -> CashTransactionList:
    """Filtered listing together with receipt and payment totals."""
    transactions = get_cash_transactions(db, **filters)
    total_receipts = ZERO
    total_payments = ZERO
    for tx in transactions:
        if tx.transaction_type == CashTransactionType.RECEIPT:
            total_receipts += money(tx.amount)
        else:
            total_payments += money(tx.amount)
    return CashTransactionList(
        transactions=[CashTransactionSchema.model_validate(tx) for tx in transactions],
        totals=CashTransactionTotals(total_receipts=total_receipts, total_payments=total_payments),
    )


def list_pending(db: Session) -> List[CashTransaction]:
    return db.query(CashTransaction).filter(
        CashTransaction.status == CashTransactionStatus.PENDING
    ).order_by(CashTransaction.date.desc(), CashTransaction.id.desc()).all()


def _lock_pending(db: Session, transaction_id: int) -> CashTransaction:
    db_tx = db.query(CashTransaction).filter(
        CashTransaction.id == transaction_id
    ).with_for_update().first()
    if db_tx is None:
        raise NotFoundError(f"Cash transaction with id {transaction_id} not found")
    if db_tx.is_terminal:
        raise InvalidStateError(
            f"Only pending transactions can be reviewed; {db_tx.transaction_code} is {db_tx.status.value}"
        )
    return db_tx


def _post_cash_journal(db: Session, tx: CashTransaction, user_id: str):
    """Mirror an approved cash movement into the journal."""
    cash = ensure_account(db, CASH_ACCOUNT_NUMBER, "Cash", ASSET, user_id)
    amount = money(tx.amount)
    if tx.transaction_type == CashTransactionType.RECEIPT:
        income = ensure_account(db, CASH_RECEIPT_ACCOUNT_NUMBER, "Cash Receipts (Income)", REVENUE, user_id)
        debit_account, credit_account = cash, income
    else:
        expense = ensure_account(db, CASH_PAYMENT_ACCOUNT_NUMBER, "Cash Payments (Expense)", EXPENSE, user_id)
        debit_account, credit_account = expense, cash

    return journal_entry_crud.add_journal_entry(db, JournalEntryCreate(
        date=tx.date,
        description=f"Cash {tx.transaction_type.value}: {tx.description} (CashTx: {tx.transaction_code})",
        reference_document=tx.transaction_code,
        lines=[
            JournalEntryLineCreate(account_id=debit_account.id, debit=amount, description=tx.description),
            JournalEntryLineCreate(account_id=credit_account.id, credit=amount, description=tx.description),
        ],
    ), user_id)


def _apply_approval(db: Session, transaction_id: int, user_id: str, strategy: str, post_journal: bool):
    """Stage one approval in the session. Nothing is committed."""
    db_tx = _lock_pending(db, transaction_id)

    db_tx.status = CashTransactionStatus.APPROVED
    db_tx.verified_by = user_id
    db_tx.verified_at = now_local()
    db_tx.updated_by = user_id
    db.flush()

    if strategy == STRATEGY_FOLD:
        crud_daily_cash.apply_approved_transaction(db, db_tx.date, db_tx.transaction_type, db_tx.amount, user_id)
    else:
        crud_daily_cash.recompute_date(db, db_tx.date, user_id=user_id)
        crud_daily_cash.propagate_daily_cash_balances(db, db_tx.date + timedelta(days=1))

    journal_entry = None
    if post_journal:
        journal_entry = _post_cash_journal(db, db_tx, user_id)
        db_tx.journal_entry_id = journal_entry.id

    receipt = add_money_receipt(db, db_tx, user_id)

    details = f"Approved cash transaction {db_tx.transaction_code}, receipt {receipt.receipt_no}"
    if journal_entry is not None:
        details += f", posted {journal_entry.entry_number}"
    create_audit_log(db, AuditLogCreate(
        actor_id=user_id,
        action="CASH_APPROVE",
        table_name="cash_transactions",
        record_id=db_tx.id,
        details=details,
        new_values={"status": db_tx.status.value, "strategy": strategy},
    ))
    return db_tx, receipt, journal_entry


def approve_cash_transaction(
    db: Session,
    transaction_id: int,
    user_id: str,
    strategy: Optional[str] = None,
    post_journal: Optional[bool] = None,
) -> CashApprovalResult:
    """
    Approve a pending transaction and apply it to the daily cash ledger.

    The status change, the daily balance update, the money receipt, the
    optional journal entry and the audit record commit together or not at all.
    When a concurrent approval creates the day's balance row first, the unit is
    rolled back and replayed once against that row.

    Raises:
        NotFoundError: no such transaction
        InvalidStateError: the transaction is not pending, or the day's row
            could not be written after a retry
    """
    strategy = (strategy or CASH_BALANCE_STRATEGY).lower()
    if strategy not in (STRATEGY_RECOMPUTE, STRATEGY_FOLD):
        raise ValidationError(f"Unknown cash balance strategy: {strategy}")
    if post_journal is None:
        post_journal = CASH_APPROVAL_POSTS_JOURNAL

    for attempt in range(1, APPROVAL_ATTEMPTS + 1):
        try:
            db_tx, receipt, journal_entry = _apply_approval(db, transaction_id, user_id, strategy, post_journal)
            db.commit()
            break
        except IntegrityError as e:
            db.rollback()
            if attempt == APPROVAL_ATTEMPTS:
                raise InvalidStateError(
                    f"Cash transaction {transaction_id} could not be approved: concurrent daily cash update"
                ) from e
            logger.warning(f"Approval of cash transaction {transaction_id} hit a concurrent write; retrying")
        except Exception:
            db.rollback()
            raise

    db.refresh(db_tx)
    logger.info(f"Cash transaction {db_tx.transaction_code} approved by user {user_id} ({strategy})")
    return CashApprovalResult(
        transaction=CashTransactionSchema.model_validate(db_tx),
        receipt_no=receipt.receipt_no,
        journal_entry_number=journal_entry.entry_number if journal_entry is not None else None,
    )


def reject_cash_transaction(db: Session, transaction_id: int, user_id: str, reason: Optional[str] = None) -> CashTransaction:
    """Cancel a pending transaction. The daily cash ledger is not touched."""
    try:
        db_tx = _lock_pending(db, transaction_id)

        reason_text = (reason or "").strip()
        if reason_text:
            db_tx.notes = f"{db_tx.notes or ''} | Rejected: {reason_text}"
        db_tx.status = CashTransactionStatus.CANCELLED
        db_tx.verified_by = user_id
        db_tx.verified_at = now_local()
        db_tx.updated_by = user_id

        create_audit_log(db, AuditLogCreate(
            actor_id=user_id,
            action="CASH_REJECT",
            table_name="cash_transactions",
            record_id=db_tx.id,
            details=f"Rejected cash transaction {db_tx.transaction_code}",
            new_values={"status": db_tx.status.value, "reason": reason_text},
        ))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_tx)
    logger.info(f"Cash transaction {db_tx.transaction_code} rejected by user {user_id}")
    return db_tx
