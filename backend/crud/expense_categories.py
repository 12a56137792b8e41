import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from crud.audit_log import create_audit_log
from errors import DuplicateError, InvalidPeriodError, NotFoundError
from models.cash_transaction import CashTransaction, CashTransactionStatus, CashTransactionType
from models.expense_category import ExpenseCategory
from schemas import expense_categories as schemas
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict
from utils.money import money, ZERO
from utils.periods import today_local, days_back

logger = logging.getLogger(__name__)

DEFAULT_EXPENSE_CATEGORIES = [
    ("OFFICE", "Office Supplies"),
    ("TRAVEL", "Travel & Transportation"),
    ("UTILITY", "Utilities"),
    ("SALARY", "Salaries & Wages"),
    ("RENT", "Rent & Lease"),
    ("MARKETING", "Marketing & Advertising"),
    ("MAINTENANCE", "Maintenance & Repairs"),
    ("INSURANCE", "Insurance"),
    ("TAX", "Taxes & Licenses"),
    ("BANK", "Bank Charges"),
    ("OTHER", "Other Expenses"),
]

# Days looked back from today, today included
ANALYSIS_WINDOWS = {"day": 0, "week": 6, "month": 29, "year": 365}


def get_expense_category(db: Session, category_id: int) -> ExpenseCategory:
    category = db.query(ExpenseCategory).filter(ExpenseCategory.id == category_id).first()
    if category is None:
        raise NotFoundError(f"Expense category with id {category_id} not found")
    return category


def get_expense_categories(db: Session, include_inactive: bool = False) -> List[ExpenseCategory]:
    query = db.query(ExpenseCategory)
    if not include_inactive:
        query = query.filter(ExpenseCategory.status == "active")
    return query.order_by(ExpenseCategory.category_name).all()


def _check_unique(db: Session, code: Optional[str], name: Optional[str], exclude_id: Optional[int] = None):
    for column, value in ((ExpenseCategory.category_code, code), (ExpenseCategory.category_name, name)):
        if value is None:
            continue
        query = db.query(ExpenseCategory.id).filter(column == value)
        if exclude_id is not None:
            query = query.filter(ExpenseCategory.id != exclude_id)
        if query.first() is not None:
            raise DuplicateError(f"Expense category {value} already exists")


def add_expense_category(db: Session, category: schemas.ExpenseCategoryCreate, user_id: str) -> ExpenseCategory:
    """Insert a category into the session without committing."""
    _check_unique(db, category.category_code, category.category_name)
    db_category = ExpenseCategory(
        category_code=category.category_code,
        category_name=category.category_name,
        budget_amount=money(category.budget_amount),
        budget_period=category.budget_period,
        status="active",
        created_by=user_id,
    )
    db.add(db_category)
    db.flush()
    create_audit_log(db, AuditLogCreate(
        actor_id=user_id,
        action="CREATE_EXPENSE_CATEGORY",
        table_name="expense_categories",
        record_id=db_category.id,
        details=f"Created expense category: {db_category.category_code} - {db_category.category_name}",
        new_values=sqlalchemy_to_dict(db_category),
    ))
    return db_category


def create_expense_category(db: Session, category: schemas.ExpenseCategoryCreate, user_id: str) -> ExpenseCategory:
    try:
        db_category = add_expense_category(db, category, user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_category)
    logger.info(f"Expense category {db_category.category_code} created by user {user_id}")
    return db_category


def update_expense_category(db: Session, category_id: int, category_update: schemas.ExpenseCategoryUpdate,
                            user_id: str) -> ExpenseCategory:
    try:
        db_category = get_expense_category(db, category_id)
        update_data = category_update.model_dump(exclude_unset=True)
        _check_unique(db, None, update_data.get('category_name'), exclude_id=category_id)

        for key, value in update_data.items():
            setattr(db_category, key, value)
        db_category.updated_by = user_id

        create_audit_log(db, AuditLogCreate(
            actor_id=user_id,
            action="UPDATE_EXPENSE_CATEGORY",
            table_name="expense_categories",
            record_id=db_category.id,
            details=f"Updated expense category: {db_category.category_code}",
            new_values={key: str(value) for key, value in update_data.items()},
        ))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_category)
    return db_category


def initialize_default_expense_categories(db: Session, user_id: str) -> List[ExpenseCategory]:
    """Seed the standard categories. Existing codes are left alone."""
    try:
        for code, name in DEFAULT_EXPENSE_CATEGORIES:
            existing = db.query(ExpenseCategory.id).filter(
                (ExpenseCategory.category_code == code) | (ExpenseCategory.category_name == name)
            ).first()
            if existing is None:
                add_expense_category(db, schemas.ExpenseCategoryCreate(category_code=code, category_name=name), user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_expense_categories(db)


def get_expense_analysis(db: Session, period: str = "month", today: Optional[date] = None) -> schemas.ExpenseAnalysis:
    """
    Budget against approved payments per active category over a trailing window.

    Payments are matched to a category by name. Payments whose category names
    no active category are not counted. Rows come highest spend first.
    """
    period = (period or "").strip().lower()
    if period not in ANALYSIS_WINDOWS:
        raise InvalidPeriodError(f"period must be one of {tuple(ANALYSIS_WINDOWS)}")
    end_date = today or today_local()
    start_date = days_back(end_date, ANALYSIS_WINDOWS[period])

    spent = func.coalesce(func.sum(CashTransaction.amount), 0)
    rows = db.query(
        ExpenseCategory,
        spent,
        func.count(CashTransaction.id),
    ).outerjoin(CashTransaction, and_(
        CashTransaction.category == ExpenseCategory.category_name,
        CashTransaction.transaction_type == CashTransactionType.PAYMENT,
        CashTransaction.status == CashTransactionStatus.APPROVED,
        CashTransaction.date >= start_date,
        CashTransaction.date <= end_date,
    )).filter(
        ExpenseCategory.status == "active"
    ).group_by(ExpenseCategory.id).all()

    categories = []
    for category, actual, count in rows:
        budget = money(category.budget_amount)
        actual = money(actual)
        categories.append(schemas.ExpenseAnalysisRow(
            category_code=category.category_code,
            category_name=category.category_name,
            budget_amount=budget,
            actual_spent=actual,
            transaction_count=int(count or 0),
            variance=budget - actual,
        ))
    categories.sort(key=lambda row: (-row.actual_spent, row.category_name))

    total_budget = sum((row.budget_amount for row in categories), ZERO)
    total_spent = sum((row.actual_spent for row in categories), ZERO)
    return schemas.ExpenseAnalysis(
        period=period,
        start_date=start_date,
        end_date=end_date,
        categories=categories,
        totals=schemas.ExpenseAnalysisTotals(
            budget=total_budget,
            spent=total_spent,
            count=sum(row.transaction_count for row in categories),
            variance=total_budget - total_spent,
        ),
    )
