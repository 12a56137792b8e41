"""
Fixtures for Ledger Tests
=========================

Provides pytest fixtures for:
- An in-memory SQLite database shared by the session and the app
- A small chart of accounts
- A FastAPI TestClient with the database and the caller overridden
"""

import os

# Must be set before database.py is imported so the app never reaches for PostgreSQL
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CASH_BALANCE_STRATEGY", "recompute")
os.environ.setdefault("CASH_APPROVAL_POSTS_JOURNAL", "false")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from crud import accounts as crud_accounts
from crud import journal_entry as crud_journal
from database import Base, get_db
from main import app
from schemas.accounts import AccountCreate
from schemas.journal_entry import JournalEntryCreate, JournalEntryLineCreate
from utils.auth_utils import get_current_user

TEST_USER_ID = "user-admin"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user_id():
    return TEST_USER_ID


@pytest.fixture
def current_user():
    """Claims of the caller; tests override the role through this fixture."""
    return {"sub": TEST_USER_ID, "role": "admin"}


@pytest.fixture
def client(db, current_user):
    def override_get_db():
        yield db

    def override_get_current_user():
        return current_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_account(db, number, name, account_type, user_id=TEST_USER_ID, **kwargs):
    return crud_accounts.create_account(db, AccountCreate(
        account_number=number,
        account_name=name,
        account_type=account_type,
        **kwargs,
    ), user_id)


def post(db, entry_date, lines, description="Test entry", user_id=TEST_USER_ID):
    """
    Post an entry from (account, debit, credit) tuples.
    """
    return crud_journal.post_entry(db, JournalEntryCreate(
        date=entry_date,
        description=description,
        lines=[
            JournalEntryLineCreate(account_id=account.id, debit=Decimal(str(debit)), credit=Decimal(str(credit)))
            for account, debit, credit in lines
        ],
    ), user_id)


@pytest.fixture
def chart(db):
    """Cash, bank, loan, capital, sales and rent accounts."""
    return {
        "cash": make_account(db, "1000", "Cash", "asset"),
        "bank": make_account(db, "1010", "Bank", "asset"),
        "loan": make_account(db, "2100", "Loans Payable", "liability"),
        "capital": make_account(db, "3000", "Owner's Equity", "equity"),
        "sales": make_account(db, "4000", "Sales Revenue", "revenue"),
        "rent": make_account(db, "5200", "Rent Expense", "expense"),
    }


@pytest.fixture
def january():
    return date(2025, 1, 1), date(2025, 1, 31)
