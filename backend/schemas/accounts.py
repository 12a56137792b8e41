from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from models.account import VALID_ACCOUNT_TYPES, STATUS_ACTIVE, STATUS_INACTIVE

# Spellings accepted on input and the type they are stored as.
ACCOUNT_TYPE_ALIASES = {"expenses": "expense", "revenues": "revenue", "assets": "asset", "liabilities": "liability"}


def normalize_account_type(value: str) -> str:
    value = (value or "").strip().lower()
    value = ACCOUNT_TYPE_ALIASES.get(value, value)
    if value not in VALID_ACCOUNT_TYPES:
        raise ValueError(f"account_type must be one of {VALID_ACCOUNT_TYPES}")
    return value


class AccountBase(BaseModel):
    account_number: str = Field(..., min_length=1, max_length=20)
    account_name: str = Field(..., min_length=1, max_length=100)
    account_type: str  # asset, liability, equity, revenue, income, expense, other
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    description: Optional[str] = None

    @field_validator('account_type')
    @classmethod
    def validate_account_type(cls, v):
        return normalize_account_type(v)


class AccountCreate(AccountBase):
    opening_balance: Decimal = Field(Decimal("0"), decimal_places=2)
    opening_date: Optional[date] = None


class AccountUpdate(BaseModel):
    account_name: Optional[str] = Field(None, min_length=1, max_length=100)
    account_type: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    description: Optional[str] = None
    status: Optional[str] = None

    # Omitting a field leaves it unchanged; an explicit null would blank a required column.
    @field_validator('account_name', 'account_type', 'currency', 'status', mode='before')
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator('account_type')
    @classmethod
    def validate_account_type(cls, v):
        return normalize_account_type(v)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v not in (STATUS_ACTIVE, STATUS_INACTIVE):
            raise ValueError(f"status must be '{STATUS_ACTIVE}' or '{STATUS_INACTIVE}'")
        return v


class Account(AccountBase):
    id: int
    currency: str
    status: str
    balance: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True


class AccountTypeTotal(BaseModel):
    account_type: str
    total: Decimal


class AccountList(BaseModel):
    accounts: List[Account]
    totals: List[AccountTypeTotal]


class BalanceDrift(BaseModel):
    """A cached balance that no longer matches its postings."""
    kind: str = "consistency"
    account_id: int
    account_number: str
    cached_balance: Decimal
    computed_balance: Decimal
    difference: Decimal
