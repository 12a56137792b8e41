from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

VALID_CATEGORY_STATUSES = ("active", "inactive")

class ExpenseCategoryBase(BaseModel):
    category_code: str = Field(..., min_length=1, max_length=30)
    category_name: str = Field(..., min_length=1, max_length=100)
    budget_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    budget_period: str = "monthly"

    @field_validator('category_code')
    @classmethod
    def normalize_code(cls, v):
        return v.strip().upper()

class ExpenseCategoryCreate(ExpenseCategoryBase):
    pass

class ExpenseCategoryUpdate(BaseModel):
    category_name: Optional[str] = Field(None, min_length=1, max_length=100)
    budget_amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    budget_period: Optional[str] = None
    status: Optional[str] = None

    @field_validator('category_name', 'budget_amount', 'budget_period', 'status', mode='before')
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        v = v.strip().lower()
        if v not in VALID_CATEGORY_STATUSES:
            raise ValueError(f"status must be one of {VALID_CATEGORY_STATUSES}")
        return v

class ExpenseCategory(ExpenseCategoryBase):
    id: int
    status: str
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True

class ExpenseAnalysisRow(BaseModel):
    category_code: str
    category_name: str
    budget_amount: Decimal
    actual_spent: Decimal
    transaction_count: int
    variance: Decimal  # budget - spent; negative when over budget

class ExpenseAnalysisTotals(BaseModel):
    budget: Decimal
    spent: Decimal
    count: int
    variance: Decimal

class ExpenseAnalysis(BaseModel):
    period: str
    start_date: date
    end_date: date
    categories: List[ExpenseAnalysisRow]
    totals: ExpenseAnalysisTotals
