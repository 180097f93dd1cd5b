"""Expense and budget schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models import Expense
from ...shared.validators import UtcDatetime, require_uuid, validate_currency

ExpenseCategory = Literal["ACCOMMODATION", "TRANSPORTATION", "FOOD", "ACTIVITIES", "SHOPPING", "OTHER"]
SplitType = Literal["EQUAL", "CUSTOM"]

MAX_AMOUNT = 999999999.99


class ExpenseSplitInput(BaseModel):
    userId: str
    amount: Optional[float] = Field(None, ge=0)
    percentage: Optional[float] = Field(None, ge=0, le=100)

    @model_validator(mode="after")
    def one_of_amount_or_percentage(self):
        if (self.amount is None) == (self.percentage is None):
            raise ValueError("Provide either amount or percentage for each split")
        return self


class _SplitFields(BaseModel):
    splitType: Optional[SplitType] = None
    splitWithUserIds: Optional[list[str]] = None
    splits: Optional[list[ExpenseSplitInput]] = None

    @model_validator(mode="after")
    def validate_split_shape(self):
        if self.splitType == "EQUAL" and not self.splitWithUserIds:
            raise ValueError("splitWithUserIds is required for an equal split")
        if self.splitType == "CUSTOM" and not self.splits:
            raise ValueError("splits is required for a custom split")
        if self.splitWithUserIds and len(set(self.splitWithUserIds)) != len(self.splitWithUserIds):
            raise ValueError("Split users must be unique")
        if self.splits and len({s.userId for s in self.splits}) != len(self.splits):
            raise ValueError("Split users must be unique")
        return self


class ExpenseCreate(_SplitFields):
    description: str = Field(..., min_length=1, max_length=500)
    amount: float = Field(..., gt=0, le=MAX_AMOUNT)
    currency: str = "USD"
    category: ExpenseCategory = "OTHER"
    date: UtcDatetime
    eventId: Optional[str] = None
    receiptUrl: Optional[str] = Field(None, max_length=500)
    paidBy: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v):
        return validate_currency(v)

    @field_validator("eventId")
    @classmethod
    def check_event_id(cls, v):
        return require_uuid(v) if v is not None else v


class ExpenseUpdate(_SplitFields):
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)
    currency: Optional[str] = None
    category: Optional[ExpenseCategory] = None
    date: Optional[UtcDatetime] = None
    eventId: Optional[str] = None
    receiptUrl: Optional[str] = Field(None, max_length=500)

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v):
        return validate_currency(v) if v is not None else v

    @field_validator("eventId")
    @classmethod
    def check_event_id(cls, v):
        return require_uuid(v) if v is not None else v


class BudgetUpsert(BaseModel):
    totalBudget: float = Field(..., ge=0, le=MAX_AMOUNT)
    currency: str = "USD"
    categoryBudgets: Optional[dict[ExpenseCategory, float]] = None

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v):
        return validate_currency(v)

    @field_validator("categoryBudgets")
    @classmethod
    def check_category_budgets(cls, v):
        if v and any(amount < 0 for amount in v.values()):
            raise ValueError("Category budgets cannot be negative")
        return v


class ExpenseSplitResponse(BaseModel):
    userId: str
    amount: float


class ExpenseResponse(BaseModel):
    id: str
    tripId: str
    eventId: Optional[str] = None
    category: str
    description: str
    amount: float
    currency: str
    date: datetime
    paidBy: str
    receiptUrl: Optional[str] = None
    splits: list[ExpenseSplitResponse]
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def expense_response(expense: Expense) -> ExpenseResponse:
    return ExpenseResponse(
        id=expense.id,
        tripId=expense.trip_id,
        eventId=expense.event_id,
        category=expense.category,
        description=expense.description,
        amount=expense.amount,
        currency=expense.currency,
        date=expense.date,
        paidBy=expense.paid_by,
        receiptUrl=expense.receipt_url,
        splits=[ExpenseSplitResponse(userId=s.user_id, amount=s.amount) for s in expense.splits],
        createdAt=expense.created_at,
        updatedAt=expense.updated_at,
    )
