"""Expense router - expenses, settlements and budget endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.pagination import MAX_PAGE_SIZE
from .schemas import BudgetUpsert, ExpenseCategory, ExpenseCreate, ExpenseUpdate, expense_response
from .service import ExpenseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trips/{trip_id}", tags=["Expenses"])


def get_expense_service(db: Session = Depends(get_db)) -> ExpenseService:
    """Dependency injection for ExpenseService"""
    return ExpenseService(db)


# ============================================================================
# EXPENSES
# ============================================================================


@router.get("/expenses")
async def list_expenses(
    trip_id: str,
    category: Optional[ExpenseCategory] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
):
    result = service.list_expenses(trip_id, current_user, category, page, limit)
    result["expenses"] = [expense_response(e) for e in result["expenses"]]
    return result


@router.post("/expenses", status_code=201)
async def create_expense(
    trip_id: str,
    data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
):
    expense = service.create_expense(trip_id, data, current_user)
    return {"expense": expense_response(expense)}


@router.get("/expenses/settlements")
async def get_settlements(
    trip_id: str,
    current_user: User = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
):
    """Who owes whom, per currency"""
    return service.get_settlements(trip_id, current_user)


@router.patch("/expenses/{expense_id}")
async def update_expense(
    trip_id: str,
    expense_id: str,
    data: ExpenseUpdate,
    current_user: User = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
):
    expense = service.update_expense(trip_id, expense_id, data, current_user)
    return {"expense": expense_response(expense)}


@router.delete("/expenses/{expense_id}")
async def delete_expense(
    trip_id: str,
    expense_id: str,
    current_user: User = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
):
    return service.delete_expense(trip_id, expense_id, current_user)


# ============================================================================
# BUDGET
# ============================================================================


@router.get("/budget")
async def get_budget(
    trip_id: str,
    current_user: User = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
):
    return service.get_budget(trip_id, current_user)


@router.put("/budget")
async def upsert_budget(
    trip_id: str,
    data: BudgetUpsert,
    current_user: User = Depends(get_current_user),
    service: ExpenseService = Depends(get_expense_service),
):
    return service.upsert_budget(trip_id, data, current_user)


__all__ = [
    "router",
    "list_expenses",
    "create_expense",
    "get_settlements",
    "update_expense",
    "delete_expense",
    "get_budget",
    "upsert_budget",
]
