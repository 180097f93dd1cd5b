"""Expense service - expenses, splits, settlements and the trip budget"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...errors import api_error
from ...models import Budget, Expense, Trip, User
from ...permissions import require_trip_permission, trip_member_ids
from ...shared.pagination import total_pages
from .calculations import (
    calculate_balances,
    calculate_custom_split,
    calculate_equal_split,
    calculate_settlements,
    round_money,
)
from .repository import ExpenseRepository
from .schemas import BudgetUpsert, ExpenseCreate, ExpenseUpdate

logger = logging.getLogger(__name__)


class ExpenseService:
    """Service layer for expense business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ExpenseRepository()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_shares(self, trip: Trip, amount: float, data) -> Optional[list[tuple[str, float]]]:
        """Turn the split fields of a request into (user_id, amount) shares"""
        if not data.splitType:
            return None

        user_ids = (
            data.splitWithUserIds
            if data.splitType == "EQUAL"
            else [split.userId for split in data.splits]
        )
        outsiders = set(user_ids) - trip_member_ids(self.db, trip)
        if outsiders:
            raise api_error(
                400,
                "Expenses can only be split with trip members",
                details=[{"field": "splits", "message": f"Not a trip member: {', '.join(sorted(outsiders))}"}],
            )

        try:
            if data.splitType == "EQUAL":
                return calculate_equal_split(amount, user_ids)
            return calculate_custom_split(amount, [split.model_dump() for split in data.splits])
        except ValueError as e:
            raise api_error(400, str(e), details=[{"field": "splits", "message": str(e)}]) from e

    def _check_event(self, trip_id: str, event_id: Optional[str]) -> None:
        if event_id and not self.repo.event_in_trip(self.db, trip_id, event_id):
            raise api_error(
                400,
                "Event does not belong to this trip",
                details=[{"field": "eventId", "message": "Event not found in this trip"}],
            )

    @staticmethod
    def _summary(expenses: list[Expense]) -> dict:
        by_category: dict[str, float] = {}
        by_currency: dict[str, float] = {}
        for expense in expenses:
            by_category[expense.category] = round_money(by_category.get(expense.category, 0) + expense.amount)
            by_currency[expense.currency] = round_money(by_currency.get(expense.currency, 0) + expense.amount)
        return {
            "totalAmount": round_money(sum(e.amount for e in expenses)),
            "count": len(expenses),
            "byCategory": by_category,
            "byCurrency": by_currency,
        }

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def list_expenses(
        self, trip_id: str, user: User, category: Optional[str], page: int, limit: int
    ) -> dict:
        require_trip_permission(self.db, user, trip_id, "view")
        expenses, total = self.repo.list_expenses(self.db, trip_id, category, page, limit)
        return {
            "expenses": expenses,
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": total_pages(total, limit),
            "summary": self._summary(self.repo.all_for_trip(self.db, trip_id)),
        }

    def create_expense(self, trip_id: str, data: ExpenseCreate, user: User) -> Expense:
        trip, _ = require_trip_permission(self.db, user, trip_id, "edit")
        self._check_event(trip_id, data.eventId)

        paid_by = data.paidBy or user.id
        if paid_by not in trip_member_ids(self.db, trip):
            raise api_error(
                400,
                "The payer must be a trip member",
                details=[{"field": "paidBy", "message": "Not a trip member"}],
            )

        shares = self._resolve_shares(trip, data.amount, data)
        expense = Expense(
            trip_id=trip_id,
            event_id=data.eventId,
            category=data.category,
            description=data.description,
            amount=round_money(data.amount),
            currency=data.currency,
            date=data.date,
            paid_by=paid_by,
            receipt_url=data.receiptUrl,
        )
        expense = self.repo.save_with_splits(self.db, expense, shares)
        logger.info(f"✅ Expense {expense.id} ({expense.amount} {expense.currency}) added to trip {trip_id}")
        return expense

    def update_expense(self, trip_id: str, expense_id: str, data: ExpenseUpdate, user: User) -> Expense:
        trip, _ = require_trip_permission(self.db, user, trip_id, "edit")
        expense = self.repo.get_expense(self.db, trip_id, expense_id)
        if not expense:
            raise HTTPException(status_code=404, detail="Expense not found")

        provided = data.model_dump(exclude_unset=True)
        if "eventId" in provided:
            self._check_event(trip_id, data.eventId)

        field_map = {
            "description": "description",
            "category": "category",
            "currency": "currency",
            "date": "date",
            "eventId": "event_id",
            "receiptUrl": "receipt_url",
        }
        for key, column in field_map.items():
            if key in provided and (provided[key] is not None or key in ("eventId", "receiptUrl")):
                setattr(expense, column, provided[key])

        old_amount = expense.amount
        if data.amount is not None:
            expense.amount = round_money(data.amount)

        shares = self._resolve_shares(trip, expense.amount, data)
        if shares is None and expense.splits and expense.amount != old_amount:
            # Keep each user's proportion when only the amount changes
            proportions = [
                {"userId": s.user_id, "percentage": s.amount / old_amount * 100} for s in expense.splits
            ]
            shares = calculate_custom_split(expense.amount, proportions)

        expense = self.repo.save_with_splits(self.db, expense, shares)
        logger.info(f"✅ Expense {expense_id} updated in trip {trip_id}")
        return expense

    def delete_expense(self, trip_id: str, expense_id: str, user: User) -> dict:
        """Owner/ADMIN, or the member who paid, can delete an expense"""
        _, context = require_trip_permission(self.db, user, trip_id, "view")
        expense = self.repo.get_expense(self.db, trip_id, expense_id)
        if not expense:
            raise HTTPException(status_code=404, detail="Expense not found")

        if not (context.can_delete() or (context.can_edit() and expense.paid_by == user.id)):
            raise HTTPException(status_code=403, detail="You do not have permission to delete this expense")

        self.repo.delete_expense(self.db, expense)
        logger.info(f"🗑️ Expense {expense_id} deleted from trip {trip_id} by {user.id}")
        return {"success": True, "message": "Expense deleted successfully"}

    def get_settlements(self, trip_id: str, user: User) -> dict:
        require_trip_permission(self.db, user, trip_id, "view")
        balances = calculate_balances(self.repo.all_for_trip(self.db, trip_id))
        settlements = []
        for currency, ledger in sorted(balances.items()):
            settlements.extend(calculate_settlements(ledger, currency))
        return {"balances": balances, "settlements": settlements}

    # ------------------------------------------------------------------
    # Budget
    # ------------------------------------------------------------------

    def get_budget(self, trip_id: str, user: User) -> dict:
        require_trip_permission(self.db, user, trip_id, "view")
        budget = self.repo.get_budget(self.db, trip_id)
        return self._budget_view(trip_id, budget)

    def upsert_budget(self, trip_id: str, data: BudgetUpsert, user: User) -> dict:
        require_trip_permission(self.db, user, trip_id, "edit")
        budget = self.repo.upsert_budget(
            self.db,
            trip_id,
            total_budget=round_money(data.totalBudget),
            currency=data.currency,
            category_budgets=data.categoryBudgets or {},
        )
        logger.info(f"✅ Budget for trip {trip_id} set to {budget.total_budget} {budget.currency}")
        return self._budget_view(trip_id, budget)

    def _budget_view(self, trip_id: str, budget: Optional[Budget]) -> dict:
        expenses = self.repo.all_for_trip(self.db, trip_id)
        if budget is None:
            return {"budget": None, "summary": self._summary(expenses)}

        in_currency = [e for e in expenses if e.currency == budget.currency]
        spent = round_money(sum(e.amount for e in in_currency))
        spent_by_category: dict[str, float] = {}
        for expense in in_currency:
            spent_by_category[expense.category] = round_money(
                spent_by_category.get(expense.category, 0) + expense.amount
            )

        categories = {}
        for category, planned in (budget.category_budgets or {}).items():
            category_spent = spent_by_category.get(category, 0)
            categories[category] = {
                "budget": planned,
                "spent": category_spent,
                "remaining": round_money(planned - category_spent),
            }

        return {
            "budget": {
                "id": budget.id,
                "tripId": budget.trip_id,
                "totalBudget": budget.total_budget,
                "currency": budget.currency,
                "categoryBudgets": budget.category_budgets or {},
                "totalSpent": spent,
                "remaining": round_money(budget.total_budget - spent),
                "percentUsed": round(spent / budget.total_budget * 100, 1) if budget.total_budget else None,
                "categories": categories,
                "spentByCategory": spent_by_category,
            },
            "summary": self._summary(expenses),
        }
