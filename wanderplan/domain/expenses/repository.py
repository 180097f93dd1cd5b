"""Expense repository - Database operations for expenses and budgets"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Budget, Event, Expense, ExpenseSplit
from ...shared.pagination import paginate


class ExpenseRepository:
    """Repository for expense database operations"""

    @staticmethod
    def list_expenses(
        db: Session, trip_id: str, category: Optional[str], page: int, limit: int
    ) -> tuple[list[Expense], int]:
        query = (
            db.query(Expense)
            .options(selectinload(Expense.splits))
            .filter(Expense.trip_id == trip_id)
        )
        if category:
            query = query.filter(Expense.category == category)
        query = query.order_by(Expense.date.desc(), Expense.created_at.desc())
        return paginate(query, page, limit)

    @staticmethod
    def all_for_trip(db: Session, trip_id: str) -> list[Expense]:
        return (
            db.query(Expense)
            .options(selectinload(Expense.splits))
            .filter(Expense.trip_id == trip_id)
            .all()
        )

    @staticmethod
    def get_expense(db: Session, trip_id: str, expense_id: str) -> Optional[Expense]:
        return (
            db.query(Expense)
            .filter(Expense.id == expense_id, Expense.trip_id == trip_id)
            .first()
        )

    @staticmethod
    def event_in_trip(db: Session, trip_id: str, event_id: str) -> bool:
        return (
            db.query(Event.id).filter(Event.id == event_id, Event.trip_id == trip_id).first()
            is not None
        )

    @staticmethod
    def save_with_splits(
        db: Session, expense: Expense, shares: Optional[list[tuple[str, float]]]
    ) -> Expense:
        """
        Persist an expense; when shares is given the split rows are replaced.
        Expense and splits commit together.
        """
        try:
            db.add(expense)
            db.flush()
            if shares is not None:
                for split in list(expense.splits):
                    db.delete(split)
                db.flush()
                for user_id, amount in shares:
                    db.add(ExpenseSplit(expense_id=expense.id, user_id=user_id, amount=amount))
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(expense)
        db.expire(expense, ["splits"])
        return expense

    @staticmethod
    def delete_expense(db: Session, expense: Expense) -> None:
        db.delete(expense)
        db.commit()

    @staticmethod
    def get_budget(db: Session, trip_id: str) -> Optional[Budget]:
        return db.query(Budget).filter(Budget.trip_id == trip_id).first()

    @staticmethod
    def upsert_budget(db: Session, trip_id: str, **values) -> Budget:
        budget = ExpenseRepository.get_budget(db, trip_id)
        if budget is None:
            budget = Budget(trip_id=trip_id)
            db.add(budget)
        for key, value in values.items():
            setattr(budget, key, value)
        db.commit()
        db.refresh(budget)
        return budget
