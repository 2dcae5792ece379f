"""
budget_service.py — Monthly budgets
One budget per (user, month, year) with optional per-category sub-limits,
plus per-category utilisation for a period.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import NotFound, Forbidden, Conflict, is_unique_violation
from models.budget import Budget, BudgetCategoryLimit
from models.expense import Expense
from services.category_service import CategoryService
from services.analytics_service import month_window, percent_of

ZERO = Decimal("0")


class BudgetService:
    @staticmethod
    def get_all(db: Session, user_id: int) -> list[Budget]:
        return db.query(Budget).filter_by(user_id=user_id)\
                 .order_by(Budget.year.desc(), Budget.month.desc()).all()

    @staticmethod
    def get_for_period(db: Session, user_id: int, year: int, month: int) -> Budget | None:
        return db.query(Budget).filter_by(user_id=user_id, year=year, month=month).first()

    @staticmethod
    def get_current(db: Session, user_id: int) -> Budget | None:
        today = datetime.now(timezone.utc).date()
        return BudgetService.get_for_period(db, user_id, today.year, today.month)

    @staticmethod
    def _get_owned(db: Session, user_id: int, budget_id: int, action: str) -> Budget:
        budget = db.query(Budget).filter_by(id=budget_id).first()
        if not budget:
            raise NotFound("Budget not found")
        if budget.user_id != user_id:
            raise Forbidden(f"You can only {action} your own budgets")
        return budget

    @staticmethod
    def _build_limits(db: Session, user_id: int, category_limits: list[dict]) -> list[BudgetCategoryLimit]:
        limits = []
        for item in category_limits:
            CategoryService.resolve_for_use(db, user_id, item["category_id"])
            limits.append(BudgetCategoryLimit(category_id=item["category_id"], limit=item["limit"]))
        return limits

    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Budget:
        if BudgetService.get_for_period(db, user_id, data["year"], data["month"]):
            raise Conflict("Budget already exists for this period. Use PUT to update.")

        budget = Budget(
            user_id=user_id,
            month=data["month"],
            year=data["year"],
            limit=data["limit"],
            category_limits=BudgetService._build_limits(db, user_id, data.get("category_limits") or []),
        )
        db.add(budget)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if not is_unique_violation(e):
                raise
            # Lost the race against a concurrent create for the same period
            raise Conflict("Budget already exists for this period. Use PUT to update.")
        db.refresh(budget)
        return budget

    @staticmethod
    def update(db: Session, user_id: int, budget_id: int, data: dict) -> Budget:
        budget = BudgetService._get_owned(db, user_id, budget_id, "update")
        if data.get("limit") is not None:
            budget.limit = data["limit"]
        if data.get("category_limits") is not None:
            budget.category_limits = BudgetService._build_limits(db, user_id, data["category_limits"])
        db.commit()
        db.refresh(budget)
        return budget

    @staticmethod
    def delete(db: Session, user_id: int, budget_id: int):
        budget = BudgetService._get_owned(db, user_id, budget_id, "delete")
        db.delete(budget)
        db.commit()

    @staticmethod
    def get_status(db: Session, user_id: int, year: int, month: int) -> dict:
        """Spend against each category sub-limit of the period's budget."""
        budget = BudgetService.get_for_period(db, user_id, year, month)
        if not budget:
            raise NotFound("Budget not found for this period")

        start, end = month_window(year, month)
        spent_by_category = dict(
            db.query(Expense.category_id, func.sum(Expense.amount)).filter(
                Expense.user_id == user_id,
                Expense.date >= start,
                Expense.date <= end,
            ).group_by(Expense.category_id).all()
        )

        status = []
        for cl in budget.category_limits:
            spent = spent_by_category.get(cl.category_id) or ZERO
            status.append({
                "category": {"id": cl.category.id, "name": cl.category.name, "color": cl.category.color},
                "limit": cl.limit,
                "spent": spent,
                "remaining": cl.limit - spent,
                "percentage_used": percent_of(spent, cl.limit),
                "is_over_limit": cl.limit > 0 and spent > cl.limit,
            })

        return {"budget": budget.to_dict(), "categories": status}
