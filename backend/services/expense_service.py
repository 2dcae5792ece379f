"""
expense_service.py — Expense records
Owner-scoped CRUD with filtered, paginated listing and receipt attachment.
"""

from sqlalchemy import or_
from sqlalchemy.orm import Session

from errors import NotFound, Forbidden, BadRequest
from models.expense import Expense
from responses import ListParams
from services.category_service import CategoryService

EXPENSE_SORT_FIELDS = ("date", "amount", "description", "created_at", "payment_method")
EXPENSE_MUTABLE_FIELDS = (
    "amount", "category_id", "date", "description", "payment_method",
    "is_recurring", "recurring_frequency", "notes",
)
NULLABLE_FIELDS = ("recurring_frequency", "notes")


def check_recurrence(is_recurring: bool, frequency: str | None) -> str | None:
    """A frequency is required for recurring records and dropped otherwise."""
    if is_recurring and not frequency:
        raise BadRequest("recurring_frequency is required when is_recurring is true")
    return frequency if is_recurring else None


class ExpenseService:
    @staticmethod
    def _get_owned(db: Session, user_id: int, expense_id: int, action: str = "access") -> Expense:
        expense = db.query(Expense).filter_by(id=expense_id).first()
        if not expense:
            raise NotFound("Expense not found")
        if expense.user_id != user_id:
            raise Forbidden(f"You can only {action} your own expenses")
        return expense

    @staticmethod
    def get(db: Session, user_id: int, expense_id: int) -> Expense:
        return ExpenseService._get_owned(db, user_id, expense_id)

    @staticmethod
    def get_all(db: Session, user_id: int, params: ListParams, filters: dict) -> tuple[list[Expense], int]:
        query = db.query(Expense).filter(Expense.user_id == user_id)

        if filters.get("start_date"):
            query = query.filter(Expense.date >= filters["start_date"])
        if filters.get("end_date"):
            query = query.filter(Expense.date <= filters["end_date"])
        if filters.get("category"):
            query = query.filter(Expense.category_id == filters["category"])
        if filters.get("min_amount") is not None:
            query = query.filter(Expense.amount >= filters["min_amount"])
        if filters.get("max_amount") is not None:
            query = query.filter(Expense.amount <= filters["max_amount"])
        if filters.get("search"):
            pattern = f"%{filters['search']}%"
            query = query.filter(or_(Expense.description.ilike(pattern), Expense.notes.ilike(pattern)))

        total = query.count()
        expenses = (
            query.order_by(params.order_by(Expense, EXPENSE_SORT_FIELDS), Expense.id.desc())
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return expenses, total

    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Expense:
        CategoryService.resolve_for_use(db, user_id, data["category_id"])
        is_recurring = data.get("is_recurring") or False
        expense = Expense(
            user_id=user_id,
            amount=data["amount"],
            category_id=data["category_id"],
            date=data["date"],
            description=data["description"],
            payment_method=data.get("payment_method") or "cash",
            is_recurring=is_recurring,
            recurring_frequency=check_recurrence(is_recurring, data.get("recurring_frequency")),
            notes=data.get("notes"),
        )
        db.add(expense)
        db.commit()
        db.refresh(expense)
        return expense

    @staticmethod
    def update(db: Session, user_id: int, expense_id: int, data: dict) -> Expense:
        expense = ExpenseService._get_owned(db, user_id, expense_id, "update")

        if data.get("category_id") is not None:
            CategoryService.resolve_for_use(db, user_id, data["category_id"])

        for field in EXPENSE_MUTABLE_FIELDS:
            if field in data and (data[field] is not None or field in NULLABLE_FIELDS):
                setattr(expense, field, data[field])

        expense.recurring_frequency = check_recurrence(bool(expense.is_recurring), expense.recurring_frequency)
        db.commit()
        db.refresh(expense)
        return expense

    @staticmethod
    def delete(db: Session, user_id: int, expense_id: int):
        expense = ExpenseService._get_owned(db, user_id, expense_id, "delete")
        db.delete(expense)
        db.commit()

    @staticmethod
    def set_receipt(db: Session, user_id: int, expense_id: int, receipt_url: str) -> Expense:
        expense = ExpenseService._get_owned(db, user_id, expense_id, "update")
        expense.receipt_url = receipt_url
        db.commit()
        db.refresh(expense)
        return expense
