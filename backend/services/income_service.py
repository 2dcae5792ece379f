"""
income_service.py — Income records
Mirrors the expense workflow for inflows: owner-scoped CRUD and paginated listing.
"""

from sqlalchemy import or_
from sqlalchemy.orm import Session

from errors import NotFound, Forbidden
from models.income import Income
from responses import ListParams
from services.expense_service import check_recurrence

INCOME_SORT_FIELDS = ("date", "amount", "source", "created_at")
INCOME_MUTABLE_FIELDS = ("source", "amount", "date", "description", "is_recurring", "recurring_frequency")
NULLABLE_FIELDS = ("description", "recurring_frequency")


class IncomeService:
    @staticmethod
    def _get_owned(db: Session, user_id: int, income_id: int, action: str = "access") -> Income:
        income = db.query(Income).filter_by(id=income_id).first()
        if not income:
            raise NotFound("Income not found")
        if income.user_id != user_id:
            raise Forbidden(f"You can only {action} your own income records")
        return income

    @staticmethod
    def get(db: Session, user_id: int, income_id: int) -> Income:
        return IncomeService._get_owned(db, user_id, income_id)

    @staticmethod
    def get_all(db: Session, user_id: int, params: ListParams, filters: dict) -> tuple[list[Income], int]:
        query = db.query(Income).filter(Income.user_id == user_id)
        if filters.get("start_date"):
            query = query.filter(Income.date >= filters["start_date"])
        if filters.get("end_date"):
            query = query.filter(Income.date <= filters["end_date"])
        if filters.get("search"):
            pattern = f"%{filters['search']}%"
            query = query.filter(or_(Income.source.ilike(pattern), Income.description.ilike(pattern)))

        total = query.count()
        incomes = (
            query.order_by(params.order_by(Income, INCOME_SORT_FIELDS), Income.id.desc())
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return incomes, total

    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Income:
        is_recurring = data.get("is_recurring") or False
        income = Income(
            user_id=user_id,
            source=data["source"],
            amount=data["amount"],
            date=data["date"],
            description=data.get("description"),
            is_recurring=is_recurring,
            recurring_frequency=check_recurrence(is_recurring, data.get("recurring_frequency")),
        )
        db.add(income)
        db.commit()
        db.refresh(income)
        return income

    @staticmethod
    def update(db: Session, user_id: int, income_id: int, data: dict) -> Income:
        income = IncomeService._get_owned(db, user_id, income_id, "update")
        for field in INCOME_MUTABLE_FIELDS:
            if field in data and (data[field] is not None or field in NULLABLE_FIELDS):
                setattr(income, field, data[field])
        income.recurring_frequency = check_recurrence(bool(income.is_recurring), income.recurring_frequency)
        db.commit()
        db.refresh(income)
        return income

    @staticmethod
    def delete(db: Session, user_id: int, income_id: int):
        income = IncomeService._get_owned(db, user_id, income_id, "delete")
        db.delete(income)
        db.commit()
