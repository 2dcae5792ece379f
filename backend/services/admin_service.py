"""
admin_service.py — Platform administration
User listing/detail, block toggling and platform-wide statistics.
"""

import logging
from datetime import datetime, timezone, timedelta
from decimal import Decimal

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from errors import BadRequest
from models.expense import Expense
from models.income import Income
from models.user import User
from responses import ListParams
from services.user_service import UserService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class AdminService:
    @staticmethod
    def get_users(db: Session, params: ListParams, search: str | None = None) -> tuple[list[User], int]:
        query = db.query(User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        total = query.count()
        users = query.order_by(User.created_at.desc(), User.id.desc())\
                     .offset(params.offset).limit(params.limit).all()
        return users, total

    @staticmethod
    def get_user_detail(db: Session, user_id: int) -> dict:
        user = UserService.get(db, user_id)
        expense_count, expense_total = db.query(func.count(Expense.id), func.sum(Expense.amount))\
                                         .filter(Expense.user_id == user.id).one()
        income_count = db.query(func.count(Income.id)).filter(Income.user_id == user.id).scalar()
        return {
            "user": user.to_dict(),
            "stats": {
                "expense_count": expense_count or 0,
                "income_count": income_count or 0,
                "total_expenses": expense_total or ZERO,
            },
        }

    @staticmethod
    def toggle_block(db: Session, admin_id: int, user_id: int) -> bool:
        if admin_id == user_id:
            raise BadRequest("You cannot block your own account")
        user = UserService.get(db, user_id)
        user.is_blocked = not user.is_blocked
        if user.is_blocked:
            user.refresh_token = None
        db.commit()
        logger.info(f"Admin {admin_id} set is_blocked={user.is_blocked} for user_id={user.id}")
        return user.is_blocked

    @staticmethod
    def get_platform_stats(db: Session) -> dict:
        now = datetime.now(timezone.utc)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        week_ago = now - timedelta(days=7)

        total_users = db.query(func.count(User.id)).scalar()
        blocked_users = db.query(func.count(User.id)).filter(User.is_blocked.is_(True)).scalar()
        new_this_month = db.query(func.count(User.id)).filter(User.created_at >= month_start).scalar()

        expense_count, expense_total = db.query(func.count(Expense.id), func.sum(Expense.amount)).one()
        income_count, income_total = db.query(func.count(Income.id), func.sum(Income.amount)).one()

        day_col = func.date(User.created_at)
        registrations = db.query(day_col, func.count(User.id))\
                          .filter(User.created_at >= week_ago)\
                          .group_by(day_col).order_by(day_col).all()

        return {
            "users": {
                "total": total_users,
                "active": total_users - blocked_users,
                "blocked": blocked_users,
                "new_this_month": new_this_month,
            },
            "expenses": {"count": expense_count, "total_amount": expense_total or ZERO},
            "income": {"count": income_count, "total_amount": income_total or ZERO},
            "recent_registrations": [{"date": str(d), "count": c} for d, c in registrations],
        }
