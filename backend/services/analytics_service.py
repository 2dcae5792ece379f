"""
analytics_service.py — Spending analytics
Monthly summary with budget flags and category breakdown, multi-month trend
series, yearly totals and per-day spending. Everything is a grouped SQL
aggregation over one user's expenses and income; amounts stay Decimal.
"""

import calendar
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func, extract, desc
from sqlalchemy.orm import Session

from models.budget import Budget
from models.category import Category
from models.expense import Expense
from models.income import Income

ZERO = Decimal("0")
HUNDRED = Decimal("100")
NEAR_BUDGET_THRESHOLD = Decimal("0.8")
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def month_window(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month, both inclusive."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, or 0 when whole is 0."""
    if not whole:
        return ZERO
    return part / whole * HUNDRED


def _round(value: Decimal, places: str = "0.01") -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


class AnalyticsService:

    @staticmethod
    def _totals(db: Session, model, user_id: int, start: date, end: date) -> tuple[Decimal, int]:
        total, count = db.query(func.sum(model.amount), func.count(model.id)).filter(
            model.user_id == user_id,
            model.date >= start,
            model.date <= end,
        ).one()
        return total or ZERO, count or 0

    @staticmethod
    def category_breakdown(db: Session, user_id: int, start: date, end: date, total_expenses: Decimal) -> list[dict]:
        """Window expenses grouped by category, largest total first."""
        total_col = func.sum(Expense.amount).label("total")
        rows = db.query(
            Category.id, Category.name, Category.color, total_col, func.count(Expense.id),
        ).select_from(Expense).join(Category, Expense.category_id == Category.id).filter(
            Expense.user_id == user_id,
            Expense.date >= start,
            Expense.date <= end,
        ).group_by(Category.id, Category.name, Category.color)\
         .order_by(desc(total_col), Category.name.asc()).all()

        return [
            {
                "category_id": cat_id,
                "category_name": name,
                "category_color": color,
                "total": total,
                "count": count,
                "percentage": percent_of(total, total_expenses),
            }
            for cat_id, name, color, total, count in rows
        ]

    @staticmethod
    def monthly_summary(db: Session, user_id: int, year: int | None = None, month: int | None = None) -> dict:
        """Totals, savings, budget utilisation and category breakdown for one month."""
        today = utc_today()
        year = year or today.year
        month = month or today.month
        start, end = month_window(year, month)

        total_expenses, expense_count = AnalyticsService._totals(db, Expense, user_id, start, end)
        total_income, _ = AnalyticsService._totals(db, Income, user_id, start, end)

        budget = db.query(Budget).filter_by(user_id=user_id, month=month, year=year).first()
        budget_limit = budget.limit if budget else ZERO

        budget_remaining = budget_limit - total_expenses
        is_over_budget = budget_limit > 0 and total_expenses > budget_limit
        is_near_budget = (
            budget_limit > 0
            and total_expenses >= budget_limit * NEAR_BUDGET_THRESHOLD
            and not is_over_budget
        )

        savings = total_income - total_expenses
        savings_percentage = _round(percent_of(savings, total_income))

        breakdown = AnalyticsService.category_breakdown(db, user_id, start, end, total_expenses)
        budget_percent_used = int(_round(percent_of(total_expenses, budget_limit), "1"))

        return {
            "summary": {
                "month": month,
                "year": year,
                "total_expenses": total_expenses,
                "total_income": total_income,
                "savings": savings,
                "savings_percentage": savings_percentage,
                "budget_limit": budget_limit,
                "budget_used": total_expenses,
                "budget_remaining": budget_remaining,
                "is_over_budget": is_over_budget,
                "category_breakdown": breakdown,
            },
            "expense_count": expense_count,
            "highest_category": breakdown[0] if breakdown else None,
            "is_near_budget": is_near_budget,
            "budget_percent_used": budget_percent_used,
        }

    @staticmethod
    def _monthly_totals(db: Session, model, user_id: int, start: date, end: date) -> dict[tuple[int, int], Decimal]:
        year_col = extract("year", model.date)
        month_col = extract("month", model.date)
        rows = db.query(year_col, month_col, func.sum(model.amount)).filter(
            model.user_id == user_id,
            model.date >= start,
            model.date <= end,
        ).group_by(year_col, month_col).all()
        return {(int(y), int(m)): total for y, m, total in rows}

    @staticmethod
    def _trend_points(totals: dict[tuple[int, int], Decimal], months: list[tuple[int, int]], fill_empty: bool) -> list[dict]:
        points = []
        for y, m in months:
            if (y, m) not in totals and not fill_empty:
                continue
            points.append({
                "date": f"{y}-{m:02d}",
                "label": f"{MONTH_NAMES[m - 1]} {y}",
                "amount": totals.get((y, m), ZERO),
            })
        return points

    @staticmethod
    def trends(db: Session, user_id: int, months: int = 6, fill_empty: bool = False, today: date | None = None) -> dict:
        """
        Expense and income totals per month for the `months` months ending at
        the current one, oldest first. Empty months are omitted unless
        fill_empty is set.
        """
        today = today or utc_today()
        start_year, start_month = _shift_month(today.year, today.month, -(months - 1))
        start = date(start_year, start_month, 1)
        _, end = month_window(today.year, today.month)

        window = [_shift_month(start_year, start_month, i) for i in range(months)]
        expense_totals = AnalyticsService._monthly_totals(db, Expense, user_id, start, end)
        income_totals = AnalyticsService._monthly_totals(db, Income, user_id, start, end)

        return {
            "expenses": AnalyticsService._trend_points(expense_totals, window, fill_empty),
            "income": AnalyticsService._trend_points(income_totals, window, fill_empty),
        }

    @staticmethod
    def yearly_summary(db: Session, user_id: int, year: int | None = None, fill_empty: bool = False) -> dict:
        year = year or utc_today().year
        start, end = date(year, 1, 1), date(year, 12, 31)

        total_expenses, expense_count = AnalyticsService._totals(db, Expense, user_id, start, end)
        total_income, _ = AnalyticsService._totals(db, Income, user_id, start, end)

        by_month = {
            m: total
            for (_, m), total in AnalyticsService._monthly_totals(db, Expense, user_id, start, end).items()
        }
        months = range(1, 13) if fill_empty else sorted(by_month)

        return {
            "year": year,
            "total_expenses": total_expenses,
            "total_income": total_income,
            "savings": total_income - total_expenses,
            "expense_count": expense_count,
            # Always spread over the full year, however many months have data
            "average_monthly_expense": total_expenses / 12,
            "monthly_breakdown": [{"month": m, "total": by_month.get(m, ZERO)} for m in months],
        }

    @staticmethod
    def daily_spending(db: Session, user_id: int, year: int | None = None, month: int | None = None) -> dict:
        today = utc_today()
        year = year or today.year
        month = month or today.month
        start, end = month_window(year, month)

        day_col = extract("day", Expense.date)
        rows = db.query(day_col, func.sum(Expense.amount), func.count(Expense.id)).filter(
            Expense.user_id == user_id,
            Expense.date >= start,
            Expense.date <= end,
        ).group_by(day_col).order_by(day_col).all()

        return {
            "year": year,
            "month": month,
            "daily_spending": [{"day": int(d), "total": total, "count": count} for d, total, count in rows],
        }
