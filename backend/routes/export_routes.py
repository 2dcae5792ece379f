# ---------- routes/export_routes.py ----------
"""
Expense downloads. CSV and PDF cover a date range that defaults to the
current month up to today; the JSON report covers one calendar month.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from auth import AuthUser, get_current_user
from database import get_db
from responses import success
from services.analytics_service import utc_today
from services.export_service import ExportService, resolve_range
from services.user_service import UserService

router = APIRouter(prefix="/api/v1/export", tags=["Export"])


def _attachment(content, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/csv")
def export_csv(start_date: Optional[date] = None, end_date: Optional[date] = None,
               current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    start, end = resolve_range(start_date, end_date)
    expenses = ExportService.get_expenses(db, current_user.user_id, start, end)
    return _attachment(
        ExportService.to_csv(expenses),
        "text/csv",
        f"expenses_{start.isoformat()}_to_{end.isoformat()}.csv",
    )


@router.get("/pdf")
def export_pdf(start_date: Optional[date] = None, end_date: Optional[date] = None,
               current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    start, end = resolve_range(start_date, end_date)
    user = UserService.get(db, current_user.user_id)
    expenses = ExportService.get_expenses(db, user.id, start, end)
    return _attachment(
        ExportService.to_pdf(expenses, start, end, user.currency or "INR"),
        "application/pdf",
        f"expense_report_{start.isoformat()}_to_{end.isoformat()}.pdf",
    )


@router.get("/report")
def monthly_report(
    year: Optional[int] = Query(None, ge=2020, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    today = utc_today()
    report = ExportService.monthly_report(db, current_user.user_id, year or today.year, month or today.month)
    return success({"report": report})
