# ---------- routes/analytics_routes.py ----------
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import AuthUser, get_current_user
from database import get_db
from responses import success
from services.analytics_service import AnalyticsService

router = APIRouter(prefix="/api/v1/analytics", tags=["Analytics"])


@router.get("/summary")
def monthly_summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2020, le=2100),
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Defaults to the current month."""
    return success(AnalyticsService.monthly_summary(db, current_user.user_id, year, month))


@router.get("/trends")
def trends(
    months: int = Query(6, ge=1, le=24),
    fill_empty: bool = False,
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success(AnalyticsService.trends(db, current_user.user_id, months, fill_empty))


@router.get("/yearly")
def yearly_summary(
    year: Optional[int] = Query(None, ge=2020, le=2100),
    fill_empty: bool = False,
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success(AnalyticsService.yearly_summary(db, current_user.user_id, year, fill_empty))


@router.get("/daily")
def daily_spending(
    year: Optional[int] = Query(None, ge=2020, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success(AnalyticsService.daily_spending(db, current_user.user_id, year, month))
