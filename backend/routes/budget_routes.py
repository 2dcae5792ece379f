# ---------- routes/budget_routes.py ----------
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import AuthUser, get_current_user
from database import get_db
from errors import NotFound
from responses import success
from services.budget_service import BudgetService

router = APIRouter(prefix="/api/v1/budgets", tags=["Budgets"])


# ── Pydantic schemas ──────────────────────────────────────────────
class CategoryLimit(BaseModel):
    category_id: int
    limit: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class BudgetCreate(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2020, le=2100)
    limit: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    category_limits: list[CategoryLimit] = []


class BudgetUpdate(BaseModel):
    limit: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    category_limits: Optional[list[CategoryLimit]] = None


# ── Routes ────────────────────────────────────────────────────────
@router.get("")
def list_budgets(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    budgets = BudgetService.get_all(db, current_user.user_id)
    return success({"budgets": [b.to_dict() for b in budgets]})


@router.get("/current")
def current_budget(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    budget = BudgetService.get_current(db, current_user.user_id)
    # No budget for this month is not an error
    return success({"budget": budget.to_dict() if budget else None})


@router.get("/{year}/{month}")
def budget_for_period(year: int = Path(ge=2020, le=2100), month: int = Path(ge=1, le=12),
                      current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    budget = BudgetService.get_for_period(db, current_user.user_id, year, month)
    if not budget:
        raise NotFound("Budget not found for this period")
    return success({"budget": budget.to_dict()})


@router.get("/{year}/{month}/status")
def budget_status(year: int = Path(ge=2020, le=2100), month: int = Path(ge=1, le=12),
                  current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return success(BudgetService.get_status(db, current_user.user_id, year, month))


@router.post("", status_code=201)
def create_budget(body: BudgetCreate, current_user: AuthUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    budget = BudgetService.create(db, current_user.user_id, body.model_dump())
    return success({"budget": budget.to_dict()}, "Budget created successfully")


@router.put("/{budget_id}")
def update_budget(budget_id: int, body: BudgetUpdate, current_user: AuthUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    budget = BudgetService.update(db, current_user.user_id, budget_id, body.model_dump(exclude_unset=True))
    return success({"budget": budget.to_dict()}, "Budget updated successfully")


@router.delete("/{budget_id}")
def delete_budget(budget_id: int, current_user: AuthUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    BudgetService.delete(db, current_user.user_id, budget_id)
    return success(message="Budget deleted successfully")
