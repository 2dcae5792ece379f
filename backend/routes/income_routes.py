# ---------- routes/income_routes.py ----------
import datetime
from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import AuthUser, get_current_user
from database import get_db
from responses import ListParams, list_params, success
from services.income_service import IncomeService

router = APIRouter(prefix="/api/v1/incomes", tags=["Incomes"])

IncomeFrequency = Literal["weekly", "biweekly", "monthly", "yearly"]


class IncomeCreate(BaseModel):
    source: str = Field(min_length=2, max_length=100)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    date: datetime.date
    description: Optional[str] = Field(None, max_length=200)
    is_recurring: bool = False
    recurring_frequency: Optional[IncomeFrequency] = None


class IncomeUpdate(BaseModel):
    source: Optional[str] = Field(None, min_length=2, max_length=100)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    date: Optional[datetime.date] = None
    description: Optional[str] = Field(None, max_length=200)
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[IncomeFrequency] = None


@router.get("")
def list_incomes(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    params: ListParams = Depends(list_params),
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    filters = {"start_date": start_date, "end_date": end_date, "search": search}
    incomes, total = IncomeService.get_all(db, current_user.user_id, params, filters)
    return success({"incomes": [i.to_dict() for i in incomes]}, pagination=params.pagination(total))


@router.post("", status_code=201)
def create_income(body: IncomeCreate, current_user: AuthUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    income = IncomeService.create(db, current_user.user_id, body.model_dump())
    return success({"income": income.to_dict()}, "Income created successfully")


@router.get("/{income_id}")
def get_income(income_id: int, current_user: AuthUser = Depends(get_current_user),
               db: Session = Depends(get_db)):
    income = IncomeService.get(db, current_user.user_id, income_id)
    return success({"income": income.to_dict()})


@router.put("/{income_id}")
def update_income(income_id: int, body: IncomeUpdate, current_user: AuthUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    income = IncomeService.update(db, current_user.user_id, income_id, body.model_dump(exclude_unset=True))
    return success({"income": income.to_dict()}, "Income updated successfully")


@router.delete("/{income_id}")
def delete_income(income_id: int, current_user: AuthUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    IncomeService.delete(db, current_user.user_id, income_id)
    return success(message="Income deleted successfully")
