# ---------- routes/expense_routes.py ----------
import datetime
from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import AuthUser, get_current_user
from database import get_db
from responses import ListParams, list_params, success
from services.expense_service import ExpenseService
from services.upload_service import save_image, delete_upload

router = APIRouter(prefix="/api/v1/expenses", tags=["Expenses"])

PaymentMethod = Literal["cash", "credit_card", "debit_card", "upi", "net_banking", "wallet", "other"]
ExpenseFrequency = Literal["daily", "weekly", "monthly", "yearly"]


# ── Pydantic schemas ──────────────────────────────────────────────
class ExpenseCreate(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    category_id: int
    date: datetime.date
    description: str = Field(min_length=2, max_length=200)
    payment_method: PaymentMethod = "cash"
    is_recurring: bool = False
    recurring_frequency: Optional[ExpenseFrequency] = None
    notes: Optional[str] = Field(None, max_length=500)


class ExpenseUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    category_id: Optional[int] = None
    date: Optional[datetime.date] = None
    description: Optional[str] = Field(None, min_length=2, max_length=200)
    payment_method: Optional[PaymentMethod] = None
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[ExpenseFrequency] = None
    notes: Optional[str] = Field(None, max_length=500)


# ── Routes ────────────────────────────────────────────────────────
@router.get("")
def list_expenses(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[int] = None,
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None,
    search: Optional[str] = None,
    params: ListParams = Depends(list_params),
    current_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    filters = {
        "start_date": start_date,
        "end_date": end_date,
        "category": category,
        "min_amount": min_amount,
        "max_amount": max_amount,
        "search": search,
    }
    expenses, total = ExpenseService.get_all(db, current_user.user_id, params, filters)
    return success({"expenses": [e.to_dict() for e in expenses]}, pagination=params.pagination(total))


@router.post("", status_code=201)
def create_expense(body: ExpenseCreate, current_user: AuthUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    expense = ExpenseService.create(db, current_user.user_id, body.model_dump())
    return success({"expense": expense.to_dict()}, "Expense created successfully")


@router.get("/{expense_id}")
def get_expense(expense_id: int, current_user: AuthUser = Depends(get_current_user),
                db: Session = Depends(get_db)):
    expense = ExpenseService.get(db, current_user.user_id, expense_id)
    return success({"expense": expense.to_dict()})


@router.put("/{expense_id}")
def update_expense(expense_id: int, body: ExpenseUpdate, current_user: AuthUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    expense = ExpenseService.update(db, current_user.user_id, expense_id, body.model_dump(exclude_unset=True))
    return success({"expense": expense.to_dict()}, "Expense updated successfully")


@router.delete("/{expense_id}")
def delete_expense(expense_id: int, current_user: AuthUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    ExpenseService.delete(db, current_user.user_id, expense_id)
    return success(message="Expense deleted successfully")


@router.post("/{expense_id}/receipt")
def upload_receipt(expense_id: int, file: UploadFile = File(...),
                   current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    # Ownership is checked before anything touches the disk
    previous = ExpenseService.get(db, current_user.user_id, expense_id).receipt_url
    url = save_image(file, "receipt")
    expense = ExpenseService.set_receipt(db, current_user.user_id, expense_id, url)
    delete_upload(previous)
    return success({"expense": expense.to_dict()}, "Receipt uploaded successfully")
