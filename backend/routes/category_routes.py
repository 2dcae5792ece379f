# ---------- routes/category_routes.py ----------
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import AuthUser, get_current_user
from database import get_db
from responses import success
from services.category_service import CategoryService

router = APIRouter(prefix="/api/v1/categories", tags=["Categories"])

HEX_COLOR = r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$"


class CategoryCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    color: str = Field("#3B82F6", pattern=HEX_COLOR)
    icon: Optional[str] = Field(None, max_length=50)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    icon: Optional[str] = Field(None, max_length=50)


@router.get("")
def list_categories(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    categories = CategoryService.get_all(db, current_user.user_id)
    return success({"categories": [c.to_dict() for c in categories]})


@router.post("", status_code=201)
def create_category(body: CategoryCreate, current_user: AuthUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    category = CategoryService.create(db, current_user.user_id, body.model_dump())
    return success({"category": category.to_dict()}, "Category created successfully")


@router.get("/{category_id}")
def get_category(category_id: int, current_user: AuthUser = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    category = CategoryService.get_accessible(db, current_user.user_id, category_id)
    return success({"category": category.to_dict()})


@router.put("/{category_id}")
def update_category(category_id: int, body: CategoryUpdate, current_user: AuthUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    category = CategoryService.update(db, current_user.user_id, category_id, body.model_dump(exclude_unset=True))
    return success({"category": category.to_dict()}, "Category updated successfully")


@router.delete("/{category_id}")
def delete_category(category_id: int, current_user: AuthUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    CategoryService.delete(db, current_user.user_id, category_id)
    return success(message="Category deleted successfully")
