"""
category_service.py — Expense categories
Shared read-only defaults plus per-user custom categories with
case-insensitive unique names.
"""

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from errors import NotFound, Forbidden, Conflict, BadRequest
from models.budget import BudgetCategoryLimit
from models.category import Category, DEFAULT_CATEGORIES
from models.expense import Expense


class CategoryService:
    @staticmethod
    def seed_defaults(db: Session) -> int:
        """Insert the shared default categories once. Returns how many were created."""
        if db.query(Category).filter_by(is_default=True).count() > 0:
            return 0
        for cat in DEFAULT_CATEGORIES:
            db.add(Category(user_id=None, is_default=True, **cat))
        db.commit()
        return len(DEFAULT_CATEGORIES)

    @staticmethod
    def get_all(db: Session, user_id: int) -> list[Category]:
        return db.query(Category).filter(
            or_(Category.is_default.is_(True), Category.user_id == user_id)
        ).order_by(Category.is_default.desc(), Category.name.asc()).all()

    @staticmethod
    def get_accessible(db: Session, user_id: int, category_id: int) -> Category:
        """A category the user may read: a default or one of their own."""
        category = db.query(Category).filter_by(id=category_id).first()
        if not category:
            raise NotFound("Category not found")
        if not category.is_default and category.user_id != user_id:
            raise Forbidden("You can only access your own categories")
        return category

    @staticmethod
    def resolve_for_use(db: Session, user_id: int, category_id: int) -> Category:
        """Validate a category reference on an expense or budget limit."""
        category = db.query(Category).filter_by(id=category_id).first()
        if not category:
            raise BadRequest("Invalid category")
        if category.user_id is not None and category.user_id != user_id:
            raise Forbidden("You can only use your own categories")
        return category

    @staticmethod
    def _ensure_unique_name(db: Session, user_id: int, name: str, exclude_id: int | None = None):
        query = db.query(Category).filter(
            Category.user_id == user_id,
            func.lower(Category.name) == name.lower(),
        )
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first():
            raise Conflict("Category with this name already exists")

    @staticmethod
    def _get_owned(db: Session, user_id: int, category_id: int, action: str) -> Category:
        category = db.query(Category).filter_by(id=category_id).first()
        if not category:
            raise NotFound("Category not found")
        if category.is_default:
            raise Forbidden(f"Default categories cannot be {action}")
        if category.user_id != user_id:
            raise Forbidden("You can only modify your own categories")
        return category

    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Category:
        CategoryService._ensure_unique_name(db, user_id, data["name"])
        category = Category(
            user_id=user_id,
            name=data["name"],
            color=data["color"],
            icon=data.get("icon") or "tag",
            is_default=False,
        )
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def update(db: Session, user_id: int, category_id: int, data: dict) -> Category:
        category = CategoryService._get_owned(db, user_id, category_id, "modified")
        if data.get("name"):
            CategoryService._ensure_unique_name(db, user_id, data["name"], exclude_id=category.id)
        for field in ("name", "color", "icon"):
            if data.get(field) is not None:
                setattr(category, field, data[field])
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def delete(db: Session, user_id: int, category_id: int):
        category = CategoryService._get_owned(db, user_id, category_id, "deleted")
        in_use = (
            db.query(Expense.id).filter_by(category_id=category.id).first()
            or db.query(BudgetCategoryLimit.id).filter_by(category_id=category.id).first()
        )
        if in_use:
            raise Conflict("Category is used by existing expenses or budgets")
        db.delete(category)
        db.commit()
