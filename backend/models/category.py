from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index, func
from database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # null for shared defaults
    name = Column(String(50), nullable=False)
    color = Column(String(7), nullable=False, default="#3B82F6")
    icon = Column(String(50), default="tag")
    is_default = Column(Boolean, default=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    # NULL owners never collide, so defaults are exempt
    __table_args__ = (
        Index("uq_category_owner_name", "user_id", func.lower(name), unique=True),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "is_default": self.is_default,
        }


DEFAULT_CATEGORIES = [
    {"name": "Food & Dining", "color": "#EF4444", "icon": "utensils"},
    {"name": "Transportation", "color": "#F59E0B", "icon": "car"},
    {"name": "Shopping", "color": "#8B5CF6", "icon": "shopping-bag"},
    {"name": "Entertainment", "color": "#EC4899", "icon": "film"},
    {"name": "Bills & Utilities", "color": "#3B82F6", "icon": "file-text"},
    {"name": "Healthcare", "color": "#10B981", "icon": "heart"},
    {"name": "Education", "color": "#6366F1", "icon": "book"},
    {"name": "Travel", "color": "#14B8A6", "icon": "plane"},
    {"name": "Rent", "color": "#F97316", "icon": "home"},
    {"name": "Groceries", "color": "#22C55E", "icon": "shopping-cart"},
    {"name": "Personal Care", "color": "#A855F7", "icon": "user"},
    {"name": "Other", "color": "#6B7280", "icon": "more-horizontal"},
]
