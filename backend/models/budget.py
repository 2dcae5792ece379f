from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base


class Budget(Base):
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    limit = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    category_limits = relationship(
        "BudgetCategoryLimit",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="BudgetCategoryLimit.id",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_budget_user_month_year"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "month": self.month,
            "year": self.year,
            "limit": self.limit,
            "category_limits": [cl.to_dict() for cl in self.category_limits],
        }


class BudgetCategoryLimit(Base):
    __tablename__ = "budget_category_limits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    budget_id = Column(Integer, ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    limit = Column(Numeric(12, 2), nullable=False)

    category = relationship("Category", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "category": {
                "id": self.category.id,
                "name": self.category.name,
                "color": self.category.color,
            } if self.category else None,
            "limit": self.limit,
        }
