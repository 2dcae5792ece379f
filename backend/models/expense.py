from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from database import Base

PAYMENT_METHODS = ("cash", "credit_card", "debit_card", "upi", "net_banking", "wallet", "other")
EXPENSE_FREQUENCIES = ("daily", "weekly", "monthly", "yearly")


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(String(200), nullable=False)
    payment_method = Column(String(20), default="cash")
    is_recurring = Column(Boolean, default=False)
    recurring_frequency = Column(String(20), nullable=True)  # daily/weekly/monthly/yearly
    notes = Column(String(500), nullable=True)
    receipt_url = Column(String(500), default="")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    category = relationship("Category", lazy="joined")

    __table_args__ = (
        Index("ix_expenses_user_date", "user_id", "date"),
        Index("ix_expenses_user_category", "user_id", "category_id"),
        Index("ix_expenses_user_amount", "user_id", "amount"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "amount": self.amount,
            "category": {
                "id": self.category.id,
                "name": self.category.name,
                "color": self.category.color,
                "icon": self.category.icon,
            } if self.category else None,
            "date": self.date.isoformat(),
            "description": self.description,
            "payment_method": self.payment_method,
            "is_recurring": self.is_recurring,
            "recurring_frequency": self.recurring_frequency,
            "notes": self.notes,
            "receipt_url": self.receipt_url or "",
        }
