from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Boolean
from database import Base

CURRENCIES = ("INR", "USD", "EUR", "GBP", "JPY", "AUD", "CAD")
ROLES = ("user", "admin")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)  # always stored lowercase
    hashed_password = Column(String(255), nullable=False)
    profile_picture = Column(String(500), default="")
    currency = Column(String(3), default="INR")
    monthly_budget = Column(Numeric(12, 2), default=0)
    role = Column(String(20), default="user", index=True)  # user/admin
    is_blocked = Column(Boolean, default=False)
    reset_password_token = Column(String(64), nullable=True)  # sha256 hex of the emailed token
    reset_password_expires = Column(DateTime(timezone=True), nullable=True)
    refresh_token = Column(String(1024), nullable=True)  # single active session
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Public representation — secrets never leave the model."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "profile_picture": self.profile_picture or "",
            "currency": self.currency,
            "monthly_budget": self.monthly_budget,
            "role": self.role,
            "is_blocked": self.is_blocked,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
