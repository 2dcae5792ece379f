"""
user_service.py — Accounts and the session lifecycle
Signup/login issue a token pair and persist the refresh token on the user row
(one active session per user). Refresh rotates the pair; logout, password
change and password reset clear the stored token.
"""

import logging
from datetime import datetime, timezone, timedelta

from sqlalchemy.orm import Session

from auth import (
    hash_password, verify_password, create_token_pair, verify_token,
    generate_reset_token, hash_reset_token,
)
from config import RESET_TOKEN_EXPIRY_MINUTES, FRONTEND_URL
from errors import BadRequest, Unauthorized, NotFound, Conflict
from models.user import User

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    def get(db: Session, user_id: int) -> User:
        user = db.query(User).filter_by(id=user_id).first()
        if not user:
            raise NotFound("User not found")
        return user

    @staticmethod
    def get_by_email(db: Session, email: str) -> User | None:
        return db.query(User).filter_by(email=email.strip().lower()).first()

    @staticmethod
    def create_user(db: Session, name: str, email: str, password: str, role: str = "user") -> User:
        """Hash the password, then construct and persist the user."""
        email = email.strip().lower()
        if UserService.get_by_email(db, email):
            raise Conflict("Email is already registered")
        user = User(
            name=name.strip(),
            email=email,
            hashed_password=hash_password(password),
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def start_session(db: Session, user: User) -> dict:
        """Issue a token pair and make its refresh token the user's only valid one."""
        tokens = create_token_pair(user.id, user.email, user.role)
        user.refresh_token = tokens["refresh_token"]
        db.commit()
        return tokens

    @staticmethod
    def signup(db: Session, name: str, email: str, password: str) -> tuple[User, dict]:
        user = UserService.create_user(db, name, email, password)
        tokens = UserService.start_session(db, user)
        logger.info(f"New account registered: user_id={user.id}")
        return user, tokens

    @staticmethod
    def login(db: Session, email: str, password: str) -> tuple[User, dict]:
        user = UserService.get_by_email(db, email)
        if not user:
            raise Unauthorized("Invalid email or password")
        if user.is_blocked:
            raise Unauthorized("Your account has been blocked. Contact support.")
        if not verify_password(password, user.hashed_password):
            logger.info(f"Failed login for user_id={user.id}")
            raise Unauthorized("Invalid email or password")

        tokens = UserService.start_session(db, user)
        logger.info(f"Login: user_id={user.id}")
        return user, tokens

    @staticmethod
    def refresh(db: Session, refresh_token: str) -> dict:
        payload = verify_token(refresh_token, "refresh")
        if payload is None:
            raise Unauthorized("Invalid or expired refresh token")

        user = db.query(User).filter_by(id=payload["user_id"]).first()
        if not user or user.refresh_token != refresh_token:
            raise Unauthorized("Invalid refresh token")
        if user.is_blocked:
            raise Unauthorized("Your account has been blocked")

        return UserService.start_session(db, user)

    @staticmethod
    def logout(db: Session, user_id: int):
        user = UserService.get(db, user_id)
        user.refresh_token = None
        db.commit()
        logger.info(f"Logout: user_id={user_id}")

    @staticmethod
    def forgot_password(db: Session, email: str) -> str | None:
        """Store a hashed one-hour reset token. Returns the plain token, or None for unknown emails."""
        user = UserService.get_by_email(db, email)
        if not user:
            return None

        token, hashed = generate_reset_token()
        user.reset_password_token = hashed
        user.reset_password_expires = datetime.now(timezone.utc) + timedelta(minutes=RESET_TOKEN_EXPIRY_MINUTES)
        db.commit()

        # No mail transport; the link is logged for out-of-band delivery
        logger.info(f"Password reset URL for user_id={user.id}: {FRONTEND_URL}/reset-password?token={token}")
        return token

    @staticmethod
    def reset_password(db: Session, token: str, new_password: str):
        user = db.query(User).filter(
            User.reset_password_token == hash_reset_token(token),
            User.reset_password_expires > datetime.now(timezone.utc),
        ).first()
        if not user:
            raise BadRequest("Invalid or expired reset token")

        user.hashed_password = hash_password(new_password)
        user.reset_password_token = None
        user.reset_password_expires = None
        user.refresh_token = None
        db.commit()
        logger.info(f"Password reset completed: user_id={user.id}")

    @staticmethod
    def update_profile(db: Session, user_id: int, data: dict) -> User:
        user = UserService.get(db, user_id)
        for field in ("name", "currency", "monthly_budget"):
            if data.get(field) is not None:
                setattr(user, field, data[field])
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_email(db: Session, user_id: int, email: str, password: str) -> User:
        user = UserService.get(db, user_id)
        if not verify_password(password, user.hashed_password):
            raise BadRequest("Current password is incorrect")

        email = email.strip().lower()
        existing = UserService.get_by_email(db, email)
        if existing and existing.id != user.id:
            raise Conflict("Email is already in use")

        user.email = email
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def change_password(db: Session, user_id: int, current_password: str, new_password: str):
        user = UserService.get(db, user_id)
        if not verify_password(current_password, user.hashed_password):
            raise BadRequest("Current password is incorrect")
        user.hashed_password = hash_password(new_password)
        user.refresh_token = None
        db.commit()

    @staticmethod
    def set_profile_picture(db: Session, user_id: int, url: str) -> str:
        """Point the profile at a new picture; returns the previous URL."""
        user = UserService.get(db, user_id)
        previous = user.profile_picture or ""
        user.profile_picture = url
        db.commit()
        return previous
