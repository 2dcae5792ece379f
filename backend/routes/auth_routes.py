# ---------- routes/auth_routes.py ----------
"""
Account lifecycle: signup, login, token refresh, logout and password reset.
"""
import re
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import AfterValidator, BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from auth import AuthUser, get_current_user
from config import APP_ENV
from database import get_db
from responses import success
from services.user_service import UserService

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent"


def check_password_strength(value: str) -> str:
    """At least 8 characters with an uppercase letter, a lowercase letter and a digit."""
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not (re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"\d", value)):
        raise ValueError("Password must contain at least one uppercase letter, one lowercase letter, and one number")
    return value


StrongPassword = Annotated[str, AfterValidator(check_password_strength)]


# ── Pydantic schemas ──────────────────────────────────────────────
class SignupRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: StrongPassword


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: StrongPassword


# ── Routes ────────────────────────────────────────────────────────
@router.post("/signup", status_code=201)
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    user, tokens = UserService.signup(db, body.name, body.email, body.password)
    return success({"user": user.to_dict(), **tokens}, "Account created successfully")


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user, tokens = UserService.login(db, body.email, body.password)
    return success({"user": user.to_dict(), **tokens}, "Login successful")


@router.post("/refresh")
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    tokens = UserService.refresh(db, body.refresh_token)
    return success(tokens, "Token refreshed successfully")


@router.post("/logout")
def logout(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    UserService.logout(db, current_user.user_id)
    return success(message="Logged out successfully")


@router.post("/forgot-password")
def forgot_password(body: ForgotPasswordRequest, db: Session = Depends(get_db)):
    token = UserService.forgot_password(db, body.email)
    # Same answer for unknown emails; the raw token is only echoed in development
    if token and APP_ENV == "development":
        return success({"reset_token": token}, FORGOT_PASSWORD_MESSAGE)
    return success(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password")
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    UserService.reset_password(db, body.token, body.password)
    return success(message="Password reset successful. Please log in with your new password.")


@router.get("/me")
def me(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    user = UserService.get(db, current_user.user_id)
    return success({"user": user.to_dict()})
