# ---------- routes/user_routes.py ----------
"""
Profile management for the signed-in user.
"""
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from auth import AuthUser, get_current_user
from database import get_db
from responses import success
from routes.auth_routes import StrongPassword
from services.upload_service import save_image, delete_upload
from services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

Currency = Literal["INR", "USD", "EUR", "GBP", "JPY", "AUD", "CAD"]


# ── Pydantic schemas ──────────────────────────────────────────────
class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    currency: Optional[Currency] = None
    monthly_budget: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class EmailUpdate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: StrongPassword


# ── Routes ────────────────────────────────────────────────────────
@router.get("/profile")
def get_profile(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    user = UserService.get(db, current_user.user_id)
    return success({"user": user.to_dict()})


@router.put("/profile")
def update_profile(body: ProfileUpdate, current_user: AuthUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    user = UserService.update_profile(db, current_user.user_id, body.model_dump(exclude_unset=True))
    return success({"user": user.to_dict()}, "Profile updated successfully")


@router.put("/email")
def update_email(body: EmailUpdate, current_user: AuthUser = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    user = UserService.update_email(db, current_user.user_id, body.email, body.password)
    return success({"user": user.to_dict()}, "Email updated successfully")


@router.put("/password")
def change_password(body: PasswordChange, current_user: AuthUser = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    UserService.change_password(db, current_user.user_id, body.current_password, body.new_password)
    return success(message="Password changed successfully. Please log in again.")


@router.post("/profile/picture")
def upload_profile_picture(file: UploadFile = File(...), current_user: AuthUser = Depends(get_current_user),
                           db: Session = Depends(get_db)):
    url = save_image(file, "profile")
    previous = UserService.set_profile_picture(db, current_user.user_id, url)
    delete_upload(previous)
    return success({"profile_picture": url}, "Profile picture updated successfully")


@router.delete("/profile/picture")
def remove_profile_picture(current_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    previous = UserService.set_profile_picture(db, current_user.user_id, "")
    delete_upload(previous)
    return success(message="Profile picture removed successfully")
