# ---------- routes/admin_routes.py ----------
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth import AuthUser, require_admin
from database import get_db
from responses import ListParams, list_params, success
from services.admin_service import AdminService

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


@router.get("/users")
def list_users(search: Optional[str] = None, params: ListParams = Depends(list_params),
               admin: AuthUser = Depends(require_admin), db: Session = Depends(get_db)):
    users, total = AdminService.get_users(db, params, search)
    return success({"users": [u.to_dict() for u in users]}, pagination=params.pagination(total))


@router.get("/users/{user_id}")
def get_user(user_id: int, admin: AuthUser = Depends(require_admin), db: Session = Depends(get_db)):
    return success(AdminService.get_user_detail(db, user_id))


@router.put("/users/{user_id}/block")
def toggle_block(user_id: int, admin: AuthUser = Depends(require_admin), db: Session = Depends(get_db)):
    is_blocked = AdminService.toggle_block(db, admin.user_id, user_id)
    message = "User blocked successfully" if is_blocked else "User unblocked successfully"
    return success({"is_blocked": is_blocked}, message)


@router.get("/stats")
def platform_stats(admin: AuthUser = Depends(require_admin), db: Session = Depends(get_db)):
    return success(AdminService.get_platform_stats(db))
