import hashlib
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from jose import jwt, JWTError
from pydantic import BaseModel
from sqlalchemy.orm import Session
import bcrypt

from config import (
    JWT_ACCESS_SECRET, JWT_REFRESH_SECRET, JWT_ALGORITHM,
    JWT_ACCESS_EXPIRY_MINUTES, JWT_REFRESH_EXPIRY_DAYS, BCRYPT_ROUNDS,
)
from database import get_db
from errors import Unauthorized, Forbidden
from models.user import User

logger = logging.getLogger(__name__)

TOKEN_SECRETS = {
    "access": JWT_ACCESS_SECRET,
    "refresh": JWT_REFRESH_SECRET,
}


class AuthUser(BaseModel):
    """Identity attached to an authenticated request."""
    user_id: int
    email: str
    role: str


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    # Ensure it doesn't exceed 72 bytes to prevent bcrypt ValueError
    pw_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    try:
        pw_bytes = plain_password.encode('utf-8')[:72]
        hash_bytes = hashed_password.encode('utf-8')
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except ValueError as e:
        logger.warning(f"Bcrypt verification error: {e}")
        return False


def _create_token(data: dict, secret: str, expires_delta: timedelta) -> str:
    """Create a JWT token with an expiry claim and a unique JTI."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "jti": str(uuid.uuid4())})
    return jwt.encode(to_encode, secret, algorithm=JWT_ALGORITHM)


def create_token_pair(user_id: int, email: str, role: str) -> dict:
    """Issue a short-lived access token and a long-lived refresh token for one identity."""
    payload = {"user_id": user_id, "email": email, "role": role}
    return {
        "access_token": _create_token(payload, JWT_ACCESS_SECRET, timedelta(minutes=JWT_ACCESS_EXPIRY_MINUTES)),
        "refresh_token": _create_token(payload, JWT_REFRESH_SECRET, timedelta(days=JWT_REFRESH_EXPIRY_DAYS)),
    }


def verify_token(token: str, kind: str = "access") -> dict | None:
    """Decode and verify a JWT token. Returns the payload or None on failure."""
    secret = TOKEN_SECRETS.get(kind)
    if secret is None or not token:
        return None
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    if not isinstance(payload.get("user_id"), int) or not payload.get("email"):
        return None
    return payload


def generate_reset_token() -> tuple[str, str]:
    """Return (plain_token, stored_hash). Only the hash is ever persisted."""
    token = secrets.token_hex(32)
    return token, hash_reset_token(token)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> AuthUser:
    """
    FastAPI dependency — extracts the Bearer token from the Authorization
    header, verifies it, checks the account still exists and is not blocked,
    and returns the caller's identity.
    Raises 401 for missing/invalid tokens and unknown users, 403 for blocked accounts.
    """
    token = _bearer_token(request)
    if token is None:
        raise Unauthorized("Access token is required")

    payload = verify_token(token, "access")
    if payload is None:
        raise Unauthorized("Invalid or expired access token")

    user = db.query(User).filter_by(id=payload["user_id"]).first()
    if user is None:
        raise Unauthorized("User no longer exists")
    if user.is_blocked:
        raise Forbidden("Your account has been blocked")

    return AuthUser(user_id=user.id, email=user.email, role=user.role)


def require_admin(current_user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if current_user.role != "admin":
        raise Forbidden("Admin access required")
    return current_user


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> AuthUser | None:
    """Like get_current_user, but any failure yields an anonymous (None) caller."""
    try:
        return get_current_user(request, db)
    except (Unauthorized, Forbidden):
        return None
