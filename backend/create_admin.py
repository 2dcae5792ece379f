"""
create_admin.py — Bootstrap an admin account.
Promotes an existing user to admin, or creates a new admin when the email is unknown.

    python create_admin.py admin@example.com --name "Site Admin" --password "Str0ngPass"
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from auth import hash_password
from database import SessionLocal, init_db
from errors import ApiError, BadRequest
from models.user import User
from services.user_service import UserService

logger = logging.getLogger(__name__)


def ensure_admin(db: Session, email: str, name: str | None = None, password: str | None = None) -> tuple[User, bool]:
    """Returns (user, created). An existing user keeps their password unless a new one is given."""
    user = UserService.get_by_email(db, email)
    if user:
        user.role = "admin"
        user.is_blocked = False
        if password:
            user.hashed_password = hash_password(password)
            user.refresh_token = None
        db.commit()
        logger.info(f"Promoted user_id={user.id} to admin")
        return user, False

    if not password:
        raise BadRequest("A password is required to create a new admin")
    user = UserService.create_user(db, name or "Administrator", email, password, role="admin")
    logger.info(f"Created admin user_id={user.id}")
    return user, True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote a FinTrack admin account.")
    parser.add_argument("email")
    parser.add_argument("--name", default=None)
    parser.add_argument("--password", default=None)
    args = parser.parse_args(argv)

    init_db()
    db = SessionLocal()
    try:
        user, created = ensure_admin(db, args.email, args.name, args.password)
        print(f"{'Created' if created else 'Updated'} admin ID {user.id} ({user.email})")
    except ApiError as e:
        print(f"Error: {e.message}")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
