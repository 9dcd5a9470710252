"""
Authentication and admin account management
"""

import logging
from functools import lru_cache
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models import User
from app.schemas.auth import UserProfile
from app.services.exceptions import (
    InvalidCredentialsError,
    NotFoundError,
    ValidationFailedError,
)
from app.services.repositories import UserRepo, store_operation
from app.utils.clock import utc_now
from app.utils.security import MAX_PASSWORD_BYTES, hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-password")


def user_to_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        username=user.username,
        role=user.role,
        name=user.name,
        phone=user.phone,
        must_change_password=bool(user.must_change_password),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class AuthService:
    """Username/password login against stored bcrypt hashes"""

    @staticmethod
    def authenticate(db: Session, username: str, password: str) -> UserProfile:
        """
        Check a username/password pair.

        Unknown users and wrong passwords raise the same error. A hash check
        still runs for unknown users so both paths cost about the same.
        """
        with store_operation(db, "log in"):
            user = UserRepo.get_by_username(db, (username or "").strip())

        if user is None:
            verify_password(password or "", _dummy_hash())
            logger.warning(f"Failed login for unknown user {username!r}")
            raise InvalidCredentialsError()

        if not verify_password(password or "", user.password_hash):
            logger.warning(f"Failed login for user {user.username!r}")
            raise InvalidCredentialsError()

        logger.info(f"User {user.username!r} logged in")
        return user_to_profile(user)

    @staticmethod
    def change_password(db: Session, user_id: int, new_password: str) -> UserProfile:
        password = new_password or ""
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailedError(
                [f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"]
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationFailedError(
                [f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"]
            )

        with store_operation(db, "change password"):
            user = UserRepo.get_by_id(db, user_id)
            if not user:
                raise NotFoundError("User", user_id)

            user.password_hash = hash_password(password)
            user.must_change_password = False
            user.updated_at = utc_now()
            db.commit()
            db.refresh(user)

        logger.info(f"Password changed for user {user.username!r}")
        return user_to_profile(user)

    @staticmethod
    def ensure_default_admin(db: Session) -> Optional[User]:
        """
        Provision the default admin account when no admin exists.

        The credential comes from settings and is flagged for rotation on
        first login. Returns the new user, or None when an admin was present.
        """
        with store_operation(db, "provision default admin"):
            if UserRepo.has_admin(db):
                return None

            now = utc_now()
            user = UserRepo.create(
                db,
                username=settings.DEFAULT_ADMIN_USERNAME,
                password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
                role="admin",
                name=settings.DEFAULT_ADMIN_NAME,
                must_change_password=True,
                created_at=now,
                updated_at=now,
            )
            db.commit()
            db.refresh(user)

        logger.warning(
            f"Created default admin account {user.username!r}; change its password after first login"
        )
        return user
