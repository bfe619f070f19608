# ============================================================================
# FILE: slotwise/services/user/user_service.py
# User business logic - registration, authentication, password resets,
# provider profiles
# ============================================================================
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import datetime, timezone
import logging
import re

from slotwise.config.settings import get_settings
from slotwise.models.password_reset import PasswordReset
from slotwise.models.user import User, UserRole
from slotwise.models.provider import Provider

logger = logging.getLogger(__name__)


class ResetTokenNotFoundError(ValueError):
    pass


class ResetTokenExpiredError(ValueError):
    """Token expired or already used"""


class UserService:
    """Service layer for user operations."""

    @staticmethod
    def create_user(
            db: Session,
            email: str,
            password: str,
            full_name: Optional[str] = None,
            phone: Optional[str] = None,
            role: UserRole = UserRole.CUSTOMER,
            business_name: Optional[str] = None,
            timezone_name: Optional[str] = None
    ) -> User:
        """
        Create a new user with hashed password.
        Providers also get a provider profile with a unique public username.
        Raises ValueError if email already exists.
        """
        email = email.lower().strip()

        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            raise ValueError("Email already registered")

        user = User(
            email=email,
            hashed_password=User.hash_password(password),
            full_name=full_name,
            phone=phone,
            role=role,
            is_active=True
        )
        db.add(user)
        db.flush()

        if role == UserRole.PROVIDER:
            display_name = business_name or full_name or email.split("@")[0]
            provider = Provider(
                user_id=user.id,
                name=full_name or display_name,
                business_name=business_name,
                username=UserService._unique_username(db, display_name),
                timezone=timezone_name,
                is_active=True
            )
            db.add(provider)

        db.commit()
        db.refresh(user)

        return user

    @staticmethod
    def authenticate_user(
            db: Session,
            email: str,
            password: str
    ) -> Optional[User]:
        """
        Authenticate a user by email and password.
        Returns User if valid, None if invalid credentials.
        """
        user = db.query(User).filter(User.email == email.lower().strip()).first()

        if not user:
            return None

        if not user.is_active:
            return None

        if not user.verify_password(password):
            return None

        # Update last login timestamp
        user.last_login_at = datetime.now(timezone.utc)
        db.commit()

        return user

    @staticmethod
    def get_user_by_id(
            db: Session,
            user_id: UUID
    ) -> Optional[User]:
        """Get a user by their ID."""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(
            db: Session,
            email: str
    ) -> Optional[User]:
        """Get a user by their email."""
        return db.query(User).filter(User.email == email.lower().strip()).first()

    @staticmethod
    def get_provider_for_user(db: Session, user_id: UUID) -> Optional[Provider]:
        return db.query(Provider).filter(Provider.user_id == user_id).first()

    @staticmethod
    def request_password_reset(
            db: Session,
            email: str,
            now: Optional[datetime] = None
    ) -> Optional[PasswordReset]:
        """
        Issue a reset token for an active account, invalidating earlier ones.
        Returns None for unknown or inactive accounts; callers must respond the
        same way in both cases. Delivering the token (email) is up to the caller.
        """
        user = UserService.get_user_by_email(db, email)
        if not user or not user.is_active:
            return None

        db.query(PasswordReset).filter(
            PasswordReset.user_id == user.id,
            PasswordReset.is_used == False
        ).update({"is_used": True})

        reset = PasswordReset.create_for_user(
            user.id, expiry_minutes=get_settings().PASSWORD_RESET_EXPIRE_MINUTES, now=now
        )
        db.add(reset)
        db.commit()
        db.refresh(reset)

        logger.info(f"Issued password reset token for user {user.id}")
        return reset

    @staticmethod
    def reset_password(
            db: Session,
            token: str,
            new_password: str,
            now: Optional[datetime] = None
    ) -> User:
        """
        Set a new password from a reset token and burn the token.
        Raises ResetTokenNotFoundError or ResetTokenExpiredError.
        """
        reset = db.query(PasswordReset).filter(PasswordReset.token == token).first()
        if not reset:
            raise ResetTokenNotFoundError("Invalid or expired reset token")

        if reset.is_used or reset.is_expired(now):
            raise ResetTokenExpiredError("Reset token has expired or already been used")

        user = reset.user
        user.hashed_password = User.hash_password(new_password)
        reset.mark_as_used(now)
        db.commit()

        logger.info(f"Password reset for user {user.id}")
        return user

    @staticmethod
    def _unique_username(db: Session, display_name: str) -> str:
        base = re.sub(r"[^a-z0-9]+", "-", display_name.lower()).strip("-") or "provider"
        candidate = base
        suffix = 1
        while db.query(Provider).filter(Provider.username == candidate).first():
            suffix += 1
            candidate = f"{base}-{suffix}"
        return candidate
