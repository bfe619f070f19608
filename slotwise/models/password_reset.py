# ============================================================================
# FILE: slotwise/models/password_reset.py
# Single-use tokens for the forgot password flow
# ============================================================================
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid
import secrets
from slotwise.models.base import Base


class PasswordReset(Base):
    __tablename__ = "password_resets"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    token = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    is_used = Column(Boolean, default=False, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", lazy="joined")

    @staticmethod
    def create_for_user(user_id, expiry_minutes: int, now: Optional[datetime] = None) -> "PasswordReset":
        """New token row, not yet added to the session"""
        now = now or datetime.now(timezone.utc)
        return PasswordReset(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            expires_at=now + timedelta(minutes=expiry_minutes),
            is_used=False
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        # SQLite hands back naive UTC
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at

    def mark_as_used(self, now: Optional[datetime] = None):
        self.is_used = True
        self.used_at = now or datetime.now(timezone.utc)

    def __repr__(self):
        return f"<PasswordReset {self.token[:8]}... user={self.user_id}>"
