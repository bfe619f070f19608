# slotwise/models/provider.py
"""
Provider Model - the business profile that offers services
Business hours are stored per weekday, 0=Sunday ... 6=Saturday.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from slotwise.models.base import Base


class Provider(Base):
    __tablename__ = "providers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )
    name = Column(String(200), nullable=False)
    business_name = Column(String(200), nullable=True)
    username = Column(String(100), nullable=False, unique=True, index=True)  # public booking slug

    # Falls back to DEFAULT_TIMEZONE when unset
    timezone = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    is_active = Column(Boolean, default=True)

    owner = relationship("User", back_populates="provider")

    def __repr__(self):
        return f"<Provider(id={self.id}, username={self.username})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "business_name": self.business_name,
            "username": self.username,
            "timezone": self.timezone,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class BusinessHours(Base):
    __tablename__ = "business_hours"
    __table_args__ = (
        UniqueConstraint("provider_id", "day_of_week", name="uq_business_hours_provider_day"),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(Uuid(as_uuid=True), ForeignKey("providers.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    is_open = Column(Boolean, default=True, nullable=False)
    open_time = Column(String(5), nullable=False)  # HH:MM format
    close_time = Column(String(5), nullable=False)  # HH:MM format

    def __repr__(self):
        return f"<BusinessHours(provider_id={self.provider_id}, day={self.day_of_week})>"

    def to_dict(self):
        return {
            "day_of_week": self.day_of_week,
            "is_open": self.is_open,
            "open_time": self.open_time,
            "close_time": self.close_time,
        }


class BlockedTime(Base):
    """Provider-wide closure (holiday, maintenance). No service can be booked inside it."""
    __tablename__ = "blocked_times"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    provider_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("providers.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    reason = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<BlockedTime(provider_id={self.provider_id}, start={self.start_time})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "provider_id": str(self.provider_id),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "reason": self.reason,
        }
