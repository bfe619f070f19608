# slotwise/models/service.py
"""
Service Model - bookable service definitions
Each service belongs to one provider and defines duration, buffers and capacity.
"""
from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, Boolean, DateTime, Text, Uuid, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from slotwise.models.base import Base


# Staff explicitly allowed to perform a service (used when any_staff_member is False)
staff_service_assignments = Table(
    "staff_service_assignments",
    Base.metadata,
    Column("staff_id", Uuid(as_uuid=True), ForeignKey("staff_members.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Uuid(as_uuid=True), ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


class Service(Base):
    __tablename__ = "services"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    provider_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("providers.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    # Minutes
    duration = Column(Integer, nullable=False)
    buffer_time_before = Column(Integer, nullable=False, default=0)
    buffer_time_after = Column(Integer, nullable=False, default=0)

    # Capacity
    requires_staff = Column(Boolean, nullable=False, default=False)
    any_staff_member = Column(Boolean, nullable=False, default=True)
    max_concurrent = Column(Integer, nullable=False, default=1)

    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    staff = relationship(
        "StaffMember",
        secondary=staff_service_assignments,
        back_populates="services"
    )

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, provider_id={self.provider_id})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "provider_id": str(self.provider_id),
            "name": self.name,
            "description": self.description,
            "price": float(self.price) if self.price is not None else None,
            "duration": self.duration,
            "buffer_time_before": self.buffer_time_before,
            "buffer_time_after": self.buffer_time_after,
            "requires_staff": self.requires_staff,
            "any_staff_member": self.any_staff_member,
            "max_concurrent": self.max_concurrent,
            "is_active": self.is_active,
            "formatted_duration": self.formatted_duration,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @property
    def formatted_duration(self) -> str:
        """Return human-readable duration string"""
        hours = self.duration // 60
        minutes = self.duration % 60

        if hours > 0 and minutes > 0:
            return f"{hours}h {minutes}m"
        elif hours > 0:
            return f"{hours}h"
        else:
            return f"{minutes}m"
