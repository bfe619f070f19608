# slotwise/models/staff.py
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from slotwise.models.base import Base
from slotwise.models.service import staff_service_assignments


class AvailabilityType(str, enum.Enum):
    AVAILABLE = "AVAILABLE"      # Extra hours
    UNAVAILABLE = "UNAVAILABLE"  # Vacation, sick leave, ...


class StaffMember(Base):
    __tablename__ = "staff_members"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    provider_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("providers.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    title = Column(String(100), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    services = relationship(
        "Service",
        secondary=staff_service_assignments,
        back_populates="staff"
    )

    def __repr__(self):
        return f"<StaffMember(id={self.id}, name={self.name})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "provider_id": str(self.provider_id),
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "title": self.title,
            "is_active": self.is_active,
            "service_ids": [str(s.id) for s in self.services],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class StaffAvailability(Base):
    """Ad hoc staff exceptions that take precedence over business hours"""
    __tablename__ = "staff_availability"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    staff_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("staff_members.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    availability_type = Column(SQLEnum(AvailabilityType), nullable=False, default=AvailabilityType.UNAVAILABLE)
    reason = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            "id": str(self.id),
            "staff_id": str(self.staff_id),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "availability_type": self.availability_type.value,
            "reason": self.reason,
        }
