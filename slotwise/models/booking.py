# ===== slotwise/models/booking.py =====
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Numeric, Uuid, Enum as SQLEnum
from sqlalchemy.sql import func
from .base import Base
import uuid
import enum


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    COMPLETED = "COMPLETED"


# Bookings in these statuses never hold capacity
INACTIVE_BOOKING_STATUSES = (BookingStatus.CANCELLED, BookingStatus.NO_SHOW)


class PaymentMethod(str, enum.Enum):
    STRIPE = "STRIPE"
    VIPPS = "VIPPS"
    CASH = "CASH"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    provider_id = Column(Uuid(as_uuid=True), ForeignKey("providers.id"), nullable=False, index=True)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=False, index=True)
    staff_id = Column(Uuid(as_uuid=True), ForeignKey("staff_members.id"), nullable=True, index=True)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)

    # Customer info
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False, index=True)
    customer_phone = Column(String, nullable=True)

    # Offered window, buffers excluded
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)

    status = Column(SQLEnum(BookingStatus), default=BookingStatus.PENDING, nullable=False, index=True)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=True)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Booking(id={self.id}, start={self.start_time}, status={self.status})>"
