# ============================================================================
# slotwise/services/booking/booking_service.py
# Booking write path - pure business logic, no FastAPI dependencies
# ============================================================================
import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from slotwise.config.settings import get_settings
from slotwise.models.booking import Booking, BookingStatus, PaymentMethod
from slotwise.models.service import Service
from slotwise.models.staff import StaffMember
from slotwise.services.availability.availability_service import AvailabilityService
from slotwise.services.availability.exceptions import InvalidTimeRangeError, ResourceNotFoundError
from slotwise.services.availability.timezones import as_utc
from slotwise.services.booking.exceptions import (
    BookingNotFoundError,
    BookingPermissionError,
    BookingStateError,
    SlotUnavailableError,
)

logger = logging.getLogger(__name__)

# Provider-driven status changes
ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW},
}


class BookingService:
    """Service layer for booking creation and lifecycle"""

    @staticmethod
    def create_booking(
            db: Session,
            provider_id: UUID,
            service_id: UUID,
            start_time: datetime,
            customer_name: str,
            customer_email: str,
            customer_phone: Optional[str] = None,
            notes: Optional[str] = None,
            payment_method: PaymentMethod = PaymentMethod.CASH,
            customer_id: Optional[UUID] = None
    ) -> Booking:
        """
        Create a booking after re-checking availability in the same transaction.

        The service row (and the provider's staff rows for staffed services) are
        locked with SELECT ... FOR UPDATE, so two concurrent requests for the same
        window serialize: the second one re-reads committed bookings and fails with
        SlotUnavailableError.
        """
        if start_time.tzinfo is None:
            raise InvalidTimeRangeError("start_time must include a timezone offset")

        try:
            service = db.query(Service).filter(
                Service.id == service_id
            ).with_for_update().first()

            if not service or service.provider_id != provider_id:
                raise ResourceNotFoundError("Service", service_id)

            if service.requires_staff:
                db.query(StaffMember).filter(
                    StaffMember.provider_id == provider_id
                ).order_by(StaffMember.id).with_for_update().all()

            start = as_utc(start_time)
            end = start + timedelta(minutes=service.duration)

            engine = AvailabilityService.for_session(db)
            check = engine.check_window(provider_id, service_id, start, end)
            if not check.available:
                raise SlotUnavailableError(check.reason)

            staff_id = None
            if service.requires_staff:
                staff_id = engine.pick_first_free_staff(provider_id, service_id, start, end)

            booking = Booking(
                provider_id=provider_id,
                service_id=service_id,
                staff_id=staff_id,
                customer_id=customer_id,
                customer_name=customer_name,
                customer_email=customer_email.lower().strip(),
                customer_phone=customer_phone,
                start_time=start,
                end_time=end,
                notes=notes,
                payment_method=payment_method,
                total_amount=service.price or Decimal("0"),
                status=BookingStatus.CONFIRMED if payment_method == PaymentMethod.CASH else BookingStatus.PENDING,
            )

            db.add(booking)
            db.commit()
            db.refresh(booking)

        except Exception:
            db.rollback()
            raise

        logger.info(
            f"Created booking {booking.id} for service {service_id} at {start.isoformat()} "
            f"(staff={staff_id}, status={booking.status.value})"
        )
        return booking

    @staticmethod
    def cancel_booking(
            db: Session,
            booking_id: UUID,
            customer_email: str,
            reason: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Customer cancellation. Full refund when more than
        CANCELLATION_FULL_REFUND_HOURS remain before the start, none otherwise.
        """
        settings = get_settings()
        now = as_utc(now) if now else datetime.now(timezone.utc)

        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found")

        if booking.customer_email.lower() != customer_email.lower().strip():
            raise BookingPermissionError("Email does not match this booking")

        if booking.status == BookingStatus.CANCELLED:
            raise BookingStateError("Booking is already cancelled")

        if booking.status == BookingStatus.COMPLETED:
            raise BookingStateError("Completed bookings cannot be cancelled")

        if as_utc(booking.end_time) < now:
            raise BookingStateError("Past bookings cannot be cancelled")

        hours_until_start = (as_utc(booking.start_time) - now).total_seconds() / 3600
        refund_percentage = 100 if hours_until_start >= settings.CANCELLATION_FULL_REFUND_HOURS else 0
        refund_amount = (Decimal(booking.total_amount or 0) * refund_percentage) / 100

        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = now
        booking.cancellation_reason = reason or "Cancelled by customer"
        db.commit()
        db.refresh(booking)

        logger.info(f"Booking {booking_id} cancelled by customer, refund {refund_percentage}%")

        return {
            "booking": BookingService.serialize_booking(booking),
            "refund_percentage": refund_percentage,
            "refund_amount": float(refund_amount),
        }

    @staticmethod
    def update_status(
            db: Session,
            provider_id: UUID,
            booking_id: UUID,
            new_status: BookingStatus,
            reason: Optional[str] = None
    ) -> Booking:
        booking = db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.provider_id == provider_id
        ).first()

        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found")

        allowed = ALLOWED_TRANSITIONS.get(booking.status, set())
        if new_status not in allowed:
            raise BookingStateError(
                f"Cannot change booking status from {booking.status.value} to {new_status.value}"
            )

        booking.status = new_status
        if new_status == BookingStatus.CANCELLED:
            booking.cancelled_at = datetime.now(timezone.utc)
            booking.cancellation_reason = reason or "Cancelled by provider"

        db.commit()
        db.refresh(booking)

        logger.info(f"Booking {booking_id} moved to {new_status.value}")
        return booking

    @staticmethod
    def get_booking(db: Session, booking_id: UUID) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def list_provider_bookings(
            db: Session,
            provider_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            status: Optional[BookingStatus] = None,
            skip: int = 0,
            limit: int = 50
    ) -> Dict[str, Any]:
        """Get paginated list of bookings with filters."""
        query = db.query(Booking).filter(Booking.provider_id == provider_id)

        if start_date:
            query = query.filter(
                Booking.start_time >= datetime.combine(start_date, datetime.min.time(), tzinfo=timezone.utc)
            )
        if end_date:
            query = query.filter(
                Booking.start_time < datetime.combine(end_date + timedelta(days=1), datetime.min.time(), tzinfo=timezone.utc)
            )
        if status:
            query = query.filter(Booking.status == status)

        query = query.order_by(Booking.start_time.asc())
        total = query.count()
        bookings = query.offset(skip).limit(limit).all()

        return {
            "provider_id": str(provider_id),
            "total_bookings": total,
            "page": {
                "skip": skip,
                "limit": limit,
                "total_pages": (total + limit - 1) // limit if total > 0 else 0
            },
            "bookings": [BookingService.serialize_booking(b) for b in bookings]
        }

    @staticmethod
    def list_customer_bookings(db: Session, customer_email: str) -> List[Dict[str, Any]]:
        bookings = db.query(Booking).filter(
            Booking.customer_email == customer_email.lower().strip()
        ).order_by(desc(Booking.start_time)).all()

        return [BookingService.serialize_booking(b) for b in bookings]

    @staticmethod
    def serialize_booking(booking: Booking) -> Dict[str, Any]:
        return {
            "id": str(booking.id),
            "provider_id": str(booking.provider_id),
            "service_id": str(booking.service_id),
            "staff_id": str(booking.staff_id) if booking.staff_id else None,
            "customer_name": booking.customer_name,
            "customer_email": booking.customer_email,
            "customer_phone": booking.customer_phone,
            "start_time": as_utc(booking.start_time).isoformat(timespec="seconds"),
            "end_time": as_utc(booking.end_time).isoformat(timespec="seconds"),
            "status": booking.status.value,
            "payment_method": booking.payment_method.value if booking.payment_method else None,
            "total_amount": float(booking.total_amount) if booking.total_amount is not None else None,
            "notes": booking.notes,
            "cancelled_at": as_utc(booking.cancelled_at).isoformat() if booking.cancelled_at else None,
        }
