# ============================================================================
# slotwise/services/availability/resource_store.py
# Named read operations the availability engine depends on
# ============================================================================
from datetime import datetime, timedelta
from typing import List, Optional, Protocol, Sequence
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from slotwise.models.booking import Booking, INACTIVE_BOOKING_STATUSES
from slotwise.models.provider import Provider, BusinessHours, BlockedTime
from slotwise.models.service import Service, staff_service_assignments
from slotwise.models.staff import StaffMember, StaffAvailability, AvailabilityType
from slotwise.services.availability.interval import Interval
from slotwise.services.availability.timezones import as_utc
from slotwise.services.availability.types import (
    BusinessHoursRule,
    ProviderBlock,
    ProviderInfo,
    ServiceConfig,
    StaffBooking,
    StaffOverride,
    StaffRef,
)


class ResourceStore(Protocol):
    """Read side of the persistence layer, as seen by the availability engine."""

    def get_provider(self, provider_id: UUID) -> Optional[ProviderInfo]:
        ...

    def get_service(self, service_id: UUID) -> Optional[ServiceConfig]:
        ...

    def get_business_hours(self, provider_id: UUID) -> List[BusinessHoursRule]:
        ...

    def count_active_bookings(self, service_id: UUID, window_start: datetime, window_end: datetime) -> int:
        ...

    def count_unassigned_bookings(self, service_id: UUID, window_start: datetime, window_end: datetime) -> int:
        ...

    def list_eligible_staff(self, provider_id: UUID, service_id: UUID, any_staff_member: bool) -> List[StaffRef]:
        ...

    def list_staff_bookings(
            self, staff_ids: Sequence[UUID], window_start: datetime, window_end: datetime
    ) -> List[StaffBooking]:
        """Active bookings whose buffered (effective) interval overlaps the window"""
        ...

    def list_staff_overrides(
            self, staff_ids: Sequence[UUID], window_start: datetime, window_end: datetime
    ) -> List[StaffOverride]:
        ...

    def list_provider_blocks(
            self, provider_id: UUID, window_start: datetime, window_end: datetime
    ) -> List[ProviderBlock]:
        ...


class SQLAlchemyResourceStore:
    """
    ResourceStore backed by a SQLAlchemy session.

    All reads of one engine call go through the same session, so they share the
    session's transaction and see one snapshot. Callers that need a hard
    guarantee (booking creation) must run the check inside the transaction that
    commits the write.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_provider(self, provider_id: UUID) -> Optional[ProviderInfo]:
        provider = self.db.query(Provider).filter(Provider.id == provider_id).first()
        if not provider:
            return None

        return ProviderInfo(
            id=provider.id,
            timezone=provider.timezone,
            is_active=bool(provider.is_active),
        )

    def get_service(self, service_id: UUID) -> Optional[ServiceConfig]:
        service = self.db.query(Service).filter(Service.id == service_id).first()
        if not service:
            return None

        return ServiceConfig(
            id=service.id,
            provider_id=service.provider_id,
            duration=service.duration,
            buffer_time_before=service.buffer_time_before or 0,
            buffer_time_after=service.buffer_time_after or 0,
            requires_staff=bool(service.requires_staff),
            any_staff_member=bool(service.any_staff_member),
            max_concurrent=service.max_concurrent,
            is_active=bool(service.is_active),
        )

    def get_business_hours(self, provider_id: UUID) -> List[BusinessHoursRule]:
        rows = self.db.query(BusinessHours).filter(
            BusinessHours.provider_id == provider_id
        ).order_by(BusinessHours.day_of_week.asc()).all()

        return [
            BusinessHoursRule(
                day_of_week=row.day_of_week,
                is_open=bool(row.is_open),
                open_time=row.open_time,
                close_time=row.close_time,
            )
            for row in rows
        ]

    def count_active_bookings(self, service_id: UUID, window_start: datetime, window_end: datetime) -> int:
        return self._overlapping_service_bookings(service_id, window_start, window_end).count()

    def count_unassigned_bookings(self, service_id: UUID, window_start: datetime, window_end: datetime) -> int:
        return self._overlapping_service_bookings(service_id, window_start, window_end).filter(
            Booking.staff_id.is_(None)
        ).count()

    def list_eligible_staff(self, provider_id: UUID, service_id: UUID, any_staff_member: bool) -> List[StaffRef]:
        query = self.db.query(StaffMember).filter(
            StaffMember.provider_id == provider_id,
            StaffMember.is_active == True
        )

        if not any_staff_member:
            query = query.join(
                staff_service_assignments,
                staff_service_assignments.c.staff_id == StaffMember.id
            ).filter(staff_service_assignments.c.service_id == service_id)

        return sorted(
            (StaffRef(id=s.id, provider_id=s.provider_id, is_active=True) for s in query.all()),
            key=lambda staff: str(staff.id)
        )

    def list_staff_bookings(
            self, staff_ids: Sequence[UUID], window_start: datetime, window_end: datetime
    ) -> List[StaffBooking]:
        if not staff_ids:
            return []

        ids = list(staff_ids)
        window = Interval(as_utc(window_start), as_utc(window_end))

        # Buffers live on each booking's service; widen the stored-time filter by
        # the largest ones, then test the padded intervals exactly
        max_before, max_after = self.db.query(
            func.coalesce(func.max(Service.buffer_time_before), 0),
            func.coalesce(func.max(Service.buffer_time_after), 0)
        ).join(Booking, Booking.service_id == Service.id).filter(
            Booking.staff_id.in_(ids)
        ).one()

        rows = self.db.query(
            Booking, Service.buffer_time_before, Service.buffer_time_after
        ).join(Service, Booking.service_id == Service.id).filter(
            Booking.staff_id.in_(ids),
            Booking.status.notin_(INACTIVE_BOOKING_STATUSES),
            Booking.start_time < window.end + timedelta(minutes=max_before),
            Booking.end_time > window.start - timedelta(minutes=max_after)
        ).all()

        bookings = [
            StaffBooking(
                id=b.id,
                staff_id=b.staff_id,
                interval=Interval(as_utc(b.start_time), as_utc(b.end_time)),
                buffer_time_before=before or 0,
                buffer_time_after=after or 0,
            )
            for b, before, after in rows
        ]
        return [b for b in bookings if b.effective_interval.overlaps(window)]

    def list_staff_overrides(
            self, staff_ids: Sequence[UUID], window_start: datetime, window_end: datetime
    ) -> List[StaffOverride]:
        if not staff_ids:
            return []

        start, end = as_utc(window_start), as_utc(window_end)
        overrides = self.db.query(StaffAvailability).filter(
            StaffAvailability.staff_id.in_(list(staff_ids)),
            StaffAvailability.start_time < end,
            StaffAvailability.end_time > start
        ).all()

        return [
            StaffOverride(
                staff_id=o.staff_id,
                interval=Interval(as_utc(o.start_time), as_utc(o.end_time)),
                is_available=o.availability_type == AvailabilityType.AVAILABLE,
            )
            for o in overrides
        ]

    def list_provider_blocks(
            self, provider_id: UUID, window_start: datetime, window_end: datetime
    ) -> List[ProviderBlock]:
        start, end = as_utc(window_start), as_utc(window_end)
        blocks = self.db.query(BlockedTime).filter(
            BlockedTime.provider_id == provider_id,
            BlockedTime.start_time < end,
            BlockedTime.end_time > start
        ).order_by(BlockedTime.start_time.asc()).all()

        return [
            ProviderBlock(
                provider_id=b.provider_id,
                interval=Interval(as_utc(b.start_time), as_utc(b.end_time)),
                reason=b.reason,
            )
            for b in blocks
        ]

    def _overlapping_service_bookings(self, service_id: UUID, window_start: datetime, window_end: datetime):
        # Half-open overlap: booking.start < window.end AND window.start < booking.end
        start, end = as_utc(window_start), as_utc(window_end)
        return self.db.query(Booking).filter(
            Booking.service_id == service_id,
            Booking.status.notin_(INACTIVE_BOOKING_STATUSES),
            Booking.start_time < end,
            Booking.end_time > start
        )
