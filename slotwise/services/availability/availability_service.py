# ===== slotwise/services/availability/availability_service.py =====
"""
Availability engine.

Classifies candidate windows for a provider's service as bookable or not by
combining business hours, provider-wide blocked time, service capacity
(max_concurrent) and, for services that require staff, the staff pool. The engine only reads through a
ResourceStore and keeps no state between calls.

Results are advisory: a window reported as available can be taken by a
concurrent booking before the caller commits. The booking write path re-runs
the check inside its own transaction.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from slotwise.config.settings import get_settings
from slotwise.services.availability.business_hours import BusinessHoursResolver
from slotwise.services.availability.exceptions import InvalidTimeRangeError, ResourceNotFoundError
from slotwise.services.availability.interval import Interval
from slotwise.services.availability.resource_store import ResourceStore, SQLAlchemyResourceStore
from slotwise.services.availability.slot_generator import SlotGenerator
from slotwise.services.availability.staff_capacity import StaffCapacityResolver
from slotwise.services.availability.timezones import parse_date, resolve_timezone
from slotwise.services.availability.types import ProviderInfo, ServiceConfig, TimeSlot

logger = logging.getLogger(__name__)


class UnavailableReason:
    SERVICE_NOT_FOUND = "service_not_found"
    SERVICE_INACTIVE = "service_inactive"
    PROVIDER_NOT_FOUND = "provider_not_found"
    OUTSIDE_BUSINESS_HOURS = "outside_business_hours"
    PROVIDER_BLOCKED = "provider_blocked"
    FULLY_BOOKED = "fully_booked"
    NO_STAFF_AVAILABLE = "no_staff_available"


@dataclass(frozen=True)
class AvailabilityCheck:
    available: bool
    reason: Optional[str] = None
    available_capacity: int = 0


@dataclass(frozen=True)
class EvaluationContext:
    """Everything loaded once per engine call"""
    provider: ProviderInfo
    service: ServiceConfig
    tz: object
    hours: BusinessHoursResolver


class AvailabilityService:
    """Availability/slot computation over a ResourceStore"""

    def __init__(
            self,
            store: ResourceStore,
            default_timezone: str = "UTC",
            granularity_minutes: Optional[int] = None
    ):
        self.store = store
        self.default_timezone = default_timezone
        self.granularity_minutes = granularity_minutes
        self.staff = StaffCapacityResolver(store)

    @classmethod
    def for_session(cls, db: Session) -> "AvailabilityService":
        """Engine reading through a SQLAlchemy session, configured from settings"""
        settings = get_settings()
        return cls(
            SQLAlchemyResourceStore(db),
            default_timezone=settings.DEFAULT_TIMEZONE,
            granularity_minutes=settings.SLOT_GRANULARITY_MINUTES,
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def is_window_available(
            self,
            provider_id: UUID,
            service_id: UUID,
            start: datetime,
            end: datetime
    ) -> bool:
        """
        True when [start, end) can be booked.

        Fails closed (False) for an unknown or inactive service or provider.
        Raises InvalidTimeRangeError for a bad window and
        InvalidConfigurationError for an invalid service configuration.
        """
        return self.check_window(provider_id, service_id, start, end).available

    def check_window(
            self,
            provider_id: UUID,
            service_id: UUID,
            start: datetime,
            end: datetime
    ) -> AvailabilityCheck:
        """Same evaluation as is_window_available, reporting the first failing condition"""
        offered = self._window(start, end)

        service = self.store.get_service(service_id)
        if service is None or service.provider_id != provider_id:
            logger.info(f"Service {service_id} not found for provider {provider_id}, failing closed")
            return AvailabilityCheck(False, UnavailableReason.SERVICE_NOT_FOUND)

        if not service.is_active:
            logger.info(f"Service {service_id} is inactive, failing closed")
            return AvailabilityCheck(False, UnavailableReason.SERVICE_INACTIVE)

        service.validate()

        provider = self.store.get_provider(provider_id)
        if provider is None or not provider.is_active:
            logger.info(f"Provider {provider_id} not found or inactive, failing closed")
            return AvailabilityCheck(False, UnavailableReason.PROVIDER_NOT_FOUND)

        context = self._context(provider, service)
        return self.evaluate(context, offered)

    def list_day_slots(
            self,
            provider_id: UUID,
            service_id: UUID,
            day: Union[date, str],
            timezone: Optional[str] = None,
            granularity_minutes: Optional[int] = None
    ) -> List[TimeSlot]:
        """
        Every candidate slot of the day annotated with availability.

        Raises ResourceNotFoundError for an unknown provider or service so callers
        can tell "no slots today" apart from a bad id. No filtering is applied.
        """
        day = parse_date(day)
        context = self.build_context(provider_id, service_id, timezone)
        return self.day_slots(context, day, granularity_minutes)

    def day_slots(
            self,
            context: EvaluationContext,
            day: date,
            granularity_minutes: Optional[int] = None
    ) -> List[TimeSlot]:
        """list_day_slots for an already loaded context"""
        service = context.service

        generator = SlotGenerator(
            context.hours.open_intervals(day, context.tz),
            duration=service.duration,
            buffer_before=service.buffer_time_before,
            buffer_after=service.buffer_time_after,
            granularity=granularity_minutes or self.granularity_minutes,
        )

        slots = []
        for candidate in generator:
            check = self.evaluate(context, candidate.offered)
            slots.append(
                TimeSlot(
                    start=candidate.offered.start,
                    end=candidate.offered.end,
                    available=check.available,
                    available_capacity=check.available_capacity,
                )
            )

        logger.info(
            f"Computed {len(slots)} slots ({sum(1 for s in slots if s.available)} available) "
            f"for service {service.id} on {day.isoformat()}"
        )
        return slots

    def pick_first_free_staff(
            self,
            provider_id: UUID,
            service_id: UUID,
            start: datetime,
            end: datetime
    ) -> Optional[UUID]:
        """
        Staff assignment policy for bookings: the free eligible staff member with
        the lowest id. None when the service does not require staff or nobody is free.
        """
        offered = self._window(start, end)
        context = self.build_context(provider_id, service_id)
        service = context.service
        if not service.requires_staff:
            return None

        effective = service.effective_window(offered)
        open_intervals = context.hours.intervals_around(effective, context.tz)
        return self.staff.pick_first_free(service, effective, open_intervals)

    # ------------------------------------------------------------------
    # Individual conditions
    # ------------------------------------------------------------------

    def build_context(
            self,
            provider_id: UUID,
            service_id: UUID,
            timezone: Optional[str] = None
    ) -> EvaluationContext:
        provider = self.store.get_provider(provider_id)
        if provider is None or not provider.is_active:
            raise ResourceNotFoundError("Provider", provider_id)

        service = self.store.get_service(service_id)
        if service is None or not service.is_active or service.provider_id != provider_id:
            raise ResourceNotFoundError("Service", service_id)

        service.validate()
        return self._context(provider, service, timezone)

    def within_business_hours(self, context: EvaluationContext, offered: Interval) -> bool:
        """The effective window (buffers included) lies inside one open period"""
        effective = context.service.effective_window(offered)
        return context.hours.covers(effective, context.tz)

    def is_blocked(self, context: EvaluationContext, offered: Interval) -> bool:
        """A provider-wide block overlaps the effective window"""
        effective = context.service.effective_window(offered)
        blocks = self.store.list_provider_blocks(context.provider.id, effective.start, effective.end)
        return any(block.interval.overlaps(effective) for block in blocks)

    def remaining_service_capacity(self, context: EvaluationContext, offered: Interval) -> int:
        service = context.service
        conflict = service.conflict_window(offered)
        booked = self.store.count_active_bookings(service.id, conflict.start, conflict.end)
        return max(0, service.max_concurrent - booked)

    def has_service_capacity(self, context: EvaluationContext, offered: Interval) -> bool:
        return self.remaining_service_capacity(context, offered) > 0

    def remaining_staff_capacity(self, context: EvaluationContext, offered: Interval) -> int:
        service = context.service
        effective = service.effective_window(offered)
        open_intervals = context.hours.intervals_around(effective, context.tz)
        return self.staff.free_capacity(
            service, effective, open_intervals, conflict_window=service.conflict_window(offered)
        )

    def has_staff_capacity(self, context: EvaluationContext, offered: Interval) -> bool:
        if not context.service.requires_staff:
            return True
        return self.remaining_staff_capacity(context, offered) > 0

    def evaluate(self, context: EvaluationContext, offered: Interval) -> AvailabilityCheck:
        """AND of all conditions; stops at the first one that fails"""
        if not self.within_business_hours(context, offered):
            return AvailabilityCheck(False, UnavailableReason.OUTSIDE_BUSINESS_HOURS)

        if self.is_blocked(context, offered):
            return AvailabilityCheck(False, UnavailableReason.PROVIDER_BLOCKED)

        remaining = self.remaining_service_capacity(context, offered)
        if remaining <= 0:
            return AvailabilityCheck(False, UnavailableReason.FULLY_BOOKED)

        if context.service.requires_staff:
            staff_remaining = self.remaining_staff_capacity(context, offered)
            if staff_remaining <= 0:
                return AvailabilityCheck(False, UnavailableReason.NO_STAFF_AVAILABLE)
            remaining = min(remaining, staff_remaining)

        return AvailabilityCheck(True, available_capacity=remaining)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _context(
            self,
            provider: ProviderInfo,
            service: ServiceConfig,
            timezone: Optional[str] = None
    ) -> EvaluationContext:
        tz = resolve_timezone(timezone or provider.timezone, fallback=self.default_timezone)
        rules = self.store.get_business_hours(provider.id)
        return EvaluationContext(
            provider=provider,
            service=service,
            tz=tz,
            hours=BusinessHoursResolver(rules),
        )

    @staticmethod
    def _window(start: datetime, end: datetime) -> Interval:
        if not isinstance(start, datetime) or not isinstance(end, datetime):
            raise InvalidTimeRangeError("Window bounds must be datetimes")
        return Interval(start, end)
