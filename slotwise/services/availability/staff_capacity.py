# slotwise/services/availability/staff_capacity.py
"""
Staff-based capacity for services that require a staff member.

A staff member is busy for a window when any of these holds:
  (a) one of their active bookings, padded by the buffers of its own service,
      overlaps the window
  (b) an UNAVAILABLE override overlaps the window
  (c) no AVAILABLE override covers the window and the window is outside the
      provider's business hours (staff inherit provider hours)

Bookings of the service without an assigned staff member each hold one
anonymous staff seat, so they are subtracted from the free pool.
"""
import logging
from typing import List, Optional, Sequence
from uuid import UUID

from slotwise.services.availability.interval import Interval
from slotwise.services.availability.resource_store import ResourceStore
from slotwise.services.availability.types import ServiceConfig, StaffRef

logger = logging.getLogger(__name__)


class StaffCapacityResolver:

    def __init__(self, store: ResourceStore):
        self.store = store

    def eligible_staff(self, service: ServiceConfig) -> List[StaffRef]:
        """Active staff allowed to perform the service, ordered by id"""
        staff = self.store.list_eligible_staff(
            service.provider_id, service.id, service.any_staff_member
        )
        return sorted((s for s in staff if s.is_active), key=lambda s: str(s.id))

    def free_staff(
            self,
            service: ServiceConfig,
            window: Interval,
            open_intervals: Sequence[Interval]
    ) -> List[StaffRef]:
        """Eligible staff members that are free for the whole window, ordered by id"""
        eligible = self.eligible_staff(service)
        if not eligible:
            return []

        staff_ids = [s.id for s in eligible]
        bookings = self.store.list_staff_bookings(staff_ids, window.start, window.end)
        overrides = self.store.list_staff_overrides(staff_ids, window.start, window.end)

        booked = {b.staff_id for b in bookings if b.effective_interval.overlaps(window)}
        blocked = {
            o.staff_id for o in overrides
            if not o.is_available and o.interval.overlaps(window)
        }
        extra_hours = {
            o.staff_id for o in overrides
            if o.is_available and o.interval.covers(window)
        }
        within_hours = any(interval.covers(window) for interval in open_intervals)

        free = []
        for staff in eligible:
            if staff.id in booked or staff.id in blocked:
                continue
            if not within_hours and staff.id not in extra_hours:
                continue
            free.append(staff)

        logger.debug(
            f"Service {service.id}: {len(free)}/{len(eligible)} staff free "
            f"for {window.start.isoformat()} - {window.end.isoformat()}"
        )
        return free

    def free_capacity(
            self,
            service: ServiceConfig,
            window: Interval,
            open_intervals: Sequence[Interval],
            conflict_window: Optional[Interval] = None
    ) -> int:
        """Number of additional bookings the free staff pool can absorb"""
        free = self.free_staff(service, window, open_intervals)
        if not free:
            return 0

        counted = conflict_window or window
        unassigned = self.store.count_unassigned_bookings(service.id, counted.start, counted.end)
        return max(0, len(free) - unassigned)

    def pick_first_free(
            self,
            service: ServiceConfig,
            window: Interval,
            open_intervals: Sequence[Interval]
    ) -> Optional[UUID]:
        """Deterministic assignment: the free staff member with the lowest id"""
        free = self.free_staff(service, window, open_intervals)
        return free[0].id if free else None
