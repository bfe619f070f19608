# slotwise/services/provider/staff_service.py
"""Service for staff members, their service assignments and availability overrides"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from slotwise.models.booking import Booking, BookingStatus
from slotwise.models.service import Service
from slotwise.models.staff import StaffMember, StaffAvailability, AvailabilityType
from slotwise.services.availability.timezones import as_utc

logger = logging.getLogger(__name__)


class StaffService:

    @staticmethod
    def list_staff(db: Session, provider_id: UUID) -> List[Dict[str, Any]]:
        """Staff with their count of upcoming (not finished) bookings"""
        staff_members = db.query(StaffMember).filter(
            StaffMember.provider_id == provider_id
        ).order_by(StaffMember.created_at.desc()).all()

        results = []
        for staff in staff_members:
            data = staff.to_dict()
            data["active_bookings"] = db.query(Booking).filter(
                Booking.staff_id == staff.id,
                Booking.status.notin_([BookingStatus.CANCELLED, BookingStatus.NO_SHOW, BookingStatus.COMPLETED])
            ).count()
            results.append(data)
        return results

    @staticmethod
    def get_staff(db: Session, provider_id: UUID, staff_id: UUID) -> Optional[StaffMember]:
        return db.query(StaffMember).filter(
            StaffMember.id == staff_id,
            StaffMember.provider_id == provider_id
        ).first()

    @staticmethod
    def create_staff(
            db: Session,
            provider_id: UUID,
            name: str,
            email: Optional[str] = None,
            phone: Optional[str] = None,
            title: Optional[str] = None,
            service_ids: Sequence[UUID] = ()
    ) -> StaffMember:
        staff = StaffMember(
            provider_id=provider_id,
            name=name,
            email=email,
            phone=phone,
            title=title,
            is_active=True
        )
        staff.services = StaffService._provider_services(db, provider_id, service_ids)

        db.add(staff)
        db.commit()
        db.refresh(staff)

        logger.info(f"Created staff member {staff.id} for provider {provider_id}")
        return staff

    @staticmethod
    def update_staff(
            db: Session,
            staff: StaffMember,
            updates: Dict[str, Any]
    ) -> StaffMember:
        service_ids = updates.pop("service_ids", None)
        for field, value in updates.items():
            setattr(staff, field, value)

        if service_ids is not None:
            staff.services = StaffService._provider_services(db, staff.provider_id, service_ids)

        db.commit()
        db.refresh(staff)
        return staff

    @staticmethod
    def add_override(
            db: Session,
            staff: StaffMember,
            start_time: datetime,
            end_time: datetime,
            availability_type: AvailabilityType,
            reason: Optional[str] = None
    ) -> StaffAvailability:
        start, end = as_utc(start_time), as_utc(end_time)
        if end <= start:
            raise ValueError("end_time must be after start_time")

        override = StaffAvailability(
            staff_id=staff.id,
            start_time=start,
            end_time=end,
            availability_type=availability_type,
            reason=reason
        )
        db.add(override)
        db.commit()
        db.refresh(override)

        logger.info(f"Added {availability_type.value} override for staff {staff.id}")
        return override

    @staticmethod
    def list_overrides(db: Session, staff: StaffMember) -> List[StaffAvailability]:
        return db.query(StaffAvailability).filter(
            StaffAvailability.staff_id == staff.id
        ).order_by(StaffAvailability.start_time.asc()).all()

    @staticmethod
    def delete_override(db: Session, staff: StaffMember, override_id: UUID) -> bool:
        deleted = db.query(StaffAvailability).filter(
            StaffAvailability.id == override_id,
            StaffAvailability.staff_id == staff.id
        ).delete()
        db.commit()
        return deleted > 0

    @staticmethod
    def _provider_services(db: Session, provider_id: UUID, service_ids: Sequence[UUID]) -> List[Service]:
        if not service_ids:
            return []

        services = db.query(Service).filter(
            Service.id.in_(list(service_ids)),
            Service.provider_id == provider_id
        ).all()

        if len(services) != len(set(service_ids)):
            raise ValueError("One or more services do not belong to this provider")
        return services
