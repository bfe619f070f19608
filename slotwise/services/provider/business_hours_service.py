# slotwise/services/provider/business_hours_service.py
"""Service for managing a provider's weekly business hours and blocked time"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from slotwise.models.provider import BusinessHours, BlockedTime
from slotwise.services.availability.business_hours import default_business_hours
from slotwise.services.availability.timezones import as_utc, parse_hhmm

logger = logging.getLogger(__name__)


class BusinessHoursService:

    @staticmethod
    def get_business_hours(db: Session, provider_id: UUID) -> Dict[str, Any]:
        """Stored hours, or the default policy flagged with is_default=True"""
        rows = db.query(BusinessHours).filter(
            BusinessHours.provider_id == provider_id
        ).order_by(BusinessHours.day_of_week.asc()).all()

        if not rows:
            return {
                "business_hours": [
                    {
                        "day_of_week": rule.day_of_week,
                        "is_open": rule.is_open,
                        "open_time": rule.open_time,
                        "close_time": rule.close_time,
                    }
                    for rule in default_business_hours()
                ],
                "is_default": True,
            }

        return {"business_hours": [row.to_dict() for row in rows], "is_default": False}

    @staticmethod
    def replace_business_hours(
            db: Session,
            provider_id: UUID,
            hours: Sequence[Dict[str, Any]]
    ) -> List[BusinessHours]:
        """
        Replace all rules of the provider in one transaction.
        Raises ValueError on duplicate days or open rules with open >= close.
        """
        seen = set()
        for item in hours:
            dow = item["day_of_week"]
            if dow in seen:
                raise ValueError(f"Duplicate business hours for day {dow}")
            seen.add(dow)
            if item["is_open"] and parse_hhmm(item["open_time"]) >= parse_hhmm(item["close_time"]):
                raise ValueError(f"Opening time must be before closing time for day {dow}")

        try:
            db.query(BusinessHours).filter(BusinessHours.provider_id == provider_id).delete()
            rows = [
                BusinessHours(
                    provider_id=provider_id,
                    day_of_week=item["day_of_week"],
                    is_open=item["is_open"],
                    open_time=item["open_time"],
                    close_time=item["close_time"],
                )
                for item in hours
            ]
            db.add_all(rows)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Replaced business hours for provider {provider_id} ({len(rows)} rules)")

        return db.query(BusinessHours).filter(
            BusinessHours.provider_id == provider_id
        ).order_by(BusinessHours.day_of_week.asc()).all()

    @staticmethod
    def add_blocked_time(
            db: Session,
            provider_id: UUID,
            start_time: datetime,
            end_time: datetime,
            reason: Optional[str] = None
    ) -> BlockedTime:
        """Close the provider for [start_time, end_time) across every service"""
        start, end = as_utc(start_time), as_utc(end_time)
        if end <= start:
            raise ValueError("end_time must be after start_time")

        block = BlockedTime(provider_id=provider_id, start_time=start, end_time=end, reason=reason)
        db.add(block)
        db.commit()
        db.refresh(block)

        logger.info(f"Blocked {start.isoformat()} - {end.isoformat()} for provider {provider_id}")
        return block

    @staticmethod
    def list_blocked_times(db: Session, provider_id: UUID) -> List[BlockedTime]:
        return db.query(BlockedTime).filter(
            BlockedTime.provider_id == provider_id
        ).order_by(BlockedTime.start_time.asc()).all()

    @staticmethod
    def delete_blocked_time(db: Session, provider_id: UUID, block_id: UUID) -> bool:
        deleted = db.query(BlockedTime).filter(
            BlockedTime.id == block_id,
            BlockedTime.provider_id == provider_id
        ).delete()
        db.commit()
        return deleted > 0
