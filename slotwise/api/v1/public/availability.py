# slotwise/api/v1/public/availability.py
"""
Public availability endpoint used by booking pages and the embed widget
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from slotwise.config.database import get_db
from slotwise.schemas.booking import AvailabilityResponse, TimeSlotResponse
from slotwise.services.availability.availability_service import AvailabilityService
from slotwise.services.availability.exceptions import (
    InvalidConfigurationError,
    InvalidTimeRangeError,
    ResourceNotFoundError,
)
from slotwise.services.availability.timezones import parse_date, resolve_timezone

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/availability", tags=["Public"])


@router.get("", response_model=AvailabilityResponse)
def get_availability(
        provider_id: UUID = Query(..., description="Provider ID"),
        service_id: UUID = Query(..., description="Service ID"),
        date: str = Query(..., description="Local date (YYYY-MM-DD or ISO-8601)"),
        timezone: Optional[str] = Query(None, description="IANA timezone overriding the provider's"),
        db: Session = Depends(get_db)
):
    """
    Bookable slots for one day. Only available slots are returned; the times
    are UTC ISO-8601 strings.

    Bookings are always checked in the provider's timezone, so a `timezone`
    naming a different zone is rejected instead of listing slots that could
    not be booked.
    """
    engine = AvailabilityService.for_session(db)

    try:
        day = parse_date(date)
        context = engine.build_context(provider_id, service_id)
        if timezone and resolve_timezone(timezone).zone != context.tz.zone:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Timezone {timezone} does not match the provider timezone {context.tz.zone}"
            )
        slots = engine.day_slots(context, day)
    except ResourceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidTimeRangeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidConfigurationError as e:
        logger.error(f"Invalid configuration for service {service_id}: {e}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return AvailabilityResponse(
        provider_id=str(provider_id),
        service_id=str(service_id),
        date=day.isoformat(),
        timezone=context.tz.zone,
        slots=[TimeSlotResponse(**slot.to_dict()) for slot in slots if slot.available],
    )
