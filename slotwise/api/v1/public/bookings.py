# slotwise/api/v1/public/bookings.py
"""
Public booking endpoints: create, cancel, calendar export, customer lookup
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from pydantic import EmailStr
from sqlalchemy.orm import Session

from slotwise.api.dependencies import optional_current_user
from slotwise.config.database import get_db
from slotwise.models.provider import Provider
from slotwise.models.service import Service
from slotwise.models.user import User
from slotwise.schemas.booking import BookingCancelRequest, BookingCreateRequest
from slotwise.services.availability.exceptions import (
    InvalidConfigurationError,
    InvalidTimeRangeError,
    ResourceNotFoundError,
)
from slotwise.services.booking.booking_service import BookingService
from slotwise.services.booking.exceptions import (
    BookingNotFoundError,
    BookingPermissionError,
    BookingStateError,
    SlotUnavailableError,
)
from slotwise.services.calendar.ics_service import BookingEvent, generate_ics

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/bookings", tags=["Public"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_booking(
        request: BookingCreateRequest,
        current_user: Optional[User] = Depends(optional_current_user),
        db: Session = Depends(get_db)
):
    """
    Book a slot. Availability is re-checked inside the booking transaction, so a
    slot taken since the availability lookup returns 409.
    """
    try:
        booking = BookingService.create_booking(
            db=db,
            provider_id=request.provider_id,
            service_id=request.service_id,
            start_time=request.start_time,
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            customer_phone=request.customer_phone,
            notes=request.notes,
            payment_method=request.payment_method,
            customer_id=current_user.id if current_user else None,
        )
    except SlotUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e), "reason": e.reason}
        )
    except ResourceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidTimeRangeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating booking: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create booking")

    return {
        "message": "Booking created",
        "booking": BookingService.serialize_booking(booking),
    }


@router.get("/my-bookings")
def my_bookings(
        email: EmailStr = Query(..., description="Email used when booking"),
        db: Session = Depends(get_db)
):
    bookings = BookingService.list_customer_bookings(db, email)
    return {"total": len(bookings), "bookings": bookings}


@router.post("/{booking_id}/cancel")
def cancel_booking(
        booking_id: UUID,
        request: BookingCancelRequest,
        db: Session = Depends(get_db)
):
    try:
        result = BookingService.cancel_booking(
            db=db,
            booking_id=booking_id,
            customer_email=request.customer_email,
            reason=request.reason,
        )
    except BookingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except BookingPermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except BookingStateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {"message": "Booking cancelled", **result}


@router.get("/{booking_id}/ics")
def download_ics(booking_id: UUID, db: Session = Depends(get_db)):
    booking = BookingService.get_booking(db, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    service = db.query(Service).filter(Service.id == booking.service_id).first()
    provider = db.query(Provider).filter(Provider.id == booking.provider_id).first()

    description_lines = [service.description or "", f"Booked by: {booking.customer_name}"]
    if booking.customer_phone:
        description_lines.append(f"Phone: {booking.customer_phone}")
    if booking.notes:
        description_lines.append(booking.notes)

    event = BookingEvent(
        id=str(booking.id),
        title=service.name,
        start_time=booking.start_time,
        end_time=booking.end_time,
        organizer_name=provider.business_name or provider.name,
        organizer_email=provider.owner.email,
        attendee_name=booking.customer_name,
        attendee_email=booking.customer_email,
        description="\n".join(line for line in description_lines if line),
    )

    return Response(
        content=generate_ics(event),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="booking-{booking.id}.ics"'}
    )
