# ============================================================================
# FILE: slotwise/api/v1/dashboard/bookings.py
# Provider authenticated endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from slotwise.config.database import get_db
from slotwise.models.booking import BookingStatus
from slotwise.models.provider import Provider
from slotwise.api.dependencies import require_provider
from slotwise.schemas.booking import BookingStatusUpdate
from slotwise.services.booking.booking_service import BookingService
from slotwise.services.booking.exceptions import BookingNotFoundError, BookingStateError

router = APIRouter(prefix="/bookings", tags=["dashboard-bookings"])


@router.get("")
async def list_bookings(
        start_date: Optional[date] = Query(None, description="Filter bookings starting on or after this date"),
        end_date: Optional[date] = Query(None, description="Filter bookings starting on or before this date"),
        status: Optional[BookingStatus] = Query(None, description="Filter by status"),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """
    Get a list of all bookings for your business.
    Requires authenticated provider.
    """
    return BookingService.list_provider_bookings(
        db=db,
        provider_id=provider.id,
        start_date=start_date,
        end_date=end_date,
        status=status,
        skip=skip,
        limit=limit
    )


@router.get("/{booking_id}")
async def get_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    booking = BookingService.get_booking(db, booking_id)

    if not booking or booking.provider_id != provider.id:
        raise HTTPException(
            status_code=404,
            detail="Booking not found"
        )

    return BookingService.serialize_booking(booking)


@router.patch("/{booking_id}/status")
async def update_booking_status(
        request: BookingStatusUpdate,
        booking_id: UUID = Path(..., description="The booking ID"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """
    Move a booking through its lifecycle:
    PENDING -> CONFIRMED | CANCELLED, CONFIRMED -> COMPLETED | CANCELLED | NO_SHOW
    """
    try:
        booking = BookingService.update_status(
            db=db,
            provider_id=provider.id,
            booking_id=booking_id,
            new_status=request.status,
            reason=request.reason
        )
    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingStateError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "message": f"Booking status updated to {booking.status.value}",
        "booking": BookingService.serialize_booking(booking)
    }
