# slotwise/api/v1/dashboard/blocked_times.py
"""
Provider-wide blocked time (holidays, closures). Slots overlapping a block are
unavailable for every service.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from slotwise.config.database import get_db
from slotwise.models.provider import Provider
from slotwise.api.dependencies import require_provider
from slotwise.schemas.business_hours import BlockedTimeCreate
from slotwise.services.provider.business_hours_service import BusinessHoursService

router = APIRouter(prefix="/blocked-times", tags=["dashboard-blocked-times"])


@router.get("")
async def list_blocked_times(
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    blocks = BusinessHoursService.list_blocked_times(db, provider.id)
    return {"blocked_times": [b.to_dict() for b in blocks]}


@router.post("", status_code=201)
async def add_blocked_time(
        request: BlockedTimeCreate,
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    try:
        block = BusinessHoursService.add_blocked_time(
            db,
            provider.id,
            start_time=request.start_time,
            end_time=request.end_time,
            reason=request.reason
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return block.to_dict()


@router.delete("/{block_id}")
async def delete_blocked_time(
        block_id: UUID = Path(..., description="The blocked time ID"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    if not BusinessHoursService.delete_blocked_time(db, provider.id, block_id):
        raise HTTPException(status_code=404, detail="Blocked time not found")

    return {"success": True}
