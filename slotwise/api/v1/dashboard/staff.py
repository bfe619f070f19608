# slotwise/api/v1/dashboard/staff.py
"""
Staff management: members, service assignments and availability overrides
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from slotwise.config.database import get_db
from slotwise.api.dependencies import require_provider
from slotwise.models.provider import Provider
from slotwise.models.staff import StaffMember
from slotwise.schemas.staff import StaffCreate, StaffUpdate, StaffOverrideCreate
from slotwise.services.provider.staff_service import StaffService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/staff", tags=["dashboard-staff"])


def _get_owned_staff(db: Session, provider: Provider, staff_id: UUID) -> StaffMember:
    staff = StaffService.get_staff(db, provider.id, staff_id)
    if not staff:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return staff


@router.get("")
async def list_staff(
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    staff = StaffService.list_staff(db, provider.id)
    return {"total": len(staff), "staff": staff}


@router.post("", status_code=201)
async def create_staff(
        request: StaffCreate,
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    try:
        staff = StaffService.create_staff(
            db=db,
            provider_id=provider.id,
            name=request.name,
            email=request.email,
            phone=request.phone,
            title=request.title,
            service_ids=request.service_ids
        )
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    return staff.to_dict()


@router.get("/{staff_id}")
async def get_staff(
        staff_id: UUID = Path(..., description="The staff member ID"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    staff = _get_owned_staff(db, provider, staff_id)
    data = staff.to_dict()
    data["overrides"] = [o.to_dict() for o in StaffService.list_overrides(db, staff)]
    return data


@router.put("/{staff_id}")
async def update_staff(
        request: StaffUpdate,
        staff_id: UUID = Path(..., description="The staff member ID"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    staff = _get_owned_staff(db, provider, staff_id)

    try:
        staff = StaffService.update_staff(db, staff, request.model_dump(exclude_unset=True))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    return staff.to_dict()


@router.delete("/{staff_id}")
async def deactivate_staff(
        staff_id: UUID = Path(..., description="The staff member ID"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """Soft delete; existing bookings keep their staff assignment."""
    staff = _get_owned_staff(db, provider, staff_id)
    StaffService.update_staff(db, staff, {"is_active": False})

    logger.info(f"Deactivated staff member {staff_id}")
    return {"success": True, "message": "Staff member deactivated"}


# ============================================================================
# Availability overrides
# ============================================================================

@router.get("/{staff_id}/availability")
async def list_overrides(
        staff_id: UUID = Path(..., description="The staff member ID"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    staff = _get_owned_staff(db, provider, staff_id)
    return {"overrides": [o.to_dict() for o in StaffService.list_overrides(db, staff)]}


@router.post("/{staff_id}/availability", status_code=201)
async def add_override(
        request: StaffOverrideCreate,
        staff_id: UUID = Path(..., description="The staff member ID"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """
    AVAILABLE overrides let the staff member work outside business hours;
    UNAVAILABLE overrides block them (vacation, sick leave).
    """
    staff = _get_owned_staff(db, provider, staff_id)

    try:
        override = StaffService.add_override(
            db,
            staff,
            start_time=request.start_time,
            end_time=request.end_time,
            availability_type=request.availability_type,
            reason=request.reason
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return override.to_dict()


@router.delete("/{staff_id}/availability/{override_id}")
async def delete_override(
        staff_id: UUID = Path(..., description="The staff member ID"),
        override_id: UUID = Path(..., description="The override ID"),
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    staff = _get_owned_staff(db, provider, staff_id)

    if not StaffService.delete_override(db, staff, override_id):
        raise HTTPException(status_code=404, detail="Override not found")

    return {"success": True}
