# slotwise/api/v1/dashboard/business_hours.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from slotwise.config.database import get_db
from slotwise.models.provider import Provider
from slotwise.api.dependencies import require_provider
from slotwise.schemas.business_hours import BusinessHoursResponse, BusinessHoursUpdate
from slotwise.services.availability.exceptions import InvalidConfigurationError
from slotwise.services.provider.business_hours_service import BusinessHoursService

router = APIRouter(prefix="/business-hours", tags=["dashboard-business-hours"])


@router.get("", response_model=BusinessHoursResponse)
async def get_business_hours(
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """Weekly hours. When nothing is stored the default policy is returned with is_default=true."""
    return BusinessHoursService.get_business_hours(db, provider.id)


@router.put("", response_model=BusinessHoursResponse)
async def replace_business_hours(
        request: BusinessHoursUpdate,
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """Replace all weekly hours. Days left out are closed."""
    try:
        rows = BusinessHoursService.replace_business_hours(
            db,
            provider.id,
            [item.model_dump() for item in request.business_hours]
        )
    except (ValueError, InvalidConfigurationError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"business_hours": [row.to_dict() for row in rows], "is_default": False}
