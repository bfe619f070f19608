# slotwise/api/v1/public/providers.py
"""
Public provider profile - what a customer sees on the booking page
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from slotwise.config.database import get_db
from slotwise.models.provider import Provider
from slotwise.models.service import Service
from slotwise.services.provider.business_hours_service import BusinessHoursService

router = APIRouter(prefix="/providers", tags=["Public"])


@router.get("/{username}")
def get_public_provider(username: str, db: Session = Depends(get_db)):
    provider = db.query(Provider).filter(
        Provider.username == username.lower(),
        Provider.is_active == True
    ).first()

    if not provider:
        raise HTTPException(status_code=404, detail="Provider not found")

    services = db.query(Service).filter(
        Service.provider_id == provider.id,
        Service.is_active == True
    ).order_by(Service.created_at.desc()).all()

    hours = BusinessHoursService.get_business_hours(db, provider.id)

    return {
        "provider": provider.to_dict(),
        "services": [
            {
                "id": str(s.id),
                "name": s.name,
                "description": s.description,
                "duration": s.duration,
                "formatted_duration": s.formatted_duration,
                "price": float(s.price) if s.price is not None else None,
            }
            for s in services
        ],
        "business_hours": hours["business_hours"],
    }
