# slotwise/api/v1/dashboard/services.py
"""
Service Management API Endpoints
Handles CRUD operations for the provider's bookable services
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from decimal import Decimal
import logging
from uuid import UUID

from slotwise.config.database import get_db
from slotwise.api.dependencies import require_provider
from slotwise.models.booking import Booking
from slotwise.models.provider import Provider
from slotwise.models.service import Service
from slotwise.schemas.service import ServiceCreate, ServiceUpdate, ServiceResponse, ServiceListResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/services", tags=["dashboard-services"])


# ============================================================================
# Helper Functions
# ============================================================================

def _get_owned_service(db: Session, provider: Provider, service_id: UUID) -> Service:
    service = db.query(Service).filter(
        Service.id == service_id,
        Service.provider_id == provider.id
    ).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


# ============================================================================
# Endpoints
# ============================================================================

@router.post("", response_model=ServiceResponse, status_code=201)
def create_service(
        service_data: ServiceCreate,
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """
    Create a new service
    """
    try:
        service = Service(
            provider_id=provider.id,
            name=service_data.name,
            description=service_data.description,
            price=Decimal(str(service_data.price)),
            duration=service_data.duration,
            buffer_time_before=service_data.buffer_time_before,
            buffer_time_after=service_data.buffer_time_after,
            requires_staff=service_data.requires_staff,
            any_staff_member=service_data.any_staff_member,
            max_concurrent=service_data.max_concurrent,
            is_active=True
        )

        db.add(service)
        db.commit()
        db.refresh(service)

        logger.info(f"Created service {service.id}: {service.name}")

        return ServiceResponse(**service.to_dict())

    except Exception as e:
        logger.error(f"Error creating service: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create service")


@router.get("", response_model=ServiceListResponse)
def list_services(
        include_inactive: bool = False,
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """
    List all services of the provider
    """
    query = db.query(Service).filter(Service.provider_id == provider.id)

    if not include_inactive:
        query = query.filter(Service.is_active == True)

    services = query.order_by(Service.created_at.desc()).all()

    return ServiceListResponse(
        total=len(services),
        services=[ServiceResponse(**s.to_dict()) for s in services]
    )


@router.get("/{service_id}", response_model=ServiceResponse)
def get_service(
        service_id: UUID,
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    service = _get_owned_service(db, provider, service_id)
    return ServiceResponse(**service.to_dict())


@router.put("/{service_id}", response_model=ServiceResponse)
def update_service(
        service_id: UUID,
        update_data: ServiceUpdate,
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """
    Update a service. Existing bookings keep their stored times.
    """
    service = _get_owned_service(db, provider, service_id)

    try:
        updates = update_data.model_dump(exclude_unset=True)
        if "price" in updates and updates["price"] is not None:
            updates["price"] = Decimal(str(updates["price"]))

        for field, value in updates.items():
            if value is not None:
                setattr(service, field, value)

        db.commit()
        db.refresh(service)

        logger.info(f"Updated service {service_id}")

        return ServiceResponse(**service.to_dict())

    except Exception as e:
        logger.error(f"Error updating service: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update service")


@router.delete("/{service_id}")
def delete_service(
        service_id: UUID,
        hard_delete: bool = False,
        provider: Provider = Depends(require_provider),
        db: Session = Depends(get_db)
):
    """
    Delete a service

    Args:
        service_id: Service to delete
        hard_delete: If True, permanently delete. If False, soft delete (set is_active=False)
    """
    service = _get_owned_service(db, provider, service_id)

    booking_count = db.query(Booking).filter(Booking.service_id == service.id).count()

    if hard_delete and booking_count > 0:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot hard delete service with {booking_count} bookings. Use soft delete."
        )

    try:
        if hard_delete:
            db.delete(service)
            db.commit()

            logger.info(f"Hard deleted service {service_id}")
            return {
                "success": True,
                "message": "Service permanently deleted"
            }

        service.is_active = False
        db.commit()

        logger.info(f"Soft deleted service {service_id}")
        return {
            "success": True,
            "message": "Service deactivated",
            "bookings": booking_count
        }

    except Exception as e:
        logger.error(f"Error deleting service: {e}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete service")
