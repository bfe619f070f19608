"""
API v1 router setup
Organized into: public (no auth) and dashboard (JWT, provider) routes
"""
from fastapi import APIRouter

from slotwise.api.v1.public import auth, availability, bookings as public_bookings, providers
from slotwise.api.v1.dashboard import blocked_times, bookings, business_hours, services, staff

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    auth.router,
    # No prefix needed - auth.router already has "/auth" prefix
    tags=["Authentication"]
)

api_v1_router.include_router(
    availability.router,
    prefix="/public",
    tags=["Public"]
)

api_v1_router.include_router(
    providers.router,
    prefix="/public",
    tags=["Public"]
)

api_v1_router.include_router(
    public_bookings.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES (JWT authentication + provider profile required)
# ============================================================================
api_v1_router.include_router(
    business_hours.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    blocked_times.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    services.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    staff.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    bookings.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required",
            "dashboard": "JWT Bearer token required (provider login)"
        }
    }
