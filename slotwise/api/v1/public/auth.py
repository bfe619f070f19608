# ============================================================================
# FILE: slotwise/api/v1/public/auth.py
# Public authentication endpoints - register, login, current user, password reset
# ============================================================================
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from slotwise.api.dependencies import (
    get_db,
    get_current_active_user,
    create_access_token,
)
from slotwise.services.user.user_service import (
    ResetTokenExpiredError,
    ResetTokenNotFoundError,
    UserService,
)
from slotwise.services.availability.exceptions import InvalidTimezoneError
from slotwise.services.availability.timezones import resolve_timezone
from slotwise.models.user import User, UserRole

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ============================================================================
# Pydantic Schemas
# ============================================================================

class RegisterRequest(BaseModel):
    """Request body for user registration."""
    email: EmailStr
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = UserRole.PROVIDER
    business_name: Optional[str] = None
    timezone: Optional[str] = Field(None, description="IANA timezone of the business, e.g. Europe/Oslo")

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "owner@example.com",
                "password": "SecurePass123!",
                "full_name": "Kari Nordmann",
                "role": "provider",
                "business_name": "Kari's Salon",
                "timezone": "Europe/Oslo"
            }
        }
    }


class LoginRequest(BaseModel):
    """Request body for login."""
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    """Response with the access token."""
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    full_name: Optional[str] = None
    role: str
    provider_id: Optional[str] = None
    username: Optional[str] = None


def _token_response(db: Session, user: User) -> TokenResponse:
    provider = UserService.get_provider_for_user(db, user.id)
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role.value})

    return TokenResponse(
        access_token=token,
        user_id=str(user.id),
        email=user.email,
        full_name=user.full_name,
        role=user.role.value,
        provider_id=str(provider.id) if provider else None,
        username=provider.username if provider else None,
    )


# ============================================================================
# Registration & Login Endpoints
# ============================================================================

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
        request: RegisterRequest,
        db: Session = Depends(get_db)
):
    """
    Register a new user.

    Providers get a provider profile with a unique public username that customers
    use to find their booking page.
    """
    if request.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admin accounts cannot be self-registered"
        )

    if request.timezone:
        try:
            resolve_timezone(request.timezone)
        except InvalidTimezoneError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        user = UserService.create_user(
            db=db,
            email=request.email,
            password=request.password,
            full_name=request.full_name,
            phone=request.phone,
            role=request.role,
            business_name=request.business_name,
            timezone_name=request.timezone
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Registration failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )

    logger.info(f"Registered {user.role.value} account {user.id}")
    return _token_response(db, user)


@router.post("/login", response_model=TokenResponse)
async def login(
        request: LoginRequest,
        db: Session = Depends(get_db)
):
    """Login with email and password."""
    user = UserService.authenticate_user(db, request.email, request.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _token_response(db, user)


@router.get("/me")
async def get_current_user_info(
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Get information about the currently authenticated user."""
    provider = UserService.get_provider_for_user(db, current_user.id)

    return {
        "user_id": str(current_user.id),
        "email": current_user.email,
        "full_name": current_user.full_name,
        "phone": current_user.phone,
        "role": current_user.role.value,
        "is_active": current_user.is_active,
        "created_at": current_user.created_at.isoformat() if current_user.created_at else None,
        "last_login_at": current_user.last_login_at.isoformat() if current_user.last_login_at else None,
        "provider": provider.to_dict() if provider else None,
    }


# ============================================================================
# Password Reset Endpoints
# ============================================================================

@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
        request: ForgotPasswordRequest,
        db: Session = Depends(get_db)
):
    """
    Request a password reset token.

    The response is identical whether or not the account exists. The token is
    stored for the mail delivery service, which sends the reset link.
    """
    UserService.request_password_reset(db, request.email)

    return MessageResponse(
        message="If an account exists with that email, a password reset link has been sent."
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
        request: ResetPasswordRequest,
        db: Session = Depends(get_db)
):
    """Set a new password using the token from the reset link."""
    try:
        UserService.reset_password(db, request.token, request.new_password)
    except ResetTokenNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ResetTokenExpiredError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return MessageResponse(message="Password reset successful. Please log in with your new password.")
