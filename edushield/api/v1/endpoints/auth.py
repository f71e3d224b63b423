"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import CurrentUser
from edushield.schemas.auth import (
    DevLoginRequest,
    LoginRequest,
    RefreshTokenRequest,
    TokenResponse,
    UserProfileResponse,
)
from edushield.services.auth import AuthService
from edushield.services.user import UserService

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(
    request: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Authenticate user and return access/refresh tokens.
    """
    service = AuthService(db)
    return service.login(request)


@router.post("/dev", response_model=TokenResponse)
def dev_login(
    request: DevLoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Passwordless login by email. Only available when DEV_AUTH_ENABLED is set.
    """
    service = AuthService(db)
    return service.dev_login(request)


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(
    request: RefreshTokenRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Refresh access token using a valid refresh token.
    """
    service = AuthService(db)
    return service.refresh_tokens(request.refresh_token)


@router.get("/me", response_model=UserProfileResponse)
def get_current_user_info(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Get the current user with the id of the linked student, faculty or parent record.
    """
    service = UserService(db)
    return service.get_profile(current_user)
