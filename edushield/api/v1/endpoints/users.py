"""User administration endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import CurrentUser, require_roles
from edushield.models.enums import UserRole
from edushield.models.user import User
from edushield.schemas.auth import (
    PaginatedUserResponse,
    UserProfileResponse,
    UserResponse,
    UserRoleUpdate,
    UserStatusUpdate,
)
from edushield.services.user import UserService

router = APIRouter()


@router.get("", response_model=PaginatedUserResponse)
def list_users(
    current_user: Annotated[User, Depends(require_roles(UserRole.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
    role: UserRole | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    """
    List users with filtering and pagination. Admin only.
    """
    service = UserService(db)
    return service.list_users(role, is_active, search, page, page_size)


@router.get("/profile", response_model=UserProfileResponse)
def get_profile(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Current user's profile."""
    service = UserService(db)
    return service.get_profile(current_user)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    current_user: Annotated[User, Depends(require_roles(UserRole.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
):
    service = UserService(db)
    return service.get_user(user_id)


@router.put("/{user_id}/role", response_model=UserResponse)
def change_user_role(
    user_id: int,
    request: UserRoleUpdate,
    current_user: Annotated[User, Depends(require_roles(UserRole.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Change a user's role. Admins cannot change their own role.
    """
    service = UserService(db)
    return service.change_role(user_id, request.role, current_user)


@router.put("/{user_id}/status", response_model=UserResponse)
def change_user_status(
    user_id: int,
    request: UserStatusUpdate,
    current_user: Annotated[User, Depends(require_roles(UserRole.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Activate or deactivate a user. Admins cannot deactivate themselves.
    """
    service = UserService(db)
    return service.change_status(user_id, request.is_active, current_user)
