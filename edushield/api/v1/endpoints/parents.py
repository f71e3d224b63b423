"""Parent management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import require_roles
from edushield.core.exceptions import PermissionDeniedError
from edushield.core.policies import ADMIN_ROLES
from edushield.models.enums import ParentType, UserRole
from edushield.models.user import User
from edushield.schemas.common import MessageResponse
from edushield.schemas.parent import (
    PaginatedParentResponse,
    ParentCreate,
    ParentFilter,
    ParentResponse,
    ParentStatistics,
    ParentUpdate,
    ParentWithChildrenResponse,
)
from edushield.schemas.parent_student import ParentStudentAssignmentResponse
from edushield.services.parent import ParentService

router = APIRouter()

AdminUser = Annotated[User, Depends(require_roles(*ADMIN_ROLES))]
ParentUser = Annotated[User, Depends(require_roles(UserRole.PARENT))]


@router.post("", response_model=ParentResponse)
def create_parent(
    request: ParentCreate,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Create a parent and its Parent-role user account.
    """
    service = ParentService(db)
    return service.create_parent(request)


@router.get("", response_model=PaginatedParentResponse)
def list_parents(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
    parent_type: ParentType | None = None,
    city: str | None = None,
    state: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    filters = ParentFilter(
        parent_type=parent_type,
        city=city,
        state=state,
        is_active=is_active,
        search=search,
    )
    service = ParentService(db)
    return service.list_parents(filters, page, page_size)


@router.get("/statistics", response_model=ParentStatistics)
def get_parent_statistics(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentService(db)
    return service.get_statistics()


@router.get("/emergency-contacts", response_model=list[ParentResponse])
def list_emergency_contacts(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentService(db)
    return service.list_emergency_contacts()


@router.get("/authorized-for-pickup", response_model=list[ParentResponse])
def list_authorized_for_pickup(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentService(db)
    return service.list_authorized_for_pickup()


@router.get("/profile", response_model=ParentWithChildrenResponse)
def get_own_profile(
    current_user: ParentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    The calling parent's own record with linked children.
    """
    service = ParentService(db)
    parent = service.get_by_user(current_user.id)
    return service.get_with_children(parent.id)


@router.put("/profile", response_model=ParentResponse)
def update_own_profile(
    request: ParentUpdate,
    current_user: ParentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Update the calling parent's own record. The active flag is admin-only.
    """
    if "is_active" in request.model_fields_set:
        raise PermissionDeniedError("Parents cannot change their own active status")
    service = ParentService(db)
    parent = service.get_by_user(current_user.id)
    return service.update_parent(parent.id, request)


@router.get("/{parent_id}", response_model=ParentResponse)
def get_parent(
    parent_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentService(db)
    return service.get_parent(parent_id)


@router.get("/{parent_id}/with-children", response_model=ParentWithChildrenResponse)
def get_parent_with_children(
    parent_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentService(db)
    return service.get_with_children(parent_id)


@router.put("/{parent_id}", response_model=ParentResponse)
def update_parent(
    parent_id: int,
    request: ParentUpdate,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentService(db)
    return service.update_parent(parent_id, request)


@router.delete("/{parent_id}", response_model=MessageResponse)
def delete_parent(
    parent_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Delete a parent. Children that relied on it as primary contact get a new one.
    """
    service = ParentService(db)
    service.delete_parent(parent_id)
    return MessageResponse(message="Parent deleted successfully")


@router.post("/{parent_id}/children/{student_id}", response_model=ParentStudentAssignmentResponse)
def add_child(
    parent_id: int,
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Legacy single-parent assignment. The parent becomes the student's primary contact.
    """
    service = ParentService(db)
    return service.add_child(parent_id, student_id)


@router.delete("/{parent_id}/children/{student_id}", response_model=MessageResponse)
def remove_child(
    parent_id: int,
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentService(db)
    service.remove_child(parent_id, student_id)
    return MessageResponse(message="Child removed from parent successfully")
