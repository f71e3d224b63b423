"""Faculty management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import require_roles
from edushield.core.policies import ADMIN_ROLES
from edushield.models.user import User
from edushield.schemas.common import MessageResponse
from edushield.schemas.faculty import (
    FacultyCreate,
    FacultyFilter,
    FacultyResponse,
    FacultyUpdate,
    PaginatedFacultyResponse,
)
from edushield.services.faculty import FacultyService

router = APIRouter()

AdminUser = Annotated[User, Depends(require_roles(*ADMIN_ROLES))]


@router.post("", response_model=FacultyResponse)
def create_faculty(
    request: FacultyCreate,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Create a faculty member and its Faculty-role user account.
    The employee id is generated.
    """
    service = FacultyService(db)
    return service.create_faculty(request)


@router.get("", response_model=PaginatedFacultyResponse)
def list_faculty(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
    department: str | None = None,
    subject: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    filters = FacultyFilter(
        department=department,
        subject=subject,
        is_active=is_active,
        search=search,
    )
    service = FacultyService(db)
    return service.list_faculty(filters, page, page_size)


@router.get("/by-email/{email}", response_model=FacultyResponse)
def get_faculty_by_email(
    email: str,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = FacultyService(db)
    return service.get_by_email(email)


@router.get("/by-employee-id/{employee_id}", response_model=FacultyResponse)
def get_faculty_by_employee_id(
    employee_id: str,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = FacultyService(db)
    return service.get_by_employee_id(employee_id)


@router.get("/{faculty_id}", response_model=FacultyResponse)
def get_faculty(
    faculty_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = FacultyService(db)
    return service.get_faculty(faculty_id)


@router.put("/{faculty_id}", response_model=FacultyResponse)
def update_faculty(
    faculty_id: int,
    request: FacultyUpdate,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = FacultyService(db)
    return service.update_faculty(faculty_id, request)


@router.delete("/{faculty_id}", response_model=MessageResponse)
def delete_faculty(
    faculty_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Delete a faculty member and the linked user account.
    """
    service = FacultyService(db)
    service.delete_faculty(faculty_id)
    return MessageResponse(message="Faculty member deleted successfully")
