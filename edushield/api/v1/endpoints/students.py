"""Student management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import CurrentUser, require_roles
from edushield.core.policies import ADMIN_OR_FACULTY, ADMIN_OR_PARENT, ADMIN_ROLES, StudentAccessPolicy
from edushield.models.enums import StudentStatus
from edushield.models.user import User
from edushield.schemas.common import MessageResponse
from edushield.schemas.student import (
    PaginatedStudentResponse,
    StudentCreate,
    StudentFilter,
    StudentResponse,
    StudentUpdate,
)
from edushield.services.student import StudentService

router = APIRouter()


@router.post("", response_model=StudentResponse)
def create_student(
    request: StudentCreate,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_ROLES))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Create a new student. The roll number is generated.
    Optional `parent_id` becomes the primary contact; `faculty_ids` are assigned.
    """
    service = StudentService(db)
    return service.create_student(request)


@router.get("", response_model=PaginatedStudentResponse)
def list_students(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    status: StudentStatus | None = None,
    grade: str | None = None,
    section: str | None = None,
    search: str | None = None,
    sort_by: str = "last_name",
    descending: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    """
    List students visible to the caller with filtering and pagination.
    """
    filters = StudentFilter(
        status=status,
        grade=grade,
        section=section,
        search=search,
        sort_by=sort_by,
        descending=descending,
    )
    student_ids = StudentAccessPolicy(db).accessible_student_ids(current_user)
    service = StudentService(db)
    return service.list_students(filters, student_ids, page, page_size)


@router.get("/by-email/{email}", response_model=StudentResponse)
def get_student_by_email(
    email: str,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentService(db)
    student = service.get_by_email(email)
    StudentAccessPolicy(db).ensure_can_access_student(current_user, student.id)
    return student


@router.get("/by-roll-number/{roll_number}", response_model=StudentResponse)
def get_student_by_roll_number(
    roll_number: str,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentService(db)
    student = service.get_by_roll_number(roll_number)
    StudentAccessPolicy(db).ensure_can_access_student(current_user, student.id)
    return student


@router.get("/by-faculty/{faculty_id}", response_model=list[StudentResponse])
def list_students_by_faculty(
    faculty_id: int,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_OR_FACULTY))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Students actively assigned to a faculty member. Faculty may only list their own.
    """
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = StudentService(db)
    return service.list_by_faculty(faculty_id)


@router.get("/by-parent/{parent_id}", response_model=list[StudentResponse])
def list_students_by_parent(
    parent_id: int,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_OR_PARENT))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Children actively linked to a parent. Parents may only list their own.
    """
    StudentAccessPolicy(db).ensure_own_parent_profile(current_user, parent_id)
    service = StudentService(db)
    return service.list_by_parent(parent_id)


@router.get("/by-status/{status}", response_model=list[StudentResponse])
def list_students_by_status(
    status: StudentStatus,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_ROLES))],
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentService(db)
    return service.list_by_status(status)


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(
    student_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Get a student by ID.
    """
    service = StudentService(db)
    student = service.get_student(student_id)
    StudentAccessPolicy(db).ensure_can_access_student(current_user, student_id)
    return student


@router.put("/{student_id}", response_model=StudentResponse)
def update_student(
    student_id: int,
    request: StudentUpdate,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_ROLES))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Update a student. `faculty_ids` replaces the active faculty assignments.
    """
    service = StudentService(db)
    return service.update_student(student_id, request)


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: int,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_ROLES))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Delete a student together with its parent links, assignments, fees and results.
    """
    service = StudentService(db)
    service.delete_student(student_id)
    return MessageResponse(message="Student deleted successfully")
