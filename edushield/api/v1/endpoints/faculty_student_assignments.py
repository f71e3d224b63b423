"""Faculty-student assignment endpoints.

Admin and DevAuth manage any assignment. Faculty members may only act on
their own assignments.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import require_roles
from edushield.core.exceptions import OperationFailedError
from edushield.core.policies import ADMIN_OR_FACULTY, StudentAccessPolicy
from edushield.models.user import User
from edushield.repositories.faculty import FacultyRepository
from edushield.schemas.common import CountResponse, ExistsResponse, ServiceResult
from edushield.schemas.faculty_student import (
    BulkFacultyStudentAssignmentCreate,
    FacultyDashboard,
    FacultyStudentAssignmentCreate,
    FacultyStudentAssignmentFilter,
    FacultyStudentAssignmentUpdate,
    PaginatedFacultyStudentAssignmentResponse,
)
from edushield.services.faculty_student import (
    AssignmentListResult,
    AssignmentResult,
    FacultyStudentAssignmentService,
)

router = APIRouter()

StaffUser = Annotated[User, Depends(require_roles(*ADMIN_OR_FACULTY))]


def unwrap(result: ServiceResult) -> ServiceResult:
    """Turn a failed service result into a 400 response."""
    if not result.success:
        raise OperationFailedError(result.message or "Operation failed", result.errors)
    return result


@router.post("", response_model=AssignmentResult)
def assign_student(
    request: FacultyStudentAssignmentCreate,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, request.faculty_id)
    service = FacultyStudentAssignmentService(db)
    return unwrap(service.assign_student(request))


@router.post("/bulk", response_model=AssignmentListResult)
def bulk_assign_students(
    request: BulkFacultyStudentAssignmentCreate,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Assign many students at once. Existing pairs are reported in `errors`.
    """
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, request.faculty_id)
    service = FacultyStudentAssignmentService(db)
    return unwrap(service.bulk_assign(request))


@router.get("", response_model=PaginatedFacultyStudentAssignmentResponse)
def list_assignments(
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
    faculty_id: int | None = None,
    student_id: int | None = None,
    is_active: bool | None = None,
    subject: str | None = None,
    academic_year: str | None = None,
    semester: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    """
    List assignments with filtering and pagination. Faculty only see their own.
    """
    policy = StudentAccessPolicy(db)
    if not policy.is_admin(current_user):
        own = FacultyRepository(db).get_by_user_id(current_user.id)
        faculty_id = own.id if own else -1

    filters = FacultyStudentAssignmentFilter(
        faculty_id=faculty_id,
        student_id=student_id,
        is_active=is_active,
        subject=subject,
        academic_year=academic_year,
        semester=semester,
    )
    service = FacultyStudentAssignmentService(db)
    return service.list_assignments(filters, page, page_size)


@router.get("/faculty/{faculty_id}", response_model=AssignmentListResult)
def list_for_faculty(
    faculty_id: int,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
    active_only: bool = False,
):
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = FacultyStudentAssignmentService(db)
    return unwrap(service.list_for_faculty(faculty_id, active_only))


@router.get("/faculty/{faculty_id}/dashboard", response_model=ServiceResult[FacultyDashboard])
def get_faculty_dashboard(
    faculty_id: int,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = FacultyStudentAssignmentService(db)
    return unwrap(service.get_faculty_dashboard(faculty_id))


@router.get("/faculty/{faculty_id}/active-count", response_model=CountResponse)
def get_active_count(
    faculty_id: int,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = FacultyStudentAssignmentService(db)
    return CountResponse(count=service.active_count_for_faculty(faculty_id))


@router.get("/student/{student_id}", response_model=AssignmentListResult)
def list_for_student(
    student_id: int,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
    active_only: bool = False,
):
    StudentAccessPolicy(db).ensure_can_access_student(current_user, student_id)
    service = FacultyStudentAssignmentService(db)
    return unwrap(service.list_for_student(student_id, active_only))


@router.get("/{faculty_id}/{student_id}/exists", response_model=ExistsResponse)
def assignment_exists(
    faculty_id: int,
    student_id: int,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Whether an active assignment exists for the pair.
    """
    service = FacultyStudentAssignmentService(db)
    return ExistsResponse(exists=service.is_assigned(faculty_id, student_id))


@router.get("/{faculty_id}/{student_id}", response_model=AssignmentResult)
def get_assignment(
    faculty_id: int,
    student_id: int,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = FacultyStudentAssignmentService(db)
    return unwrap(service.get_assignment(faculty_id, student_id))


@router.put("/{faculty_id}/{student_id}", response_model=AssignmentResult)
def update_assignment(
    faculty_id: int,
    student_id: int,
    request: FacultyStudentAssignmentUpdate,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = FacultyStudentAssignmentService(db)
    return unwrap(service.update_assignment(faculty_id, student_id, request))


@router.post("/{faculty_id}/{student_id}/activate", response_model=AssignmentResult)
def activate_assignment(
    faculty_id: int,
    student_id: int,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = FacultyStudentAssignmentService(db)
    return unwrap(service.activate_assignment(faculty_id, student_id))


@router.post("/{faculty_id}/{student_id}/deactivate", response_model=AssignmentResult)
def deactivate_assignment(
    faculty_id: int,
    student_id: int,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = FacultyStudentAssignmentService(db)
    return unwrap(service.deactivate_assignment(faculty_id, student_id))
