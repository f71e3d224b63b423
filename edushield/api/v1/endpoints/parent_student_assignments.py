"""Parent-student assignment endpoints.

Every route here is restricted to Admin and DevAuth.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import require_roles
from edushield.core.policies import ADMIN_ROLES
from edushield.models.user import User
from edushield.schemas.common import CountResponse, MessageResponse
from edushield.schemas.parent import ParentResponse
from edushield.schemas.parent_student import (
    AssignmentStatistics,
    AssignmentValidationResponse,
    BulkParentStudentAssignmentCreate,
    ParentStudentAssignmentCreate,
    ParentStudentAssignmentResponse,
    ParentStudentAssignmentUpdate,
    ParentWithStudentsResponse,
    StudentWithParentsResponse,
    SyncResult,
)
from edushield.schemas.student import StudentResponse
from edushield.services.parent_student import ParentStudentAssignmentService

router = APIRouter()

AdminUser = Annotated[User, Depends(require_roles(*ADMIN_ROLES))]


@router.post("", response_model=ParentStudentAssignmentResponse)
def create_assignment(
    request: ParentStudentAssignmentCreate,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Link a parent to a student. A primary link replaces the student's current primary.
    """
    service = ParentStudentAssignmentService(db)
    return service.create_assignment(request)


@router.get("", response_model=list[ParentStudentAssignmentResponse])
def list_assignments(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.list_assignments()


@router.post("/bulk", response_model=list[ParentStudentAssignmentResponse])
def create_bulk_assignments(
    request: BulkParentStudentAssignmentCreate,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Link one parent to many students. Unknown students and existing links are skipped.
    """
    service = ParentStudentAssignmentService(db)
    return service.create_bulk_assignments(request)


@router.get("/statistics", response_model=AssignmentStatistics)
def get_assignment_statistics(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.get_statistics()


@router.get("/orphaned-students", response_model=list[StudentResponse])
def get_orphaned_students(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Active students without any active parent link.
    """
    service = ParentStudentAssignmentService(db)
    return service.get_orphaned_students()


@router.get("/parents-without-students", response_model=list[ParentResponse])
def get_parents_without_students(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.get_parents_without_students()


@router.get("/validate", response_model=AssignmentValidationResponse)
def validate_assignment(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
    parent_id: int = Query(...),
    student_id: int = Query(...),
):
    """
    Whether a new link may be created, and whether an active one already exists.
    """
    service = ParentStudentAssignmentService(db)
    return AssignmentValidationResponse(
        can_assign=service.can_assign(parent_id, student_id),
        is_assigned=service.is_assigned(parent_id, student_id),
    )


@router.post("/sync-legacy", response_model=SyncResult)
def sync_legacy_links(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Create links for students that only carry the legacy parent reference.
    """
    service = ParentStudentAssignmentService(db)
    return service.sync_legacy_links()


@router.get("/parent/{parent_id}", response_model=list[ParentStudentAssignmentResponse])
def list_by_parent(
    parent_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
    active_only: bool = False,
):
    service = ParentStudentAssignmentService(db)
    return service.list_by_parent(parent_id, active_only)


@router.get("/parent/{parent_id}/with-students", response_model=ParentWithStudentsResponse)
def get_parent_with_students(
    parent_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.get_parent_with_students(parent_id)


@router.delete("/parent/{parent_id}/all", response_model=CountResponse)
def delete_all_for_parent(
    parent_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return CountResponse(count=service.delete_all_for_parent(parent_id))


@router.get("/student/{student_id}", response_model=list[ParentStudentAssignmentResponse])
def list_by_student(
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
    active_only: bool = False,
):
    service = ParentStudentAssignmentService(db)
    return service.list_by_student(student_id, active_only)


@router.get("/student/{student_id}/with-parents", response_model=StudentWithParentsResponse)
def get_student_with_parents(
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.get_student_with_parents(student_id)


@router.delete("/student/{student_id}/all", response_model=CountResponse)
def delete_all_for_student(
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return CountResponse(count=service.delete_all_for_student(student_id))


@router.get("/{parent_id}/{student_id}", response_model=ParentStudentAssignmentResponse)
def get_assignment(
    parent_id: int,
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.get_assignment(parent_id, student_id)


@router.put("/{parent_id}/{student_id}", response_model=ParentStudentAssignmentResponse)
def update_assignment(
    parent_id: int,
    student_id: int,
    request: ParentStudentAssignmentUpdate,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.update_assignment(parent_id, student_id, request)


@router.delete("/{parent_id}/{student_id}", response_model=MessageResponse)
def delete_assignment(
    parent_id: int,
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Remove a link. If it was the primary contact another active link is promoted.
    """
    service = ParentStudentAssignmentService(db)
    service.delete_assignment(parent_id, student_id)
    return MessageResponse(message="Assignment deleted successfully")


@router.post("/{parent_id}/{student_id}/set-primary", response_model=ParentStudentAssignmentResponse)
def set_primary_contact(
    parent_id: int,
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.set_primary_contact(parent_id, student_id)


@router.post("/{parent_id}/{student_id}/remove-primary", response_model=ParentStudentAssignmentResponse)
def remove_primary_contact(
    parent_id: int,
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.remove_primary_contact(parent_id, student_id)


@router.post("/{parent_id}/{student_id}/activate", response_model=ParentStudentAssignmentResponse)
def activate_assignment(
    parent_id: int,
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.activate_assignment(parent_id, student_id)


@router.post("/{parent_id}/{student_id}/deactivate", response_model=ParentStudentAssignmentResponse)
def deactivate_assignment(
    parent_id: int,
    student_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = ParentStudentAssignmentService(db)
    return service.deactivate_assignment(parent_id, student_id)
