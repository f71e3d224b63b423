"""Student performance endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import CurrentUser, require_roles
from edushield.core.policies import ADMIN_OR_FACULTY, ADMIN_ROLES, StudentAccessPolicy
from edushield.models.enums import ExamType
from edushield.models.user import User
from edushield.schemas.common import MessageResponse
from edushield.schemas.student_performance import (
    PaginatedStudentPerformanceResponse,
    PerformanceStatistics,
    StudentPerformanceCreate,
    StudentPerformanceFilter,
    StudentPerformanceResponse,
    StudentPerformanceUpdate,
)
from edushield.services.student_performance import StudentPerformanceService

router = APIRouter()

StaffUser = Annotated[User, Depends(require_roles(*ADMIN_OR_FACULTY))]


@router.post("", response_model=StudentPerformanceResponse)
def create_performance_record(
    request: StudentPerformanceCreate,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Record an exam result. Faculty may only record results of assigned students.
    """
    StudentAccessPolicy(db).ensure_can_access_student(current_user, request.student_id)
    service = StudentPerformanceService(db)
    return service.create_record(request)


@router.get("", response_model=PaginatedStudentPerformanceResponse)
def list_performance_records(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    student_id: int | None = None,
    subject: str | None = None,
    exam_type: ExamType | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    search: str | None = None,
    sort_by: str | None = None,
    descending: bool = True,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    filters = StudentPerformanceFilter(
        student_id=student_id,
        subject=subject,
        exam_type=exam_type,
        from_date=from_date,
        to_date=to_date,
        search=search,
        sort_by=sort_by,
        descending=descending,
    )
    student_ids = StudentAccessPolicy(db).accessible_student_ids(current_user)
    service = StudentPerformanceService(db)
    return service.list_records(filters, student_ids, page, page_size)


@router.get("/by-subject/{subject}", response_model=list[StudentPerformanceResponse])
def list_by_subject(
    subject: str,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentPerformanceService(db)
    allowed = StudentAccessPolicy(db).accessible_student_ids(current_user)
    records = service.list_by_subject(subject)
    return [r for r in records if allowed is None or r.student_id in allowed]


@router.get("/by-exam-type/{exam_type}", response_model=list[StudentPerformanceResponse])
def list_by_exam_type(
    exam_type: ExamType,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentPerformanceService(db)
    allowed = StudentAccessPolicy(db).accessible_student_ids(current_user)
    records = service.list_by_exam_type(exam_type)
    return [r for r in records if allowed is None or r.student_id in allowed]


@router.get("/student/{student_id}", response_model=list[StudentPerformanceResponse])
def list_for_student(
    student_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    subject: str | None = None,
):
    StudentAccessPolicy(db).ensure_can_access_student(current_user, student_id)
    service = StudentPerformanceService(db)
    return service.list_for_student(student_id, subject)


@router.get("/student/{student_id}/statistics", response_model=PerformanceStatistics)
def get_performance_statistics(
    student_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    subject: str | None = None,
):
    """
    Average, highest and lowest score, overall and per subject.
    """
    StudentAccessPolicy(db).ensure_can_access_student(current_user, student_id)
    service = StudentPerformanceService(db)
    return service.get_student_statistics(student_id, subject)


@router.get("/faculty/{faculty_id}", response_model=list[StudentPerformanceResponse])
def list_for_faculty(
    faculty_id: int,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = StudentPerformanceService(db)
    return service.list_for_faculty(faculty_id)


@router.get("/{performance_id}", response_model=StudentPerformanceResponse)
def get_performance_record(
    performance_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentPerformanceService(db)
    record = service.get_record_response(performance_id)
    StudentAccessPolicy(db).ensure_can_access_student(current_user, record.student_id)
    return record


@router.put("/{performance_id}", response_model=StudentPerformanceResponse)
def update_performance_record(
    performance_id: int,
    request: StudentPerformanceUpdate,
    current_user: StaffUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentPerformanceService(db)
    record = service.get_record(performance_id)
    StudentAccessPolicy(db).ensure_can_access_student(current_user, record.student_id)
    return service.update_record(performance_id, request)


@router.delete("/{performance_id}", response_model=MessageResponse)
def delete_performance_record(
    performance_id: int,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_ROLES))],
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentPerformanceService(db)
    service.delete_record(performance_id)
    return MessageResponse(message="Performance record deleted successfully")
