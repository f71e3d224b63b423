"""Faculty-student assignment schemas."""

from datetime import datetime

from pydantic import Field

from edushield.schemas.common import BaseSchema, PaginatedResponse
from edushield.schemas.faculty import FacultyResponse, FacultySummary
from edushield.schemas.student import StudentSummary


class FacultyStudentAssignmentCreate(BaseSchema):
    """Assign one student to a faculty member."""

    faculty_id: int
    student_id: int
    subject: str | None = Field(None, max_length=100)
    academic_year: str | None = Field(None, max_length=20)
    semester: str | None = Field(None, max_length=20)
    notes: str | None = Field(None, max_length=1000)


class BulkFacultyStudentAssignmentCreate(BaseSchema):
    """Assign many students to a faculty member."""

    faculty_id: int
    student_ids: list[int] = Field(..., min_length=1)
    subject: str | None = Field(None, max_length=100)
    academic_year: str | None = Field(None, max_length=20)
    semester: str | None = Field(None, max_length=20)
    notes: str | None = Field(None, max_length=1000)


class FacultyStudentAssignmentUpdate(BaseSchema):
    is_active: bool | None = None
    subject: str | None = Field(None, max_length=100)
    academic_year: str | None = Field(None, max_length=20)
    semester: str | None = Field(None, max_length=20)
    notes: str | None = Field(None, max_length=1000)


class FacultyStudentAssignmentResponse(BaseSchema):
    faculty_id: int
    student_id: int
    assigned_date: datetime
    is_active: bool
    subject: str | None
    academic_year: str | None
    semester: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
    faculty: FacultySummary | None = None
    student: StudentSummary | None = None


class FacultyStudentAssignmentFilter(BaseSchema):
    faculty_id: int | None = None
    student_id: int | None = None
    is_active: bool | None = None
    subject: str | None = None
    academic_year: str | None = None
    semester: str | None = None


class FacultyDashboard(BaseSchema):
    faculty: FacultyResponse
    total_assigned: int
    active_assignments: int
    assigned_students: list[StudentSummary]


class PaginatedFacultyStudentAssignmentResponse(PaginatedResponse):
    items: list[FacultyStudentAssignmentResponse]
