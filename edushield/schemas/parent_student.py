"""Parent-student assignment schemas."""

from datetime import datetime

from pydantic import Field

from edushield.schemas.common import BaseSchema
from edushield.schemas.parent import ParentResponse, ParentSummary
from edushield.schemas.student import StudentResponse, StudentSummary


class ParentStudentAssignmentCreate(BaseSchema):
    """Create a single parent-student link."""

    parent_id: int
    student_id: int
    relationship: str = Field("Parent", min_length=1, max_length=50)
    is_primary_contact: bool = False
    is_authorized_to_pickup: bool = True
    is_emergency_contact: bool = True
    notes: str | None = Field(None, max_length=1000)


class ParentStudentAssignmentUpdate(BaseSchema):
    """Partial update of a link."""

    relationship: str | None = Field(None, min_length=1, max_length=50)
    is_primary_contact: bool | None = None
    is_authorized_to_pickup: bool | None = None
    is_emergency_contact: bool | None = None
    is_active: bool | None = None
    notes: str | None = Field(None, max_length=1000)


class BulkParentStudentAssignmentCreate(BaseSchema):
    """Link one parent to many students."""

    parent_id: int
    student_ids: list[int] = Field(..., min_length=1)
    relationship: str = Field("Parent", min_length=1, max_length=50)
    is_primary_contact: bool = False
    is_authorized_to_pickup: bool = True
    is_emergency_contact: bool = True
    notes: str | None = Field(None, max_length=1000)


class ParentStudentAssignmentResponse(BaseSchema):
    """Link with compact parent and student references."""

    parent_id: int
    student_id: int
    relationship: str
    is_primary_contact: bool
    is_authorized_to_pickup: bool
    is_emergency_contact: bool
    is_active: bool
    notes: str | None
    created_at: datetime
    updated_at: datetime
    parent: ParentSummary | None = None
    student: StudentSummary | None = None


class ParentWithStudentsResponse(BaseSchema):
    parent: ParentResponse
    assignments: list[ParentStudentAssignmentResponse]
    total_students: int
    active_students: int


class StudentWithParentsResponse(BaseSchema):
    student: StudentResponse
    assignments: list[ParentStudentAssignmentResponse]
    primary_parent: ParentSummary | None = None
    total_parents: int
    active_parents: int


class AssignmentStatistics(BaseSchema):
    total_assignments: int
    active_assignments: int
    inactive_assignments: int
    relationship_types: dict[str, int]


class AssignmentValidationResponse(BaseSchema):
    can_assign: bool
    is_assigned: bool


class SyncResult(BaseSchema):
    links_created: int
    students_updated: int
