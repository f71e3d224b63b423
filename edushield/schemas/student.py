"""Student schemas."""

from datetime import date, datetime

from pydantic import EmailStr, Field

from edushield.models.enums import Gender, StudentStatus
from edushield.schemas.common import BaseSchema, PaginatedResponse


class StudentBase(BaseSchema):
    """Base student schema."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: str | None = Field(None, max_length=20)
    date_of_birth: date
    address: str | None = Field(None, max_length=500)
    gender: Gender
    enrollment_date: date
    grade: str | None = Field(None, max_length=20)
    section: str | None = Field(None, max_length=20)


class StudentCreate(StudentBase):
    """Student creation schema."""

    status: StudentStatus = StudentStatus.ACTIVE
    user_id: int | None = None
    parent_id: int | None = None
    faculty_ids: list[int] = []


class StudentUpdate(BaseSchema):
    """Student update schema."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone_number: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    address: str | None = Field(None, max_length=500)
    gender: Gender | None = None
    enrollment_date: date | None = None
    status: StudentStatus | None = None
    grade: str | None = Field(None, max_length=20)
    section: str | None = Field(None, max_length=20)
    user_id: int | None = None
    # Makes this parent the primary contact
    parent_id: int | None = None
    # Replaces the set of active faculty assignments
    faculty_ids: list[int] | None = None


class StudentResponse(StudentBase):
    """Student response schema."""

    id: int
    roll_number: str
    status: StudentStatus
    user_id: int | None
    parent_id: int | None
    created_at: datetime
    updated_at: datetime


class StudentSummary(BaseSchema):
    """Compact student reference used inside other responses."""

    id: int
    first_name: str
    last_name: str
    email: str
    roll_number: str
    status: StudentStatus


class StudentFilter(BaseSchema):
    """Student filter options."""

    status: StudentStatus | None = None
    grade: str | None = None
    section: str | None = None
    search: str | None = None  # Name, email or roll number
    sort_by: str = "last_name"
    descending: bool = False


class PaginatedStudentResponse(PaginatedResponse):
    """Paginated student list."""

    items: list[StudentResponse]
