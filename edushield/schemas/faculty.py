"""Faculty schemas."""

from datetime import date, datetime

from pydantic import EmailStr, Field

from edushield.models.enums import Gender
from edushield.schemas.common import BaseSchema, PaginatedResponse


class FacultyBase(BaseSchema):
    """Base faculty schema."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: str | None = Field(None, max_length=20)
    date_of_birth: date
    address: str | None = Field(None, max_length=500)
    gender: Gender
    department: str = Field(..., min_length=1, max_length=100)
    subject: str = Field(..., min_length=1, max_length=100)
    hire_date: date


class FacultyCreate(FacultyBase):
    """Faculty creation schema."""

    password: str | None = Field(None, min_length=8)


class FacultyUpdate(BaseSchema):
    """Faculty update schema."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone_number: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    address: str | None = Field(None, max_length=500)
    gender: Gender | None = None
    department: str | None = Field(None, min_length=1, max_length=100)
    subject: str | None = Field(None, min_length=1, max_length=100)
    hire_date: date | None = None
    is_active: bool | None = None


class FacultyResponse(FacultyBase):
    """Faculty response schema."""

    id: int
    employee_id: str
    is_active: bool
    user_id: int | None
    created_at: datetime
    updated_at: datetime


class FacultySummary(BaseSchema):
    id: int
    first_name: str
    last_name: str
    email: str
    employee_id: str
    department: str
    subject: str


class FacultyFilter(BaseSchema):
    """Faculty filter options."""

    department: str | None = None
    subject: str | None = None
    is_active: bool | None = None
    search: str | None = None


class PaginatedFacultyResponse(PaginatedResponse):
    """Paginated faculty list."""

    items: list[FacultyResponse]
