"""Parent schemas."""

from datetime import date, datetime

from pydantic import EmailStr, Field

from edushield.models.enums import Gender, ParentType
from edushield.schemas.common import BaseSchema, PaginatedResponse
from edushield.schemas.student import StudentSummary


class ParentBase(BaseSchema):
    """Base parent schema."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: str = Field(..., min_length=1, max_length=20)
    alternate_phone_number: str | None = Field(None, max_length=20)
    date_of_birth: date
    address: str = Field(..., min_length=1, max_length=500)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str = Field("USA", max_length=100)
    gender: Gender
    occupation: str | None = Field(None, max_length=100)
    employer: str | None = Field(None, max_length=200)
    work_phone: str | None = Field(None, max_length=20)
    emergency_contact_name: str | None = Field(None, max_length=200)
    emergency_contact_phone: str | None = Field(None, max_length=20)
    emergency_contact_relationship: str | None = Field(None, max_length=50)
    parent_type: ParentType = ParentType.PRIMARY
    is_emergency_contact: bool = False
    is_authorized_to_pickup: bool = True


class ParentCreate(ParentBase):
    """Parent creation schema."""

    password: str | None = Field(None, min_length=8)


class ParentUpdate(BaseSchema):
    """Parent update schema."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone_number: str | None = Field(None, min_length=1, max_length=20)
    alternate_phone_number: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    address: str | None = Field(None, min_length=1, max_length=500)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=100)
    gender: Gender | None = None
    occupation: str | None = Field(None, max_length=100)
    employer: str | None = Field(None, max_length=200)
    work_phone: str | None = Field(None, max_length=20)
    emergency_contact_name: str | None = Field(None, max_length=200)
    emergency_contact_phone: str | None = Field(None, max_length=20)
    emergency_contact_relationship: str | None = Field(None, max_length=50)
    parent_type: ParentType | None = None
    is_emergency_contact: bool | None = None
    is_authorized_to_pickup: bool | None = None
    is_active: bool | None = None


class ParentResponse(ParentBase):
    """Parent response schema."""

    id: int
    is_active: bool
    user_id: int | None
    created_at: datetime
    updated_at: datetime


class ParentSummary(BaseSchema):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: str
    parent_type: ParentType


class ParentWithChildrenResponse(ParentResponse):
    children: list[StudentSummary] = []


class ParentFilter(BaseSchema):
    """Parent filter options."""

    parent_type: ParentType | None = None
    city: str | None = None
    state: str | None = None
    is_active: bool | None = None
    search: str | None = None


class ParentStatistics(BaseSchema):
    total_parents: int
    active_parents: int
    primary_parents: int
    secondary_parents: int
    guardians: int
    emergency_contacts: int
    authorized_for_pickup: int
    parents_with_children: int
    average_children_per_parent: float
    parents_by_state: dict[str, int]
    parents_by_city: dict[str, int]


class PaginatedParentResponse(PaginatedResponse):
    """Paginated parent list."""

    items: list[ParentResponse]
