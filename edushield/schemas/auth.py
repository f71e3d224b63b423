"""Authentication and user schemas."""

from datetime import datetime

from pydantic import EmailStr, Field

from edushield.models.enums import UserRole
from edushield.schemas.common import BaseSchema, PaginatedResponse


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=6)


class DevLoginRequest(BaseSchema):
    """Development login by email, only available when enabled in settings."""

    email: EmailStr


class TokenResponse(BaseSchema):
    """Token response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: "UserResponse"


class RefreshTokenRequest(BaseSchema):
    """Refresh token request schema."""

    refresh_token: str


class UserResponse(BaseSchema):
    """User response schema."""

    id: int
    email: str
    name: str
    role: UserRole
    is_active: bool
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


class UserRoleUpdate(BaseSchema):
    role: UserRole


class UserStatusUpdate(BaseSchema):
    is_active: bool


class UserProfileResponse(UserResponse):
    """Current user with the id of the linked student, faculty or parent record."""

    student_id: int | None = None
    faculty_id: int | None = None
    parent_id: int | None = None


class PaginatedUserResponse(PaginatedResponse):
    """Paginated user list."""

    items: list[UserResponse]


TokenResponse.model_rebuild()
