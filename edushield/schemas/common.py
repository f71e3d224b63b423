"""Common schema utilities and base classes."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class TimestampSchema(BaseSchema):
    """Schema with timestamp fields."""

    created_at: datetime
    updated_at: datetime


T = TypeVar("T")


class PaginatedResponse(BaseSchema, Generic[T]):
    """Paginated response wrapper."""

    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, items: list, total: int, page: int, page_size: int) -> "PaginatedResponse":
        return cls(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        )


class ServiceResult(BaseSchema, Generic[T]):
    """Success/failure envelope returned by services that report partial outcomes."""

    success: bool
    message: str | None = None
    data: T | None = None
    errors: list[str] = []

    @classmethod
    def ok(cls, data: Any = None, message: str | None = None, errors: list[str] | None = None):
        return cls(success=True, data=data, message=message, errors=errors or [])

    @classmethod
    def fail(cls, message: str, errors: list[str] | None = None):
        return cls(success=False, message=message, errors=errors or [])


class ErrorDetail(BaseSchema):
    """Error detail structure."""

    code: str
    message: str
    details: dict[str, Any] = {}


class ErrorResponse(BaseSchema):
    """Standard error response."""

    success: bool = False
    error: ErrorDetail


class MessageResponse(BaseSchema):
    """Simple message response."""

    message: str


class CountResponse(BaseSchema):
    count: int


class ExistsResponse(BaseSchema):
    exists: bool
