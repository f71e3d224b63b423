"""Student performance schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, model_validator

from edushield.models.enums import ExamType
from edushield.schemas.common import BaseSchema, PaginatedResponse


class StudentPerformanceCreate(BaseSchema):
    """Performance record creation schema."""

    student_id: int
    subject: str = Field(..., min_length=1, max_length=100)
    exam_type: ExamType
    exam_date: date
    score: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    max_score: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    exam_title: str | None = Field(None, max_length=200)
    comments: str | None = Field(None, max_length=1000)

    @model_validator(mode="after")
    def validate_score(self):
        if self.max_score is not None and self.score > self.max_score:
            raise ValueError(f"score ({self.score}) exceeds max_score ({self.max_score})")
        return self


class StudentPerformanceUpdate(BaseSchema):
    subject: str | None = Field(None, min_length=1, max_length=100)
    exam_type: ExamType | None = None
    exam_date: date | None = None
    score: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    max_score: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    exam_title: str | None = Field(None, max_length=200)
    comments: str | None = Field(None, max_length=1000)


class StudentPerformanceResponse(BaseSchema):
    id: int
    student_id: int
    student_name: str | None = None
    subject: str
    exam_type: ExamType
    exam_date: date
    score: Decimal
    max_score: Decimal | None
    percentage: float | None
    grade: str
    exam_title: str | None
    comments: str | None
    created_at: datetime
    updated_at: datetime


class SubjectBreakdown(BaseSchema):
    subject: str
    exam_count: int
    average_score: float
    highest_score: float
    lowest_score: float


class PerformanceStatistics(BaseSchema):
    student_id: int
    subject: str | None = None
    total_exams: int
    average_score: float
    highest_score: float
    lowest_score: float
    subject_breakdown: list[SubjectBreakdown]


class StudentPerformanceFilter(BaseSchema):
    student_id: int | None = None
    subject: str | None = None
    exam_type: ExamType | None = None
    from_date: date | None = None
    to_date: date | None = None
    search: str | None = None
    sort_by: str | None = None
    descending: bool = True


class PaginatedStudentPerformanceResponse(PaginatedResponse):
    items: list[StudentPerformanceResponse]
