"""Student performance service."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from edushield.core.encryption import EncryptionService, get_encryption_service
from edushield.core.exceptions import ConflictError, NotFoundError, ValidationError
from edushield.models.enums import ExamType
from edushield.models.student_performance import StudentPerformance
from edushield.repositories.student import StudentRepository
from edushield.repositories.student_performance import StudentPerformanceRepository
from edushield.schemas.student_performance import (
    PaginatedStudentPerformanceResponse,
    PerformanceStatistics,
    StudentPerformanceCreate,
    StudentPerformanceFilter,
    StudentPerformanceResponse,
    StudentPerformanceUpdate,
    SubjectBreakdown,
)

logger = logging.getLogger(__name__)

# (minimum percentage, grade), checked top down
GRADE_BANDS = [
    (90, "A+"),
    (85, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
    (45, "D+"),
    (40, "D"),
    (35, "D-"),
]


def exact_percentage(score: Decimal, max_score: Decimal | None) -> Decimal | None:
    if not max_score or max_score <= 0:
        return None
    return score / max_score * 100


def calculate_percentage(score: Decimal, max_score: Decimal | None) -> float | None:
    percentage = exact_percentage(score, max_score)
    return None if percentage is None else round(float(percentage), 2)


def calculate_grade(percentage: Decimal | float | None) -> str:
    """Grade band for an unrounded percentage."""
    if percentage is None:
        return "N/A"
    for minimum, grade in GRADE_BANDS:
        if percentage >= minimum:
            return grade
    return "F"


class StudentPerformanceService:
    """Exam results with encrypted scores."""

    def __init__(self, db: Session, encryption: EncryptionService | None = None):
        self.db = db
        self.records = StudentPerformanceRepository(db)
        self.students = StudentRepository(db)
        self.encryption = encryption or get_encryption_service()

    def _to_response(self, record: StudentPerformance) -> StudentPerformanceResponse:
        score = self.encryption.decrypt_decimal(record.encrypted_score)
        exact = exact_percentage(score, record.max_score)
        return StudentPerformanceResponse(
            id=record.id,
            student_id=record.student_id,
            student_name=record.student.full_name if record.student else None,
            subject=record.subject,
            exam_type=record.exam_type,
            exam_date=record.exam_date,
            score=score,
            max_score=record.max_score,
            percentage=None if exact is None else round(float(exact), 2),
            grade=calculate_grade(exact),
            exam_title=record.exam_title,
            comments=record.comments,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def _validate(self, exam_date: date, score: Decimal, max_score: Decimal | None) -> None:
        if exam_date > date.today():
            raise ValidationError("Exam date cannot be in the future")
        if score < 0:
            raise ValidationError("Score cannot be negative")
        if max_score is not None and score > max_score:
            raise ValidationError(f"Score ({score}) exceeds max score ({max_score})")

    def get_record(self, performance_id: int) -> StudentPerformance:
        record = self.records.get(performance_id)
        if not record:
            raise NotFoundError("Performance record", str(performance_id))
        return record

    def get_record_response(self, performance_id: int) -> StudentPerformanceResponse:
        return self._to_response(self.get_record(performance_id))

    def create_record(self, request: StudentPerformanceCreate) -> StudentPerformanceResponse:
        if not self.students.get(request.student_id):
            raise ValidationError(f"Student with ID {request.student_id} not found")
        self._validate(request.exam_date, request.score, request.max_score)
        if self.records.exists_for_exam(
            request.student_id, request.subject, request.exam_type, request.exam_date
        ):
            raise ConflictError(
                f"A {request.exam_type.value} result for {request.subject} on "
                f"{request.exam_date} already exists for this student"
            )

        record = self.records.create(
            StudentPerformance(
                student_id=request.student_id,
                subject=request.subject,
                exam_type=request.exam_type,
                exam_date=request.exam_date,
                encrypted_score=self.encryption.encrypt_decimal(request.score),
                max_score=request.max_score,
                exam_title=request.exam_title,
                comments=request.comments,
            )
        )
        logger.info(f"Recorded {record.subject} result {record.id} for student {record.student_id}")
        return self._to_response(record)

    def update_record(self, performance_id: int, request: StudentPerformanceUpdate) -> StudentPerformanceResponse:
        record = self.get_record(performance_id)
        changes = request.model_dump(exclude_unset=True)

        score = changes.pop("score", None)
        if score is None:
            score = self.encryption.decrypt_decimal(record.encrypted_score)
        else:
            changes["encrypted_score"] = self.encryption.encrypt_decimal(score)

        self._validate(
            changes.get("exam_date", record.exam_date),
            score,
            changes.get("max_score", record.max_score),
        )
        if self.records.exists_for_exam(
            record.student_id,
            changes.get("subject", record.subject),
            changes.get("exam_type", record.exam_type),
            changes.get("exam_date", record.exam_date),
            exclude_id=record.id,
        ):
            raise ConflictError("A result for this subject, exam type and date already exists")

        record = self.records.update(record, changes)
        return self._to_response(record)

    def delete_record(self, performance_id: int) -> None:
        self.records.delete(self.get_record(performance_id))
        logger.info(f"Deleted performance record {performance_id}")

    def list_records(
        self,
        filters: StudentPerformanceFilter | None = None,
        student_ids: list[int] | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStudentPerformanceResponse:
        filters = filters or StudentPerformanceFilter()
        items, total = self.records.search(
            **filters.model_dump(),
            student_ids=student_ids,
            page=page,
            page_size=page_size,
        )
        return PaginatedStudentPerformanceResponse.build(
            [self._to_response(r) for r in items], total, page, page_size
        )

    def list_for_student(self, student_id: int, subject: str | None = None) -> list[StudentPerformanceResponse]:
        return [self._to_response(r) for r in self.records.list_by_student(student_id, subject)]

    def list_recent_for_students(
        self, student_ids: list[int], since: date, limit: int = 10
    ) -> list[StudentPerformanceResponse]:
        """Newest results on or after `since`, at most `limit` of them."""
        return [
            self._to_response(r)
            for r in self.records.list_recent_for_students(student_ids, since, limit)
        ]

    def list_by_subject(self, subject: str) -> list[StudentPerformanceResponse]:
        return [self._to_response(r) for r in self.records.list_by_subject(subject)]

    def list_by_exam_type(self, exam_type: ExamType) -> list[StudentPerformanceResponse]:
        return [self._to_response(r) for r in self.records.list_by_exam_type(exam_type)]

    def list_for_faculty(self, faculty_id: int) -> list[StudentPerformanceResponse]:
        return [self._to_response(r) for r in self.records.list_by_faculty(faculty_id)]

    def get_student_statistics(self, student_id: int, subject: str | None = None) -> PerformanceStatistics:
        """Average, best and worst score overall and per subject."""
        if not self.students.get(student_id):
            raise NotFoundError("Student", str(student_id))

        by_subject: dict[str, list[float]] = defaultdict(list)
        for record in self.records.list_by_student(student_id, subject):
            by_subject[record.subject].append(
                float(self.encryption.decrypt_decimal(record.encrypted_score))
            )
        scores = [score for values in by_subject.values() for score in values]

        if not scores:
            return PerformanceStatistics(
                student_id=student_id,
                subject=subject,
                total_exams=0,
                average_score=0.0,
                highest_score=0.0,
                lowest_score=0.0,
                subject_breakdown=[],
            )

        return PerformanceStatistics(
            student_id=student_id,
            subject=subject,
            total_exams=len(scores),
            average_score=round(sum(scores) / len(scores), 2),
            highest_score=max(scores),
            lowest_score=min(scores),
            subject_breakdown=[
                SubjectBreakdown(
                    subject=name,
                    exam_count=len(values),
                    average_score=round(sum(values) / len(values), 2),
                    highest_score=max(values),
                    lowest_score=min(values),
                )
                for name, values in sorted(by_subject.items())
            ],
        )
