"""Student performance model."""

from datetime import date
from decimal import Decimal

from sqlalchemy import DECIMAL, Date, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edushield.core.database import Base
from edushield.models.base import BigIntegerType, IDMixin, TimestampMixin
from edushield.models.enums import ExamType


class StudentPerformance(Base, IDMixin, TimestampMixin):
    """Exam result for a student. The score is stored encrypted."""

    __tablename__ = "student_performances"

    student_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    exam_type: Mapped[ExamType] = mapped_column(Enum(ExamType), nullable=False)
    exam_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    encrypted_score: Mapped[str] = mapped_column(Text, nullable=False)
    max_score: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True)
    exam_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    student: Mapped["Student"] = relationship("Student", lazy="selectin", viewonly=True)

    __table_args__ = (
        UniqueConstraint(
            "student_id", "subject", "exam_type", "exam_date",
            name="uq_performance_student_subject_exam",
        ),
    )

    def __repr__(self) -> str:
        return f"<StudentPerformance(student_id={self.student_id}, subject={self.subject})>"
