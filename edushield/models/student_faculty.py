"""Student-faculty assignment model."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edushield.core.database import Base
from edushield.models.base import BigIntegerType, TimestampMixin


class StudentFaculty(Base, TimestampMixin):
    """Assignment of a student to a faculty member."""

    __tablename__ = "student_faculty"

    student_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("students.id", ondelete="CASCADE"),
        primary_key=True,
    )
    faculty_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("faculty.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    assigned_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    subject: Mapped[str | None] = mapped_column(String(100), nullable=True)
    academic_year: Mapped[str | None] = mapped_column(String(20), nullable=True)
    semester: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Read-only navigation for response building
    student: Mapped["Student"] = relationship("Student", lazy="selectin", viewonly=True)
    faculty: Mapped["Faculty"] = relationship("Faculty", lazy="selectin", viewonly=True)

    def __repr__(self) -> str:
        return f"<StudentFaculty(student_id={self.student_id}, faculty_id={self.faculty_id})>"
