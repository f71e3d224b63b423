"""Parent-student assignment model."""

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edushield.core.database import Base
from edushield.models.base import BigIntegerType, TimestampMixin


class ParentStudent(Base, TimestampMixin):
    """Link between a parent and a student, with contact flags."""

    __tablename__ = "parent_students"

    parent_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("parents.id", ondelete="CASCADE"),
        primary_key=True,
    )
    student_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("students.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    relationship_type: Mapped[str] = mapped_column("relationship", String(50), nullable=False)
    is_primary_contact: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_authorized_to_pickup: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_emergency_contact: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Read-only navigation for response building
    parent: Mapped["Parent"] = relationship("Parent", lazy="selectin", viewonly=True)
    student: Mapped["Student"] = relationship("Student", lazy="selectin", viewonly=True)

    __table_args__ = (
        # At most one active primary contact per student
        Index(
            "uq_parent_students_active_primary",
            "student_id",
            unique=True,
            postgresql_where=text("is_primary_contact AND is_active"),
            sqlite_where=text("is_primary_contact = 1 AND is_active = 1"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ParentStudent(parent_id={self.parent_id}, student_id={self.student_id}, "
            f"primary={self.is_primary_contact})>"
        )
