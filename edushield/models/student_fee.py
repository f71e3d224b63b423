"""Student fee model."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edushield.core.database import Base
from edushield.models.base import BigIntegerType, IDMixin, TimestampMixin
from edushield.models.enums import FeeType, PaymentStatus


class StudentFee(Base, IDMixin, TimestampMixin):
    """Fee charged to a student for one fee type and term.

    Amounts are stored encrypted and only decrypted in the service layer.
    """

    __tablename__ = "student_fees"

    student_id: Mapped[int] = mapped_column(
        BigIntegerType,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    fee_type: Mapped[FeeType] = mapped_column(Enum(FeeType), nullable=False)
    term: Mapped[str] = mapped_column(String(50), nullable=False)
    encrypted_total_amount: Mapped[str] = mapped_column(Text, nullable=False)
    encrypted_amount_paid: Mapped[str] = mapped_column(Text, nullable=False)
    encrypted_amount_due: Mapped[str] = mapped_column(Text, nullable=False)
    encrypted_fine_amount: Mapped[str] = mapped_column(Text, nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    last_payment_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    student: Mapped["Student"] = relationship("Student", lazy="selectin", viewonly=True)

    __table_args__ = (
        UniqueConstraint(
            "student_id", "fee_type", "term",
            name="uq_student_fee_type_term",
        ),
    )

    def __repr__(self) -> str:
        return f"<StudentFee(id={self.id}, student_id={self.student_id}, type={self.fee_type})>"
