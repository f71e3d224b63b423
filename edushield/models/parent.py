"""Parent model."""

from datetime import date

from sqlalchemy import Boolean, Date, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from edushield.core.database import Base
from edushield.models.base import BigIntegerType, IDMixin, TimestampMixin
from edushield.models.enums import Gender, ParentType


class Parent(Base, IDMixin, TimestampMixin):
    """Parent or guardian model."""

    __tablename__ = "parents"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)
    alternate_phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str] = mapped_column(String(100), default="USA", nullable=False)
    gender: Mapped[Gender] = mapped_column(Enum(Gender), nullable=False)
    occupation: Mapped[str | None] = mapped_column(String(100), nullable=True)
    employer: Mapped[str | None] = mapped_column(String(200), nullable=True)
    work_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    emergency_contact_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    emergency_contact_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    emergency_contact_relationship: Mapped[str | None] = mapped_column(String(50), nullable=True)

    parent_type: Mapped[ParentType] = mapped_column(
        Enum(ParentType),
        default=ParentType.PRIMARY,
        nullable=False,
        index=True,
    )
    is_emergency_contact: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_authorized_to_pickup: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    user_id: Mapped[int | None] = mapped_column(
        BigIntegerType,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Parent(id={self.id}, email={self.email})>"
