"""Student fee and payment schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from edushield.models.enums import FeeType, PaymentStatus
from edushield.schemas.common import BaseSchema, PaginatedResponse


class StudentFeeCreate(BaseSchema):
    """Fee creation schema. Amounts are plain here and encrypted at rest."""

    student_id: int
    fee_type: FeeType
    term: str = Field(..., min_length=1, max_length=50)
    total_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    due_date: date
    notes: str | None = Field(None, max_length=1000)


class StudentFeeUpdate(BaseSchema):
    """Partial fee update; status and amount due are recalculated."""

    fee_type: FeeType | None = None
    term: str | None = Field(None, min_length=1, max_length=50)
    total_amount: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    fine_amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    due_date: date | None = None
    notes: str | None = Field(None, max_length=1000)


class StudentFeeResponse(BaseSchema):
    id: int
    student_id: int
    student_name: str | None = None
    fee_type: FeeType
    term: str
    total_amount: Decimal
    amount_paid: Decimal
    amount_due: Decimal
    fine_amount: Decimal
    payment_status: PaymentStatus
    due_date: date
    last_payment_date: datetime | None
    is_overdue: bool
    days_overdue: int
    notes: str | None
    created_at: datetime
    updated_at: datetime


class PaymentRequest(BaseSchema):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_method: str = Field("card", max_length=50)
    notes: str | None = Field(None, max_length=500)


class PaymentResult(BaseSchema):
    success: bool
    message: str
    transaction_id: str | None = None
    amount_paid: Decimal = Decimal("0.00")
    new_amount_due: Decimal | None = None
    new_payment_status: PaymentStatus | None = None
    payment_date: datetime | None = None
    updated_fee: StudentFeeResponse | None = None


class FeeStatistics(BaseSchema):
    student_id: int
    total_fees: int
    paid_fees: int
    pending_fees: int
    partial_fees: int
    overdue_fees: int
    total_amount: Decimal
    total_paid: Decimal
    total_due: Decimal
    total_fines: Decimal
    payment_rate: float


class StudentFeeFilter(BaseSchema):
    student_id: int | None = None
    fee_type: FeeType | None = None
    term: str | None = None
    payment_status: PaymentStatus | None = None
    due_from: date | None = None
    due_to: date | None = None


class LateFeeRunResult(BaseSchema):
    updated_count: int


class PaginatedStudentFeeResponse(PaginatedResponse):
    items: list[StudentFeeResponse]
