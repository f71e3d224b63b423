"""Student fee service.

Amounts are encrypted at rest. They are decrypted here, recalculated with the
fee calculator and re-encrypted on every write, so amount due and payment
status are always derived from the stored total, paid and fine amounts.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from edushield.core.config import settings
from edushield.core.encryption import EncryptionService, get_encryption_service
from edushield.core.exceptions import ConflictError, NotFoundError, ValidationError
from edushield.models.enums import FeeType, PaymentStatus
from edushield.models.student_fee import StudentFee
from edushield.repositories.student import StudentRepository
from edushield.repositories.student_fee import StudentFeeRepository
from edushield.schemas.student_fee import (
    FeeStatistics,
    PaginatedStudentFeeResponse,
    PaymentRequest,
    PaymentResult,
    StudentFeeCreate,
    StudentFeeFilter,
    StudentFeeResponse,
    StudentFeeUpdate,
)
from edushield.services import fee_calculator
from edushield.services.payment_gateway import MockPaymentGateway

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class StudentFeeService:
    """Fee records, payments and late fees."""

    def __init__(
        self,
        db: Session,
        encryption: EncryptionService | None = None,
        gateway: MockPaymentGateway | None = None,
    ):
        self.db = db
        self.fees = StudentFeeRepository(db)
        self.students = StudentRepository(db)
        self.encryption = encryption or get_encryption_service()
        self.gateway = gateway or MockPaymentGateway()

    def _amounts(self, fee: StudentFee) -> tuple[Decimal, Decimal, Decimal]:
        """Decrypted (total, paid, fine)."""
        return (
            self.encryption.decrypt_decimal(fee.encrypted_total_amount),
            self.encryption.decrypt_decimal(fee.encrypted_amount_paid),
            self.encryption.decrypt_decimal(fee.encrypted_fine_amount),
        )

    def _derived_fields(self, total: Decimal, paid: Decimal, fine: Decimal) -> dict:
        """Encrypted amount columns plus the payment status derived from them."""
        return {
            "encrypted_total_amount": self.encryption.encrypt_decimal(total),
            "encrypted_amount_paid": self.encryption.encrypt_decimal(paid),
            "encrypted_fine_amount": self.encryption.encrypt_decimal(fine),
            "encrypted_amount_due": self.encryption.encrypt_decimal(
                fee_calculator.calculate_amount_due(total, paid, fine)
            ),
            "payment_status": fee_calculator.determine_payment_status(total, paid, fine),
        }

    def _to_response(self, fee: StudentFee, today: date | None = None) -> StudentFeeResponse:
        total, paid, fine = self._amounts(fee)
        overdue = fee_calculator.is_overdue(fee.due_date, fee.payment_status, today)
        return StudentFeeResponse(
            id=fee.id,
            student_id=fee.student_id,
            student_name=fee.student.full_name if fee.student else None,
            fee_type=fee.fee_type,
            term=fee.term,
            total_amount=total,
            amount_paid=paid,
            amount_due=self.encryption.decrypt_decimal(fee.encrypted_amount_due),
            fine_amount=fine,
            payment_status=fee.payment_status,
            due_date=fee.due_date,
            last_payment_date=fee.last_payment_date,
            is_overdue=overdue,
            days_overdue=fee_calculator.calculate_days_overdue(fee.due_date, today) if overdue else 0,
            notes=fee.notes,
            created_at=fee.created_at,
            updated_at=fee.updated_at,
        )

    def get_fee(self, fee_id: int) -> StudentFee:
        fee = self.fees.get(fee_id)
        if not fee:
            raise NotFoundError("Student fee", str(fee_id))
        return fee

    def get_fee_response(self, fee_id: int) -> StudentFeeResponse:
        return self._to_response(self.get_fee(fee_id))

    def create_fee(self, request: StudentFeeCreate) -> StudentFeeResponse:
        if not self.students.get(request.student_id):
            raise ValidationError(f"Student with ID {request.student_id} not found")
        if request.due_date <= date.today():
            raise ValidationError("Due date must be in the future")
        if self.fees.exists_for_term(request.student_id, request.fee_type, request.term):
            raise ConflictError(
                f"A {request.fee_type.value} fee for term {request.term} already exists for this student"
            )

        fee = self.fees.create(
            StudentFee(
                student_id=request.student_id,
                fee_type=request.fee_type,
                term=request.term,
                due_date=request.due_date,
                notes=request.notes,
                **self._derived_fields(request.total_amount, ZERO, ZERO),
            )
        )
        logger.info(f"Created {fee.fee_type.value} fee {fee.id} for student {fee.student_id}")
        return self._to_response(fee)

    def update_fee(self, fee_id: int, request: StudentFeeUpdate) -> StudentFeeResponse:
        fee = self.get_fee(fee_id)
        changes = request.model_dump(exclude_unset=True)
        total, paid, fine = self._amounts(fee)
        total = changes.pop("total_amount", None) or total
        if "fine_amount" in changes:
            fine = changes.pop("fine_amount") or ZERO

        due_date = changes.pop("due_date", None)
        if due_date and due_date != fee.due_date:
            if due_date <= date.today():
                raise ValidationError("Due date must be in the future")
            changes["due_date"] = due_date
            # The late fee follows the new due date unless a fine was given explicitly
            if "fine_amount" not in request.model_fields_set:
                fine = fee_calculator.calculate_late_fee(due_date)

        fee_type = changes.get("fee_type", fee.fee_type)
        term = changes.get("term", fee.term)
        if self.fees.exists_for_term(fee.student_id, fee_type, term, exclude_id=fee.id):
            raise ConflictError(f"A {fee_type.value} fee for term {term} already exists for this student")

        changes.update(self._derived_fields(total, paid, fine))
        fee = self.fees.update(fee, changes)
        return self._to_response(fee)

    def delete_fee(self, fee_id: int) -> None:
        self.fees.delete(self.get_fee(fee_id))
        logger.info(f"Deleted fee {fee_id}")

    def make_payment(self, fee_id: int, request: PaymentRequest) -> PaymentResult:
        """Charge the gateway and record the payment against the fee."""
        fee = self.get_fee(fee_id)
        total, paid, fine = self._amounts(fee)
        amount_due = fee_calculator.calculate_amount_due(total, paid, fine)

        if fee.payment_status == PaymentStatus.PAID or amount_due == ZERO:
            raise ValidationError("Fee is already fully paid")
        if request.amount > amount_due:
            raise ValidationError(
                f"Payment amount {request.amount} exceeds amount due {amount_due}",
                details={"amount_due": str(amount_due)},
            )

        result = self.gateway.process_payment(
            amount=request.amount,
            currency=settings.PAYMENT_CURRENCY,
            description=f"{fee.fee_type.value} fee for term {fee.term}",
            metadata={"fee_id": fee.id, "student_id": fee.student_id, "method": request.payment_method},
        )
        if not result.success:
            logger.warning(f"Payment for fee {fee.id} failed: {result.error_message}")
            return PaymentResult(
                success=False,
                message=result.error_message or "Payment failed",
                new_amount_due=amount_due,
                new_payment_status=fee.payment_status,
            )

        payment_date = datetime.now(timezone.utc)
        changes = self._derived_fields(total, paid + request.amount, fine)
        changes["last_payment_date"] = payment_date
        fee = self.fees.update(fee, changes)
        updated = self._to_response(fee)

        logger.info(f"Recorded payment {result.transaction_id} of {request.amount} for fee {fee.id}")
        return PaymentResult(
            success=True,
            message="Payment processed successfully",
            transaction_id=result.transaction_id,
            amount_paid=request.amount,
            new_amount_due=updated.amount_due,
            new_payment_status=updated.payment_status,
            payment_date=payment_date,
            updated_fee=updated,
        )

    def calculate_late_fees(self, today: date | None = None) -> int:
        """Re-derive the fine on every overdue fee; returns how many changed."""
        today = today or date.today()
        updated = 0
        for fee in self.fees.list_overdue(today):
            total, paid, fine = self._amounts(fee)
            late_fee = fee_calculator.calculate_late_fee(fee.due_date, today)
            if late_fee == fine:
                continue
            self.fees.update(fee, self._derived_fields(total, paid, late_fee))
            updated += 1
        logger.info(f"Late fee run updated {updated} fee(s)")
        return updated

    def get_student_statistics(self, student_id: int) -> FeeStatistics:
        if not self.students.get(student_id):
            raise NotFoundError("Student", str(student_id))
        fees = self.fees.list_by_student(student_id)

        total_amount = total_paid = total_due = total_fines = ZERO
        statuses = []
        for fee in fees:
            total, paid, fine = self._amounts(fee)
            total_amount += total
            total_paid += paid
            total_fines += fine
            total_due += self.encryption.decrypt_decimal(fee.encrypted_amount_due)
            statuses.append(fee.payment_status)

        charged = total_amount + total_fines
        payment_rate = round(float(total_paid / charged * 100), 2) if charged > 0 else 0.0
        return FeeStatistics(
            student_id=student_id,
            total_fees=len(fees),
            paid_fees=statuses.count(PaymentStatus.PAID),
            pending_fees=statuses.count(PaymentStatus.PENDING),
            partial_fees=statuses.count(PaymentStatus.PARTIAL),
            overdue_fees=sum(1 for fee in fees if fee_calculator.is_overdue(fee.due_date, fee.payment_status)),
            total_amount=total_amount,
            total_paid=total_paid,
            total_due=total_due,
            total_fines=total_fines,
            payment_rate=payment_rate,
        )

    def list_fees(
        self,
        filters: StudentFeeFilter | None = None,
        student_ids: list[int] | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStudentFeeResponse:
        filters = filters or StudentFeeFilter()
        items, total = self.fees.search(
            **filters.model_dump(),
            student_ids=student_ids,
            page=page,
            page_size=page_size,
        )
        return PaginatedStudentFeeResponse.build(
            [self._to_response(f) for f in items], total, page, page_size
        )

    def list_for_student(self, student_id: int) -> list[StudentFeeResponse]:
        return [self._to_response(f) for f in self.fees.list_by_student(student_id)]

    def list_by_type(self, fee_type: FeeType) -> list[StudentFeeResponse]:
        return [self._to_response(f) for f in self.fees.list_by_type(fee_type)]

    def list_by_term(self, term: str) -> list[StudentFeeResponse]:
        return [self._to_response(f) for f in self.fees.list_by_term(term)]

    def list_overdue(self, today: date | None = None) -> list[StudentFeeResponse]:
        today = today or date.today()
        return [self._to_response(f, today) for f in self.fees.list_overdue(today)]

    def list_for_faculty(self, faculty_id: int) -> list[StudentFeeResponse]:
        return [self._to_response(f) for f in self.fees.list_by_faculty(faculty_id)]

    def list_for_parent(self, parent_id: int) -> list[StudentFeeResponse]:
        return [self._to_response(f) for f in self.fees.list_by_parent(parent_id)]
