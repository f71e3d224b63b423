from datetime import date, timedelta
from decimal import Decimal

import pytest

from edushield.core.exceptions import ConflictError, ValidationError
from edushield.models.enums import FeeType, PaymentStatus
from edushield.schemas.student_fee import (
    PaymentRequest,
    StudentFeeCreate,
    StudentFeeFilter,
    StudentFeeUpdate,
)
from edushield.services.payment_gateway import MockPaymentGateway
from edushield.services.student_fee import StudentFeeService

NEXT_MONTH = date.today() + timedelta(days=30)


@pytest.fixture
def service(db):
    return StudentFeeService(db, gateway=MockPaymentGateway(failure_rate=0))


@pytest.fixture
def student(make_student):
    return make_student()


def new_fee(student, total="1000.00", fee_type=FeeType.TUITION, term="2024-T1"):
    return StudentFeeCreate(
        student_id=student.id,
        fee_type=fee_type,
        term=term,
        total_amount=Decimal(total),
        due_date=NEXT_MONTH,
    )


def make_overdue(service, fee_id, days):
    service.fees.update(service.get_fee(fee_id), {"due_date": date.today() - timedelta(days=days)})


def test_create_fee_derives_amounts(service, student):
    fee = service.create_fee(new_fee(student))

    assert fee.amount_due == Decimal("1000.00")
    assert fee.amount_paid == Decimal("0.00")
    assert fee.payment_status == PaymentStatus.PENDING
    assert not fee.is_overdue

    stored = service.get_fee(fee.id)
    assert stored.encrypted_total_amount != "1000.00"
    assert stored.encrypted_total_amount != stored.encrypted_amount_due


def test_create_fee_validation(service, student):
    past = new_fee(student)
    past.due_date = date.today()
    with pytest.raises(ValidationError):
        service.create_fee(past)

    unknown = new_fee(student)
    unknown.student_id = 9999
    with pytest.raises(ValidationError):
        service.create_fee(unknown)


def test_one_fee_per_type_and_term(service, student):
    service.create_fee(new_fee(student))

    with pytest.raises(ConflictError):
        service.create_fee(new_fee(student))
    assert service.create_fee(new_fee(student, term="2024-T2")).term == "2024-T2"


def test_partial_then_full_payment(service, student):
    fee = service.create_fee(new_fee(student))

    partial = service.make_payment(fee.id, PaymentRequest(amount=Decimal("400.00")))
    assert partial.success
    assert partial.transaction_id.startswith("mock_")
    assert partial.new_amount_due == Decimal("600.00")
    assert partial.new_payment_status == PaymentStatus.PARTIAL

    full = service.make_payment(fee.id, PaymentRequest(amount=Decimal("600.00")))
    assert full.new_amount_due == Decimal("0.00")
    assert full.new_payment_status == PaymentStatus.PAID
    assert full.updated_fee.last_payment_date is not None


def test_overpayment_and_paid_fee_are_rejected(service, student):
    fee = service.create_fee(new_fee(student, total="100.00"))

    with pytest.raises(ValidationError):
        service.make_payment(fee.id, PaymentRequest(amount=Decimal("100.01")))

    service.make_payment(fee.id, PaymentRequest(amount=Decimal("100.00")))
    with pytest.raises(ValidationError):
        service.make_payment(fee.id, PaymentRequest(amount=Decimal("1.00")))


def test_declined_payment_changes_nothing(db, student):
    service = StudentFeeService(db, gateway=MockPaymentGateway(failure_rate=1.0))
    fee = service.create_fee(new_fee(student))

    result = service.make_payment(fee.id, PaymentRequest(amount=Decimal("100.00")))

    assert not result.success
    assert result.transaction_id is None
    assert service.get_fee_response(fee.id).amount_paid == Decimal("0.00")


def test_late_fee_run(service, student):
    fee = service.create_fee(new_fee(student))
    make_overdue(service, fee.id, days=1)

    assert service.calculate_late_fees() == 1

    updated = service.get_fee_response(fee.id)
    assert updated.fine_amount == Decimal("110.00")
    assert updated.amount_due == Decimal("1110.00")
    assert updated.payment_status == PaymentStatus.OVERDUE
    assert updated.is_overdue
    assert updated.days_overdue == 1

    assert service.calculate_late_fees() == 0


def test_paid_fees_get_no_late_fee(service, student):
    fee = service.create_fee(new_fee(student, total="50.00"))
    service.make_payment(fee.id, PaymentRequest(amount=Decimal("50.00")))
    make_overdue(service, fee.id, days=10)

    assert service.calculate_late_fees() == 0
    assert service.list_overdue() == []


def test_paying_the_fine_settles_an_overdue_fee(service, student):
    fee = service.create_fee(new_fee(student, total="200.00"))
    make_overdue(service, fee.id, days=3)
    service.calculate_late_fees()

    result = service.make_payment(fee.id, PaymentRequest(amount=Decimal("330.00")))

    assert result.new_payment_status == PaymentStatus.PAID
    assert result.new_amount_due == Decimal("0.00")


def test_update_recomputes_amount_due(service, student):
    fee = service.create_fee(new_fee(student))
    service.make_payment(fee.id, PaymentRequest(amount=Decimal("250.00")))

    updated = service.update_fee(
        fee.id, StudentFeeUpdate(total_amount=Decimal("1200.00"), fine_amount=Decimal("50.00"))
    )

    assert updated.amount_due == Decimal("1000.00")
    assert updated.payment_status == PaymentStatus.PARTIAL


def test_update_due_date_must_be_in_the_future(service, student):
    fee = service.create_fee(new_fee(student))

    with pytest.raises(ValidationError):
        service.update_fee(fee.id, StudentFeeUpdate(due_date=date.today() - timedelta(days=5)))
    assert service.get_fee(fee.id).due_date == NEXT_MONTH


def test_extending_due_date_clears_the_late_fee(service, student):
    fee = service.create_fee(new_fee(student))
    make_overdue(service, fee.id, days=10)
    service.calculate_late_fees()

    updated = service.update_fee(fee.id, StudentFeeUpdate(due_date=NEXT_MONTH))

    assert updated.fine_amount == Decimal("0.00")
    assert updated.amount_due == Decimal("1000.00")
    assert updated.payment_status == PaymentStatus.PENDING
    assert not updated.is_overdue


def test_explicit_fine_survives_due_date_change(service, student):
    fee = service.create_fee(new_fee(student))

    updated = service.update_fee(
        fee.id,
        StudentFeeUpdate(due_date=NEXT_MONTH + timedelta(days=7), fine_amount=Decimal("25.00")),
    )

    assert updated.fine_amount == Decimal("25.00")
    assert updated.amount_due == Decimal("1025.00")


def test_statistics(service, student):
    tuition = service.create_fee(new_fee(student, total="800.00"))
    service.create_fee(new_fee(student, total="200.00", fee_type=FeeType.LIBRARY))
    service.make_payment(tuition.id, PaymentRequest(amount=Decimal("800.00")))

    stats = service.get_student_statistics(student.id)

    assert stats.total_fees == 2
    assert stats.paid_fees == 1
    assert stats.pending_fees == 1
    assert stats.total_amount == Decimal("1000.00")
    assert stats.total_paid == Decimal("800.00")
    assert stats.total_due == Decimal("200.00")
    assert stats.payment_rate == 80.0


def test_list_fees_restricted_to_students(service, make_student):
    mine, other = make_student(), make_student()
    service.create_fee(new_fee(mine))
    service.create_fee(new_fee(other))

    page = service.list_fees(StudentFeeFilter(fee_type=FeeType.TUITION), student_ids=[mine.id])

    assert page.total == 1
    assert page.items[0].student_id == mine.id
