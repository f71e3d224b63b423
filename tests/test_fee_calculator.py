from datetime import date, timedelta
from decimal import Decimal

import pytest

from edushield.models.enums import PaymentStatus
from edushield.services import fee_calculator

TODAY = date(2024, 3, 15)


@pytest.mark.parametrize(
    "days_late, expected",
    [
        (0, Decimal("0.00")),
        (1, Decimal("110.00")),
        (10, Decimal("200.00")),
        (40, Decimal("500.00")),
        (365, Decimal("500.00")),
    ],
)
def test_late_fee_is_base_plus_daily_capped(days_late, expected):
    due = TODAY - timedelta(days=days_late)
    assert fee_calculator.calculate_late_fee(due, TODAY) == expected


def test_no_late_fee_before_due_date():
    assert fee_calculator.calculate_late_fee(TODAY + timedelta(days=5), TODAY) == Decimal("0.00")
    assert fee_calculator.calculate_days_overdue(TODAY + timedelta(days=5), TODAY) == 0


def test_amount_due_never_negative():
    assert fee_calculator.calculate_amount_due(Decimal("100"), Decimal("150")) == Decimal("0.00")
    assert fee_calculator.calculate_amount_due(Decimal("100"), Decimal("40"), Decimal("10")) == Decimal("70.00")


@pytest.mark.parametrize(
    "total, paid, fine, status",
    [
        ("1000", "0", "0", PaymentStatus.PENDING),
        ("1000", "400", "0", PaymentStatus.PARTIAL),
        ("1000", "1000", "0", PaymentStatus.PAID),
        ("1000", "1000", "110", PaymentStatus.PARTIAL),
        ("1000", "0", "110", PaymentStatus.OVERDUE),
        ("1000", "1110", "110", PaymentStatus.PAID),
    ],
)
def test_payment_status(total, paid, fine, status):
    assert fee_calculator.determine_payment_status(Decimal(total), Decimal(paid), Decimal(fine)) == status


def test_is_overdue_ignores_paid_fees():
    due = TODAY - timedelta(days=1)
    assert fee_calculator.is_overdue(due, PaymentStatus.PENDING, TODAY)
    assert not fee_calculator.is_overdue(due, PaymentStatus.PAID, TODAY)
    assert not fee_calculator.is_overdue(TODAY, PaymentStatus.PENDING, TODAY)
