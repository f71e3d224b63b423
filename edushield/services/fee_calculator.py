"""Fee and payment status derivation.

Pure functions over decrypted amounts and due dates. `today` defaults to the
current date so callers and tests can pin it.
"""

from datetime import date
from decimal import Decimal

from edushield.core.config import settings
from edushield.models.enums import PaymentStatus

ZERO = Decimal("0.00")


def _as_decimal(value: Decimal | float | int) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def calculate_days_overdue(due_date: date, today: date | None = None) -> int:
    today = today or date.today()
    return max((today - due_date).days, 0)


def calculate_late_fee(due_date: date, today: date | None = None) -> Decimal:
    """Base fee plus a daily charge for each day past due, capped."""
    days = calculate_days_overdue(due_date, today)
    if days == 0:
        return ZERO
    base = _as_decimal(settings.LATE_FEE_BASE)
    daily = _as_decimal(settings.LATE_FEE_DAILY)
    cap = _as_decimal(settings.LATE_FEE_MAX)
    return min(base + days * daily, cap).quantize(ZERO)


def calculate_amount_due(
    total: Decimal | float | int,
    paid: Decimal | float | int,
    fine: Decimal | float | int = ZERO,
) -> Decimal:
    """Total minus paid plus fine, never negative."""
    due = _as_decimal(total) - _as_decimal(paid) + _as_decimal(fine)
    return max(due, ZERO).quantize(ZERO)


def determine_payment_status(
    total: Decimal | float | int,
    paid: Decimal | float | int,
    fine: Decimal | float | int = ZERO,
) -> PaymentStatus:
    total, paid, fine = _as_decimal(total), _as_decimal(paid), _as_decimal(fine)
    if paid >= total + fine:
        return PaymentStatus.PAID
    if paid > 0:
        return PaymentStatus.PARTIAL
    if fine > 0:
        return PaymentStatus.OVERDUE
    return PaymentStatus.PENDING


def is_overdue(
    due_date: date,
    status: PaymentStatus | None = None,
    today: date | None = None,
) -> bool:
    """A fee is overdue once its due date has passed, unless it is paid."""
    today = today or date.today()
    return today > due_date and status != PaymentStatus.PAID
