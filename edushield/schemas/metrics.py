"""Dashboard metrics schemas."""

from decimal import Decimal

from edushield.schemas.common import BaseSchema
from edushield.schemas.student_performance import StudentPerformanceResponse


class ParentMetrics(BaseSchema):
    """Dashboard figures for one parent's linked children."""

    parent_id: int
    total_children: int = 0
    children_with_overdue_fees: int = 0
    total_overdue_amount: Decimal = Decimal("0.00")
    recent_performances: list[StudentPerformanceResponse] = []


class AdminMetrics(BaseSchema):
    """School-wide dashboard figures."""

    total_students: int = 0
    active_students: int = 0
    inactive_students: int = 0
    total_faculty: int = 0
    active_faculty: int = 0
    inactive_faculty: int = 0
    total_parents: int = 0
    recent_enrollments: int = 0
    overdue_payments: int = 0
    total_overdue_amount: Decimal = Decimal("0.00")
