"""Dashboard metrics for parents and administrators."""

import logging
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from edushield.core.encryption import EncryptionService, get_encryption_service
from edushield.core.exceptions import NotFoundError
from edushield.models.enums import StudentStatus
from edushield.models.student_fee import StudentFee
from edushield.repositories.faculty import FacultyRepository
from edushield.repositories.parent import ParentRepository
from edushield.repositories.parent_student import ParentStudentRepository
from edushield.repositories.student import StudentRepository
from edushield.repositories.student_fee import StudentFeeRepository
from edushield.schemas.metrics import AdminMetrics, ParentMetrics
from edushield.services.student_performance import StudentPerformanceService

logger = logging.getLogger(__name__)

RECENT_DAYS = 30
RECENT_PERFORMANCE_LIMIT = 10


class MetricsService:
    """Dashboard data aggregation service."""

    def __init__(self, db: Session, encryption: EncryptionService | None = None):
        self.db = db
        self.students = StudentRepository(db)
        self.faculty = FacultyRepository(db)
        self.parents = ParentRepository(db)
        self.links = ParentStudentRepository(db)
        self.fees = StudentFeeRepository(db)
        self.encryption = encryption or get_encryption_service()

    def _amount_due(self, fees: list[StudentFee]) -> Decimal:
        return sum(
            (self.encryption.decrypt_decimal(fee.encrypted_amount_due) for fee in fees),
            Decimal("0.00"),
        )

    def get_parent_metrics(self, parent_id: int, today: date | None = None) -> ParentMetrics:
        """
        Figures for the parent's actively linked children:
        overdue fees, the amount still owed on them and the latest results.
        """
        if not self.parents.get(parent_id):
            raise NotFoundError("Parent", str(parent_id))
        today = today or date.today()

        child_ids = [child.id for child in self.students.list_by_parent(parent_id)]
        overdue = self.fees.list_overdue_for_students(child_ids, today)
        recent = StudentPerformanceService(self.db, self.encryption).list_recent_for_students(
            child_ids,
            since=today - timedelta(days=RECENT_DAYS),
            limit=RECENT_PERFORMANCE_LIMIT,
        )

        logger.info(f"Parent metrics built for parent {parent_id}")
        return ParentMetrics(
            parent_id=parent_id,
            total_children=self.links.count_active_by_parent(parent_id),
            children_with_overdue_fees=len({fee.student_id for fee in overdue}),
            total_overdue_amount=self._amount_due(overdue),
            recent_performances=recent,
        )

    def get_parent_metrics_for_user(self, user_id: int, today: date | None = None) -> ParentMetrics:
        parent = self.parents.get_by_user_id(user_id)
        if not parent:
            raise NotFoundError("Parent profile", str(user_id))
        return self.get_parent_metrics(parent.id, today)

    def get_admin_metrics(self, today: date | None = None) -> AdminMetrics:
        today = today or date.today()

        total_students = self.students.count_all()
        active_students = self.students.count_by_status(StudentStatus.ACTIVE)
        total_faculty = self.faculty.count_all()
        active_faculty = self.faculty.count_active()
        overdue = self.fees.list_overdue(today)

        return AdminMetrics(
            total_students=total_students,
            active_students=active_students,
            inactive_students=total_students - active_students,
            total_faculty=total_faculty,
            active_faculty=active_faculty,
            inactive_faculty=total_faculty - active_faculty,
            total_parents=self.parents.count_all(),
            recent_enrollments=self.students.count_enrolled_since(today - timedelta(days=RECENT_DAYS)),
            overdue_payments=len(overdue),
            total_overdue_amount=self._amount_due(overdue),
        )
