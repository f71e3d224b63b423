"""Student fee repository."""

from datetime import date

from sqlalchemy import select

from edushield.models.enums import FeeType, PaymentStatus
from edushield.models.parent_student import ParentStudent
from edushield.models.student_faculty import StudentFaculty
from edushield.models.student_fee import StudentFee
from edushield.repositories.base import BaseRepository


class StudentFeeRepository(BaseRepository):
    """Data access for fee records."""

    def get(self, fee_id: int) -> StudentFee | None:
        return self._scalar_one_or_none(select(StudentFee).where(StudentFee.id == fee_id))

    def exists_for_term(
        self,
        student_id: int,
        fee_type: FeeType,
        term: str,
        exclude_id: int | None = None,
    ) -> bool:
        query = select(StudentFee.id).where(
            StudentFee.student_id == student_id,
            StudentFee.fee_type == fee_type,
            StudentFee.term == term,
        )
        if exclude_id is not None:
            query = query.where(StudentFee.id != exclude_id)
        return self._exists(query)

    def search(
        self,
        student_id: int | None = None,
        student_ids: list[int] | None = None,
        fee_type: FeeType | None = None,
        term: str | None = None,
        payment_status: PaymentStatus | None = None,
        due_from: date | None = None,
        due_to: date | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[StudentFee], int]:
        query = select(StudentFee)
        if student_id is not None:
            query = query.where(StudentFee.student_id == student_id)
        if student_ids is not None:
            query = query.where(StudentFee.student_id.in_(student_ids))
        if fee_type:
            query = query.where(StudentFee.fee_type == fee_type)
        if term:
            query = query.where(StudentFee.term == term)
        if payment_status:
            query = query.where(StudentFee.payment_status == payment_status)
        if due_from:
            query = query.where(StudentFee.due_date >= due_from)
        if due_to:
            query = query.where(StudentFee.due_date <= due_to)
        query = query.order_by(StudentFee.due_date.desc(), StudentFee.id)
        return self._paginate(query, page, page_size)

    def list_by_student(self, student_id: int) -> list[StudentFee]:
        return self._scalars(
            select(StudentFee)
            .where(StudentFee.student_id == student_id)
            .order_by(StudentFee.due_date.desc(), StudentFee.id)
        )

    def list_by_type(self, fee_type: FeeType) -> list[StudentFee]:
        return self._scalars(
            select(StudentFee).where(StudentFee.fee_type == fee_type).order_by(StudentFee.due_date)
        )

    def list_by_term(self, term: str) -> list[StudentFee]:
        return self._scalars(
            select(StudentFee).where(StudentFee.term == term).order_by(StudentFee.due_date)
        )

    def list_overdue(self, today: date) -> list[StudentFee]:
        return self._scalars(
            select(StudentFee)
            .where(
                StudentFee.due_date < today,
                StudentFee.payment_status != PaymentStatus.PAID,
            )
            .order_by(StudentFee.due_date, StudentFee.id)
        )

    def list_overdue_for_students(self, student_ids: list[int], today: date) -> list[StudentFee]:
        if not student_ids:
            return []
        return self._scalars(
            select(StudentFee)
            .where(
                StudentFee.student_id.in_(student_ids),
                StudentFee.due_date < today,
                StudentFee.payment_status != PaymentStatus.PAID,
            )
            .order_by(StudentFee.due_date, StudentFee.id)
        )

    def list_by_faculty(self, faculty_id: int) -> list[StudentFee]:
        """Fees of students actively assigned to the faculty member."""
        return self._scalars(
            select(StudentFee)
            .join(StudentFaculty, StudentFaculty.student_id == StudentFee.student_id)
            .where(
                StudentFaculty.faculty_id == faculty_id,
                StudentFaculty.is_active.is_(True),
            )
            .order_by(StudentFee.due_date.desc(), StudentFee.id)
        )

    def list_by_parent(self, parent_id: int) -> list[StudentFee]:
        """Fees of the parent's actively linked children."""
        return self._scalars(
            select(StudentFee)
            .join(ParentStudent, ParentStudent.student_id == StudentFee.student_id)
            .where(
                ParentStudent.parent_id == parent_id,
                ParentStudent.is_active.is_(True),
            )
            .order_by(StudentFee.due_date.desc(), StudentFee.id)
        )

    def create(self, fee: StudentFee) -> StudentFee:
        return self._add(fee)

    def update(self, fee: StudentFee, changes: dict) -> StudentFee:
        return self._update(fee, changes)

    def delete(self, fee: StudentFee) -> None:
        self._delete(fee)
