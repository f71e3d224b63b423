"""Student performance repository."""

from datetime import date

from sqlalchemy import or_, select

from edushield.models.enums import ExamType
from edushield.models.student import Student
from edushield.models.student_faculty import StudentFaculty
from edushield.models.student_performance import StudentPerformance
from edushield.repositories.base import BaseRepository

SORT_COLUMNS = {
    "subject": StudentPerformance.subject,
    "examdate": StudentPerformance.exam_date,
    "exam_date": StudentPerformance.exam_date,
    "examtype": StudentPerformance.exam_type,
    "exam_type": StudentPerformance.exam_type,
    "student": Student.last_name,
    "created_at": StudentPerformance.created_at,
}


class StudentPerformanceRepository(BaseRepository):
    """Data access for performance records."""

    def get(self, performance_id: int) -> StudentPerformance | None:
        return self._scalar_one_or_none(
            select(StudentPerformance).where(StudentPerformance.id == performance_id)
        )

    def exists_for_exam(
        self,
        student_id: int,
        subject: str,
        exam_type: ExamType,
        exam_date: date,
        exclude_id: int | None = None,
    ) -> bool:
        query = select(StudentPerformance.id).where(
            StudentPerformance.student_id == student_id,
            StudentPerformance.subject == subject,
            StudentPerformance.exam_type == exam_type,
            StudentPerformance.exam_date == exam_date,
        )
        if exclude_id is not None:
            query = query.where(StudentPerformance.id != exclude_id)
        return self._exists(query)

    def search(
        self,
        student_id: int | None = None,
        student_ids: list[int] | None = None,
        subject: str | None = None,
        exam_type: ExamType | None = None,
        from_date: date | None = None,
        to_date: date | None = None,
        search: str | None = None,
        sort_by: str | None = None,
        descending: bool = True,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[StudentPerformance], int]:
        query = select(StudentPerformance).join(Student, Student.id == StudentPerformance.student_id)
        if student_id is not None:
            query = query.where(StudentPerformance.student_id == student_id)
        if student_ids is not None:
            query = query.where(StudentPerformance.student_id.in_(student_ids))
        if subject:
            query = query.where(StudentPerformance.subject.ilike(f"%{subject}%"))
        if exam_type:
            query = query.where(StudentPerformance.exam_type == exam_type)
        if from_date:
            query = query.where(StudentPerformance.exam_date >= from_date)
        if to_date:
            query = query.where(StudentPerformance.exam_date <= to_date)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    StudentPerformance.subject.ilike(search_term),
                    StudentPerformance.exam_title.ilike(search_term),
                    StudentPerformance.comments.ilike(search_term),
                    Student.first_name.ilike(search_term),
                    Student.last_name.ilike(search_term),
                )
            )

        column = SORT_COLUMNS.get((sort_by or "").lower(), StudentPerformance.exam_date)
        query = query.order_by(column.desc() if descending else column.asc(), StudentPerformance.id)
        return self._paginate(query, page, page_size)

    def list_by_student(self, student_id: int, subject: str | None = None) -> list[StudentPerformance]:
        query = select(StudentPerformance).where(StudentPerformance.student_id == student_id)
        if subject:
            query = query.where(StudentPerformance.subject == subject)
        return self._scalars(query.order_by(StudentPerformance.exam_date.desc(), StudentPerformance.id))

    def list_by_subject(self, subject: str) -> list[StudentPerformance]:
        return self._scalars(
            select(StudentPerformance)
            .where(StudentPerformance.subject == subject)
            .order_by(StudentPerformance.exam_date.desc(), StudentPerformance.id)
        )

    def list_by_exam_type(self, exam_type: ExamType) -> list[StudentPerformance]:
        return self._scalars(
            select(StudentPerformance)
            .where(StudentPerformance.exam_type == exam_type)
            .order_by(StudentPerformance.exam_date.desc(), StudentPerformance.id)
        )

    def list_by_faculty(self, faculty_id: int) -> list[StudentPerformance]:
        """Records of students actively assigned to the faculty member."""
        return self._scalars(
            select(StudentPerformance)
            .join(StudentFaculty, StudentFaculty.student_id == StudentPerformance.student_id)
            .where(
                StudentFaculty.faculty_id == faculty_id,
                StudentFaculty.is_active.is_(True),
            )
            .order_by(StudentPerformance.exam_date.desc(), StudentPerformance.id)
        )

    def list_recent_for_students(
        self, student_ids: list[int], since: date, limit: int
    ) -> list[StudentPerformance]:
        if not student_ids:
            return []
        return self._scalars(
            select(StudentPerformance)
            .where(
                StudentPerformance.student_id.in_(student_ids),
                StudentPerformance.exam_date >= since,
            )
            .order_by(StudentPerformance.exam_date.desc(), StudentPerformance.id.desc())
            .limit(limit)
        )

    def create(self, performance: StudentPerformance) -> StudentPerformance:
        return self._add(performance)

    def update(self, performance: StudentPerformance, changes: dict) -> StudentPerformance:
        return self._update(performance, changes)

    def delete(self, performance: StudentPerformance) -> None:
        self._delete(performance)
