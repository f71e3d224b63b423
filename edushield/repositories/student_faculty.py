"""Student-faculty assignment repository."""

from sqlalchemy import select

from edushield.models.student_faculty import StudentFaculty
from edushield.repositories.base import BaseRepository


class StudentFacultyRepository(BaseRepository):
    """Data access for student-faculty assignments."""

    def get(self, faculty_id: int, student_id: int) -> StudentFaculty | None:
        return self._scalar_one_or_none(
            select(StudentFaculty).where(
                StudentFaculty.faculty_id == faculty_id,
                StudentFaculty.student_id == student_id,
            )
        )

    def exists(self, faculty_id: int, student_id: int, active_only: bool = False) -> bool:
        query = select(StudentFaculty.student_id).where(
            StudentFaculty.faculty_id == faculty_id,
            StudentFaculty.student_id == student_id,
        )
        if active_only:
            query = query.where(StudentFaculty.is_active.is_(True))
        return self._exists(query)

    def list_by_faculty(self, faculty_id: int, active_only: bool = False) -> list[StudentFaculty]:
        query = select(StudentFaculty).where(StudentFaculty.faculty_id == faculty_id)
        if active_only:
            query = query.where(StudentFaculty.is_active.is_(True))
        return self._scalars(query.order_by(StudentFaculty.assigned_date, StudentFaculty.student_id))

    def list_by_student(self, student_id: int, active_only: bool = False) -> list[StudentFaculty]:
        query = select(StudentFaculty).where(StudentFaculty.student_id == student_id)
        if active_only:
            query = query.where(StudentFaculty.is_active.is_(True))
        return self._scalars(query.order_by(StudentFaculty.assigned_date, StudentFaculty.faculty_id))

    def search(
        self,
        faculty_id: int | None = None,
        student_id: int | None = None,
        is_active: bool | None = None,
        subject: str | None = None,
        academic_year: str | None = None,
        semester: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[StudentFaculty], int]:
        query = select(StudentFaculty)
        if faculty_id is not None:
            query = query.where(StudentFaculty.faculty_id == faculty_id)
        if student_id is not None:
            query = query.where(StudentFaculty.student_id == student_id)
        if is_active is not None:
            query = query.where(StudentFaculty.is_active == is_active)
        if subject:
            query = query.where(StudentFaculty.subject.ilike(f"%{subject}%"))
        if academic_year:
            query = query.where(StudentFaculty.academic_year == academic_year)
        if semester:
            query = query.where(StudentFaculty.semester == semester)
        query = query.order_by(StudentFaculty.assigned_date.desc(), StudentFaculty.faculty_id)
        return self._paginate(query, page, page_size)

    def active_count_for_faculty(self, faculty_id: int) -> int:
        return self._count(
            select(StudentFaculty.student_id).where(
                StudentFaculty.faculty_id == faculty_id,
                StudentFaculty.is_active.is_(True),
            )
        )

    def create(self, assignment: StudentFaculty) -> StudentFaculty:
        return self._add(assignment)

    def create_bulk(self, assignments: list[StudentFaculty]) -> list[StudentFaculty]:
        return self._add_all(assignments)

    def update(self, assignment: StudentFaculty, changes: dict) -> StudentFaculty:
        return self._update(assignment, changes)

    def delete(self, assignment: StudentFaculty) -> None:
        self._delete(assignment)
