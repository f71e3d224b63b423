"""Student repository."""

from datetime import date

from sqlalchemy import func, or_, select

from edushield.models.enums import StudentStatus
from edushield.models.parent_student import ParentStudent
from edushield.models.student import Student
from edushield.models.student_faculty import StudentFaculty
from edushield.repositories.base import BaseRepository

ROLL_NUMBER_PREFIX = "student_"

SORT_COLUMNS = {
    "first_name": Student.first_name,
    "last_name": Student.last_name,
    "email": Student.email,
    "roll_number": Student.roll_number,
    "enrollment_date": Student.enrollment_date,
    "created_at": Student.created_at,
}


def parse_suffix(value: str, prefix: str) -> int | None:
    """Return the numeric suffix of an identifier like `student_12`."""
    if not value or not value.startswith(prefix):
        return None
    suffix = value[len(prefix):]
    return int(suffix) if suffix.isdigit() else None


class StudentRepository(BaseRepository):
    """Data access for students."""

    def get(self, student_id: int) -> Student | None:
        return self._scalar_one_or_none(select(Student).where(Student.id == student_id))

    def get_for_update(self, student_id: int) -> Student | None:
        """Load a student row with a row lock held until the transaction ends."""
        return self._scalar_one_or_none(
            select(Student).where(Student.id == student_id).with_for_update()
        )

    def get_many(self, student_ids: list[int]) -> list[Student]:
        if not student_ids:
            return []
        return self._scalars(select(Student).where(Student.id.in_(student_ids)))

    def get_by_email(self, email: str) -> Student | None:
        return self._scalar_one_or_none(
            select(Student).where(func.lower(Student.email) == email.lower())
        )

    def get_by_roll_number(self, roll_number: str) -> Student | None:
        return self._scalar_one_or_none(select(Student).where(Student.roll_number == roll_number))

    def get_by_user_id(self, user_id: int) -> Student | None:
        return self._scalar_one_or_none(select(Student).where(Student.user_id == user_id))

    def email_exists(self, email: str, exclude_id: int | None = None) -> bool:
        query = select(Student.id).where(func.lower(Student.email) == email.lower())
        if exclude_id is not None:
            query = query.where(Student.id != exclude_id)
        return self._exists(query)

    def roll_number_exists(self, roll_number: str) -> bool:
        return self._exists(select(Student.id).where(Student.roll_number == roll_number))

    def next_roll_number(self) -> str:
        """Next `student_<n>` after the numerically largest existing suffix."""
        roll_numbers = self._scalars(
            select(Student.roll_number).where(Student.roll_number.startswith(ROLL_NUMBER_PREFIX))
        )
        suffixes = [parse_suffix(r, ROLL_NUMBER_PREFIX) for r in roll_numbers]
        highest = max((s for s in suffixes if s is not None), default=0)
        return f"{ROLL_NUMBER_PREFIX}{highest + 1}"

    def search(
        self,
        status: StudentStatus | None = None,
        grade: str | None = None,
        section: str | None = None,
        search: str | None = None,
        sort_by: str = "last_name",
        descending: bool = False,
        student_ids: list[int] | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[Student], int]:
        query = select(Student)
        if student_ids is not None:
            query = query.where(Student.id.in_(student_ids))
        if status:
            query = query.where(Student.status == status)
        if grade:
            query = query.where(Student.grade == grade)
        if section:
            query = query.where(Student.section == section)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Student.first_name.ilike(search_term),
                    Student.last_name.ilike(search_term),
                    Student.email.ilike(search_term),
                    Student.roll_number.ilike(search_term),
                )
            )

        column = SORT_COLUMNS.get(sort_by, Student.last_name)
        query = query.order_by(column.desc() if descending else column.asc(), Student.id)
        return self._paginate(query, page, page_size)

    def list_by_faculty(self, faculty_id: int, active_only: bool = True) -> list[Student]:
        query = (
            select(Student)
            .join(StudentFaculty, StudentFaculty.student_id == Student.id)
            .where(StudentFaculty.faculty_id == faculty_id)
        )
        if active_only:
            query = query.where(StudentFaculty.is_active.is_(True))
        return self._scalars(query.order_by(Student.last_name, Student.first_name))

    def list_by_parent(self, parent_id: int, active_only: bool = True) -> list[Student]:
        query = (
            select(Student)
            .join(ParentStudent, ParentStudent.student_id == Student.id)
            .where(ParentStudent.parent_id == parent_id)
        )
        if active_only:
            query = query.where(ParentStudent.is_active.is_(True))
        return self._scalars(query.order_by(Student.last_name, Student.first_name))

    def list_by_status(self, status: StudentStatus) -> list[Student]:
        return self._scalars(
            select(Student)
            .where(Student.status == status)
            .order_by(Student.last_name, Student.first_name)
        )

    def list_active(self) -> list[Student]:
        return self.list_by_status(StudentStatus.ACTIVE)

    def list_with_legacy_parent(self) -> list[Student]:
        return self._scalars(select(Student).where(Student.parent_id.is_not(None)))

    def list_all(self) -> list[Student]:
        return self._scalars(select(Student).order_by(Student.id))

    def count_all(self) -> int:
        return self._count(select(Student.id))

    def count_by_status(self, status: StudentStatus) -> int:
        return self._count(select(Student.id).where(Student.status == status))

    def count_enrolled_since(self, since: date) -> int:
        return self._count(select(Student.id).where(Student.enrollment_date >= since))

    def create(self, student: Student) -> Student:
        return self._add(student)

    def update(self, student: Student, changes: dict) -> Student:
        return self._update(student, changes)

    def delete(self, student: Student) -> None:
        self._delete(student)
