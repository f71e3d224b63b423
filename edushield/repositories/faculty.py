"""Faculty repository."""

from sqlalchemy import func, or_, select

from edushield.models.faculty import Faculty
from edushield.repositories.base import BaseRepository
from edushield.repositories.student import parse_suffix

EMPLOYEE_ID_PREFIX = "faculty_"


class FacultyRepository(BaseRepository):
    """Data access for faculty members."""

    def get(self, faculty_id: int) -> Faculty | None:
        return self._scalar_one_or_none(select(Faculty).where(Faculty.id == faculty_id))

    def get_by_email(self, email: str) -> Faculty | None:
        return self._scalar_one_or_none(
            select(Faculty).where(func.lower(Faculty.email) == email.lower())
        )

    def get_by_employee_id(self, employee_id: str) -> Faculty | None:
        return self._scalar_one_or_none(select(Faculty).where(Faculty.employee_id == employee_id))

    def get_by_user_id(self, user_id: int) -> Faculty | None:
        return self._scalar_one_or_none(select(Faculty).where(Faculty.user_id == user_id))

    def email_exists(self, email: str, exclude_id: int | None = None) -> bool:
        query = select(Faculty.id).where(func.lower(Faculty.email) == email.lower())
        if exclude_id is not None:
            query = query.where(Faculty.id != exclude_id)
        return self._exists(query)

    def next_employee_id(self) -> str:
        """Next `faculty_<nnnn>` after the numerically largest existing suffix."""
        employee_ids = self._scalars(
            select(Faculty.employee_id).where(Faculty.employee_id.startswith(EMPLOYEE_ID_PREFIX))
        )
        suffixes = [parse_suffix(e, EMPLOYEE_ID_PREFIX) for e in employee_ids]
        highest = max((s for s in suffixes if s is not None), default=0)
        return f"{EMPLOYEE_ID_PREFIX}{highest + 1:04d}"

    def search(
        self,
        department: str | None = None,
        subject: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[Faculty], int]:
        query = select(Faculty)
        if department:
            query = query.where(Faculty.department == department)
        if subject:
            query = query.where(Faculty.subject == subject)
        if is_active is not None:
            query = query.where(Faculty.is_active == is_active)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Faculty.first_name.ilike(search_term),
                    Faculty.last_name.ilike(search_term),
                    Faculty.email.ilike(search_term),
                    Faculty.employee_id.ilike(search_term),
                )
            )
        query = query.order_by(Faculty.last_name, Faculty.first_name, Faculty.id)
        return self._paginate(query, page, page_size)

    def count_all(self) -> int:
        return self._count(select(Faculty.id))

    def count_active(self) -> int:
        return self._count(select(Faculty.id).where(Faculty.is_active.is_(True)))

    def create(self, faculty: Faculty) -> Faculty:
        return self._add(faculty)

    def update(self, faculty: Faculty, changes: dict) -> Faculty:
        return self._update(faculty, changes)

    def delete(self, faculty: Faculty) -> None:
        self._delete(faculty)
