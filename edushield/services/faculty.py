"""Faculty management service."""

import logging
from datetime import date

from sqlalchemy.orm import Session

from edushield.core.exceptions import ConflictError, NotFoundError, ValidationError
from edushield.core.security import hash_password
from edushield.models.enums import UserRole
from edushield.models.faculty import Faculty
from edushield.models.user import User
from edushield.repositories.faculty import FacultyRepository
from edushield.repositories.user import UserRepository
from edushield.schemas.faculty import (
    FacultyCreate,
    FacultyFilter,
    FacultyResponse,
    FacultyUpdate,
    PaginatedFacultyResponse,
)
from edushield.services.identifiers import insert_with_generated_id

logger = logging.getLogger(__name__)

MINIMUM_AGE = 18


def age_on(date_of_birth: date, today: date) -> int:
    """Whole years between date_of_birth and today."""
    had_birthday = (today.month, today.day) >= (date_of_birth.month, date_of_birth.day)
    return today.year - date_of_birth.year - (0 if had_birthday else 1)


class FacultyService:
    """Faculty management service."""

    def __init__(self, db: Session):
        self.db = db
        self.faculty = FacultyRepository(db)
        self.users = UserRepository(db)

    def _validate_dates(self, date_of_birth: date | None, hire_date: date | None) -> None:
        today = date.today()
        if hire_date and hire_date > today:
            raise ValidationError("Hire date cannot be in the future")
        if date_of_birth:
            if date_of_birth > today:
                raise ValidationError("Date of birth cannot be in the future")
            if age_on(date_of_birth, today) < MINIMUM_AGE:
                raise ValidationError(f"Faculty member must be at least {MINIMUM_AGE} years old")

    def get_faculty(self, faculty_id: int) -> Faculty:
        faculty = self.faculty.get(faculty_id)
        if not faculty:
            raise NotFoundError("Faculty", str(faculty_id))
        return faculty

    def create_faculty(self, request: FacultyCreate) -> FacultyResponse:
        """Create a faculty member together with a Faculty-role user account."""
        if self.users.email_exists(request.email) or self.faculty.email_exists(request.email):
            raise ConflictError(f"A user with email {request.email} already exists")
        self._validate_dates(request.date_of_birth, request.hire_date)

        user = self.users.create(
            User(
                email=request.email,
                name=f"{request.first_name} {request.last_name}",
                role=UserRole.FACULTY,
                password_hash=hash_password(request.password) if request.password else None,
                is_active=True,
            )
        )

        fields = request.model_dump(exclude={"password"})

        def insert(employee_id: str) -> Faculty:
            return self.faculty.create(
                Faculty(employee_id=employee_id, user_id=user.id, is_active=True, **fields)
            )

        faculty = insert_with_generated_id(
            self.db,
            next_value=self.faculty.next_employee_id,
            value_taken=lambda value: self.faculty.get_by_employee_id(value) is not None,
            insert=insert,
            label="employee id",
        )
        logger.info(f"Created faculty {faculty.id} with employee id {faculty.employee_id}")
        return FacultyResponse.model_validate(faculty)

    def update_faculty(self, faculty_id: int, request: FacultyUpdate) -> FacultyResponse:
        faculty = self.get_faculty(faculty_id)
        changes = request.model_dump(exclude_unset=True)
        self._validate_dates(changes.get("date_of_birth"), changes.get("hire_date"))
        faculty = self.faculty.update(faculty, changes)

        user = self.users.get(faculty.user_id) if faculty.user_id else None
        if user:
            self.users.update(user, {"name": faculty.full_name, "is_active": faculty.is_active})
        return FacultyResponse.model_validate(faculty)

    def delete_faculty(self, faculty_id: int) -> None:
        """Delete a faculty member and the linked user account."""
        faculty = self.get_faculty(faculty_id)
        user = self.users.get(faculty.user_id) if faculty.user_id else None
        self.faculty.delete(faculty)
        if user:
            self.users.delete(user)
        logger.info(f"Deleted faculty {faculty_id}")

    def get_by_email(self, email: str) -> Faculty:
        faculty = self.faculty.get_by_email(email)
        if not faculty:
            raise NotFoundError("Faculty", email)
        return faculty

    def get_by_employee_id(self, employee_id: str) -> Faculty:
        faculty = self.faculty.get_by_employee_id(employee_id)
        if not faculty:
            raise NotFoundError("Faculty", employee_id)
        return faculty

    def list_faculty(
        self,
        filters: FacultyFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedFacultyResponse:
        filters = filters or FacultyFilter()
        items, total = self.faculty.search(**filters.model_dump(), page=page, page_size=page_size)
        return PaginatedFacultyResponse.build(
            [FacultyResponse.model_validate(f) for f in items], total, page, page_size
        )
