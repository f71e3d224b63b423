"""Student management service."""

import logging
from datetime import date

from sqlalchemy.orm import Session

from edushield.core.exceptions import ConflictError, NotFoundError, ValidationError
from edushield.models.enums import StudentStatus
from edushield.models.student import Student
from edushield.repositories.student import StudentRepository
from edushield.repositories.student_faculty import StudentFacultyRepository
from edushield.repositories.user import UserRepository
from edushield.schemas.faculty_student import FacultyStudentAssignmentCreate
from edushield.schemas.parent_student import ParentStudentAssignmentCreate
from edushield.schemas.student import (
    PaginatedStudentResponse,
    StudentCreate,
    StudentFilter,
    StudentResponse,
    StudentUpdate,
)
from edushield.services.faculty_student import FacultyStudentAssignmentService
from edushield.services.identifiers import insert_with_generated_id
from edushield.services.parent_student import ParentStudentAssignmentService

logger = logging.getLogger(__name__)


class StudentService:
    """Student management service."""

    def __init__(self, db: Session):
        self.db = db
        self.students = StudentRepository(db)
        self.users = UserRepository(db)
        self.faculty_assignments = StudentFacultyRepository(db)

    def _validate_dates(self, date_of_birth: date | None, enrollment_date: date | None) -> None:
        today = date.today()
        if date_of_birth and date_of_birth > today:
            raise ValidationError("Date of birth cannot be in the future")
        if enrollment_date and enrollment_date > today:
            raise ValidationError("Enrollment date cannot be in the future")

    def _validate_user(self, user_id: int | None) -> None:
        if user_id is not None and not self.users.get(user_id):
            raise ValidationError(f"User with ID {user_id} not found")

    def _assign_faculty(self, student_id: int, faculty_ids: list[int]) -> None:
        """Assign the student to each faculty member, reactivating old assignments."""
        service = FacultyStudentAssignmentService(self.db)
        for faculty_id in dict.fromkeys(faculty_ids):
            existing = self.faculty_assignments.get(faculty_id, student_id)
            if existing:
                if not existing.is_active:
                    service.activate_assignment(faculty_id, student_id)
                continue
            result = service.assign_student(
                FacultyStudentAssignmentCreate(faculty_id=faculty_id, student_id=student_id)
            )
            if not result.success:
                raise ValidationError(f"{result.message} (faculty ID {faculty_id})")

    def _replace_faculty(self, student_id: int, faculty_ids: list[int]) -> None:
        service = FacultyStudentAssignmentService(self.db)
        wanted = set(faculty_ids)
        for assignment in self.faculty_assignments.list_by_student(student_id, active_only=True):
            if assignment.faculty_id not in wanted:
                service.deactivate_assignment(assignment.faculty_id, student_id)
        self._assign_faculty(student_id, faculty_ids)

    def _set_primary_parent(self, student_id: int, parent_id: int) -> None:
        service = ParentStudentAssignmentService(self.db)
        if service.links.exists(parent_id, student_id):
            service.activate_assignment(parent_id, student_id)
            service.set_primary_contact(parent_id, student_id)
        else:
            service.create_assignment(
                ParentStudentAssignmentCreate(
                    parent_id=parent_id,
                    student_id=student_id,
                    relationship="Parent",
                    is_primary_contact=True,
                )
            )

    def get_student(self, student_id: int) -> Student:
        """Get student by ID."""
        student = self.students.get(student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def create_student(self, request: StudentCreate) -> StudentResponse:
        """Create a new student with the next roll number."""
        if self.students.email_exists(request.email):
            raise ConflictError(f"A student with email {request.email} already exists")
        self._validate_dates(request.date_of_birth, request.enrollment_date)
        self._validate_user(request.user_id)

        fields = request.model_dump(exclude={"parent_id", "faculty_ids"})

        def insert(roll_number: str) -> Student:
            return self.students.create(Student(roll_number=roll_number, **fields))

        student = insert_with_generated_id(
            self.db,
            next_value=self.students.next_roll_number,
            value_taken=self.students.roll_number_exists,
            insert=insert,
            label="roll number",
        )

        if request.faculty_ids:
            self._assign_faculty(student.id, request.faculty_ids)
        if request.parent_id is not None:
            self._set_primary_parent(student.id, request.parent_id)

        logger.info(f"Created student {student.id} with roll number {student.roll_number}")
        return StudentResponse.model_validate(student)

    def update_student(self, student_id: int, request: StudentUpdate) -> StudentResponse:
        """Update a student."""
        student = self.get_student(student_id)
        changes = request.model_dump(exclude_unset=True)
        parent_id = changes.pop("parent_id", None)
        faculty_ids = changes.pop("faculty_ids", None)

        if "email" in changes and self.students.email_exists(changes["email"], exclude_id=student_id):
            raise ConflictError(f"A student with email {changes['email']} already exists")
        self._validate_dates(changes.get("date_of_birth"), changes.get("enrollment_date"))
        self._validate_user(changes.get("user_id"))

        student = self.students.update(student, changes)
        if faculty_ids is not None:
            self._replace_faculty(student_id, faculty_ids)
        if parent_id is not None:
            self._set_primary_parent(student_id, parent_id)

        return StudentResponse.model_validate(student)

    def delete_student(self, student_id: int) -> None:
        """Delete a student with its links; fees and performance cascade in the database."""
        student = self.get_student(student_id)
        ParentStudentAssignmentService(self.db).delete_all_for_student(student_id)
        for assignment in self.faculty_assignments.list_by_student(student_id):
            self.faculty_assignments.delete(assignment)
        self.students.delete(student)
        logger.info(f"Deleted student {student_id}")

    def get_by_email(self, email: str) -> Student:
        student = self.students.get_by_email(email)
        if not student:
            raise NotFoundError("Student", email)
        return student

    def get_by_roll_number(self, roll_number: str) -> Student:
        student = self.students.get_by_roll_number(roll_number)
        if not student:
            raise NotFoundError("Student", roll_number)
        return student

    def list_students(
        self,
        filters: StudentFilter | None = None,
        student_ids: list[int] | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStudentResponse:
        """List students with filtering and pagination."""
        filters = filters or StudentFilter()
        items, total = self.students.search(
            **filters.model_dump(), student_ids=student_ids, page=page, page_size=page_size
        )
        return PaginatedStudentResponse.build(
            [StudentResponse.model_validate(s) for s in items], total, page, page_size
        )

    def list_by_faculty(self, faculty_id: int) -> list[StudentResponse]:
        return [StudentResponse.model_validate(s) for s in self.students.list_by_faculty(faculty_id)]

    def list_by_parent(self, parent_id: int) -> list[StudentResponse]:
        return [StudentResponse.model_validate(s) for s in self.students.list_by_parent(parent_id)]

    def list_by_status(self, status: StudentStatus) -> list[StudentResponse]:
        return [StudentResponse.model_validate(s) for s in self.students.list_by_status(status)]
