"""Faculty-student assignment management.

Unlike parent links there is no primary concept: a student may be actively
assigned to any number of faculty members. Operations report outcomes through
`ServiceResult` so bulk calls can return partial success with an error list.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from edushield.models.student_faculty import StudentFaculty
from edushield.repositories.faculty import FacultyRepository
from edushield.repositories.student import StudentRepository
from edushield.repositories.student_faculty import StudentFacultyRepository
from edushield.schemas.common import ServiceResult
from edushield.schemas.faculty import FacultyResponse, FacultySummary
from edushield.schemas.faculty_student import (
    BulkFacultyStudentAssignmentCreate,
    FacultyDashboard,
    FacultyStudentAssignmentCreate,
    FacultyStudentAssignmentFilter,
    FacultyStudentAssignmentResponse,
    FacultyStudentAssignmentUpdate,
    PaginatedFacultyStudentAssignmentResponse,
)
from edushield.schemas.student import StudentSummary

logger = logging.getLogger(__name__)

AssignmentResult = ServiceResult[FacultyStudentAssignmentResponse]
AssignmentListResult = ServiceResult[list[FacultyStudentAssignmentResponse]]


class FacultyStudentAssignmentService:
    """Faculty-student assignment service."""

    def __init__(self, db: Session):
        self.db = db
        self.assignments = StudentFacultyRepository(db)
        self.faculty = FacultyRepository(db)
        self.students = StudentRepository(db)

    def _to_response(self, assignment: StudentFaculty) -> FacultyStudentAssignmentResponse:
        return FacultyStudentAssignmentResponse(
            faculty_id=assignment.faculty_id,
            student_id=assignment.student_id,
            assigned_date=assignment.assigned_date,
            is_active=assignment.is_active,
            subject=assignment.subject,
            academic_year=assignment.academic_year,
            semester=assignment.semester,
            notes=assignment.notes,
            created_at=assignment.created_at,
            updated_at=assignment.updated_at,
            faculty=FacultySummary.model_validate(assignment.faculty) if assignment.faculty else None,
            student=StudentSummary.model_validate(assignment.student) if assignment.student else None,
        )

    def assign_student(self, request: FacultyStudentAssignmentCreate) -> AssignmentResult:
        if not self.faculty.get(request.faculty_id):
            return AssignmentResult.fail("Faculty not found")
        if not self.students.get(request.student_id):
            return AssignmentResult.fail("Student not found")
        if self.assignments.exists(request.faculty_id, request.student_id):
            return AssignmentResult.fail("Assignment already exists")

        assignment = self.assignments.create(
            StudentFaculty(
                faculty_id=request.faculty_id,
                student_id=request.student_id,
                assigned_date=datetime.now(timezone.utc),
                is_active=True,
                subject=request.subject,
                academic_year=request.academic_year,
                semester=request.semester,
                notes=request.notes,
            )
        )
        logger.info(f"Assigned student {request.student_id} to faculty {request.faculty_id}")
        return AssignmentResult.ok(
            data=self._to_response(assignment),
            message="Student assigned to faculty successfully",
        )

    def bulk_assign(self, request: BulkFacultyStudentAssignmentCreate) -> AssignmentListResult:
        """Assign many students.

        Every student id is validated before anything is written; one unknown
        id fails the whole batch. Existing pairs are skipped and reported.
        """
        faculty = self.faculty.get(request.faculty_id)
        if not faculty:
            return AssignmentListResult.fail("Faculty not found")

        requested = list(dict.fromkeys(request.student_ids))
        students = {s.id: s for s in self.students.get_many(requested)}
        for student_id in requested:
            if student_id not in students:
                return AssignmentListResult.fail(f"Student with ID {student_id} not found")

        errors: list[str] = []
        to_create: list[StudentFaculty] = []
        now = datetime.now(timezone.utc)
        for student_id in requested:
            if self.assignments.exists(request.faculty_id, student_id):
                errors.append(
                    f"Assignment already exists for student {students[student_id].full_name}"
                )
                continue
            to_create.append(
                StudentFaculty(
                    faculty_id=request.faculty_id,
                    student_id=student_id,
                    assigned_date=now,
                    is_active=True,
                    subject=request.subject,
                    academic_year=request.academic_year,
                    semester=request.semester,
                    notes=request.notes,
                )
            )

        if not to_create:
            return AssignmentListResult.fail("No students were assigned successfully", errors)

        created = self.assignments.create_bulk(to_create)
        if errors:
            message = (
                f"Successfully assigned {len(created)} students. "
                f"{len(errors)} assignments failed."
            )
        else:
            message = f"Successfully assigned {len(created)} students to faculty."

        logger.info(f"Bulk assigned {len(created)} students to faculty {request.faculty_id}")
        return AssignmentListResult.ok(
            data=[self._to_response(a) for a in created],
            message=message,
            errors=errors,
        )

    def update_assignment(
        self,
        faculty_id: int,
        student_id: int,
        request: FacultyStudentAssignmentUpdate,
    ) -> AssignmentResult:
        assignment = self.assignments.get(faculty_id, student_id)
        if not assignment:
            return AssignmentResult.fail("Assignment not found")
        assignment = self.assignments.update(assignment, request.model_dump(exclude_unset=True))
        return AssignmentResult.ok(
            data=self._to_response(assignment),
            message="Assignment updated successfully",
        )

    def _set_active(self, faculty_id: int, student_id: int, is_active: bool) -> AssignmentResult:
        assignment = self.assignments.get(faculty_id, student_id)
        if not assignment:
            return AssignmentResult.fail("Assignment not found")
        assignment = self.assignments.update(assignment, {"is_active": is_active})
        state = "activated" if is_active else "deactivated"
        logger.info(f"Assignment faculty={faculty_id} student={student_id} {state}")
        return AssignmentResult.ok(data=self._to_response(assignment), message=f"Assignment {state}")

    def activate_assignment(self, faculty_id: int, student_id: int) -> AssignmentResult:
        return self._set_active(faculty_id, student_id, True)

    def deactivate_assignment(self, faculty_id: int, student_id: int) -> AssignmentResult:
        return self._set_active(faculty_id, student_id, False)

    def get_assignment(self, faculty_id: int, student_id: int) -> AssignmentResult:
        assignment = self.assignments.get(faculty_id, student_id)
        if not assignment:
            return AssignmentResult.fail("Assignment not found")
        return AssignmentResult.ok(data=self._to_response(assignment))

    def list_for_faculty(self, faculty_id: int, active_only: bool = False) -> AssignmentListResult:
        if not self.faculty.get(faculty_id):
            return AssignmentListResult.fail("Faculty not found")
        assignments = self.assignments.list_by_faculty(faculty_id, active_only)
        return AssignmentListResult.ok(data=[self._to_response(a) for a in assignments])

    def list_for_student(self, student_id: int, active_only: bool = False) -> AssignmentListResult:
        if not self.students.get(student_id):
            return AssignmentListResult.fail("Student not found")
        assignments = self.assignments.list_by_student(student_id, active_only)
        return AssignmentListResult.ok(data=[self._to_response(a) for a in assignments])

    def list_assignments(
        self,
        filters: FacultyStudentAssignmentFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedFacultyStudentAssignmentResponse:
        filters = filters or FacultyStudentAssignmentFilter()
        items, total = self.assignments.search(
            **filters.model_dump(),
            page=page,
            page_size=page_size,
        )
        return PaginatedFacultyStudentAssignmentResponse.build(
            [self._to_response(a) for a in items], total, page, page_size
        )

    def get_faculty_dashboard(self, faculty_id: int) -> ServiceResult[FacultyDashboard]:
        faculty = self.faculty.get(faculty_id)
        if not faculty:
            return ServiceResult[FacultyDashboard].fail("Faculty not found")
        assignments = self.assignments.list_by_faculty(faculty_id)
        active_students = self.students.list_by_faculty(faculty_id, active_only=True)
        dashboard = FacultyDashboard(
            faculty=FacultyResponse.model_validate(faculty),
            total_assigned=len(assignments),
            active_assignments=sum(1 for a in assignments if a.is_active),
            assigned_students=[StudentSummary.model_validate(s) for s in active_students],
        )
        return ServiceResult[FacultyDashboard].ok(data=dashboard)

    def is_assigned(self, faculty_id: int, student_id: int) -> bool:
        return self.assignments.exists(faculty_id, student_id, active_only=True)

    def active_count_for_faculty(self, faculty_id: int) -> int:
        return self.assignments.active_count_for_faculty(faculty_id)
