import pytest

from edushield.schemas.faculty_student import (
    BulkFacultyStudentAssignmentCreate,
    FacultyStudentAssignmentCreate,
    FacultyStudentAssignmentFilter,
    FacultyStudentAssignmentUpdate,
)
from edushield.services.faculty_student import FacultyStudentAssignmentService


@pytest.fixture
def service(db):
    return FacultyStudentAssignmentService(db)


def test_assign_student(service, make_faculty, make_student):
    faculty, student = make_faculty(), make_student()

    result = service.assign_student(
        FacultyStudentAssignmentCreate(
            faculty_id=faculty.id,
            student_id=student.id,
            subject="Physics",
            academic_year="2024-25",
        )
    )

    assert result.success
    assert result.data.is_active
    assert result.data.subject == "Physics"
    assert result.data.student.id == student.id
    assert service.is_assigned(faculty.id, student.id)


@pytest.mark.parametrize("missing", ["faculty", "student"])
def test_assign_reports_missing_entities(service, make_faculty, make_student, missing):
    faculty, student = make_faculty(), make_student()
    request = FacultyStudentAssignmentCreate(
        faculty_id=9999 if missing == "faculty" else faculty.id,
        student_id=9999 if missing == "student" else student.id,
    )

    result = service.assign_student(request)

    assert not result.success
    assert result.message == f"{missing.capitalize()} not found"


def test_assign_twice_fails(service, make_faculty, make_student):
    faculty, student = make_faculty(), make_student()
    request = FacultyStudentAssignmentCreate(faculty_id=faculty.id, student_id=student.id)
    service.assign_student(request)

    result = service.assign_student(request)

    assert not result.success
    assert result.message == "Assignment already exists"


def test_bulk_assign_reports_existing_pairs(service, make_faculty, make_student):
    faculty = make_faculty()
    already = make_student(first_name="Asha", last_name="Rao")
    fresh = make_student()
    service.assign_student(FacultyStudentAssignmentCreate(faculty_id=faculty.id, student_id=already.id))

    result = service.bulk_assign(
        BulkFacultyStudentAssignmentCreate(faculty_id=faculty.id, student_ids=[already.id, fresh.id])
    )

    assert result.success
    assert [a.student_id for a in result.data] == [fresh.id]
    assert result.errors == ["Assignment already exists for student Asha Rao"]
    assert result.message == "Successfully assigned 1 students. 1 assignments failed."


def test_bulk_assign_fails_on_unknown_student(service, make_faculty, make_student):
    faculty, student = make_faculty(), make_student()

    result = service.bulk_assign(
        BulkFacultyStudentAssignmentCreate(faculty_id=faculty.id, student_ids=[student.id, 9999])
    )

    assert not result.success
    assert result.message == "Student with ID 9999 not found"
    assert service.active_count_for_faculty(faculty.id) == 0


def test_bulk_assign_with_only_duplicates_fails(service, make_faculty, make_student):
    faculty, student = make_faculty(), make_student()
    service.assign_student(FacultyStudentAssignmentCreate(faculty_id=faculty.id, student_id=student.id))

    result = service.bulk_assign(
        BulkFacultyStudentAssignmentCreate(faculty_id=faculty.id, student_ids=[student.id])
    )

    assert not result.success
    assert result.message == "No students were assigned successfully"
    assert len(result.errors) == 1


def test_deactivate_and_activate(service, make_faculty, make_student):
    faculty, student = make_faculty(), make_student()
    service.assign_student(FacultyStudentAssignmentCreate(faculty_id=faculty.id, student_id=student.id))

    assert not service.deactivate_assignment(faculty.id, student.id).data.is_active
    assert not service.is_assigned(faculty.id, student.id)
    assert service.activate_assignment(faculty.id, student.id).data.is_active
    assert not service.deactivate_assignment(faculty.id, 9999).success


def test_update_assignment(service, make_faculty, make_student):
    faculty, student = make_faculty(), make_student()
    service.assign_student(FacultyStudentAssignmentCreate(faculty_id=faculty.id, student_id=student.id))

    result = service.update_assignment(
        faculty.id, student.id, FacultyStudentAssignmentUpdate(semester="Spring", notes="Lab group B")
    )

    assert result.data.semester == "Spring"
    assert result.data.notes == "Lab group B"


def test_dashboard_counts_active_students(service, make_faculty, make_student):
    faculty = make_faculty()
    a, b = make_student(), make_student()
    service.bulk_assign(BulkFacultyStudentAssignmentCreate(faculty_id=faculty.id, student_ids=[a.id, b.id]))
    service.deactivate_assignment(faculty.id, b.id)

    dashboard = service.get_faculty_dashboard(faculty.id).data

    assert dashboard.total_assigned == 2
    assert dashboard.active_assignments == 1
    assert [s.id for s in dashboard.assigned_students] == [a.id]


def test_list_assignments_filters_and_paginates(service, make_faculty, make_student):
    physics, maths = make_faculty(), make_faculty()
    students = [make_student() for _ in range(3)]
    service.bulk_assign(
        BulkFacultyStudentAssignmentCreate(faculty_id=physics.id, student_ids=[s.id for s in students])
    )
    service.assign_student(FacultyStudentAssignmentCreate(faculty_id=maths.id, student_id=students[0].id))

    page = service.list_assignments(
        FacultyStudentAssignmentFilter(faculty_id=physics.id), page=1, page_size=2
    )

    assert page.total == 3
    assert page.total_pages == 2
    assert len(page.items) == 2
    assert all(item.faculty_id == physics.id for item in page.items)
