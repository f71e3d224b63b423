from datetime import date, timedelta

import pytest

from edushield.core.exceptions import ConflictError, NotFoundError, ValidationError
from edushield.models.enums import Gender
from edushield.repositories.student import parse_suffix
from edushield.schemas.student import StudentCreate, StudentFilter, StudentUpdate
from edushield.services.faculty_student import FacultyStudentAssignmentService
from edushield.services.parent_student import ParentStudentAssignmentService
from edushield.services.student import StudentService


@pytest.fixture
def service(db):
    return StudentService(db)


def new_student(email: str, **fields) -> StudentCreate:
    return StudentCreate(
        first_name=fields.pop("first_name", "Meera"),
        last_name=fields.pop("last_name", "Iyer"),
        email=email,
        date_of_birth=date(2011, 2, 2),
        gender=Gender.FEMALE,
        enrollment_date=date(2023, 6, 1),
        **fields,
    )


def test_roll_numbers_are_sequential(service):
    numbers = [service.create_student(new_student(f"s{i}@school.edu")).roll_number for i in range(3)]

    assert numbers == ["student_1", "student_2", "student_3"]


def test_roll_number_follows_numeric_maximum(service, make_student):
    make_student(roll_number="student_9")
    make_student(roll_number="student_10")
    make_student(roll_number="legacy_77")

    created = service.create_student(new_student("next@school.edu"))

    assert created.roll_number == "student_11"


def test_parse_suffix():
    assert parse_suffix("student_42", "student_") == 42
    assert parse_suffix("student_x", "student_") is None
    assert parse_suffix("faculty_0007", "faculty_") == 7


def test_duplicate_email_is_a_conflict(service, make_student):
    make_student(email="taken@school.edu")

    with pytest.raises(ConflictError):
        service.create_student(new_student("TAKEN@school.edu"))


def test_future_dates_are_rejected(service):
    request = new_student("future@school.edu")
    request.enrollment_date = date.today() + timedelta(days=3)

    with pytest.raises(ValidationError):
        service.create_student(request)


def test_create_with_parent_and_faculty(db, service, make_parent, make_faculty):
    parent, faculty = make_parent(), make_faculty()

    created = service.create_student(
        new_student("linked@school.edu", parent_id=parent.id, faculty_ids=[faculty.id, faculty.id])
    )

    assert created.parent_id == parent.id
    links = ParentStudentAssignmentService(db).list_by_student(created.id)
    assert [(link.parent_id, link.is_primary_contact) for link in links] == [(parent.id, True)]
    assert FacultyStudentAssignmentService(db).is_assigned(faculty.id, created.id)


def test_create_with_unknown_faculty_fails(service):
    with pytest.raises(ValidationError):
        service.create_student(new_student("nofaculty@school.edu", faculty_ids=[9999]))


def test_update_replaces_faculty_assignments(db, service, make_student, make_faculty):
    student = make_student()
    old, new = make_faculty(), make_faculty()
    service.update_student(student.id, StudentUpdate(faculty_ids=[old.id]))

    service.update_student(student.id, StudentUpdate(faculty_ids=[new.id]))

    assignments = FacultyStudentAssignmentService(db)
    assert not assignments.is_assigned(old.id, student.id)
    assert assignments.is_assigned(new.id, student.id)


def test_update_parent_makes_it_primary(db, service, make_student, make_parent):
    student = make_student()
    first, second = make_parent(), make_parent()
    service.update_student(student.id, StudentUpdate(parent_id=first.id))

    updated = service.update_student(student.id, StudentUpdate(parent_id=second.id))

    assert updated.parent_id == second.id
    links = ParentStudentAssignmentService(db).list_by_student(student.id)
    assert [link.parent_id for link in links if link.is_primary_contact] == [second.id]


def test_update_email_conflict(service, make_student):
    make_student(email="one@school.edu")
    other = make_student(email="two@school.edu")

    with pytest.raises(ConflictError):
        service.update_student(other.id, StudentUpdate(email="one@school.edu"))


def test_delete_student_removes_links(db, service, make_student, make_parent, make_faculty):
    student, parent, faculty = make_student(), make_parent(), make_faculty()
    service.update_student(student.id, StudentUpdate(parent_id=parent.id, faculty_ids=[faculty.id]))

    service.delete_student(student.id)

    with pytest.raises(NotFoundError):
        service.get_student(student.id)
    assert ParentStudentAssignmentService(db).list_by_parent(parent.id) == []
    assert FacultyStudentAssignmentService(db).active_count_for_faculty(faculty.id) == 0


def test_list_students_filters_and_restricts(service, make_student):
    a = make_student(grade="5", last_name="Alpha")
    make_student(grade="5", last_name="Beta")
    make_student(grade="6", last_name="Gamma")

    grade_five = service.list_students(StudentFilter(grade="5"))
    restricted = service.list_students(StudentFilter(grade="5"), student_ids=[a.id])

    assert [s.last_name for s in grade_five.items] == ["Alpha", "Beta"]
    assert [s.id for s in restricted.items] == [a.id]
    assert restricted.total == 1
