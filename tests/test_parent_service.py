from datetime import date

import pytest

from edushield.core.exceptions import ConflictError, ValidationError
from edushield.models.enums import Gender, ParentType, UserRole
from edushield.repositories.user import UserRepository
from edushield.schemas.parent import ParentCreate
from edushield.schemas.parent_student import ParentStudentAssignmentCreate
from edushield.services.parent import ParentService
from edushield.services.parent_student import ParentStudentAssignmentService


@pytest.fixture
def service(db):
    return ParentService(db)


def new_parent(email, **fields):
    data = {
        "first_name": "Ravi",
        "last_name": "Kumar",
        "email": email,
        "phone_number": "555-0142",
        "date_of_birth": date(1979, 8, 20),
        "address": "12 Lake Road",
        "gender": Gender.MALE,
    }
    data.update(fields)
    return ParentCreate(**data)


def link(db, parent, student, primary=False):
    return ParentStudentAssignmentService(db).create_assignment(
        ParentStudentAssignmentCreate(
            parent_id=parent.id,
            student_id=student.id,
            is_primary_contact=primary,
        )
    )


def test_create_parent_creates_linked_user(service, db):
    created = service.create_parent(new_parent("ravi@home.net"))

    user = UserRepository(db).get(created.user_id)
    assert user.role == UserRole.PARENT
    assert user.name == "Ravi Kumar"
    assert service.get_by_user(user.id).id == created.id


def test_email_must_be_unique_across_users_and_parents(service, make_user, make_parent):
    make_user(UserRole.FACULTY, email="taken@school.edu")
    make_parent(email="mum@home.net")

    with pytest.raises(ConflictError):
        service.create_parent(new_parent("taken@school.edu"))
    with pytest.raises(ConflictError):
        service.create_parent(new_parent("mum@home.net"))


def test_date_of_birth_must_be_realistic(service):
    with pytest.raises(ValidationError):
        service.create_parent(new_parent("future@home.net", date_of_birth=date.today()))
    with pytest.raises(ValidationError):
        service.create_parent(new_parent("ancient@home.net", date_of_birth=date(1850, 1, 1)))


def test_statistics_group_by_type_state_and_city(service, db, make_parent, make_student):
    first = make_parent(parent_type=ParentType.PRIMARY, city="Pune", state="MH", is_emergency_contact=True)
    second = make_parent(parent_type=ParentType.SECONDARY, city="Pune", state="MH")
    make_parent(
        parent_type=ParentType.GUARDIAN,
        city="Mumbai",
        state="MH",
        is_active=False,
        is_authorized_to_pickup=False,
    )
    older, younger = make_student(), make_student()
    link(db, first, older, primary=True)
    link(db, first, younger, primary=True)
    link(db, second, older)

    stats = service.get_statistics()

    assert stats.total_parents == 3
    assert stats.active_parents == 2
    assert (stats.primary_parents, stats.secondary_parents, stats.guardians) == (1, 1, 1)
    assert stats.emergency_contacts == 1
    assert stats.authorized_for_pickup == 2
    assert stats.parents_with_children == 2
    assert stats.average_children_per_parent == 1.5
    assert stats.parents_by_city == {"Mumbai": 1, "Pune": 2}
    assert stats.parents_by_state == {"MH": 3}


def test_statistics_without_links(service, make_parent):
    make_parent()

    stats = service.get_statistics()

    assert stats.parents_with_children == 0
    assert stats.average_children_per_parent == 0.0


def test_add_child_refuses_student_of_another_parent(service, db, make_parent, make_student):
    student = make_student()
    mother, father = make_parent(), make_parent()
    link(db, mother, student, primary=True)

    with pytest.raises(ConflictError):
        service.add_child(father.id, student.id)


def test_add_child_creates_primary_link(service, make_parent, make_student):
    student, parent = make_student(), make_parent()

    result = service.add_child(parent.id, student.id)

    assert result.is_primary_contact
    assert student.parent_id == parent.id
    assert [child.id for child in service.get_with_children(parent.id).children] == [student.id]


def test_delete_parent_removes_links_and_user(service, db, make_parent, make_student):
    student = make_student()
    created = service.create_parent(new_parent("leaving@home.net"))
    other = make_parent()
    link(db, service.get_parent(created.id), student, primary=True)
    link(db, other, student)

    service.delete_parent(created.id)

    links = ParentStudentAssignmentService(db).list_by_student(student.id)
    assert [(a.parent_id, a.is_primary_contact) for a in links] == [(other.id, True)]
    assert student.parent_id == other.id
    assert UserRepository(db).get(created.user_id) is None
