from datetime import date, timedelta

import pytest

from edushield.core.exceptions import ConflictError, ValidationError
from edushield.core.security import verify_password
from edushield.models.enums import Gender, UserRole
from edushield.repositories.user import UserRepository
from edushield.schemas.faculty import FacultyCreate, FacultyUpdate
from edushield.services.faculty import FacultyService, age_on


@pytest.fixture
def service(db):
    return FacultyService(db)


def new_faculty(email, **fields):
    data = {
        "first_name": "Meera",
        "last_name": "Iyer",
        "email": email,
        "date_of_birth": date(1985, 4, 12),
        "gender": Gender.FEMALE,
        "department": "Mathematics",
        "subject": "Algebra",
        "hire_date": date.today() - timedelta(days=30),
    }
    data.update(fields)
    return FacultyCreate(**data)


def test_employee_ids_are_sequential_and_padded(service):
    created = [service.create_faculty(new_faculty(f"teacher{i}@school.edu")) for i in range(3)]

    assert [f.employee_id for f in created] == ["faculty_0001", "faculty_0002", "faculty_0003"]


def test_employee_id_follows_numeric_maximum(service, make_faculty):
    make_faculty(employee_id="faculty_0009")
    make_faculty(employee_id="faculty_0010")

    created = service.create_faculty(new_faculty("next@school.edu"))

    assert created.employee_id == "faculty_0011"


def test_create_faculty_creates_linked_user(service, db):
    created = service.create_faculty(new_faculty("meera@school.edu", password="secret-pass"))

    user = UserRepository(db).get(created.user_id)
    assert user.role == UserRole.FACULTY
    assert user.name == "Meera Iyer"
    assert user.is_active
    assert verify_password("secret-pass", user.password_hash)


def test_email_must_be_unique_across_users_and_faculty(service, make_user, make_faculty):
    make_user(UserRole.STUDENT, email="taken@school.edu")
    make_faculty(email="staff@school.edu")

    with pytest.raises(ConflictError):
        service.create_faculty(new_faculty("TAKEN@school.edu"))
    with pytest.raises(ConflictError):
        service.create_faculty(new_faculty("staff@school.edu"))


def test_faculty_must_be_at_least_eighteen(service):
    this_year = date.today().year

    with pytest.raises(ValidationError):
        service.create_faculty(new_faculty("young@school.edu", date_of_birth=date(this_year - 17, 1, 1)))

    created = service.create_faculty(new_faculty("adult@school.edu", date_of_birth=date(this_year - 18, 1, 1)))
    assert created.id


def test_future_dates_are_rejected(service):
    with pytest.raises(ValidationError):
        service.create_faculty(new_faculty("hire@school.edu", hire_date=date.today() + timedelta(days=1)))
    with pytest.raises(ValidationError):
        service.create_faculty(new_faculty("born@school.edu", date_of_birth=date.today() + timedelta(days=1)))


def test_age_counts_whole_years():
    assert age_on(date(2000, 6, 15), date(2018, 6, 14)) == 17
    assert age_on(date(2000, 6, 15), date(2018, 6, 15)) == 18


def test_update_syncs_linked_user(service, db):
    created = service.create_faculty(new_faculty("sync@school.edu"))

    service.update_faculty(created.id, FacultyUpdate(last_name="Nair", is_active=False))

    user = UserRepository(db).get(created.user_id)
    assert user.name == "Meera Nair"
    assert not user.is_active


def test_delete_removes_linked_user(service, db):
    created = service.create_faculty(new_faculty("gone@school.edu"))

    service.delete_faculty(created.id)

    assert service.faculty.get(created.id) is None
    assert UserRepository(db).get(created.user_id) is None
