"""Shared fixtures.

The environment is configured before anything from `edushield` is imported so
settings, the engine and the app pick up an in-memory SQLite database.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PAYMENT_FAILURE_RATE"] = "0"
os.environ["DEV_AUTH_ENABLED"] = "true"
os.environ["SCHEDULER_ENABLED"] = "false"

from datetime import date, timedelta  # noqa: E402
from itertools import count  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import edushield.models  # noqa: E402,F401
from edushield.core.database import Base, SessionLocal, engine  # noqa: E402
from edushield.core.security import create_access_token, hash_password  # noqa: E402
from edushield.main import app  # noqa: E402
from edushield.models.enums import Gender, StudentStatus, UserRole  # noqa: E402
from edushield.models.faculty import Faculty  # noqa: E402
from edushield.models.parent import Parent  # noqa: E402
from edushield.models.student import Student  # noqa: E402
from edushield.models.user import User  # noqa: E402

_sequence = count(1)


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(setup_database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(setup_database):
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def factory(role: UserRole = UserRole.ADMIN, password: str = "password123", **fields) -> User:
        n = next(_sequence)
        user = User(
            email=fields.pop("email", f"user{n}@school.edu"),
            name=fields.pop("name", f"User {n}"),
            role=role,
            password_hash=hash_password(password),
            is_active=fields.pop("is_active", True),
            **fields,
        )
        db.add(user)
        db.commit()
        return user

    return factory


@pytest.fixture
def make_student(db):
    def factory(**fields) -> Student:
        n = next(_sequence)
        student = Student(
            first_name=fields.pop("first_name", "Student"),
            last_name=fields.pop("last_name", f"Number{n}"),
            email=fields.pop("email", f"student{n}@school.edu"),
            date_of_birth=fields.pop("date_of_birth", date(2010, 5, 1)),
            gender=fields.pop("gender", Gender.FEMALE),
            roll_number=fields.pop("roll_number", f"student_{1000 + n}"),
            enrollment_date=fields.pop("enrollment_date", date(2022, 6, 1)),
            status=fields.pop("status", StudentStatus.ACTIVE),
            **fields,
        )
        db.add(student)
        db.commit()
        return student

    return factory


@pytest.fixture
def make_parent(db):
    def factory(**fields) -> Parent:
        n = next(_sequence)
        parent = Parent(
            first_name=fields.pop("first_name", "Parent"),
            last_name=fields.pop("last_name", f"Number{n}"),
            email=fields.pop("email", f"parent{n}@home.net"),
            phone_number=fields.pop("phone_number", "555-0100"),
            date_of_birth=fields.pop("date_of_birth", date(1980, 1, 15)),
            address=fields.pop("address", "1 Main Street"),
            gender=fields.pop("gender", Gender.MALE),
            **fields,
        )
        db.add(parent)
        db.commit()
        return parent

    return factory


@pytest.fixture
def make_faculty(db):
    def factory(**fields) -> Faculty:
        n = next(_sequence)
        faculty = Faculty(
            first_name=fields.pop("first_name", "Teacher"),
            last_name=fields.pop("last_name", f"Number{n}"),
            email=fields.pop("email", f"teacher{n}@school.edu"),
            date_of_birth=fields.pop("date_of_birth", date(1985, 3, 3)),
            gender=fields.pop("gender", Gender.OTHER),
            department=fields.pop("department", "Science"),
            subject=fields.pop("subject", "Physics"),
            employee_id=fields.pop("employee_id", f"faculty_{9000 + n}"),
            hire_date=fields.pop("hire_date", date.today() - timedelta(days=365)),
            is_active=fields.pop("is_active", True),
            **fields,
        )
        db.add(faculty)
        db.commit()
        return faculty

    return factory


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.email, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(make_user):
    return auth_headers(make_user(UserRole.ADMIN))
