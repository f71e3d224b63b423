from edushield.models.enums import UserRole
from tests.conftest import auth_headers


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_login_and_me(client, make_user, make_student):
    user = make_user(UserRole.STUDENT, email="pupil@school.edu", password="secret123")
    student = make_student(user_id=user.id)

    response = client.post("/api/v1/auth/login", json={"email": "pupil@school.edu", "password": "secret123"})

    assert response.status_code == 200
    tokens = response.json()
    assert tokens["token_type"] == "bearer"
    assert tokens["user"]["role"] == "Student"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["student_id"] == student.id
    assert me.json()["parent_id"] is None


def test_wrong_password_uses_error_envelope(client, make_user):
    make_user(UserRole.ADMIN, email="boss@school.edu", password="secret123")

    response = client.post("/api/v1/auth/login", json={"email": "boss@school.edu", "password": "wrong-pass"})

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "AUTH_FAILED"


def test_deactivated_user_cannot_log_in(client, make_user):
    make_user(UserRole.PARENT, email="gone@home.net", password="secret123", is_active=False)

    response = client.post("/api/v1/auth/login", json={"email": "gone@home.net", "password": "secret123"})

    assert response.status_code == 401


def test_dev_login_and_refresh(client, make_user):
    make_user(UserRole.DEV_AUTH, email="dev@school.edu")

    login = client.post("/api/v1/auth/dev", json={"email": "dev@school.edu"})
    assert login.status_code == 200

    refreshed = client.post("/api/v1/auth/refresh", json={"refresh_token": login.json()["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["user"]["email"] == "dev@school.edu"


def test_access_token_is_not_a_refresh_token(client, make_user):
    user = make_user(UserRole.ADMIN)
    access = auth_headers(user)["Authorization"][7:]

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": access})

    assert response.status_code == 401


def test_missing_or_bad_token(client):
    assert client.get("/api/v1/students").status_code == 401
    response = client.get("/api/v1/students", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid or expired token"


def test_request_validation_error_envelope(client, admin_headers):
    response = client.post("/api/v1/students", json={"first_name": ""}, headers=admin_headers)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"]["errors"]


def test_admin_cannot_demote_self(client, make_user):
    admin = make_user(UserRole.ADMIN)

    response = client.put(
        f"/api/v1/users/{admin.id}/role",
        json={"role": "Student"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400


def test_user_management_is_admin_only(client, make_user):
    admin = make_user(UserRole.ADMIN)
    faculty_user = make_user(UserRole.FACULTY)

    denied = client.get("/api/v1/users", headers=auth_headers(faculty_user))
    assert denied.status_code == 403
    assert denied.json()["error"]["details"]["required_roles"] == ["Admin"]

    changed = client.put(
        f"/api/v1/users/{faculty_user.id}/status",
        json={"is_active": False},
        headers=auth_headers(admin),
    )
    assert changed.status_code == 200
    assert changed.json()["is_active"] is False
