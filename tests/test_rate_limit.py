import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from edushield.middleware.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware, budget_for
from edushield.models.enums import UserRole
from tests.conftest import auth_headers

LIMITS = {"anonymous": 2, "Admin": 4, "default": 3}
SENSITIVE_LIMITS = {"anonymous": 1, "Admin": 2, "default": 1}


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limited_client(clock):
    app = FastAPI()
    app.add_middleware(
        RateLimitMiddleware,
        enabled=True,
        window_seconds=60,
        limits=LIMITS,
        sensitive_limits=SENSITIVE_LIMITS,
        clock=clock,
    )

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    @app.get("/api/v1/items")
    def items():
        return []

    @app.post("/api/v1/auth/login")
    def login():
        return {}

    @app.post("/api/v1/student-fees/{fee_id}/pay")
    def pay(fee_id: int):
        return {}

    return TestClient(app)


def test_limiter_resets_each_window(clock):
    limiter = FixedWindowRateLimiter(60, clock=clock)

    assert limiter.hit("k", 2)[0]
    assert limiter.hit("k", 2) == (True, 0, 0)
    allowed, remaining, retry_after = limiter.hit("k", 2)
    assert not allowed
    assert retry_after == 20

    clock.now += 20
    assert limiter.hit("k", 2)[0]


def test_budget_falls_back_to_default():
    assert budget_for(LIMITS, None) == 2
    assert budget_for(LIMITS, "Admin") == 4
    assert budget_for(LIMITS, "Parent") == 3


def test_anonymous_callers_get_429_with_retry_after(limited_client):
    for _ in range(2):
        assert limited_client.get("/api/v1/items").status_code == 200

    response = limited_client.get("/api/v1/items")

    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) > 0
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "RATE_LIMIT_EXCEEDED"


def test_health_is_exempt(limited_client):
    for _ in range(5):
        assert limited_client.get("/health").status_code == 200


def test_authenticated_users_have_their_own_budget(limited_client, make_user):
    headers = auth_headers(make_user(UserRole.ADMIN))

    for _ in range(2):
        limited_client.get("/api/v1/items")
    assert limited_client.get("/api/v1/items").status_code == 429

    statuses = [limited_client.get("/api/v1/items", headers=headers).status_code for _ in range(5)]
    assert statuses == [200, 200, 200, 200, 429]


def test_sensitive_paths_use_stricter_budget(limited_client, make_user):
    headers = auth_headers(make_user(UserRole.PARENT))

    assert limited_client.post("/api/v1/student-fees/1/pay", headers=headers).status_code == 200
    assert limited_client.post("/api/v1/student-fees/1/pay", headers=headers).status_code == 429
    assert limited_client.get("/api/v1/items", headers=headers).status_code == 200

    assert limited_client.post("/api/v1/auth/login").status_code == 200
    assert limited_client.post("/api/v1/auth/login").status_code == 429


def test_remaining_header(limited_client):
    response = limited_client.get("/api/v1/items")

    assert response.headers["X-RateLimit-Limit"] == "2"
    assert response.headers["X-RateLimit-Remaining"] == "1"
