"""Fixed-window rate limiting middleware.

Requests are partitioned by authenticated user id (taken from the bearer
token) or, for anonymous callers, by client IP. Each partition gets a permit
budget per window that depends on the caller's role. Authentication and
payment endpoints count against a separate, stricter budget.
"""

import logging
import math
import time
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from edushield.core.config import settings
from edushield.core.exceptions import RateLimitExceededError
from edushield.core.security import verify_access_token

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"
DEFAULT = "default"

# Stale windows are purged once this many partitions are tracked
PURGE_THRESHOLD = 10_000


class FixedWindowRateLimiter:
    """Counts hits per key within aligned windows of `window_seconds`."""

    def __init__(self, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[int, int]] = {}

    def hit(self, key: str, limit: int) -> tuple[bool, int, int]:
        """Record a hit. Returns (allowed, remaining, retry_after_seconds)."""
        now = self._clock()
        window = int(now // self.window_seconds)
        if len(self._windows) > PURGE_THRESHOLD:
            self._purge(window)

        start, count = self._windows.get(key, (window, 0))
        if start != window:
            count = 0

        if count >= limit:
            retry_after = max(1, math.ceil((window + 1) * self.window_seconds - now))
            return False, 0, retry_after

        self._windows[key] = (window, count + 1)
        return True, limit - count - 1, 0

    def _purge(self, current_window: int) -> None:
        self._windows = {
            key: value for key, value in self._windows.items() if value[0] == current_window
        }

    def reset(self) -> None:
        self._windows.clear()


def budget_for(limits: dict[str, int], role: str | None) -> int:
    if role is None:
        return limits.get(ANONYMOUS, limits.get(DEFAULT, 0))
    return limits.get(role, limits.get(DEFAULT, 0))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies per-role fixed-window budgets and answers 429 when exhausted."""

    EXEMPT_PATHS = ("/health", "/docs", "/redoc")

    def __init__(
        self,
        app,
        enabled: bool | None = None,
        window_seconds: int | None = None,
        limits: dict[str, int] | None = None,
        sensitive_limits: dict[str, int] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.enabled = settings.RATE_LIMIT_ENABLED if enabled is None else enabled
        self.limits = limits or settings.RATE_LIMITS
        self.sensitive_limits = sensitive_limits or settings.SENSITIVE_RATE_LIMITS
        self.limiter = FixedWindowRateLimiter(
            window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS,
            clock=clock,
        )

    def _is_exempt(self, path: str) -> bool:
        return path.startswith(self.EXEMPT_PATHS) or path.endswith("/openapi.json")

    def _is_sensitive(self, path: str) -> bool:
        return path.startswith(f"{settings.API_V1_PREFIX}/auth") or path.rstrip("/").endswith("/pay")

    def _identify(self, request: Request) -> tuple[str, str | None]:
        """Partition key and role of the caller."""
        authorization = request.headers.get("Authorization", "")
        if authorization.startswith("Bearer "):
            payload = verify_access_token(authorization[7:])
            if payload and payload.get("sub"):
                return f"user:{payload['sub']}", payload.get("role")
        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}", None

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not self.enabled or self._is_exempt(path):
            return await call_next(request)

        partition, role = self._identify(request)
        if self._is_sensitive(path):
            policy, limit = "sensitive", budget_for(self.sensitive_limits, role)
        else:
            policy, limit = "general", budget_for(self.limits, role)

        allowed, remaining, retry_after = self.limiter.hit(f"{policy}:{partition}", limit)
        if not allowed:
            logger.warning(f"Rate limit exceeded for {partition} on {policy} policy ({limit}/window)")
            error = RateLimitExceededError(retry_after=retry_after, limit=limit)
            return JSONResponse(
                status_code=error.status_code,
                content=error.detail,
                headers=error.headers,
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
