"""Authentication service."""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from edushield.core.config import settings
from edushield.core.exceptions import AuthenticationError, PermissionDeniedError
from edushield.core.security import (
    create_access_token,
    create_refresh_token,
    verify_password,
    verify_refresh_token,
)
from edushield.models.user import User
from edushield.repositories.user import UserRepository
from edushield.schemas.auth import (
    DevLoginRequest,
    LoginRequest,
    TokenResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service."""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def _issue_tokens(self, user: User) -> TokenResponse:
        user.last_login_at = datetime.now(timezone.utc)
        self.db.flush()

        return TokenResponse(
            access_token=create_access_token(user.id, user.email, user.role.value),
            refresh_token=create_refresh_token(user.id),
            token_type="bearer",
            expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserResponse.model_validate(user),
        )

    def login(self, request: LoginRequest) -> TokenResponse:
        """Authenticate user and return tokens."""
        user = self.users.get_by_email(request.email)

        if not user or not verify_password(request.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        logger.info(f"User {user.id} logged in")
        return self._issue_tokens(user)

    def dev_login(self, request: DevLoginRequest) -> TokenResponse:
        """Passwordless login by email for development environments."""
        if not settings.DEV_AUTH_ENABLED:
            raise PermissionDeniedError("Development login is disabled")

        user = self.users.get_by_email(request.email)
        if not user or not user.is_active:
            raise AuthenticationError("User not found or deactivated")

        logger.warning(f"Development login used for user {user.id}")
        return self._issue_tokens(user)

    def refresh_tokens(self, refresh_token: str) -> TokenResponse:
        """Refresh access token using refresh token."""
        payload = verify_refresh_token(refresh_token)

        if not payload:
            raise AuthenticationError("Invalid or expired refresh token")

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token payload")

        try:
            user_pk = int(user_id)
        except ValueError:
            raise AuthenticationError("Invalid user ID in token")

        user = self.users.get(user_pk)
        if not user or not user.is_active:
            raise AuthenticationError("User not found or deactivated")

        return self._issue_tokens(user)
