"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.exceptions import AuthenticationError, PermissionDeniedError
from edushield.core.security import verify_access_token
from edushield.models.enums import UserRole
from edushield.models.user import User


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    authorization: str | None = Header(None, description="Bearer token"),
) -> User:
    """Extract and validate the current user from JWT token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format")

    token = authorization[7:]  # Remove "Bearer " prefix
    payload = verify_access_token(token)

    if not payload:
        raise AuthenticationError("Invalid or expired token")

    user_id_str = payload.get("sub")
    if not user_id_str:
        raise AuthenticationError("Invalid token payload")

    try:
        user_id = int(user_id_str)
    except ValueError:
        raise AuthenticationError("Invalid user ID in token")

    result = db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user


def require_roles(*roles: UserRole):
    """Dependency factory that requires the user's role to be in the allow-list."""
    allowed = set(roles)

    def check_roles(
        user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if user.role not in allowed:
            raise PermissionDeniedError(
                "Your role is not allowed to perform this action",
                required_roles=sorted(role.value for role in allowed),
            )
        return user

    return check_roles


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
