"""User administration service."""

import logging

from sqlalchemy.orm import Session

from edushield.core.exceptions import NotFoundError, ValidationError
from edushield.models.enums import UserRole
from edushield.models.user import User
from edushield.repositories.faculty import FacultyRepository
from edushield.repositories.parent import ParentRepository
from edushield.repositories.student import StudentRepository
from edushield.repositories.user import UserRepository
from edushield.schemas.auth import (
    PaginatedUserResponse,
    UserProfileResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)


class UserService:
    """User administration service."""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def get_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    def list_users(
        self,
        role: UserRole | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedUserResponse:
        items, total = self.users.search(role, is_active, search, page, page_size)
        return PaginatedUserResponse.build(
            [UserResponse.model_validate(u) for u in items], total, page, page_size
        )

    def change_role(self, user_id: int, role: UserRole, acting_user: User) -> UserResponse:
        user = self.get_user(user_id)
        if user.id == acting_user.id and role != user.role:
            raise ValidationError("You cannot change your own role")
        user = self.users.update(user, {"role": role})
        logger.info(f"User {user_id} role changed to {role.value} by user {acting_user.id}")
        return UserResponse.model_validate(user)

    def change_status(self, user_id: int, is_active: bool, acting_user: User) -> UserResponse:
        user = self.get_user(user_id)
        if user.id == acting_user.id and not is_active:
            raise ValidationError("You cannot deactivate your own account")
        user = self.users.update(user, {"is_active": is_active})
        logger.info(f"User {user_id} active={is_active} set by user {acting_user.id}")
        return UserResponse.model_validate(user)

    def get_profile(self, user: User) -> UserProfileResponse:
        """The user plus the id of the student, faculty or parent record it owns."""
        profile = UserProfileResponse.model_validate(user)
        student = StudentRepository(self.db).get_by_user_id(user.id)
        faculty = FacultyRepository(self.db).get_by_user_id(user.id)
        parent = ParentRepository(self.db).get_by_user_id(user.id)
        profile.student_id = student.id if student else None
        profile.faculty_id = faculty.id if faculty else None
        profile.parent_id = parent.id if parent else None
        return profile
