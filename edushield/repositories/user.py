"""User repository."""

from sqlalchemy import func, select

from edushield.models.enums import UserRole
from edushield.models.user import User
from edushield.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    """Data access for users."""

    def get(self, user_id: int) -> User | None:
        return self._scalar_one_or_none(select(User).where(User.id == user_id))

    def get_by_email(self, email: str) -> User | None:
        return self._scalar_one_or_none(
            select(User).where(func.lower(User.email) == email.lower())
        )

    def email_exists(self, email: str) -> bool:
        return self._exists(select(User.id).where(func.lower(User.email) == email.lower()))

    def search(
        self,
        role: UserRole | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[User], int]:
        query = select(User)
        if role:
            query = query.where(User.role == role)
        if is_active is not None:
            query = query.where(User.is_active == is_active)
        if search:
            search_term = f"%{search}%"
            query = query.where(User.name.ilike(search_term) | User.email.ilike(search_term))
        query = query.order_by(User.name, User.id)
        return self._paginate(query, page, page_size)

    def create(self, user: User) -> User:
        return self._add(user)

    def update(self, user: User, changes: dict) -> User:
        return self._update(user, changes)

    def delete(self, user: User) -> None:
        self._delete(user)
