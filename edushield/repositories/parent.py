"""Parent repository."""

from sqlalchemy import func, or_, select

from edushield.models.enums import ParentType
from edushield.models.parent import Parent
from edushield.repositories.base import BaseRepository


class ParentRepository(BaseRepository):
    """Data access for parents."""

    def get(self, parent_id: int) -> Parent | None:
        return self._scalar_one_or_none(select(Parent).where(Parent.id == parent_id))

    def get_by_email(self, email: str) -> Parent | None:
        return self._scalar_one_or_none(
            select(Parent).where(func.lower(Parent.email) == email.lower())
        )

    def get_by_user_id(self, user_id: int) -> Parent | None:
        return self._scalar_one_or_none(select(Parent).where(Parent.user_id == user_id))

    def email_exists(self, email: str, exclude_id: int | None = None) -> bool:
        query = select(Parent.id).where(func.lower(Parent.email) == email.lower())
        if exclude_id is not None:
            query = query.where(Parent.id != exclude_id)
        return self._exists(query)

    def search(
        self,
        parent_type: ParentType | None = None,
        city: str | None = None,
        state: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[Parent], int]:
        query = select(Parent)
        if parent_type:
            query = query.where(Parent.parent_type == parent_type)
        if city:
            query = query.where(func.lower(Parent.city) == city.lower())
        if state:
            query = query.where(func.lower(Parent.state) == state.lower())
        if is_active is not None:
            query = query.where(Parent.is_active == is_active)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Parent.first_name.ilike(search_term),
                    Parent.last_name.ilike(search_term),
                    Parent.email.ilike(search_term),
                )
            )
        query = query.order_by(Parent.last_name, Parent.first_name, Parent.id)
        return self._paginate(query, page, page_size)

    def list_emergency_contacts(self) -> list[Parent]:
        return self._scalars(
            select(Parent)
            .where(Parent.is_emergency_contact.is_(True), Parent.is_active.is_(True))
            .order_by(Parent.last_name, Parent.first_name)
        )

    def list_authorized_for_pickup(self) -> list[Parent]:
        return self._scalars(
            select(Parent)
            .where(Parent.is_authorized_to_pickup.is_(True), Parent.is_active.is_(True))
            .order_by(Parent.last_name, Parent.first_name)
        )

    def list_active(self) -> list[Parent]:
        return self._scalars(
            select(Parent).where(Parent.is_active.is_(True)).order_by(Parent.id)
        )

    def list_all(self) -> list[Parent]:
        return self._scalars(select(Parent).order_by(Parent.id))

    def count_all(self) -> int:
        return self._count(select(Parent.id))

    def create(self, parent: Parent) -> Parent:
        return self._add(parent)

    def update(self, parent: Parent, changes: dict) -> Parent:
        return self._update(parent, changes)

    def delete(self, parent: Parent) -> None:
        self._delete(parent)
