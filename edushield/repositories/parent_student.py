"""Parent-student assignment repository."""

from sqlalchemy import func, select

from edushield.models.parent_student import ParentStudent
from edushield.repositories.base import BaseRepository


class ParentStudentRepository(BaseRepository):
    """Data access for parent-student links."""

    def get(self, parent_id: int, student_id: int) -> ParentStudent | None:
        return self._scalar_one_or_none(
            select(ParentStudent).where(
                ParentStudent.parent_id == parent_id,
                ParentStudent.student_id == student_id,
            )
        )

    def exists(self, parent_id: int, student_id: int) -> bool:
        return self._exists(
            select(ParentStudent.parent_id).where(
                ParentStudent.parent_id == parent_id,
                ParentStudent.student_id == student_id,
            )
        )

    def exists_active(self, parent_id: int, student_id: int) -> bool:
        return self._exists(
            select(ParentStudent.parent_id).where(
                ParentStudent.parent_id == parent_id,
                ParentStudent.student_id == student_id,
                ParentStudent.is_active.is_(True),
            )
        )

    def existing_student_ids(self, parent_id: int, student_ids: list[int]) -> set[int]:
        """Student ids among `student_ids` already linked to the parent."""
        if not student_ids:
            return set()
        return set(
            self._scalars(
                select(ParentStudent.student_id).where(
                    ParentStudent.parent_id == parent_id,
                    ParentStudent.student_id.in_(student_ids),
                )
            )
        )

    def list_all(self) -> list[ParentStudent]:
        return self._scalars(
            select(ParentStudent).order_by(ParentStudent.student_id, ParentStudent.parent_id)
        )

    def list_by_parent(self, parent_id: int, active_only: bool = False) -> list[ParentStudent]:
        query = select(ParentStudent).where(ParentStudent.parent_id == parent_id)
        if active_only:
            query = query.where(ParentStudent.is_active.is_(True))
        return self._scalars(query.order_by(ParentStudent.created_at, ParentStudent.student_id))

    def list_by_student(self, student_id: int, active_only: bool = False) -> list[ParentStudent]:
        """Links for a student, primary contact first, then oldest first."""
        query = select(ParentStudent).where(ParentStudent.student_id == student_id)
        if active_only:
            query = query.where(ParentStudent.is_active.is_(True))
        return self._scalars(
            query.order_by(
                ParentStudent.is_primary_contact.desc(),
                ParentStudent.created_at,
                ParentStudent.parent_id,
            )
        )

    def get_primary_for_student(self, student_id: int) -> ParentStudent | None:
        return self._execute(
            select(ParentStudent)
            .where(
                ParentStudent.student_id == student_id,
                ParentStudent.is_primary_contact.is_(True),
                ParentStudent.is_active.is_(True),
            )
            .limit(1)
        ).scalar_one_or_none()

    def list_primaries_for_student(
        self,
        student_id: int,
        exclude_parent_id: int | None = None,
    ) -> list[ParentStudent]:
        query = select(ParentStudent).where(
            ParentStudent.student_id == student_id,
            ParentStudent.is_primary_contact.is_(True),
        )
        if exclude_parent_id is not None:
            query = query.where(ParentStudent.parent_id != exclude_parent_id)
        return self._scalars(query)

    def count_all(self) -> int:
        return self._count(select(ParentStudent.parent_id))

    def count_active(self) -> int:
        return self._count(select(ParentStudent.parent_id).where(ParentStudent.is_active.is_(True)))

    def count_active_by_parent(self, parent_id: int) -> int:
        return self._count(
            select(ParentStudent.student_id).where(
                ParentStudent.parent_id == parent_id,
                ParentStudent.is_active.is_(True),
            )
        )

    def counts_by_relationship(self) -> dict[str, int]:
        rows = self._execute(
            select(ParentStudent.relationship_type, func.count())
            .group_by(ParentStudent.relationship_type)
            .order_by(ParentStudent.relationship_type)
        ).all()
        return {relationship: count for relationship, count in rows}

    def student_ids_with_active_links(self) -> set[int]:
        return set(
            self._scalars(
                select(ParentStudent.student_id)
                .where(ParentStudent.is_active.is_(True))
                .distinct()
            )
        )

    def parent_ids_with_active_links(self) -> set[int]:
        return set(
            self._scalars(
                select(ParentStudent.parent_id)
                .where(ParentStudent.is_active.is_(True))
                .distinct()
            )
        )

    def create(self, link: ParentStudent) -> ParentStudent:
        return self._add(link)

    def create_bulk(self, links: list[ParentStudent]) -> list[ParentStudent]:
        return self._add_all(links)

    def update(self, link: ParentStudent, changes: dict) -> ParentStudent:
        return self._update(link, changes)

    def delete(self, link: ParentStudent) -> None:
        self._delete(link)

    def delete_many(self, links: list[ParentStudent]) -> int:
        for link in links:
            self.db.delete(link)
        self._flush()
        return len(links)
