"""Shared repository helpers."""

import logging
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class BaseRepository:
    """Base class wrapping session access.

    Database errors are logged with the failing operation and re-raised
    unchanged; repositories never commit.
    """

    def __init__(self, db: Session):
        self.db = db

    def _execute(self, statement: Any) -> Result:
        try:
            return self.db.execute(statement)
        except SQLAlchemyError:
            logger.exception(f"{type(self).__name__}: query failed")
            raise

    def _flush(self) -> None:
        try:
            self.db.flush()
        except SQLAlchemyError:
            logger.exception(f"{type(self).__name__}: flush failed")
            raise

    def _add(self, instance: Any) -> Any:
        self.db.add(instance)
        self._flush()
        self.db.refresh(instance)
        return instance

    def _add_all(self, instances: list[Any]) -> list[Any]:
        self.db.add_all(instances)
        self._flush()
        return instances

    def _delete(self, instance: Any) -> None:
        self.db.delete(instance)
        self._flush()

    def _update(self, instance: Any, changes: dict[str, Any]) -> Any:
        for field, value in changes.items():
            setattr(instance, field, value)
        self._flush()
        self.db.refresh(instance)
        return instance

    def _scalar_one_or_none(self, query: Select) -> Any:
        return self._execute(query).scalar_one_or_none()

    def _scalars(self, query: Select) -> list[Any]:
        return list(self._execute(query).scalars().all())

    def _exists(self, query: Select) -> bool:
        return self._execute(select(query.exists())).scalar() or False

    def _count(self, query: Select) -> int:
        count_query = select(func.count()).select_from(query.subquery())
        return self._execute(count_query).scalar() or 0

    def _paginate(self, query: Select, page: int, page_size: int) -> tuple[list[Any], int]:
        """Return one page of results plus the unpaged total."""
        total = self._count(query)
        offset = (page - 1) * page_size
        items = self._scalars(query.offset(offset).limit(page_size))
        return items, total
