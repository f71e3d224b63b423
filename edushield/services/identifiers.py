"""Generated identifiers (roll numbers, employee ids).

The next value is read from the numeric maximum and the row is inserted inside
a SAVEPOINT. If a concurrent writer took the same value first, the unique index
rejects the insert, the savepoint is rolled back and a fresh value is tried.
"""

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from edushield.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5

T = TypeVar("T")


def insert_with_generated_id(
    db: Session,
    next_value: Callable[[], str],
    value_taken: Callable[[str], bool],
    insert: Callable[[str], T],
    label: str,
) -> T:
    for attempt in range(1, MAX_ATTEMPTS + 1):
        value = next_value()
        try:
            with db.begin_nested():
                return insert(value)
        except IntegrityError:
            if not value_taken(value):
                raise
            logger.warning(f"{label} {value} already taken, retrying (attempt {attempt})")
    raise ConflictError(f"Could not allocate a unique {label}, please retry")
