"""Parent-student assignment management.

This service is the only writer of `parent_students` rows and of the legacy
`students.parent_id` column. The link table is the source of truth; the legacy
column is re-projected after every mutation:

    parent of the active primary link
    else parent of the oldest active link
    else NULL

Primary-contact changes lock the student row and flush the demote step before
the promote step, so the partial unique index on active primaries is never
violated mid-flush and concurrent callers serialize on the student.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from edushield.core.exceptions import ConflictError, NotFoundError, ValidationError
from edushield.models.enums import StudentStatus
from edushield.models.parent import Parent
from edushield.models.parent_student import ParentStudent
from edushield.models.student import Student
from edushield.repositories.parent import ParentRepository
from edushield.repositories.parent_student import ParentStudentRepository
from edushield.repositories.student import StudentRepository
from edushield.schemas.parent import ParentResponse, ParentSummary
from edushield.schemas.parent_student import (
    AssignmentStatistics,
    BulkParentStudentAssignmentCreate,
    ParentStudentAssignmentCreate,
    ParentStudentAssignmentResponse,
    ParentStudentAssignmentUpdate,
    ParentWithStudentsResponse,
    StudentWithParentsResponse,
    SyncResult,
)
from edushield.schemas.student import StudentResponse, StudentSummary

logger = logging.getLogger(__name__)

LEGACY_SYNC_NOTE = "Synced from legacy parent relationship"


class ParentStudentAssignmentService:
    """Parent-student assignment service."""

    def __init__(self, db: Session):
        self.db = db
        self.links = ParentStudentRepository(db)
        self.parents = ParentRepository(db)
        self.students = StudentRepository(db)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_link(self, parent_id: int, student_id: int) -> ParentStudent:
        link = self.links.get(parent_id, student_id)
        if not link:
            raise NotFoundError("Parent-student assignment", f"{parent_id}/{student_id}")
        return link

    def _require_parent(self, parent_id: int) -> Parent:
        parent = self.parents.get(parent_id)
        if not parent:
            raise ValidationError(f"Parent with ID {parent_id} not found")
        return parent

    def _require_student(self, student_id: int) -> Student:
        student = self.students.get(student_id)
        if not student:
            raise ValidationError(f"Student with ID {student_id} not found")
        return student

    def _to_response(self, link: ParentStudent) -> ParentStudentAssignmentResponse:
        return ParentStudentAssignmentResponse(
            parent_id=link.parent_id,
            student_id=link.student_id,
            relationship=link.relationship_type,
            is_primary_contact=link.is_primary_contact,
            is_authorized_to_pickup=link.is_authorized_to_pickup,
            is_emergency_contact=link.is_emergency_contact,
            is_active=link.is_active,
            notes=link.notes,
            created_at=link.created_at,
            updated_at=link.updated_at,
            parent=ParentSummary.model_validate(link.parent) if link.parent else None,
            student=StudentSummary.model_validate(link.student) if link.student else None,
        )

    def _demote_other_primaries(self, student_id: int, keep_parent_id: int | None) -> int:
        """Clear the primary flag on every other link of the student."""
        demoted = 0
        for other in self.links.list_primaries_for_student(student_id, exclude_parent_id=keep_parent_id):
            self.links.update(other, {"is_primary_contact": False})
            demoted += 1
        if demoted:
            logger.info(f"Demoted {demoted} primary contact(s) for student {student_id}")
        return demoted

    def _promote_replacement(self, student_id: int, exclude_parent_id: int) -> ParentStudent | None:
        """Make the oldest remaining active link the student's primary contact."""
        if self.links.get_primary_for_student(student_id):
            return None
        candidates = [
            link
            for link in self.links.list_by_student(student_id, active_only=True)
            if link.parent_id != exclude_parent_id
        ]
        if not candidates:
            return None
        # list_by_student orders oldest first once no primary remains
        replacement = candidates[0]
        self.links.update(replacement, {"is_primary_contact": True, "is_emergency_contact": True})
        logger.info(
            f"Promoted parent {replacement.parent_id} to primary contact for student {student_id}"
        )
        return replacement

    def _sync_legacy_parent(self, student_id: int) -> bool:
        """Re-project students.parent_id from the link table."""
        student = self.students.get(student_id)
        if not student:
            return False

        primary = self.links.get_primary_for_student(student_id)
        if primary:
            parent_id = primary.parent_id
        else:
            active = self.links.list_by_student(student_id, active_only=True)
            parent_id = active[0].parent_id if active else None

        if student.parent_id == parent_id:
            return False
        self.students.update(student, {"parent_id": parent_id})
        logger.info(f"Legacy parent for student {student_id} synced to {parent_id}")
        return True

    def _make_primary(self, link: ParentStudent) -> ParentStudent:
        if not link.is_active:
            raise ValidationError("Cannot set an inactive assignment as primary contact")
        # Serialize primary changes per student
        self.students.get_for_update(link.student_id)
        self._demote_other_primaries(link.student_id, keep_parent_id=link.parent_id)
        return self.links.update(link, {"is_primary_contact": True, "is_emergency_contact": True})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_assignment(self, parent_id: int, student_id: int) -> ParentStudentAssignmentResponse:
        return self._to_response(self._get_link(parent_id, student_id))

    def list_assignments(self) -> list[ParentStudentAssignmentResponse]:
        return [self._to_response(link) for link in self.links.list_all()]

    def list_by_parent(
        self, parent_id: int, active_only: bool = False
    ) -> list[ParentStudentAssignmentResponse]:
        return [self._to_response(link) for link in self.links.list_by_parent(parent_id, active_only)]

    def list_by_student(
        self, student_id: int, active_only: bool = False
    ) -> list[ParentStudentAssignmentResponse]:
        return [self._to_response(link) for link in self.links.list_by_student(student_id, active_only)]

    def get_parent_with_students(self, parent_id: int) -> ParentWithStudentsResponse:
        parent = self.parents.get(parent_id)
        if not parent:
            raise NotFoundError("Parent", str(parent_id))
        links = self.links.list_by_parent(parent_id)
        return ParentWithStudentsResponse(
            parent=ParentResponse.model_validate(parent),
            assignments=[self._to_response(link) for link in links],
            total_students=len(links),
            active_students=sum(1 for link in links if link.is_active),
        )

    def get_student_with_parents(self, student_id: int) -> StudentWithParentsResponse:
        student = self.students.get(student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))
        links = self.links.list_by_student(student_id)
        primary = next(
            (link for link in links if link.is_primary_contact and link.is_active),
            None,
        )
        return StudentWithParentsResponse(
            student=StudentResponse.model_validate(student),
            assignments=[self._to_response(link) for link in links],
            primary_parent=ParentSummary.model_validate(primary.parent) if primary else None,
            total_parents=len(links),
            active_parents=sum(1 for link in links if link.is_active),
        )

    def can_assign(self, parent_id: int, student_id: int) -> bool:
        """A new link is allowed for an active parent, an Active student and no existing link."""
        parent = self.parents.get(parent_id)
        if not parent or not parent.is_active:
            return False
        student = self.students.get(student_id)
        if not student or student.status != StudentStatus.ACTIVE:
            return False
        return not self.links.exists(parent_id, student_id)

    def is_assigned(self, parent_id: int, student_id: int) -> bool:
        return self.links.exists_active(parent_id, student_id)

    def get_orphaned_students(self) -> list[Student]:
        """Active students with no active parent link."""
        linked = self.links.student_ids_with_active_links()
        return [s for s in self.students.list_active() if s.id not in linked]

    def get_parents_without_students(self) -> list[Parent]:
        """Active parents with no active student link."""
        linked = self.links.parent_ids_with_active_links()
        return [p for p in self.parents.list_active() if p.id not in linked]

    def get_statistics(self) -> AssignmentStatistics:
        total = self.links.count_all()
        active = self.links.count_active()
        return AssignmentStatistics(
            total_assignments=total,
            active_assignments=active,
            inactive_assignments=total - active,
            relationship_types=self.links.counts_by_relationship(),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_assignment(self, request: ParentStudentAssignmentCreate) -> ParentStudentAssignmentResponse:
        """Create a link; a primary link demotes the student's current primary first."""
        self._require_parent(request.parent_id)
        self._require_student(request.student_id)

        if self.links.exists(request.parent_id, request.student_id):
            raise ConflictError(
                f"Assignment already exists between parent {request.parent_id} "
                f"and student {request.student_id}"
            )

        if request.is_primary_contact:
            self.students.get_for_update(request.student_id)
            self._demote_other_primaries(request.student_id, keep_parent_id=request.parent_id)

        now = datetime.now(timezone.utc)
        link = self.links.create(
            ParentStudent(
                parent_id=request.parent_id,
                student_id=request.student_id,
                relationship_type=request.relationship,
                is_primary_contact=request.is_primary_contact,
                is_authorized_to_pickup=request.is_authorized_to_pickup,
                is_emergency_contact=request.is_emergency_contact or request.is_primary_contact,
                is_active=True,
                notes=request.notes,
                created_at=now,
                updated_at=now,
            )
        )
        self._sync_legacy_parent(request.student_id)

        logger.info(
            f"Created assignment parent={request.parent_id} student={request.student_id} "
            f"primary={request.is_primary_contact}"
        )
        return self._to_response(link)

    def update_assignment(
        self,
        parent_id: int,
        student_id: int,
        request: ParentStudentAssignmentUpdate,
    ) -> ParentStudentAssignmentResponse:
        """Partial update. Deactivating clears the primary flag without reassigning it."""
        link = self._get_link(parent_id, student_id)
        changes = request.model_dump(exclude_unset=True)
        if "relationship" in changes:
            changes["relationship_type"] = changes.pop("relationship")
        make_primary = changes.pop("is_primary_contact", None)

        if changes.get("is_active") is False:
            if make_primary:
                raise ValidationError("An inactive assignment cannot be the primary contact")
            changes["is_primary_contact"] = False
        elif make_primary is False:
            changes["is_primary_contact"] = False

        link = self.links.update(link, changes)
        if make_primary:
            link = self._make_primary(link)

        self._sync_legacy_parent(student_id)
        return self._to_response(link)

    def delete_assignment(self, parent_id: int, student_id: int) -> None:
        """Hard delete; a deleted primary is replaced by another active link if any."""
        link = self._get_link(parent_id, student_id)
        was_primary = link.is_primary_contact and link.is_active
        self.links.delete(link)

        if was_primary:
            self.students.get_for_update(student_id)
            self._promote_replacement(student_id, exclude_parent_id=parent_id)
        self._sync_legacy_parent(student_id)
        logger.info(f"Deleted assignment parent={parent_id} student={student_id}")

    def set_primary_contact(self, parent_id: int, student_id: int) -> ParentStudentAssignmentResponse:
        link = self._get_link(parent_id, student_id)
        link = self._make_primary(link)
        self._sync_legacy_parent(student_id)
        logger.info(f"Parent {parent_id} set as primary contact for student {student_id}")
        return self._to_response(link)

    def remove_primary_contact(self, parent_id: int, student_id: int) -> ParentStudentAssignmentResponse:
        link = self._get_link(parent_id, student_id)
        if link.is_primary_contact:
            self.students.get_for_update(student_id)
            link = self.links.update(link, {"is_primary_contact": False})
            self._promote_replacement(student_id, exclude_parent_id=parent_id)
            self._sync_legacy_parent(student_id)
            logger.info(f"Parent {parent_id} removed as primary contact for student {student_id}")
        return self._to_response(link)

    def activate_assignment(self, parent_id: int, student_id: int) -> ParentStudentAssignmentResponse:
        link = self._get_link(parent_id, student_id)
        link = self.links.update(link, {"is_active": True})
        self._sync_legacy_parent(student_id)
        return self._to_response(link)

    def deactivate_assignment(self, parent_id: int, student_id: int) -> ParentStudentAssignmentResponse:
        """A deactivated link can never stay primary; no replacement is promoted."""
        link = self._get_link(parent_id, student_id)
        link = self.links.update(link, {"is_active": False, "is_primary_contact": False})
        self._sync_legacy_parent(student_id)
        logger.info(f"Deactivated assignment parent={parent_id} student={student_id}")
        return self._to_response(link)

    def create_bulk_assignments(
        self, request: BulkParentStudentAssignmentCreate
    ) -> list[ParentStudentAssignmentResponse]:
        """Link one parent to many students, skipping missing students and existing pairs."""
        self._require_parent(request.parent_id)

        requested = list(dict.fromkeys(request.student_ids))
        found = {s.id for s in self.students.get_many(requested)}
        existing = self.links.existing_student_ids(request.parent_id, requested)
        valid_ids = [sid for sid in requested if sid in found and sid not in existing]

        skipped = len(requested) - len(valid_ids)
        if skipped:
            logger.warning(
                f"Bulk assignment for parent {request.parent_id} skipped {skipped} student(s)"
            )
        if not valid_ids:
            raise ConflictError("No valid assignments to create")

        if request.is_primary_contact:
            for student_id in valid_ids:
                self.students.get_for_update(student_id)
                self._demote_other_primaries(student_id, keep_parent_id=request.parent_id)

        now = datetime.now(timezone.utc)
        links = self.links.create_bulk(
            [
                ParentStudent(
                    parent_id=request.parent_id,
                    student_id=student_id,
                    relationship_type=request.relationship,
                    is_primary_contact=request.is_primary_contact,
                    is_authorized_to_pickup=request.is_authorized_to_pickup,
                    is_emergency_contact=request.is_emergency_contact or request.is_primary_contact,
                    is_active=True,
                    notes=request.notes,
                    created_at=now,
                    updated_at=now,
                )
                for student_id in valid_ids
            ]
        )
        for student_id in valid_ids:
            self._sync_legacy_parent(student_id)

        logger.info(f"Bulk created {len(links)} assignments for parent {request.parent_id}")
        return [self._to_response(link) for link in links]

    def delete_all_for_parent(self, parent_id: int) -> int:
        links = self.links.list_by_parent(parent_id)
        lost_primary = [link.student_id for link in links if link.is_primary_contact and link.is_active]
        student_ids = [link.student_id for link in links]
        deleted = self.links.delete_many(links)

        for student_id in lost_primary:
            self.students.get_for_update(student_id)
            self._promote_replacement(student_id, exclude_parent_id=parent_id)
        for student_id in student_ids:
            self._sync_legacy_parent(student_id)

        logger.info(f"Deleted {deleted} assignments for parent {parent_id}")
        return deleted

    def delete_all_for_student(self, student_id: int) -> int:
        deleted = self.links.delete_many(self.links.list_by_student(student_id))
        self._sync_legacy_parent(student_id)
        logger.info(f"Deleted {deleted} assignments for student {student_id}")
        return deleted

    def sync_legacy_links(self) -> SyncResult:
        """Backfill links from students.parent_id, then re-project the column for all students."""
        created = 0
        for student in self.students.list_with_legacy_parent():
            parent_id = student.parent_id
            if self.links.exists(parent_id, student.id) or not self.parents.get(parent_id):
                continue
            has_primary = self.links.get_primary_for_student(student.id) is not None
            self.links.create(
                ParentStudent(
                    parent_id=parent_id,
                    student_id=student.id,
                    relationship_type="Parent",
                    is_primary_contact=not has_primary,
                    is_authorized_to_pickup=True,
                    is_emergency_contact=True,
                    is_active=True,
                    notes=LEGACY_SYNC_NOTE,
                )
            )
            created += 1

        updated = sum(1 for student in self.students.list_all() if self._sync_legacy_parent(student.id))
        logger.info(f"Legacy sync created {created} links and updated {updated} students")
        return SyncResult(links_created=created, students_updated=updated)
