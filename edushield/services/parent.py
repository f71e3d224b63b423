"""Parent management service."""

import logging
from collections import Counter
from datetime import date

from sqlalchemy.orm import Session

from edushield.core.exceptions import ConflictError, NotFoundError, ValidationError
from edushield.core.security import hash_password
from edushield.models.enums import ParentType, UserRole
from edushield.models.parent import Parent
from edushield.models.user import User
from edushield.repositories.parent import ParentRepository
from edushield.repositories.parent_student import ParentStudentRepository
from edushield.repositories.student import StudentRepository
from edushield.repositories.user import UserRepository
from edushield.schemas.parent import (
    PaginatedParentResponse,
    ParentCreate,
    ParentFilter,
    ParentResponse,
    ParentStatistics,
    ParentUpdate,
    ParentWithChildrenResponse,
)
from edushield.schemas.parent_student import (
    ParentStudentAssignmentCreate,
    ParentStudentAssignmentResponse,
)
from edushield.schemas.student import StudentSummary
from edushield.services.parent_student import ParentStudentAssignmentService

logger = logging.getLogger(__name__)

MAX_AGE_YEARS = 120


class ParentService:
    """Parent management service."""

    def __init__(self, db: Session):
        self.db = db
        self.parents = ParentRepository(db)
        self.users = UserRepository(db)
        self.students = StudentRepository(db)
        self.links = ParentStudentRepository(db)

    def _validate_date_of_birth(self, date_of_birth: date | None) -> None:
        if not date_of_birth:
            return
        today = date.today()
        if date_of_birth >= today:
            raise ValidationError("Date of birth must be in the past")
        if today.year - date_of_birth.year > MAX_AGE_YEARS:
            raise ValidationError(f"Date of birth cannot be more than {MAX_AGE_YEARS} years ago")

    def get_parent(self, parent_id: int) -> Parent:
        parent = self.parents.get(parent_id)
        if not parent:
            raise NotFoundError("Parent", str(parent_id))
        return parent

    def get_by_user(self, user_id: int) -> Parent:
        parent = self.parents.get_by_user_id(user_id)
        if not parent:
            raise NotFoundError("Parent profile", str(user_id))
        return parent

    def get_with_children(self, parent_id: int) -> ParentWithChildrenResponse:
        parent = self.get_parent(parent_id)
        children = self.students.list_by_parent(parent_id)
        response = ParentWithChildrenResponse.model_validate(parent)
        response.children = [StudentSummary.model_validate(child) for child in children]
        return response

    def create_parent(self, request: ParentCreate) -> ParentResponse:
        """Create a parent together with a Parent-role user account."""
        if self.users.email_exists(request.email) or self.parents.email_exists(request.email):
            raise ConflictError(f"A user with email {request.email} already exists")
        self._validate_date_of_birth(request.date_of_birth)

        user = self.users.create(
            User(
                email=request.email,
                name=f"{request.first_name} {request.last_name}",
                role=UserRole.PARENT,
                password_hash=hash_password(request.password) if request.password else None,
                is_active=True,
            )
        )
        parent = self.parents.create(
            Parent(user_id=user.id, is_active=True, **request.model_dump(exclude={"password"}))
        )
        logger.info(f"Created parent {parent.id} for user {user.id}")
        return ParentResponse.model_validate(parent)

    def update_parent(self, parent_id: int, request: ParentUpdate) -> ParentResponse:
        parent = self.get_parent(parent_id)
        changes = request.model_dump(exclude_unset=True)
        self._validate_date_of_birth(changes.get("date_of_birth"))
        parent = self.parents.update(parent, changes)

        user = self.users.get(parent.user_id) if parent.user_id else None
        if user:
            self.users.update(user, {"name": parent.full_name, "is_active": parent.is_active})
        return ParentResponse.model_validate(parent)

    def delete_parent(self, parent_id: int) -> None:
        """Delete a parent, its links (reassigning primaries) and its user account."""
        parent = self.get_parent(parent_id)
        ParentStudentAssignmentService(self.db).delete_all_for_parent(parent_id)
        user = self.users.get(parent.user_id) if parent.user_id else None
        self.parents.delete(parent)
        if user:
            self.users.delete(user)
        logger.info(f"Deleted parent {parent_id}")

    def list_parents(
        self,
        filters: ParentFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedParentResponse:
        filters = filters or ParentFilter()
        items, total = self.parents.search(**filters.model_dump(), page=page, page_size=page_size)
        return PaginatedParentResponse.build(
            [ParentResponse.model_validate(p) for p in items], total, page, page_size
        )

    def list_emergency_contacts(self) -> list[ParentResponse]:
        return [ParentResponse.model_validate(p) for p in self.parents.list_emergency_contacts()]

    def list_authorized_for_pickup(self) -> list[ParentResponse]:
        return [ParentResponse.model_validate(p) for p in self.parents.list_authorized_for_pickup()]

    def add_child(self, parent_id: int, student_id: int) -> ParentStudentAssignmentResponse:
        """Legacy single-parent assignment, kept for older clients.

        Refuses a student whose legacy parent is already someone else; the link
        is created as the student's primary contact.
        """
        self.get_parent(parent_id)
        student = self.students.get(student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))
        if student.parent_id is not None and student.parent_id != parent_id:
            raise ConflictError("Student is already assigned to another parent")

        service = ParentStudentAssignmentService(self.db)
        if self.links.exists(parent_id, student_id):
            service.activate_assignment(parent_id, student_id)
            return service.set_primary_contact(parent_id, student_id)
        return service.create_assignment(
            ParentStudentAssignmentCreate(
                parent_id=parent_id,
                student_id=student_id,
                relationship="Parent",
                is_primary_contact=True,
            )
        )

    def remove_child(self, parent_id: int, student_id: int) -> None:
        self.get_parent(parent_id)
        ParentStudentAssignmentService(self.db).delete_assignment(parent_id, student_id)

    def get_statistics(self) -> ParentStatistics:
        """Aggregate counts over all parents and active links."""
        parents = self.parents.list_all()
        children_per_parent = Counter(
            link.parent_id for link in self.links.list_all() if link.is_active
        )
        parents_with_children = len(children_per_parent)
        total_children = sum(children_per_parent.values())
        average = round(total_children / parents_with_children, 2) if parents_with_children else 0.0

        type_counts = Counter(p.parent_type for p in parents)
        by_state = Counter(p.state for p in parents if p.state)
        by_city = Counter(p.city for p in parents if p.city)

        return ParentStatistics(
            total_parents=len(parents),
            active_parents=sum(1 for p in parents if p.is_active),
            primary_parents=type_counts[ParentType.PRIMARY],
            secondary_parents=type_counts[ParentType.SECONDARY],
            guardians=type_counts[ParentType.GUARDIAN],
            emergency_contacts=sum(1 for p in parents if p.is_emergency_contact),
            authorized_for_pickup=sum(1 for p in parents if p.is_authorized_to_pickup),
            parents_with_children=parents_with_children,
            average_children_per_parent=average,
            parents_by_state=dict(sorted(by_state.items())),
            parents_by_city=dict(sorted(by_city.items())),
        )
