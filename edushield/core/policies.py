"""Role allow-lists and record-level access rules.

Role checks happen in the endpoint dependency (`require_roles`). Record-level
checks decide which students a caller may see:

- Admin and DevAuth see everything.
- A student sees only their own record.
- A parent sees children linked to them by an active assignment.
- A faculty member sees students actively assigned to them.
"""

from sqlalchemy.orm import Session

from edushield.core.exceptions import PermissionDeniedError
from edushield.models.enums import UserRole
from edushield.models.user import User
from edushield.repositories.faculty import FacultyRepository
from edushield.repositories.parent import ParentRepository
from edushield.repositories.parent_student import ParentStudentRepository
from edushield.repositories.student import StudentRepository
from edushield.repositories.student_faculty import StudentFacultyRepository

ADMIN_ROLES = (UserRole.ADMIN, UserRole.DEV_AUTH)
ADMIN_OR_FACULTY = (UserRole.ADMIN, UserRole.DEV_AUTH, UserRole.FACULTY)
ADMIN_OR_PARENT = (UserRole.ADMIN, UserRole.DEV_AUTH, UserRole.PARENT)
FEE_PAYERS = (UserRole.STUDENT, UserRole.PARENT)
ALL_ROLES = tuple(UserRole)


class StudentAccessPolicy:
    """Decides which student records a user may read."""

    def __init__(self, db: Session):
        self.db = db

    def is_admin(self, user: User) -> bool:
        return user.role in ADMIN_ROLES

    def accessible_student_ids(self, user: User) -> list[int] | None:
        """Student ids visible to the user, or None when unrestricted."""
        if self.is_admin(user):
            return None

        if user.role == UserRole.STUDENT:
            student = StudentRepository(self.db).get_by_user_id(user.id)
            return [student.id] if student else []

        if user.role == UserRole.PARENT:
            parent = ParentRepository(self.db).get_by_user_id(user.id)
            if not parent:
                return []
            links = ParentStudentRepository(self.db).list_by_parent(parent.id, active_only=True)
            return [link.student_id for link in links]

        if user.role == UserRole.FACULTY:
            faculty = FacultyRepository(self.db).get_by_user_id(user.id)
            if not faculty:
                return []
            assignments = StudentFacultyRepository(self.db).list_by_faculty(faculty.id, active_only=True)
            return [a.student_id for a in assignments]

        return []

    def can_access_student(self, user: User, student_id: int) -> bool:
        allowed = self.accessible_student_ids(user)
        return allowed is None or student_id in allowed

    def ensure_can_access_student(self, user: User, student_id: int) -> None:
        if not self.can_access_student(user, student_id):
            raise PermissionDeniedError("You do not have access to this student's records")

    def ensure_own_parent_profile(self, user: User, parent_id: int) -> None:
        """Parents may only act on their own parent record."""
        if self.is_admin(user):
            return
        parent = ParentRepository(self.db).get_by_user_id(user.id)
        if not parent or parent.id != parent_id:
            raise PermissionDeniedError("You can only access your own parent profile")

    def ensure_own_faculty_profile(self, user: User, faculty_id: int) -> None:
        """Faculty may only act on their own faculty record."""
        if self.is_admin(user):
            return
        faculty = FacultyRepository(self.db).get_by_user_id(user.id)
        if not faculty or faculty.id != faculty_id:
            raise PermissionDeniedError("You can only access your own faculty record")
