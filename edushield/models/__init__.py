"""Database models package."""

from edushield.models.enums import (
    ExamType,
    FeeType,
    Gender,
    ParentType,
    PaymentStatus,
    StudentStatus,
    UserRole,
)
from edushield.models.faculty import Faculty
from edushield.models.parent import Parent
from edushield.models.parent_student import ParentStudent
from edushield.models.student import Student
from edushield.models.student_faculty import StudentFaculty
from edushield.models.student_fee import StudentFee
from edushield.models.student_performance import StudentPerformance
from edushield.models.user import User

__all__ = [
    # Enums
    "ExamType",
    "FeeType",
    "Gender",
    "ParentType",
    "PaymentStatus",
    "StudentStatus",
    "UserRole",
    # Entities
    "User",
    "Student",
    "Faculty",
    "Parent",
    # Assignments
    "StudentFaculty",
    "ParentStudent",
    # Records
    "StudentFee",
    "StudentPerformance",
]
