"""Domain enumerations shared by models and schemas."""

import enum


class UserRole(str, enum.Enum):
    """Role claim carried in access tokens."""

    ADMIN = "Admin"
    STUDENT = "Student"
    FACULTY = "Faculty"
    PARENT = "Parent"
    DEV_AUTH = "DevAuth"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class StudentStatus(str, enum.Enum):
    """Enrollment status of a student."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    SUSPENDED = "Suspended"
    GRADUATED = "Graduated"
    TRANSFERRED = "Transferred"
    WITHDRAWN = "Withdrawn"


class ParentType(str, enum.Enum):
    PRIMARY = "Primary"
    SECONDARY = "Secondary"
    GUARDIAN = "Guardian"
    STEP_PARENT = "StepParent"
    FOSTER_PARENT = "FosterParent"
    OTHER = "Other"


class FeeType(str, enum.Enum):
    TUITION = "Tuition"
    EXAM = "Exam"
    TRANSPORT = "Transport"
    LIBRARY = "Library"
    MISC = "Misc"


class PaymentStatus(str, enum.Enum):
    """Payment state of a fee record, derived from amounts and due date."""

    PENDING = "Pending"
    PARTIAL = "Partial"
    PAID = "Paid"
    OVERDUE = "Overdue"


class ExamType(str, enum.Enum):
    UNIT_TEST = "UnitTest"
    MID_TERM = "MidTerm"
    FINAL = "Final"
    ASSIGNMENT = "Assignment"
    LABORATORY = "Laboratory"
    PRESENTATION = "Presentation"
    CONTINUOUS_ASSESSMENT = "ContinuousAssessment"
    OTHER = "Other"
