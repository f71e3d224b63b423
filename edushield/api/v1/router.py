"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from edushield.api.v1.endpoints import (
    auth,
    faculty,
    faculty_student_assignments,
    metrics,
    parent_student_assignments,
    parents,
    student_fees,
    student_performance,
    students,
    users,
)

api_router = APIRouter()

# Authentication (public login, token refresh)
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

# User administration (Admin)
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
)

# Students
api_router.include_router(
    students.router,
    prefix="/students",
    tags=["Students"],
)

# Faculty
api_router.include_router(
    faculty.router,
    prefix="/faculty",
    tags=["Faculty"],
)

# Parents
api_router.include_router(
    parents.router,
    prefix="/parents",
    tags=["Parents"],
)

# Parent-student links
api_router.include_router(
    parent_student_assignments.router,
    prefix="/parent-student-assignments",
    tags=["Parent-Student Assignments"],
)

# Faculty-student links
api_router.include_router(
    faculty_student_assignments.router,
    prefix="/faculty-student-assignments",
    tags=["Faculty-Student Assignments"],
)

# Fees and payments
api_router.include_router(
    student_fees.router,
    prefix="/student-fees",
    tags=["Student Fees"],
)

# Exam results
api_router.include_router(
    student_performance.router,
    prefix="/student-performance",
    tags=["Student Performance"],
)

# Dashboard metrics (Parent / Admin)
api_router.include_router(
    metrics.router,
    prefix="/metrics",
    tags=["Metrics"],
)
