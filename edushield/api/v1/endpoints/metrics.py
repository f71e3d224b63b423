"""Dashboard metrics endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import require_roles
from edushield.core.policies import ADMIN_OR_PARENT, ADMIN_ROLES, StudentAccessPolicy
from edushield.models.enums import UserRole
from edushield.models.user import User
from edushield.schemas.metrics import AdminMetrics, ParentMetrics
from edushield.services.metrics import MetricsService

router = APIRouter()


@router.get("/parent", response_model=ParentMetrics)
def get_my_parent_metrics(
    current_user: Annotated[User, Depends(require_roles(UserRole.PARENT))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Dashboard metrics for the calling parent's children.

    Returns total children, children with overdue fees, the overdue amount
    and up to 10 results from the last 30 days.
    """
    service = MetricsService(db)
    return service.get_parent_metrics_for_user(current_user.id)


@router.get("/parent/{parent_id}", response_model=ParentMetrics)
def get_parent_metrics(
    parent_id: int,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_OR_PARENT))],
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_own_parent_profile(current_user, parent_id)
    service = MetricsService(db)
    return service.get_parent_metrics(parent_id)


@router.get("/admin", response_model=AdminMetrics)
def get_admin_metrics(
    current_user: Annotated[User, Depends(require_roles(*ADMIN_ROLES))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    School-wide counts: students, faculty, parents, recent enrollments
    and overdue payments.
    """
    service = MetricsService(db)
    return service.get_admin_metrics()
