"""Student fee endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from edushield.core.database import get_db
from edushield.core.dependencies import CurrentUser, require_roles
from edushield.core.exceptions import OperationFailedError
from edushield.core.policies import (
    ADMIN_OR_FACULTY,
    ADMIN_OR_PARENT,
    ADMIN_ROLES,
    FEE_PAYERS,
    StudentAccessPolicy,
)
from edushield.models.enums import FeeType, PaymentStatus
from edushield.models.user import User
from edushield.schemas.common import MessageResponse
from edushield.schemas.student_fee import (
    FeeStatistics,
    LateFeeRunResult,
    PaginatedStudentFeeResponse,
    PaymentRequest,
    PaymentResult,
    StudentFeeCreate,
    StudentFeeFilter,
    StudentFeeResponse,
    StudentFeeUpdate,
)
from edushield.services.student_fee import StudentFeeService

router = APIRouter()

AdminUser = Annotated[User, Depends(require_roles(*ADMIN_ROLES))]


def visible(fees: list[StudentFeeResponse], allowed: list[int] | None) -> list[StudentFeeResponse]:
    if allowed is None:
        return fees
    return [fee for fee in fees if fee.student_id in allowed]


@router.post("", response_model=StudentFeeResponse)
def create_fee(
    request: StudentFeeCreate,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Create a fee. Amount due and payment status are derived from the amounts.
    """
    service = StudentFeeService(db)
    return service.create_fee(request)


@router.get("", response_model=PaginatedStudentFeeResponse)
def list_fees(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    student_id: int | None = None,
    fee_type: FeeType | None = None,
    term: str | None = None,
    payment_status: PaymentStatus | None = None,
    due_from: date | None = None,
    due_to: date | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    """
    List fees visible to the caller with filtering and pagination.
    """
    filters = StudentFeeFilter(
        student_id=student_id,
        fee_type=fee_type,
        term=term,
        payment_status=payment_status,
        due_from=due_from,
        due_to=due_to,
    )
    student_ids = StudentAccessPolicy(db).accessible_student_ids(current_user)
    service = StudentFeeService(db)
    return service.list_fees(filters, student_ids, page, page_size)


@router.get("/overdue", response_model=list[StudentFeeResponse])
def list_overdue_fees(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentFeeService(db)
    allowed = StudentAccessPolicy(db).accessible_student_ids(current_user)
    return visible(service.list_overdue(), allowed)


@router.get("/by-type/{fee_type}", response_model=list[StudentFeeResponse])
def list_fees_by_type(
    fee_type: FeeType,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentFeeService(db)
    allowed = StudentAccessPolicy(db).accessible_student_ids(current_user)
    return visible(service.list_by_type(fee_type), allowed)


@router.get("/by-term/{term}", response_model=list[StudentFeeResponse])
def list_fees_by_term(
    term: str,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentFeeService(db)
    allowed = StudentAccessPolicy(db).accessible_student_ids(current_user)
    return visible(service.list_by_term(term), allowed)


@router.post("/calculate-late-fees", response_model=LateFeeRunResult)
def calculate_late_fees(
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Run the late fee calculation now instead of waiting for the nightly job.
    """
    service = StudentFeeService(db)
    return LateFeeRunResult(updated_count=service.calculate_late_fees())


@router.get("/student/{student_id}", response_model=list[StudentFeeResponse])
def list_fees_for_student(
    student_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_can_access_student(current_user, student_id)
    service = StudentFeeService(db)
    return service.list_for_student(student_id)


@router.get("/student/{student_id}/statistics", response_model=FeeStatistics)
def get_fee_statistics(
    student_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    StudentAccessPolicy(db).ensure_can_access_student(current_user, student_id)
    service = StudentFeeService(db)
    return service.get_student_statistics(student_id)


@router.get("/faculty/{faculty_id}", response_model=list[StudentFeeResponse])
def list_fees_for_faculty(
    faculty_id: int,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_OR_FACULTY))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Fees of students actively assigned to a faculty member.
    """
    StudentAccessPolicy(db).ensure_own_faculty_profile(current_user, faculty_id)
    service = StudentFeeService(db)
    return service.list_for_faculty(faculty_id)


@router.get("/parent/{parent_id}", response_model=list[StudentFeeResponse])
def list_fees_for_parent(
    parent_id: int,
    current_user: Annotated[User, Depends(require_roles(*ADMIN_OR_PARENT))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Fees of children actively linked to a parent.
    """
    StudentAccessPolicy(db).ensure_own_parent_profile(current_user, parent_id)
    service = StudentFeeService(db)
    return service.list_for_parent(parent_id)


@router.get("/{fee_id}", response_model=StudentFeeResponse)
def get_fee(
    fee_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentFeeService(db)
    fee = service.get_fee_response(fee_id)
    StudentAccessPolicy(db).ensure_can_access_student(current_user, fee.student_id)
    return fee


@router.put("/{fee_id}", response_model=StudentFeeResponse)
def update_fee(
    fee_id: int,
    request: StudentFeeUpdate,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentFeeService(db)
    return service.update_fee(fee_id, request)


@router.delete("/{fee_id}", response_model=MessageResponse)
def delete_fee(
    fee_id: int,
    current_user: AdminUser,
    db: Annotated[Session, Depends(get_db)],
):
    service = StudentFeeService(db)
    service.delete_fee(fee_id)
    return MessageResponse(message="Fee deleted successfully")


@router.post("/{fee_id}/pay", response_model=PaymentResult)
def pay_fee(
    fee_id: int,
    request: PaymentRequest,
    current_user: Annotated[User, Depends(require_roles(*FEE_PAYERS))],
    db: Annotated[Session, Depends(get_db)],
):
    """
    Pay towards a fee through the payment gateway.
    Students may pay their own fees, parents the fees of linked children.
    """
    service = StudentFeeService(db)
    fee = service.get_fee(fee_id)
    StudentAccessPolicy(db).ensure_can_access_student(current_user, fee.student_id)

    result = service.make_payment(fee_id, request)
    if not result.success:
        raise OperationFailedError(result.message, [result.message])
    return result
