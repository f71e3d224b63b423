from datetime import date, timedelta
from decimal import Decimal

import pytest

from edushield.core.exceptions import NotFoundError
from edushield.models.enums import ExamType, FeeType, StudentStatus, UserRole
from edushield.schemas.parent_student import ParentStudentAssignmentCreate
from edushield.schemas.student_fee import StudentFeeCreate
from edushield.schemas.student_performance import StudentPerformanceCreate
from edushield.services.metrics import MetricsService
from edushield.services.parent_student import ParentStudentAssignmentService
from edushield.services.payment_gateway import MockPaymentGateway
from edushield.services.student_fee import StudentFeeService
from edushield.services.student_performance import StudentPerformanceService
from tests.conftest import auth_headers


@pytest.fixture
def service(db):
    return MetricsService(db)


def add_fee(db, student, total, overdue_days=None, term="2024-T1"):
    fees = StudentFeeService(db, gateway=MockPaymentGateway(failure_rate=0))
    fee = fees.create_fee(
        StudentFeeCreate(
            student_id=student.id,
            fee_type=FeeType.TUITION,
            term=term,
            total_amount=Decimal(total),
            due_date=date.today() + timedelta(days=30),
        )
    )
    if overdue_days:
        fees.fees.update(fees.get_fee(fee.id), {"due_date": date.today() - timedelta(days=overdue_days)})
    return fee


def add_result(db, student, subject, days_ago):
    return StudentPerformanceService(db).create_record(
        StudentPerformanceCreate(
            student_id=student.id,
            subject=subject,
            exam_type=ExamType.UNIT_TEST,
            exam_date=date.today() - timedelta(days=days_ago),
            score=Decimal("40"),
            max_score=Decimal("50"),
        )
    )


@pytest.fixture
def family(db, make_parent, make_student):
    parent = make_parent()
    older, younger, stranger = make_student(), make_student(), make_student()
    links = ParentStudentAssignmentService(db)
    for child in (older, younger):
        links.create_assignment(ParentStudentAssignmentCreate(parent_id=parent.id, student_id=child.id))

    add_fee(db, older, "1000.00", overdue_days=10)
    add_fee(db, older, "150.00", overdue_days=3, term="2024-T2")
    add_fee(db, younger, "500.00")
    add_fee(db, stranger, "700.00", overdue_days=5)
    db.commit()
    return {"parent": parent, "older": older, "younger": younger, "stranger": stranger}


def test_parent_metrics_cover_only_linked_children(service, family):
    metrics = service.get_parent_metrics(family["parent"].id)

    assert metrics.total_children == 2
    assert metrics.children_with_overdue_fees == 1
    assert metrics.total_overdue_amount == Decimal("1150.00")


def test_parent_metrics_recent_results(service, db, family):
    recent = add_result(db, family["older"], "Maths", days_ago=3)
    add_result(db, family["older"], "History", days_ago=45)
    add_result(db, family["stranger"], "Maths", days_ago=2)

    metrics = service.get_parent_metrics(family["parent"].id)

    assert [r.id for r in metrics.recent_performances] == [recent.id]
    assert metrics.recent_performances[0].grade == "A-"


def test_recent_results_are_newest_first_and_capped(service, db, family):
    for i in range(12):
        add_result(db, family["younger"], f"Subject {i}", days_ago=i)

    results = service.get_parent_metrics(family["parent"].id).recent_performances

    assert len(results) == 10
    assert [r.subject for r in results[:2]] == ["Subject 0", "Subject 1"]


def test_inactive_links_are_not_counted(service, db, family):
    ParentStudentAssignmentService(db).deactivate_assignment(family["parent"].id, family["older"].id)

    metrics = service.get_parent_metrics(family["parent"].id)

    assert metrics.total_children == 1
    assert metrics.children_with_overdue_fees == 0
    assert metrics.total_overdue_amount == Decimal("0.00")


def test_unknown_parent(service, make_user):
    with pytest.raises(NotFoundError):
        service.get_parent_metrics(9999)
    with pytest.raises(NotFoundError):
        service.get_parent_metrics_for_user(make_user(UserRole.PARENT).id)


def test_admin_metrics(service, family, make_student, make_faculty):
    make_student(status=StudentStatus.GRADUATED)
    make_student(enrollment_date=date.today() - timedelta(days=5))
    make_faculty()
    make_faculty(is_active=False)

    metrics = service.get_admin_metrics()

    assert (metrics.total_students, metrics.active_students, metrics.inactive_students) == (5, 4, 1)
    assert (metrics.total_faculty, metrics.active_faculty, metrics.inactive_faculty) == (2, 1, 1)
    assert metrics.total_parents == 1
    assert metrics.recent_enrollments == 1
    assert metrics.overdue_payments == 3
    assert metrics.total_overdue_amount == Decimal("1850.00")


def test_metrics_endpoints_are_role_gated(client, db, family, make_user, make_parent):
    parent_user = make_user(UserRole.PARENT)
    family["parent"].user_id = parent_user.id
    other = make_parent()
    db.commit()
    parent = auth_headers(parent_user)
    admin = auth_headers(make_user(UserRole.ADMIN))
    faculty = auth_headers(make_user(UserRole.FACULTY))

    mine = client.get("/api/v1/metrics/parent", headers=parent)
    assert mine.status_code == 200
    assert mine.json()["total_children"] == 2
    assert Decimal(mine.json()["total_overdue_amount"]) == Decimal("1150.00")

    assert client.get(f"/api/v1/metrics/parent/{family['parent'].id}", headers=parent).status_code == 200
    assert client.get(f"/api/v1/metrics/parent/{other.id}", headers=parent).status_code == 403
    assert client.get(f"/api/v1/metrics/parent/{other.id}", headers=admin).status_code == 200
    assert client.get("/api/v1/metrics/parent", headers=admin).status_code == 403
    assert client.get(f"/api/v1/metrics/parent/{other.id}", headers=faculty).status_code == 403

    assert client.get("/api/v1/metrics/admin", headers=parent).status_code == 403
    summary = client.get("/api/v1/metrics/admin", headers=admin)
    assert summary.status_code == 200
    assert summary.json()["overdue_payments"] == 3
