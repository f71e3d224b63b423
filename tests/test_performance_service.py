from datetime import date, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError

from edushield.core.exceptions import ConflictError, ValidationError
from edushield.models.enums import ExamType
from edushield.schemas.student_performance import (
    StudentPerformanceCreate,
    StudentPerformanceFilter,
    StudentPerformanceUpdate,
)
from edushield.services.student_performance import (
    StudentPerformanceService,
    calculate_grade,
    calculate_percentage,
    exact_percentage,
)

LAST_WEEK = date.today() - timedelta(days=7)


@pytest.fixture
def service(db):
    return StudentPerformanceService(db)


def result(student, subject="Maths", score="45", max_score="50", exam_date=LAST_WEEK, exam_type=ExamType.UNIT_TEST):
    return StudentPerformanceCreate(
        student_id=student.id,
        subject=subject,
        exam_type=exam_type,
        exam_date=exam_date,
        score=Decimal(score),
        max_score=Decimal(max_score) if max_score else None,
    )


@pytest.mark.parametrize(
    "percentage, grade",
    [(95, "A+"), (90, "A+"), (84.99, "A-"), (70, "B"), (40, "D"), (34.9, "F"), (None, "N/A")],
)
def test_grade_bands(percentage, grade):
    assert calculate_grade(percentage) == grade


def test_percentage_requires_max_score():
    assert calculate_percentage(Decimal("45"), Decimal("50")) == 90.0
    assert calculate_percentage(Decimal("45"), None) is None


def test_grade_uses_unrounded_percentage():
    score, max_score = Decimal("1079.95"), Decimal("1200")

    assert calculate_percentage(score, max_score) == 90.0
    assert calculate_grade(exact_percentage(score, max_score)) == "A"


def test_response_grade_is_not_lifted_by_rounding(service, make_student):
    created = service.create_record(result(make_student(), score="1079.95", max_score="1200"))

    assert created.percentage == 90.0
    assert created.grade == "A"


def test_create_record_encrypts_score(service, make_student):
    student = make_student()

    created = service.create_record(result(student))

    assert created.score == Decimal("45.00")
    assert created.percentage == 90.0
    assert created.grade == "A+"
    assert service.get_record(created.id).encrypted_score != "45.00"


def test_score_above_max_is_rejected_by_schema(make_student):
    student = make_student()

    with pytest.raises(SchemaValidationError):
        result(student, score="55", max_score="50")


def test_future_exam_and_duplicates_are_rejected(service, make_student):
    student = make_student()

    with pytest.raises(ValidationError):
        service.create_record(result(student, exam_date=date.today() + timedelta(days=1)))

    service.create_record(result(student))
    with pytest.raises(ConflictError):
        service.create_record(result(student, score="10"))


def test_update_checks_score_against_existing_max(service, make_student):
    student = make_student()
    created = service.create_record(result(student))

    with pytest.raises(ValidationError):
        service.update_record(created.id, StudentPerformanceUpdate(score=Decimal("51")))

    updated = service.update_record(created.id, StudentPerformanceUpdate(score=Decimal("30")))
    assert updated.score == Decimal("30.00")
    assert updated.grade == "C+"


def test_statistics_per_subject(service, make_student):
    student = make_student()
    service.create_record(result(student, subject="Maths", score="40", exam_type=ExamType.UNIT_TEST))
    service.create_record(result(student, subject="Maths", score="50", exam_type=ExamType.FINAL))
    service.create_record(result(student, subject="Art", score="33", max_score=None))

    stats = service.get_student_statistics(student.id)

    assert stats.total_exams == 3
    assert stats.average_score == 41.0
    assert stats.highest_score == 50.0
    assert stats.lowest_score == 33.0
    assert [b.subject for b in stats.subject_breakdown] == ["Art", "Maths"]
    assert stats.subject_breakdown[1].average_score == 45.0

    maths_only = service.get_student_statistics(student.id, subject="Maths")
    assert maths_only.total_exams == 2


def test_statistics_without_results(service, make_student):
    stats = service.get_student_statistics(make_student().id)

    assert stats.total_exams == 0
    assert stats.subject_breakdown == []


def test_list_records_filters(service, make_student):
    a, b = make_student(), make_student()
    service.create_record(result(a, subject="Maths"))
    service.create_record(result(a, subject="Physics"))
    service.create_record(result(b, subject="Maths"))

    page = service.list_records(StudentPerformanceFilter(subject="Maths"), student_ids=[a.id])

    assert page.total == 1
    assert page.items[0].student_id == a.id
