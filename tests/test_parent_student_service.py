import pytest

from edushield.core.exceptions import ConflictError, NotFoundError, ValidationError
from edushield.models.enums import StudentStatus
from edushield.schemas.parent_student import (
    BulkParentStudentAssignmentCreate,
    ParentStudentAssignmentCreate,
    ParentStudentAssignmentUpdate,
)
from edushield.services.parent_student import LEGACY_SYNC_NOTE, ParentStudentAssignmentService


@pytest.fixture
def service(db):
    return ParentStudentAssignmentService(db)


def link(service, parent, student, primary=False, relationship="Parent"):
    return service.create_assignment(
        ParentStudentAssignmentCreate(
            parent_id=parent.id,
            student_id=student.id,
            relationship=relationship,
            is_primary_contact=primary,
        )
    )


def primaries(service, student):
    return [a.parent_id for a in service.list_by_student(student.id) if a.is_primary_contact]


def test_new_primary_replaces_existing_primary(service, make_parent, make_student):
    student = make_student()
    mother, father = make_parent(), make_parent()

    link(service, mother, student, primary=True)
    created = link(service, father, student, primary=True)

    assert created.is_primary_contact
    assert created.is_emergency_contact
    assert primaries(service, student) == [father.id]
    assert student.parent_id == father.id


def test_duplicate_link_is_a_conflict(service, make_parent, make_student):
    student, parent = make_student(), make_parent()
    link(service, parent, student)

    with pytest.raises(ConflictError):
        link(service, parent, student)


def test_unknown_parent_or_student_is_rejected(service, make_parent, make_student):
    student, parent = make_student(), make_parent()

    with pytest.raises(ValidationError):
        service.create_assignment(ParentStudentAssignmentCreate(parent_id=9999, student_id=student.id))
    with pytest.raises(ValidationError):
        service.create_assignment(ParentStudentAssignmentCreate(parent_id=parent.id, student_id=9999))


def test_first_non_primary_link_still_sets_legacy_parent(service, make_parent, make_student):
    student, parent = make_student(), make_parent()

    link(service, parent, student)

    assert primaries(service, student) == []
    assert student.parent_id == parent.id


def test_deleting_primary_promotes_oldest_active_link(service, make_parent, make_student):
    student = make_student()
    first, second, third = make_parent(), make_parent(), make_parent()
    link(service, first, student, primary=True)
    link(service, second, student)
    link(service, third, student)

    service.delete_assignment(first.id, student.id)

    assert primaries(service, student) == [second.id]
    assert student.parent_id == second.id


def test_deleting_last_link_clears_legacy_parent(service, make_parent, make_student):
    student, parent = make_student(), make_parent()
    link(service, parent, student, primary=True)

    service.delete_assignment(parent.id, student.id)

    assert student.parent_id is None
    with pytest.raises(NotFoundError):
        service.get_assignment(parent.id, student.id)


def test_deactivating_primary_does_not_promote(service, make_parent, make_student):
    student = make_student()
    first, second = make_parent(), make_parent()
    link(service, first, student, primary=True)
    link(service, second, student)

    result = service.deactivate_assignment(first.id, student.id)

    assert not result.is_active
    assert not result.is_primary_contact
    assert primaries(service, student) == []
    assert student.parent_id == second.id


def test_inactive_link_cannot_become_primary(service, make_parent, make_student):
    student, parent = make_student(), make_parent()
    link(service, parent, student)
    service.deactivate_assignment(parent.id, student.id)

    with pytest.raises(ValidationError):
        service.set_primary_contact(parent.id, student.id)
    with pytest.raises(ValidationError):
        service.update_assignment(
            parent.id,
            student.id,
            ParentStudentAssignmentUpdate(is_active=False, is_primary_contact=True),
        )


def test_set_primary_sequence_keeps_exactly_one_primary(service, make_parent, make_student):
    student = make_student()
    a, b, c = make_parent(), make_parent(), make_parent()
    for parent in (a, b, c):
        link(service, parent, student)

    for target in (a, b, c, a, c):
        result = service.set_primary_contact(target.id, student.id)

        assert result.is_primary_contact
        assert result.is_emergency_contact
        assert primaries(service, student) == [target.id]
        assert student.parent_id == target.id


def test_update_can_promote_and_rename_relationship(service, make_parent, make_student):
    student = make_student()
    first, second = make_parent(), make_parent()
    link(service, first, student, primary=True)
    link(service, second, student)

    updated = service.update_assignment(
        second.id,
        student.id,
        ParentStudentAssignmentUpdate(is_primary_contact=True, relationship="Guardian"),
    )

    assert updated.relationship == "Guardian"
    assert primaries(service, student) == [second.id]
    assert student.parent_id == second.id


def test_remove_primary_promotes_another_link(service, make_parent, make_student):
    student = make_student()
    first, second = make_parent(), make_parent()
    link(service, first, student, primary=True)
    link(service, second, student)

    result = service.remove_primary_contact(first.id, student.id)

    assert not result.is_primary_contact
    assert primaries(service, student) == [second.id]


def test_bulk_skips_missing_and_existing_students(service, make_parent, make_student):
    parent = make_parent()
    existing, fresh = make_student(), make_student()
    link(service, parent, existing)

    created = service.create_bulk_assignments(
        BulkParentStudentAssignmentCreate(
            parent_id=parent.id,
            student_ids=[existing.id, fresh.id, 9999],
            is_primary_contact=True,
        )
    )

    assert [a.student_id for a in created] == [fresh.id]
    assert fresh.parent_id == parent.id


def test_bulk_with_nothing_to_create_is_a_conflict(service, make_parent, make_student):
    parent, student = make_parent(), make_student()
    link(service, parent, student)

    with pytest.raises(ConflictError):
        service.create_bulk_assignments(
            BulkParentStudentAssignmentCreate(parent_id=parent.id, student_ids=[student.id, 9999])
        )


def test_delete_all_for_parent_reassigns_primaries(service, make_parent, make_student):
    leaving, staying = make_parent(), make_parent()
    a, b = make_student(), make_student()
    link(service, leaving, a, primary=True)
    link(service, staying, a)
    link(service, leaving, b, primary=True)

    assert service.delete_all_for_parent(leaving.id) == 2

    assert primaries(service, a) == [staying.id]
    assert a.parent_id == staying.id
    assert b.parent_id is None


def test_can_assign_and_is_assigned(service, make_parent, make_student):
    parent = make_parent()
    student = make_student()
    graduated = make_student(status=StudentStatus.GRADUATED)

    assert service.can_assign(parent.id, student.id)
    assert not service.can_assign(parent.id, graduated.id)
    assert not service.is_assigned(parent.id, student.id)

    link(service, parent, student)

    assert not service.can_assign(parent.id, student.id)
    assert service.is_assigned(parent.id, student.id)


def test_orphans_and_parents_without_students(service, make_parent, make_student):
    linked_parent, lonely_parent = make_parent(), make_parent()
    linked_student, orphan = make_student(), make_student()
    link(service, linked_parent, linked_student)

    assert [s.id for s in service.get_orphaned_students()] == [orphan.id]
    assert [p.id for p in service.get_parents_without_students()] == [lonely_parent.id]


def test_statistics(service, make_parent, make_student):
    parent = make_parent()
    a, b, c = make_student(), make_student(), make_student()
    link(service, parent, a, relationship="Mother")
    link(service, parent, b, relationship="Mother")
    link(service, parent, c, relationship="Guardian")
    service.deactivate_assignment(parent.id, c.id)

    stats = service.get_statistics()

    assert stats.total_assignments == 3
    assert stats.active_assignments == 2
    assert stats.inactive_assignments == 1
    assert stats.relationship_types == {"Mother": 2, "Guardian": 1}


def test_sync_legacy_links_backfills_link_table(db, service, make_parent, make_student):
    parent = make_parent()
    student = make_student(parent_id=parent.id)

    result = service.sync_legacy_links()

    assert result.links_created == 1
    assignment = service.get_assignment(parent.id, student.id)
    assert assignment.is_primary_contact
    assert assignment.notes == LEGACY_SYNC_NOTE

    again = service.sync_legacy_links()
    assert again.links_created == 0
