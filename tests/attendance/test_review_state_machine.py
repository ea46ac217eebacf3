from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from timesheet_portal.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from timesheet_portal.attendance.model import NewAttendanceRecord
from timesheet_portal.attendance.review import ReviewStateMachine
from timesheet_portal.core.enums import ReviewStatus, Role
from timesheet_portal.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

REVIEWED_AT = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


def _setup(initial=ReviewStatus.PENDING):
    repo = InMemoryAttendanceRepository(clock=lambda: datetime(2024, 5, 31, tzinfo=timezone.utc))
    record = repo.create(
        NewAttendanceRecord(
            owner_id=7,
            month="2024-05",
            work_hours=120,
            transportation_fee=3000,
            attendance_file_ref="/files/attendances/a.xlsx",
        )
    )
    if initial is not ReviewStatus.PENDING:
        repo.update(
            record.record_id,
            lambda r: replace(r, status=initial, reviewer_id=99, reviewed_at=REVIEWED_AT),
        )
    return repo, ReviewStateMachine(repo, clock=lambda: REVIEWED_AT), record.record_id


ROLE_CLASSES = {"reviewer": Role.TEACHER, "non_reviewer": Role.MEMBER}


@pytest.mark.parametrize("current", list(ReviewStatus))
@pytest.mark.parametrize("role_class", sorted(ROLE_CLASSES))
@pytest.mark.parametrize("target", [ReviewStatus.APPROVED, ReviewStatus.REJECTED])
def test_transition_table_is_exhaustive(current, role_class, target):
    repo, machine, record_id = _setup(current)
    allowed = current is ReviewStatus.PENDING and role_class == "reviewer"

    if allowed:
        updated = machine.review(
            record_id=record_id, reviewer_id=3, role=ROLE_CLASSES[role_class], target_status=target, comments="checked"
        )
        assert updated.status is target
        assert updated.reviewer_id == 3
        assert updated.reviewed_at == REVIEWED_AT
        assert updated.comments == "checked"
        return

    expected = InvalidTransitionError if current.is_terminal else AuthorizationError
    with pytest.raises(expected):
        machine.review(
            record_id=record_id, reviewer_id=3, role=ROLE_CLASSES[role_class], target_status=target, comments="checked"
        )
    assert repo.get(record_id).status is current


@pytest.mark.parametrize("role", [Role.TEACHER, Role.ADMIN])
def test_both_reviewer_roles_may_approve_without_comments(role):
    repo, machine, record_id = _setup()
    updated = machine.review(record_id=record_id, reviewer_id=2, role=role, target_status=ReviewStatus.APPROVED)
    assert updated.status is ReviewStatus.APPROVED
    assert updated.comments is None


@pytest.mark.parametrize("comments", [None, "", "   "])
def test_reject_requires_comments(comments):
    repo, machine, record_id = _setup()
    with pytest.raises(ValidationError) as exc:
        machine.review(
            record_id=record_id, reviewer_id=2, role=Role.ADMIN, target_status=ReviewStatus.REJECTED, comments=comments
        )
    assert exc.value.field == "comments"
    assert repo.get(record_id).status is ReviewStatus.PENDING
    assert repo.get(record_id).reviewer_id is None


def test_reject_with_reason_succeeds():
    repo, machine, record_id = _setup()
    updated = machine.review(
        record_id=record_id, reviewer_id=2, role=Role.ADMIN, target_status=ReviewStatus.REJECTED, comments="Missing receipt"
    )
    assert updated.status is ReviewStatus.REJECTED
    assert repo.get(record_id).comments == "Missing receipt"


def test_pending_is_never_a_target():
    _, machine, record_id = _setup()
    with pytest.raises(InvalidTransitionError):
        machine.review(record_id=record_id, reviewer_id=2, role=Role.ADMIN, target_status=ReviewStatus.PENDING)


def test_unknown_record():
    _, machine, _ = _setup()
    with pytest.raises(NotFoundError):
        machine.review(record_id=404, reviewer_id=2, role=Role.ADMIN, target_status=ReviewStatus.APPROVED)


def test_replay_with_same_key_returns_record():
    _, machine, record_id = _setup()
    first = machine.review(
        record_id=record_id, reviewer_id=2, role=Role.ADMIN, target_status=ReviewStatus.APPROVED, idempotency_key="k1"
    )
    again = machine.review(
        record_id=record_id, reviewer_id=2, role=Role.ADMIN, target_status=ReviewStatus.APPROVED, idempotency_key="k1"
    )
    assert again == first

    with pytest.raises(InvalidTransitionError):
        machine.review(
            record_id=record_id, reviewer_id=2, role=Role.ADMIN, target_status=ReviewStatus.APPROVED, idempotency_key="k2"
        )


def test_concurrent_conflicting_reviews_only_one_wins():
    for _ in range(20):
        repo, machine, record_id = _setup()
        barrier = threading.Barrier(2)
        outcomes = {}

        def attempt(target, comments):
            barrier.wait()
            try:
                machine.review(
                    record_id=record_id, reviewer_id=5, role=Role.TEACHER, target_status=target, comments=comments
                )
                outcomes[target] = "ok"
            except InvalidTransitionError:
                outcomes[target] = "invalid"

        threads = [
            threading.Thread(target=attempt, args=(ReviewStatus.APPROVED, None)),
            threading.Thread(target=attempt, args=(ReviewStatus.REJECTED, "no")),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes.values()) == ["invalid", "ok"]
        winner = next(target for target, outcome in outcomes.items() if outcome == "ok")
        assert repo.get(record_id).status is winner


def test_reviewer_fields_present_iff_terminal():
    repo, machine, _ = _setup()
    second = repo.create(
        NewAttendanceRecord(
            owner_id=8, month="2024-04", work_hours=10, transportation_fee=0, attendance_file_ref="/files/attendances/b.pdf"
        )
    )
    third = repo.create(
        NewAttendanceRecord(
            owner_id=8, month="2024-03", work_hours=10, transportation_fee=0, attendance_file_ref="/files/attendances/c.pdf"
        )
    )
    machine.review(record_id=second.record_id, reviewer_id=1, role=Role.ADMIN, target_status=ReviewStatus.APPROVED)
    machine.review(
        record_id=third.record_id, reviewer_id=1, role=Role.ADMIN, target_status=ReviewStatus.REJECTED, comments="late"
    )

    for record in repo.list_all():
        reviewed = record.reviewer_id is not None and record.reviewed_at is not None
        assert record.status.is_terminal == reviewed


@pytest.mark.parametrize("role, reviewer_id", [(Role.MEMBER, 99), (Role.MEMBER, 2), (Role.TEACHER, 99)])
def test_replaying_a_key_needs_the_same_reviewer(role, reviewer_id):
    _, machine, record_id = _setup()
    machine.review(
        record_id=record_id, reviewer_id=2, role=Role.ADMIN, target_status=ReviewStatus.APPROVED, idempotency_key="k"
    )

    with pytest.raises(InvalidTransitionError):
        machine.review(
            record_id=record_id,
            reviewer_id=reviewer_id,
            role=role,
            target_status=ReviewStatus.APPROVED,
            idempotency_key="k",
        )


def test_non_text_comments_are_rejected():
    repo, machine, record_id = _setup()
    with pytest.raises(ValidationError) as exc:
        machine.review(record_id=record_id, reviewer_id=2, role=Role.ADMIN, target_status=ReviewStatus.REJECTED, comments=5)
    assert exc.value.field == "comments"
    assert repo.get(record_id).status is ReviewStatus.PENDING
