from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, FrozenSet, Optional

from ..common.datetime_utils import now_utc
from ..core.enums import ReviewStatus, Role
from ..core.exceptions import AuthorizationError, InvalidTransitionError, ValidationError
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

# Legal targets per current status. Terminal statuses have none.
TRANSITIONS: Dict[ReviewStatus, FrozenSet[ReviewStatus]] = {
    ReviewStatus.PENDING: frozenset({ReviewStatus.APPROVED, ReviewStatus.REJECTED}),
    ReviewStatus.APPROVED: frozenset(),
    ReviewStatus.REJECTED: frozenset(),
}


class ReviewStateMachine:
    """Approve/reject transitions for attendance records.

    The checks run inside the store's per-record update, so of two
    concurrent reviews only the one that still sees ``PENDING`` wins; the
    other gets ``InvalidTransitionError``.
    """

    def __init__(self, records: AttendanceRepository, clock: Callable = now_utc):
        self._records = records
        self._clock = clock

    def review(
        self,
        *,
        record_id: int,
        reviewer_id: int,
        role: Role,
        target_status: ReviewStatus,
        comments: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> AttendanceRecord:
        if comments is not None and not isinstance(comments, str):
            raise ValidationError("comments must be text", field="comments")
        note = (comments or "").strip() or None

        def transition(current: AttendanceRecord) -> AttendanceRecord:
            if (
                idempotency_key
                and role.is_reviewer
                and current.review_key == idempotency_key
                and current.reviewer_id == int(reviewer_id)
                and current.status is target_status
            ):
                return current

            self.check(current=current, role=role, target_status=target_status, comments=note)
            return replace(
                current,
                status=target_status,
                reviewer_id=int(reviewer_id),
                reviewed_at=self._clock(),
                comments=note if note is not None else current.comments,
                review_key=idempotency_key,
            )

        updated = self._records.update(int(record_id), transition)
        logger.info(
            "attendance record %s marked %s by reviewer %s", record_id, updated.status.value, reviewer_id
        )
        return updated

    @staticmethod
    def check(
        *,
        current: AttendanceRecord,
        role: Role,
        target_status: ReviewStatus,
        comments: Optional[str],
    ) -> None:
        """Raise the error a review of ``current`` would fail with, if any."""

        if current.status.is_terminal:
            raise InvalidTransitionError(
                f"Record is already {current.status.value.lower()}", field="status"
            )
        if not role.is_reviewer:
            raise AuthorizationError("Only teachers and admins may review records", field="role")
        if target_status not in TRANSITIONS[current.status]:
            raise InvalidTransitionError(
                f"Cannot move a {current.status.value.lower()} record to {target_status.value.lower()}",
                field="status",
            )
        if target_status is ReviewStatus.REJECTED and not comments:
            raise ValidationError("A reason is required when rejecting", field="comments")
