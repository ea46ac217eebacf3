from __future__ import annotations

import logging
from typing import Optional

from ..common.deadline import call_with_timeout
from ..core.constants import DEFAULT_IO_TIMEOUT_SECONDS
from ..core.enums import FileKind, ReviewStatus, Role
from ..core.exceptions import NotFoundError
from .file_store import FileStore
from .model import (
    AttendanceFilter,
    AttendanceRecord,
    AttendanceSort,
    AttendanceSubmission,
    NewAttendanceRecord,
    PagedResult,
    PageRequest,
)
from .query import query
from .repository import AttendanceRepository
from .review import ReviewStateMachine
from .validation import validate_submission

logger = logging.getLogger(__name__)

_UNSET = object()


class AttendanceService:
    """Use cases: submit, list, download, remove and review timesheets.

    Every call into the store or the file store is bounded by ``timeout``
    (seconds; ``None`` waits forever). A caller that gives up after the store
    committed does not undo the commit: the record exists, or the review
    stands, and a retry with the same idempotency key returns it.
    """

    def __init__(
        self,
        records: AttendanceRepository,
        files: FileStore,
        *,
        reviews: Optional[ReviewStateMachine] = None,
        io_timeout: Optional[float] = DEFAULT_IO_TIMEOUT_SECONDS,
    ):
        self._records = records
        self._files = files
        self._reviews = reviews or ReviewStateMachine(records)
        self._io_timeout = io_timeout

    def _timeout(self, timeout) -> Optional[float]:
        return self._io_timeout if timeout is _UNSET else timeout

    def submit(
        self,
        *,
        owner_id: int,
        submission: AttendanceSubmission,
        owner_name: Optional[str] = None,
        idempotency_key: Optional[str] = None,
        timeout=_UNSET,
    ) -> int:
        validated = validate_submission(submission)
        limit = self._timeout(timeout)
        key = (idempotency_key or "").strip() or None

        if key:
            existing = call_with_timeout(
                lambda: self._records.find_by_idempotency_key(int(owner_id), key),
                timeout=limit,
                operation="idempotency lookup",
            )
            if existing is not None:
                logger.info("replayed submission %s for owner %s", existing.record_id, owner_id)
                return existing.record_id

        attendance_ref = call_with_timeout(
            lambda: self._files.save(FileKind.ATTENDANCE, validated.attendance_file),
            timeout=limit,
            operation="attendance file upload",
        )
        transportation_ref = None
        if validated.transportation_file is not None:
            transportation_ref = call_with_timeout(
                lambda: self._files.save(FileKind.TRANSPORTATION, validated.transportation_file),
                timeout=limit,
                operation="transportation file upload",
            )

        new = NewAttendanceRecord(
            owner_id=int(owner_id),
            owner_name=owner_name,
            month=validated.month,
            work_hours=validated.work_hours,
            transportation_fee=validated.transportation_fee,
            attendance_file_ref=attendance_ref,
            transportation_file_ref=transportation_ref,
            comments=validated.comments,
            idempotency_key=key,
        )
        record = call_with_timeout(lambda: self._records.create(new), timeout=limit, operation="record create")
        logger.info("attendance record %s submitted by %s for %s", record.record_id, owner_id, record.month)
        return record.record_id

    def list(
        self,
        *,
        caller_id: int,
        role: Role,
        criteria: Optional[AttendanceFilter] = None,
        sort: Optional[AttendanceSort] = None,
        page: Optional[PageRequest] = None,
        timeout=_UNSET,
    ) -> PagedResult:
        # All authenticated callers see every record; only mutations are role-gated.
        snapshot = call_with_timeout(
            self._records.list_all, timeout=self._timeout(timeout), operation="record listing"
        )
        return query(snapshot, criteria or AttendanceFilter(), sort or AttendanceSort(), page or PageRequest())

    def get(self, record_id: int, *, timeout=_UNSET) -> AttendanceRecord:
        return call_with_timeout(
            lambda: self._records.get(int(record_id)), timeout=self._timeout(timeout), operation="record lookup"
        )

    def resolve_file_reference(self, record_id: int, which: FileKind, *, timeout=_UNSET) -> str:
        record = self.get(record_id, timeout=timeout)
        ref = record.file_ref(FileKind(which))
        if not ref:
            raise NotFoundError(f"Record {record_id} has no {FileKind(which).value} file", field=FileKind(which).value)
        return ref

    download = resolve_file_reference

    def remove(self, record_id: int, *, caller_id: int, timeout=_UNSET) -> None:
        call_with_timeout(
            lambda: self._records.delete(int(record_id), int(caller_id)),
            timeout=self._timeout(timeout),
            operation="record delete",
        )

    def review(
        self,
        record_id: int,
        *,
        caller_id: int,
        role: Role,
        target_status: ReviewStatus,
        comments: Optional[str] = None,
        idempotency_key: Optional[str] = None,
        timeout=_UNSET,
    ) -> AttendanceRecord:
        limit = self._timeout(timeout)
        call_with_timeout(
            lambda: self._reviews.review(
                record_id=int(record_id),
                reviewer_id=int(caller_id),
                role=role,
                target_status=target_status,
                comments=comments,
                idempotency_key=(idempotency_key or "").strip() or None,
            ),
            timeout=limit,
            operation="record review",
        )
        return self.get(record_id, timeout=limit)
