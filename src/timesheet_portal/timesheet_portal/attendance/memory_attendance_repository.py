from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.enums import ReviewStatus
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import AttendanceRecord, NewAttendanceRecord
from .repository import AttendanceRepository, RecordMutator

logger = logging.getLogger(__name__)


class InMemoryAttendanceRepository(AttendanceRepository):
    """Process-local store.

    Records are immutable dataclasses, so a snapshot is a shallow copy of the
    index taken under ``_lock``. Mutations of one record are serialized by
    that record's own lock; ``_lock`` is only held for index reads/writes, so
    work on other records proceeds in parallel.
    """

    def __init__(self, clock: Callable = now_utc):
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[int, AttendanceRecord] = {}
        self._record_locks: Dict[int, threading.Lock] = {}
        self._next_id = 1

    def create(self, new: NewAttendanceRecord) -> AttendanceRecord:
        with self._lock:
            if new.idempotency_key:
                existing = self._find_key_locked(new.owner_id, new.idempotency_key)
                if existing is not None:
                    return existing

            record = AttendanceRecord(
                record_id=self._next_id,
                owner_id=int(new.owner_id),
                owner_name=new.owner_name,
                month=new.month,
                work_hours=float(new.work_hours),
                transportation_fee=float(new.transportation_fee),
                attendance_file_ref=new.attendance_file_ref,
                transportation_file_ref=new.transportation_file_ref,
                comments=new.comments,
                status=ReviewStatus.PENDING,
                uploaded_at=self._clock(),
                idempotency_key=new.idempotency_key,
            )
            self._next_id += 1
            self._records[record.record_id] = record
            self._record_locks[record.record_id] = threading.Lock()
            return record

    def get(self, record_id: int) -> AttendanceRecord:
        with self._lock:
            record = self._records.get(int(record_id))
        if record is None:
            raise NotFoundError(f"Attendance record {record_id} does not exist", field="id")
        return record

    def list_all(self) -> Sequence[AttendanceRecord]:
        with self._lock:
            return list(self._records.values())

    def update(self, record_id: int, mutator: RecordMutator) -> AttendanceRecord:
        with self._record_lock(record_id):
            current = self.get(record_id)
            updated = mutator(current)
            if updated.record_id != current.record_id:
                raise ValueError("mutator must not change the record id")
            with self._lock:
                self._records[current.record_id] = updated
            return updated

    def delete(self, record_id: int, requester_id: int) -> None:
        with self._record_lock(record_id):
            current = self.get(record_id)
            if current.owner_id != int(requester_id):
                raise AuthorizationError("Only the owner may delete this record", field="id")
            with self._lock:
                del self._records[current.record_id]
                self._record_locks.pop(current.record_id, None)
        logger.info("attendance record %s deleted by %s", record_id, requester_id)

    def find_by_idempotency_key(self, owner_id: int, key: str) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._find_key_locked(owner_id, key)

    def _find_key_locked(self, owner_id: int, key: str) -> Optional[AttendanceRecord]:
        for record in self._records.values():
            if record.owner_id == int(owner_id) and record.idempotency_key == key:
                return record
        return None

    def _record_lock(self, record_id: int) -> threading.Lock:
        with self._lock:
            lock = self._record_locks.get(int(record_id))
        if lock is None:
            raise NotFoundError(f"Attendance record {record_id} does not exist", field="id")
        return lock
