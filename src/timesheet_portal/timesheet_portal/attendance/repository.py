from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendanceRecord

# Receives the current record under the per-record lock and returns the
# replacement. Raising aborts the update with nothing written.
RecordMutator = Callable[[AttendanceRecord], AttendanceRecord]


class AttendanceRepository(Protocol):
    """Authoritative store of attendance records.

    Every method returns copies; callers never mutate the canonical record.
    """

    def create(self, new: NewAttendanceRecord) -> AttendanceRecord:
        """Assign id, ``uploaded_at`` and ``PENDING`` status, then persist."""

        raise NotImplementedError

    def get(self, record_id: int) -> AttendanceRecord:
        """Raises NotFoundError."""

        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        """Consistent snapshot, in no particular order."""

        raise NotImplementedError

    def update(self, record_id: int, mutator: RecordMutator) -> AttendanceRecord:
        """Apply ``mutator`` atomically. Raises NotFoundError."""

        raise NotImplementedError

    def delete(self, record_id: int, requester_id: int) -> None:
        """Owner-only hard delete. Raises NotFoundError or AuthorizationError."""

        raise NotImplementedError

    def find_by_idempotency_key(self, owner_id: int, key: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError
