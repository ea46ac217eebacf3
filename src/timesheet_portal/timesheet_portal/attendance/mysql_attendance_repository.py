from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import now_utc
from ..core.enums import ReviewStatus
from ..core.exceptions import AuthorizationError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, NewAttendanceRecord
from .repository import AttendanceRepository, RecordMutator

_COLUMNS = """
    record_id, owner_id, owner_name, month, work_hours, transportation_fee,
    attendance_file_ref, transportation_file_ref, comments, status,
    uploaded_at, reviewer_id, reviewed_at, idempotency_key, review_key
"""


def _to_db_time(value: Optional[datetime]) -> Optional[datetime]:
    # DATETIME columns hold naive UTC.
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_db_time(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        owner_id=int(r["owner_id"]),
        owner_name=r.get("owner_name"),
        month=r["month"],
        work_hours=float(r["work_hours"]),
        transportation_fee=float(r["transportation_fee"]),
        attendance_file_ref=r["attendance_file_ref"],
        transportation_file_ref=r.get("transportation_file_ref"),
        comments=r.get("comments"),
        status=ReviewStatus(r["status"]),
        uploaded_at=_from_db_time(r["uploaded_at"]),
        reviewer_id=int(r["reviewer_id"]) if r.get("reviewer_id") is not None else None,
        reviewed_at=_from_db_time(r.get("reviewed_at")),
        idempotency_key=r.get("idempotency_key"),
        review_key=r.get("review_key"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """``attendance_records`` table.

    ``update`` and ``delete`` lock the row with ``SELECT ... FOR UPDATE`` for
    the length of one transaction, which serializes writers per record.
    """

    def __init__(self, conn_factory: DatabaseConnection, clock: Callable = now_utc):
        self._conn_factory = conn_factory
        self._clock = clock

    def create(self, new: NewAttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        owner_id, owner_name, month, work_hours, transportation_fee,
                        attendance_file_ref, transportation_file_ref, comments,
                        status, uploaded_at, idempotency_key
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(new.owner_id),
                        new.owner_name,
                        new.month,
                        float(new.work_hours),
                        float(new.transportation_fee),
                        new.attendance_file_ref,
                        new.transportation_file_ref,
                        new.comments,
                        ReviewStatus.PENDING.value,
                        _to_db_time(self._clock()),
                        new.idempotency_key,
                    ),
                )
                record_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            # Lost a race on (owner_id, idempotency_key): return the winner.
            if new.idempotency_key:
                existing = self.find_by_idempotency_key(new.owner_id, new.idempotency_key)
                if existing is not None:
                    return existing
            raise
        return self.get(record_id)

    def get(self, record_id: int) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
        if not r:
            raise NotFoundError(f"Attendance record {record_id} does not exist", field="id")
        return _row_to_record(r)

    def list_all(self) -> Sequence[AttendanceRecord]:
        # A single SELECT reads one consistent InnoDB snapshot.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records")
            return [_row_to_record(r) for r in fetchall(cur)]

    def update(self, record_id: int, mutator: RecordMutator) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s FOR UPDATE",
                (int(record_id),),
            )
            r = fetchone(cur)
            if not r:
                raise NotFoundError(f"Attendance record {record_id} does not exist", field="id")

            current = _row_to_record(r)
            updated = mutator(current)
            if updated.record_id != current.record_id:
                raise ValueError("mutator must not change the record id")
            if updated == current:
                return current

            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, comments=%s, reviewer_id=%s, reviewed_at=%s,
                    transportation_file_ref=%s, review_key=%s
                WHERE record_id=%s
                """,
                (
                    updated.status.value,
                    updated.comments,
                    updated.reviewer_id,
                    _to_db_time(updated.reviewed_at),
                    updated.transportation_file_ref,
                    updated.review_key,
                    current.record_id,
                ),
            )
            return updated

    def delete(self, record_id: int, requester_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT owner_id FROM attendance_records WHERE record_id=%s FOR UPDATE",
                (int(record_id),),
            )
            r = fetchone(cur)
            if not r:
                raise NotFoundError(f"Attendance record {record_id} does not exist", field="id")
            if int(r["owner_id"]) != int(requester_id):
                raise AuthorizationError("Only the owner may delete this record", field="id")
            cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (int(record_id),))

    def find_by_idempotency_key(self, owner_id: int, key: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE owner_id=%s AND idempotency_key=%s",
                (int(owner_id), key),
            )
            r = fetchone(cur)
        return _row_to_record(r) if r else None
