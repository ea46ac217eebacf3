from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .attendance.file_store import FileStore, LocalFileStore
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.review import ReviewStateMachine
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_IO_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    attendance_repo: AttendanceRepository
    file_store: FileStore

    review_state_machine: ReviewStateMachine
    attendance_service: AttendanceService


def build_container(
    *,
    storage_backend: str = "memory",
    db_config: Optional[dict] = None,
    upload_dir: str | Path = "uploads",
    io_timeout: Optional[float] = DEFAULT_IO_TIMEOUT_SECONDS,
) -> Container:
    conn = None
    if storage_backend == "mysql":
        conn = DatabaseConnection.for_config(DBConfig.from_settings(db_config))
        attendance_repo: AttendanceRepository = MySQLAttendanceRepository(conn)
    elif storage_backend == "memory":
        attendance_repo = InMemoryAttendanceRepository()
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND: {storage_backend!r}")

    file_store = LocalFileStore(upload_dir)
    review_state_machine = ReviewStateMachine(attendance_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        file_store,
        reviews=review_state_machine,
        io_timeout=io_timeout,
    )

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        file_store=file_store,
        review_state_machine=review_state_machine,
        attendance_service=attendance_service,
    )
