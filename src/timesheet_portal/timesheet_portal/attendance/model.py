from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import FileKind, ReviewStatus, SortDirection, SortField
from ..common.datetime_utils import isoformat_or_none


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded file as the core sees it: an opaque blob."""

    filename: str
    content_type: Optional[str]
    size: int
    data: bytes = field(default=b"", repr=False)


@dataclass(frozen=True)
class AttendanceSubmission:
    """Raw submission input, before validation."""

    month: object
    work_hours: object
    transportation_fee: object
    attendance_file: Optional[UploadedFile]
    transportation_file: Optional[UploadedFile] = None
    comments: Optional[str] = None


@dataclass(frozen=True)
class ValidatedSubmission:
    month: str
    work_hours: float
    transportation_fee: float
    attendance_file: UploadedFile
    transportation_file: Optional[UploadedFile] = None
    comments: Optional[str] = None


@dataclass(frozen=True)
class NewAttendanceRecord:
    """What the store needs to create a record (files already persisted)."""

    owner_id: int
    month: str
    work_hours: float
    transportation_fee: float
    attendance_file_ref: str
    transportation_file_ref: Optional[str] = None
    comments: Optional[str] = None
    owner_name: Optional[str] = None
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one monthly timesheet submission and its review state."""

    record_id: int
    owner_id: int
    month: str
    work_hours: float
    transportation_fee: float
    attendance_file_ref: str
    status: ReviewStatus
    uploaded_at: datetime
    transportation_file_ref: Optional[str] = None
    comments: Optional[str] = None
    reviewer_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    owner_name: Optional[str] = None
    idempotency_key: Optional[str] = None
    review_key: Optional[str] = None

    def file_ref(self, kind: FileKind) -> Optional[str]:
        if kind is FileKind.ATTENDANCE:
            return self.attendance_file_ref
        return self.transportation_file_ref

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "owner_id": self.owner_id,
            "owner_name": self.owner_name,
            "month": self.month,
            "work_hours": self.work_hours,
            "transportation_fee": self.transportation_fee,
            "attendance_file_ref": self.attendance_file_ref,
            "transportation_file_ref": self.transportation_file_ref,
            "comments": self.comments,
            "status": self.status.value,
            "status_code": self.status.code,
            "uploaded_at": isoformat_or_none(self.uploaded_at),
            "reviewer_id": self.reviewer_id,
            "reviewed_at": isoformat_or_none(self.reviewed_at),
        }


@dataclass(frozen=True)
class AttendanceFilter:
    month_contains: Optional[str] = None
    status: Optional[ReviewStatus] = None
    owner_id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceSort:
    sort_by: SortField = SortField.MONTH
    direction: SortDirection = SortDirection.DESC


@dataclass(frozen=True)
class PageRequest:
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class PagedResult:
    items: Sequence[AttendanceRecord]
    total_count: int
    page_count: int
    current_page: int
    page_size: int

    def to_dict(self) -> dict:
        return {
            "items": [r.to_dict() for r in self.items],
            "total_count": self.total_count,
            "page_count": self.page_count,
            "current_page": self.current_page,
            "page_size": self.page_size,
        }
