from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for authorization.

    The legacy front end encodes it as a numeric ``userType``.
    """

    MEMBER = "member"
    TEACHER = "teacher"
    ADMIN = "admin"

    @property
    def is_reviewer(self) -> bool:
        return self in (Role.TEACHER, Role.ADMIN)

    @classmethod
    def from_user_type(cls, user_type: int) -> "Role":
        try:
            return _USER_TYPES[int(user_type)]
        except (KeyError, TypeError, ValueError):
            raise ValueError(f"Unknown userType: {user_type!r}") from None


_USER_TYPES = {0: Role.MEMBER, 1: Role.TEACHER, 2: Role.ADMIN}


class ReviewStatus(str, Enum):
    """Review state of an attendance record. Approved/Rejected are terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self is not ReviewStatus.PENDING

    @property
    def code(self) -> int:
        return _STATUS_CODES[self]

    @classmethod
    def from_code(cls, code: int) -> "ReviewStatus":
        for status, value in _STATUS_CODES.items():
            if value == code:
                return status
        raise ValueError(f"Unknown status code: {code!r}")


_STATUS_CODES = {ReviewStatus.PENDING: 0, ReviewStatus.APPROVED: 1, ReviewStatus.REJECTED: 2}


class FileKind(str, Enum):
    """Which file slot of a record."""

    ATTENDANCE = "attendance"
    TRANSPORTATION = "transportation"


class SortField(str, Enum):
    UPLOAD_DATE = "upload_date"
    MONTH = "month"
    WORK_HOURS = "work_hours"
    TRANSPORTATION_FEE = "transportation_fee"
    STATUS = "status"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"
