"""Submission checks. Pure functions: the first violation wins."""

from __future__ import annotations

import os
from typing import Optional

from ..common.validators import require_number, require_pattern
from ..core.constants import ALLOWED_EXTENSIONS, ALLOWED_MEDIA_TYPES, MAX_UPLOAD_BYTES, MONTH_PATTERN
from ..core.exceptions import ValidationError
from .model import AttendanceSubmission, UploadedFile, ValidatedSubmission


def validate_file(upload: Optional[UploadedFile], field_name: str) -> UploadedFile:
    if upload is None or not upload.filename:
        raise ValidationError(f"{field_name} is required", field=field_name)

    extension = os.path.splitext(upload.filename)[1].lower()
    media_type = (upload.content_type or "").split(";")[0].strip().lower()
    if extension not in ALLOWED_EXTENSIONS and media_type not in ALLOWED_MEDIA_TYPES:
        raise ValidationError("Only PDF, Word or Excel files are accepted", field=field_name)

    if upload.size <= 0:
        raise ValidationError("File is empty", field=field_name)
    if upload.size > MAX_UPLOAD_BYTES:
        raise ValidationError("File must not exceed 20MB", field=field_name)
    return upload


def validate_submission(submission: AttendanceSubmission) -> ValidatedSubmission:
    month = require_pattern(submission.month, "month", MONTH_PATTERN, "YYYY-MM")

    work_hours = require_number(submission.work_hours, "work_hours")
    if work_hours <= 0:
        raise ValidationError("work_hours must be greater than 0", field="work_hours")

    fee = require_number(submission.transportation_fee, "transportation_fee")
    if fee < 0:
        raise ValidationError("transportation_fee must not be negative", field="transportation_fee")

    attendance_file = validate_file(submission.attendance_file, "attendance_file")

    transportation_file = None
    if submission.transportation_file is not None:
        transportation_file = validate_file(submission.transportation_file, "transportation_file")

    comments = (submission.comments or "").strip() or None

    return ValidatedSubmission(
        month=month,
        work_hours=work_hours,
        transportation_fee=fee,
        attendance_file=attendance_file,
        transportation_file=transportation_file,
        comments=comments,
    )
