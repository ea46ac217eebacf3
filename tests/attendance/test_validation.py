from __future__ import annotations

import pytest

from timesheet_portal.attendance.model import AttendanceSubmission, UploadedFile
from timesheet_portal.attendance.validation import validate_file, validate_submission
from timesheet_portal.core.exceptions import ValidationError

MIB = 1024 * 1024
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _file(name="timesheet.xlsx", content_type=XLSX, size=1024):
    return UploadedFile(filename=name, content_type=content_type, size=size)


def _submission(**overrides):
    data = dict(
        month="2024-05",
        work_hours="160",
        transportation_fee="12000",
        attendance_file=_file(),
        transportation_file=None,
    )
    data.update(overrides)
    return AttendanceSubmission(**data)


def test_valid_submission_is_normalized():
    result = validate_submission(_submission(comments="  first month  "))
    assert result.month == "2024-05"
    assert result.work_hours == 160.0
    assert result.transportation_fee == 12000.0
    assert result.comments == "first month"
    assert result.transportation_file is None


@pytest.mark.parametrize(
    "month", [None, "", "2024-5", "202405", "24-05", "2024/05", "May 2024", "\uff12\uff10\uff12\uff14-\uff10\uff15"]
)
def test_month_must_be_year_dash_month(month):
    with pytest.raises(ValidationError) as exc:
        validate_submission(_submission(month=month))
    assert exc.value.field == "month"


@pytest.mark.parametrize("hours", [None, "", "0", 0, -1, "abc", "nan", True])
def test_work_hours_must_be_positive_number(hours):
    with pytest.raises(ValidationError) as exc:
        validate_submission(_submission(work_hours=hours))
    assert exc.value.field == "work_hours"


def test_transportation_fee_may_be_zero_but_not_negative():
    assert validate_submission(_submission(transportation_fee=0)).transportation_fee == 0.0
    with pytest.raises(ValidationError) as exc:
        validate_submission(_submission(transportation_fee="-1"))
    assert exc.value.field == "transportation_fee"


def test_first_violation_wins():
    with pytest.raises(ValidationError) as exc:
        validate_submission(_submission(month="bad", work_hours="-5", attendance_file=None))
    assert exc.value.field == "month"


def test_attendance_file_is_required():
    with pytest.raises(ValidationError) as exc:
        validate_submission(_submission(attendance_file=None))
    assert exc.value.field == "attendance_file"


def test_rejects_21_mib_upload():
    with pytest.raises(ValidationError) as exc:
        validate_file(_file(size=21 * MIB), "attendance_file")
    assert "20MB" in exc.value.reason


def test_accepts_19_mib_xlsx_upload():
    upload = _file(size=19 * MIB)
    assert validate_file(upload, "attendance_file") is upload


def test_exactly_20_mib_is_accepted():
    validate_file(_file(size=20 * MIB), "attendance_file")


def test_type_accepted_by_extension_or_media_type():
    validate_file(_file(name="hours.PDF", content_type="application/octet-stream"), "f")
    validate_file(_file(name="hours", content_type="application/msword"), "f")
    with pytest.raises(ValidationError):
        validate_file(_file(name="hours.png", content_type="image/png"), "f")


def test_empty_file_is_rejected():
    with pytest.raises(ValidationError):
        validate_file(_file(size=0), "f")


def test_optional_transportation_file_gets_same_checks():
    ok = validate_submission(_submission(transportation_file=_file(name="receipt.pdf", content_type="application/pdf")))
    assert ok.transportation_file is not None

    with pytest.raises(ValidationError) as exc:
        validate_submission(_submission(transportation_file=_file(name="receipt.exe", content_type="application/x-msdownload")))
    assert exc.value.field == "transportation_file"
