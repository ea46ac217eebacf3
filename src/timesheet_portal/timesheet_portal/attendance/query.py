"""Filter, sort and paginate attendance records in one step.

Filtering happens before pagination so ``total_count``/``page_count``
always describe the filtered set.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..common.validators import require_positive_int
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import ReviewStatus, SortDirection, SortField
from ..core.exceptions import ValidationError
from .model import AttendanceFilter, AttendanceRecord, AttendanceSort, PagedResult, PageRequest

_SORT_KEYS: Dict[SortField, Callable[[AttendanceRecord], Any]] = {
    SortField.UPLOAD_DATE: lambda r: r.uploaded_at,
    SortField.MONTH: lambda r: r.month,
    SortField.WORK_HOURS: lambda r: r.work_hours,
    SortField.TRANSPORTATION_FEE: lambda r: r.transportation_fee,
    SortField.STATUS: lambda r: r.status.code,
}


def matches(record: AttendanceRecord, criteria: AttendanceFilter) -> bool:
    if criteria.month_contains and criteria.month_contains not in record.month:
        return False
    if criteria.status is not None and record.status is not criteria.status:
        return False
    if criteria.owner_id is not None and record.owner_id != criteria.owner_id:
        return False
    return True


def query(
    records: Iterable[AttendanceRecord],
    criteria: AttendanceFilter,
    sort: AttendanceSort,
    page: PageRequest,
) -> PagedResult:
    if page.page_number < 1 or page.page_size < 1:
        raise ValidationError("page_number and page_size must be >= 1", field="page")

    selected: List[AttendanceRecord] = [r for r in records if matches(r, criteria)]

    # sorted() is stable, also with reverse=True, so equal keys keep input order.
    selected = sorted(
        selected,
        key=_SORT_KEYS[sort.sort_by],
        reverse=sort.direction is SortDirection.DESC,
    )

    total = len(selected)
    start = (page.page_number - 1) * page.page_size
    return PagedResult(
        items=tuple(selected[start : start + page.page_size]),
        total_count=total,
        page_count=math.ceil(total / page.page_size),
        current_page=page.page_number,
        page_size=page.page_size,
    )


def parse_filter(
    *,
    month: Optional[str] = None,
    status: Optional[str] = None,
    owner_id: Optional[int] = None,
) -> AttendanceFilter:
    """Build a filter from query-string style values (``status`` may be ``all``)."""

    month = (month or "").strip() or None
    parsed_status = None
    raw = (status or "").strip()
    if raw and raw.lower() != "all":
        parsed_status = _parse_status(raw)
    return AttendanceFilter(month_contains=month, status=parsed_status, owner_id=owner_id)


def parse_sort(sort_by: Optional[str] = None, direction: Optional[str] = None) -> AttendanceSort:
    try:
        field = SortField((sort_by or SortField.MONTH.value).strip().lower())
    except ValueError:
        raise ValidationError(f"Cannot sort by {sort_by!r}", field="sort_by") from None
    try:
        order = SortDirection((direction or SortDirection.DESC.value).strip().lower())
    except ValueError:
        raise ValidationError("direction must be asc or desc", field="direction") from None
    return AttendanceSort(sort_by=field, direction=order)


def parse_page(page_number: Any = None, page_size: Any = None) -> PageRequest:
    return PageRequest(
        page_number=require_positive_int(page_number if page_number not in (None, "") else 1, "page"),
        page_size=require_positive_int(page_size if page_size not in (None, "") else DEFAULT_PAGE_SIZE, "page_size"),
    )


def _parse_status(raw: str) -> ReviewStatus:
    if raw.isdigit():
        try:
            return ReviewStatus.from_code(int(raw))
        except ValueError:
            pass
    else:
        try:
            return ReviewStatus(raw.upper())
        except ValueError:
            pass
    raise ValidationError(f"Unknown status {raw!r}", field="status")
