from __future__ import annotations

import math
import re
from typing import Any

from ..core.exceptions import ValidationError


def require_pattern(value: Any, field_name: str, pattern: str, hint: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    value = value.strip()
    if not re.match(pattern, value):
        raise ValidationError(f"{field_name} must use the {hint} format", field=field_name)
    return value


def require_number(value: Any, field_name: str) -> float:
    """Coerce form or JSON input into a finite float."""

    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required", field=field_name)
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number", field=field_name) from None
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    return number


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", field=field_name) from None
    if number < 1:
        raise ValidationError(f"{field_name} must be >= 1", field=field_name)
    return number
