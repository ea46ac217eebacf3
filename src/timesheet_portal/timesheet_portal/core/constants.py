"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MONTH_PATTERN = r"^[0-9]{4}-[0-9]{2}$"

MAX_UPLOAD_BYTES = 20 * 1024 * 1024

ALLOWED_EXTENSIONS = frozenset({".pdf", ".doc", ".docx", ".xls", ".xlsx"})
ALLOWED_MEDIA_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)

DEFAULT_PAGE_SIZE = 9
DEFAULT_IO_TIMEOUT_SECONDS = 10.0
