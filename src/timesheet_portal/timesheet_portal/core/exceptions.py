from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every error carries the offending ``field`` (if any) and a ``reason``
    that is safe to show to the caller.
    """

    kind = "domain"

    def __init__(self, reason: str, *, field: Optional[str] = None):
        super().__init__(reason)
        self.field = field
        self.reason = reason

    def to_dict(self) -> dict:
        return {"error": self.kind, "field": self.field, "reason": self.reason}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation"


class NotFoundError(DomainError):
    """Raised when a record id does not exist."""

    kind = "not_found"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "forbidden"


class InvalidTransitionError(DomainError):
    """Raised when a review would leave a terminal status."""

    kind = "invalid_transition"


class OperationTimeout(DomainError):
    """Raised when an I/O collaborator misses its deadline."""

    kind = "timeout"
