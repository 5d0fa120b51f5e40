from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    ``status_code`` is the HTTP status the API layer answers with.
    """

    status_code = 400


class ValidationError(DomainError):
    status_code = 400


class ScoreOutOfRangeError(ValidationError):
    """Score outside ``0..total_marks`` (both bounds inclusive)."""


class PrerequisiteNotMetError(ValidationError):
    def __init__(self, missing: list[int]):
        super().__init__("Prerequisites not met for this course")
        self.missing = list(missing)


class AuthenticationError(DomainError):
    status_code = 401


class AuthorizationError(DomainError):
    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class StoreUnavailable(DomainError):
    """Transient persistence failure (lock timeout, deadlock, lost connection).

    The operation did not take effect and may be retried. ``context`` carries
    identifiers needed to reconcile a partially applied request.
    """

    status_code = 500
    retryable = True

    def __init__(self, message: str = "Store temporarily unavailable", *, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = dict(context or {})
