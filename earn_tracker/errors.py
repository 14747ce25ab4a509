"""
Application error hierarchy.

Every error raised by the tax core and the record store derives from
EarnTrackerError. Routes do not catch these individually; a single error
handler registered in the application factory turns them into JSON
responses using ``status_code``.
"""

from typing import Any, Optional


class EarnTrackerError(Exception):
    """Base class for all application errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        payload = {'error': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class InvalidPeriod(EarnTrackerError):
    """Quarter outside 1-4, a bad year, or a malformed/inverted date range."""

    status_code = 400


class ValidationError(EarnTrackerError):
    """Submitted record fields break an entity invariant."""

    status_code = 400


class AuthenticationError(EarnTrackerError):
    status_code = 401


class NotFound(EarnTrackerError):
    """Referenced record does not exist (or belongs to another user)."""

    status_code = 404


class DuplicateUsername(EarnTrackerError):
    status_code = 409


class UnsupportedRuleKind(EarnTrackerError):
    """A tax rule with a kind other than fixed/percentage reached the calculator."""

    status_code = 422


class TransactionFailure(EarnTrackerError):
    """A multi-step write could not complete; the session was rolled back."""

    status_code = 500
