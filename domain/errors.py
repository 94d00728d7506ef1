"""
Business error taxonomy.

Every expected business failure is a ``BettingError`` carrying a
machine-readable ``code``. Repositories raise these inside transactions so the
transaction rolls back; services convert them to ``Result.fail``.
Subclassing ValueError keeps them compatible with callers that catch the
broader validation failure.
"""

from domain import error_codes


class BettingError(ValueError):
    """Base class for expected business failures."""

    default_code = error_codes.VALIDATION_ERROR

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code or self.default_code


class NotFoundError(BettingError):
    default_code = error_codes.NOT_FOUND


class StateConflictError(BettingError):
    """Operation is illegal for the bet's current status."""

    default_code = error_codes.STATE_ERROR


class ValidationError(BettingError):
    default_code = error_codes.VALIDATION_ERROR


class InsufficientFundsError(BettingError):
    default_code = error_codes.INSUFFICIENT_FUNDS


class PermissionDeniedError(BettingError):
    default_code = error_codes.PERMISSION_DENIED


class UnauthorizedError(BettingError):
    default_code = error_codes.UNAUTHORIZED
