"""
Standard error codes for service layer.

These error codes allow callers to programmatically handle specific error
conditions without parsing error message text. The canonical definitions live
in ``domain.error_codes`` so repositories and domain services can raise coded
errors without importing the service layer.

Usage:
    from services import error_codes
    from services.result import Result

    if bet is None:
        return Result.fail("Bet not found", code=error_codes.BET_NOT_FOUND)
"""

from domain.error_codes import (  # noqa: F401
    BET_ALREADY_COMPLETED,
    BET_HAS_PARTICIPATIONS,
    BET_NOT_ACTIVE,
    BET_NOT_FOUND,
    DUPLICATE_PARTICIPATION,
    INSUFFICIENT_FUNDS,
    INVALID_AMOUNT,
    INVALID_COMMISSION_RATE,
    INVALID_OPTION,
    INVALID_WINNING_OPTION,
    NOT_FOUND,
    PARTICIPATION_NOT_FOUND,
    PERMISSION_DENIED,
    STATE_ERROR,
    UNAUTHORIZED,
    USER_NOT_FOUND,
    VALIDATION_ERROR,
)
