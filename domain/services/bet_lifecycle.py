"""
Bet lifecycle guard.

States: active -> locked -> completed (active may also go straight to
completed; locked may return to active). Completed is terminal.
"""

from enum import Enum

from domain import error_codes
from domain.errors import StateConflictError
from domain.models.bet import BetStatus


class BetAction(str, Enum):
    PARTICIPATE = "participate"
    EDIT_PARTICIPATION = "edit participation"
    CHANGE_COMMISSION = "change commission"
    UPDATE_DETAILS = "update details"
    SETTLE = "settle"
    DELETE = "delete"
    LOCK = "lock"
    UNLOCK = "unlock"


_ALLOWED: dict[BetStatus, frozenset[BetAction]] = {
    BetStatus.ACTIVE: frozenset(
        {
            BetAction.PARTICIPATE,
            BetAction.EDIT_PARTICIPATION,
            BetAction.CHANGE_COMMISSION,
            BetAction.UPDATE_DETAILS,
            BetAction.SETTLE,
            BetAction.DELETE,
            BetAction.LOCK,
        }
    ),
    BetStatus.LOCKED: frozenset(
        {
            BetAction.CHANGE_COMMISSION,
            BetAction.UPDATE_DETAILS,
            BetAction.SETTLE,
            BetAction.DELETE,
            BetAction.UNLOCK,
        }
    ),
    # Deletion of a completed bet is still gated on having no participations
    BetStatus.COMPLETED: frozenset({BetAction.DELETE}),
}

# Status -> action pairs that map to a more specific error code
_SPECIFIC_CODES: dict[tuple[BetStatus, BetAction], str] = {
    (BetStatus.COMPLETED, BetAction.SETTLE): error_codes.BET_ALREADY_COMPLETED,
}
for _status in (BetStatus.LOCKED, BetStatus.COMPLETED):
    _SPECIFIC_CODES[(_status, BetAction.PARTICIPATE)] = error_codes.BET_NOT_ACTIVE
    _SPECIFIC_CODES[(_status, BetAction.EDIT_PARTICIPATION)] = error_codes.BET_NOT_ACTIVE


def is_allowed(status: BetStatus, action: BetAction) -> bool:
    """Return True if ``action`` is legal while a bet is in ``status``."""
    return action in _ALLOWED[BetStatus(status)]


def ensure_allowed(status: BetStatus, action: BetAction) -> None:
    """
    Raise StateConflictError if ``action`` is illegal for ``status``.

    The message names both the current status and the attempted action.
    """
    status = BetStatus(status)
    if is_allowed(status, action):
        return
    code = _SPECIFIC_CODES.get((status, action), error_codes.STATE_ERROR)
    if code == error_codes.BET_ALREADY_COMPLETED:
        message = "Bet already completed; cannot settle it again."
    else:
        message = f"Cannot {action.value} while bet is {status.value}."
    raise StateConflictError(message, code=code)


def ensure_deletable(status: BetStatus, participation_count: int) -> None:
    """A bet in any status can be deleted only while it has no participations."""
    ensure_allowed(status, BetAction.DELETE)
    if participation_count > 0:
        raise StateConflictError(
            f"Cannot delete a {BetStatus(status).value} bet that has "
            f"{participation_count} participation(s).",
            code=error_codes.BET_HAS_PARTICIPATIONS,
        )
