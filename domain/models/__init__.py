"""
Domain models - pure data structures representing business entities.
"""

from domain.models.bet import Bet, BetOption, BetOptions, BetStatus
from domain.models.ledger_entry import BalanceChange, LedgerEntry, LedgerEntryType
from domain.models.participation import Participation
from domain.models.user import User

__all__ = [
    "Bet",
    "BetOption",
    "BetOptions",
    "BetStatus",
    "BalanceChange",
    "LedgerEntry",
    "LedgerEntryType",
    "Participation",
    "User",
]
