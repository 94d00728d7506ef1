"""
Repository layer for data access abstraction.
"""

from repositories.base_repository import BaseRepository
from repositories.bet_repository import BetRepository
from repositories.interfaces import (
    IBetRepository,
    ILedgerRepository,
    IParticipationRepository,
    IUserRepository,
)
from repositories.ledger_repository import LedgerRepository
from repositories.participation_repository import ParticipationRepository
from repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BetRepository",
    "LedgerRepository",
    "ParticipationRepository",
    "UserRepository",
    "IBetRepository",
    "ILedgerRepository",
    "IParticipationRepository",
    "IUserRepository",
]
