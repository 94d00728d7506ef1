"""
Application services layer.

Services orchestrate business operations using repositories and domain services.
"""

from services.admin_stats_service import AdminStatsService
from services.balance_service import BalanceService
from services.bet_service import BetService
from services.participation_service import ParticipationService
from services.permissions import AuthContext, has_admin_permission
from services.settlement_service import SettlementService
from services.user_service import UserService

# Result type for consistent error handling
from services.result import Result

# Service interfaces (ABCs)
from services.interfaces import (
    IAdminStatsService,
    IBalanceService,
    IBetService,
    IParticipationService,
    ISettlementService,
    IUserService,
)

__all__ = [
    "AdminStatsService",
    "AuthContext",
    "BalanceService",
    "BetService",
    "ParticipationService",
    "SettlementService",
    "UserService",
    "has_admin_permission",
    "Result",
    "IAdminStatsService",
    "IBalanceService",
    "IBetService",
    "IParticipationService",
    "ISettlementService",
    "IUserService",
]
