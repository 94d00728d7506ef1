"""
Builds the ledger repositories and services against one database file.

This module centralizes service creation and wiring so callers (HTTP
handlers, admin scripts, tests) receive fully built services instead of
reaching for a shared database client.

Usage:
    container = ServiceContainer(ServiceConfig(db_path="bets.db"))
    await container.initialize()

    result = container.participation_service.participate(bet_id, user_id, 1, Decimal("10"))
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import config
from database import Database
from domain.services.pool_calculator import PoolCalculator

# Repositories
from repositories.bet_repository import BetRepository
from repositories.ledger_repository import LedgerRepository
from repositories.participation_repository import ParticipationRepository
from repositories.user_repository import UserRepository

if TYPE_CHECKING:
    from services.admin_stats_service import AdminStatsService
    from services.balance_service import BalanceService
    from services.bet_service import BetService
    from services.participation_service import ParticipationService
    from services.settlement_service import SettlementService
    from services.user_service import UserService

logger = logging.getLogger("friendly_bets.infrastructure.container")


@dataclass
class RepositoryContainer:
    """Repositories sharing one database path."""

    user: UserRepository | None = None
    bet: BetRepository | None = None
    participation: ParticipationRepository | None = None
    ledger: LedgerRepository | None = None


@dataclass
class ServiceConfig:
    """Settings the container passes down to services."""

    # Database
    db_path: str = config.DB_PATH

    # Stake and commission rules
    min_stake_unit: int = config.MIN_STAKE_UNIT

    # Admin dashboard
    recent_window_seconds: int = config.RECENT_WINDOW_SECONDS


class ServiceContainer:
    """
    Wires repositories into the participation, settlement and admin services.

    Repositories are built before services; the pool calculator is shared by
    settlement and bet previews. Accessors return None until initialize() runs.
    """

    def __init__(self, config: ServiceConfig | None = None):
        self.config = config or ServiceConfig()
        self._initialized = False
        self._repos = RepositoryContainer()

        self._database: Database | None = None
        self._services: dict[str, Any] = {}

    @property
    def is_initialized(self) -> bool:
        """True once repositories and services are built."""
        return self._initialized

    async def initialize(self) -> None:
        """Build everything once; later calls return immediately."""
        self.initialize_sync()

    def initialize_sync(self) -> None:
        """Blocking variant of initialize() for scripts and synchronous callers."""
        if self._initialized:
            logger.debug("Ledger services already built")
            return

        logger.info(f"Building ledger services for {self.config.db_path}")

        self._init_database()
        self._init_repositories()
        self._init_core_services()
        self._init_admin_services()

        self._initialized = True
        logger.info("Ledger services ready")

    def _init_database(self) -> None:
        """Create the schema and apply pending migrations."""
        self._database = Database(self.config.db_path)

    def _init_repositories(self) -> None:
        logger.debug("Opening repositories")

        db_path = self.config.db_path
        self._repos.user = UserRepository(db_path)
        self._repos.bet = BetRepository(db_path)
        self._repos.participation = ParticipationRepository(db_path)
        self._repos.ledger = LedgerRepository(db_path)

    def _init_core_services(self) -> None:
        """Participation and settlement: the money-moving services."""
        logger.debug("Building participation and settlement")

        from services.participation_service import ParticipationService
        from services.settlement_service import SettlementService

        pool_calculator = PoolCalculator()
        self._services["participation"] = ParticipationService(
            self._repos.bet,
            self._repos.participation,
            self._repos.ledger,
            stake_unit=self.config.min_stake_unit,
        )
        self._services["settlement"] = SettlementService(
            self._repos.bet,
            self._repos.participation,
            self._repos.ledger,
            pool_calculator=pool_calculator,
        )
        self._services["pool_calculator"] = pool_calculator

    def _init_admin_services(self) -> None:
        """Bet administration, balances, users and dashboard stats."""
        logger.debug("Building admin services")

        from services.admin_stats_service import AdminStatsService
        from services.balance_service import BalanceService
        from services.bet_service import BetService
        from services.user_service import UserService

        self._services["bet"] = BetService(
            self._repos.bet,
            self._repos.participation,
            pool_calculator=self._services["pool_calculator"],
        )
        self._services["balance"] = BalanceService(self._repos.user, self._repos.ledger)
        self._services["user"] = UserService(self._repos.user)
        self._services["admin_stats"] = AdminStatsService(
            self._repos.user,
            self._repos.bet,
            self._repos.participation,
            recent_window_seconds=self.config.recent_window_seconds,
        )

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def database(self) -> Database | None:
        return self._database

    @property
    def user_repo(self) -> UserRepository:
        return self._repos.user

    @property
    def bet_repo(self) -> BetRepository:
        return self._repos.bet

    @property
    def participation_repo(self) -> ParticipationRepository:
        return self._repos.participation

    @property
    def ledger_repo(self) -> LedgerRepository:
        return self._repos.ledger

    @property
    def participation_service(self) -> "ParticipationService | None":
        return self._services.get("participation")

    @property
    def settlement_service(self) -> "SettlementService | None":
        return self._services.get("settlement")

    @property
    def bet_service(self) -> "BetService | None":
        return self._services.get("bet")

    @property
    def balance_service(self) -> "BalanceService | None":
        return self._services.get("balance")

    @property
    def user_service(self) -> "UserService | None":
        return self._services.get("user")

    @property
    def admin_stats_service(self) -> "AdminStatsService | None":
        return self._services.get("admin_stats")
