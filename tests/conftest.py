"""
Shared fixtures: repositories, services and builders over a throwaway ledger.

The ledger schema is built once per session into a template file; each test
gets a private copy of that file.

This module also provides centralized constants and small builders (users
with funded balances, bets with options) to reduce duplication across the
test suite.
"""

import shutil
from decimal import Decimal

import pytest

from database import Database
from domain.models.ledger_entry import LedgerEntryType
from repositories.bet_repository import BetRepository
from repositories.ledger_repository import LedgerRepository
from repositories.participation_repository import ParticipationRepository
from repositories.user_repository import UserRepository
from services.admin_stats_service import AdminStatsService
from services.balance_service import BalanceService
from services.bet_service import BetService
from services.participation_service import ParticipationService
from services.permissions import AuthContext
from services.settlement_service import SettlementService
from services.user_service import UserService


# =============================================================================
# CALLERS
# =============================================================================

ADMIN = AuthContext(user_id="admin-1", is_admin=True)
"""Admin caller for admin-only operations."""

NON_ADMIN = AuthContext(user_id="user-regular", is_admin=False)
"""Authenticated caller without admin rights."""


@pytest.fixture(scope="session")
def _schema_template_path(tmp_path_factory):
    """Ledger database with every migration applied, built once."""
    template_path = str(tmp_path_factory.mktemp("ledger_template") / "ledger.db")
    Database(template_path)
    yield template_path


@pytest.fixture
def temp_db_path(tmp_path):
    """Path to a database file that does not exist yet."""
    path = str(tmp_path / "temp.db")
    yield path


@pytest.fixture
def repo_db_path(_schema_template_path, tmp_path):
    """Private copy of the migrated template for one test."""
    db_path = str(tmp_path / "ledger.db")
    shutil.copy2(_schema_template_path, db_path)
    yield db_path


# =============================================================================
# REPOSITORIES
# =============================================================================


@pytest.fixture
def user_repository(repo_db_path):
    return UserRepository(repo_db_path)


@pytest.fixture
def bet_repository(repo_db_path):
    return BetRepository(repo_db_path)


@pytest.fixture
def participation_repository(repo_db_path):
    return ParticipationRepository(repo_db_path)


@pytest.fixture
def ledger_repository(repo_db_path):
    return LedgerRepository(repo_db_path)


# =============================================================================
# SERVICES
# =============================================================================


@pytest.fixture
def participation_service(bet_repository, participation_repository, ledger_repository):
    return ParticipationService(bet_repository, participation_repository, ledger_repository, stake_unit=10)


@pytest.fixture
def settlement_service(bet_repository, participation_repository, ledger_repository):
    return SettlementService(bet_repository, participation_repository, ledger_repository)


@pytest.fixture
def bet_service(bet_repository, participation_repository):
    return BetService(bet_repository, participation_repository)


@pytest.fixture
def balance_service(user_repository, ledger_repository):
    return BalanceService(user_repository, ledger_repository)


@pytest.fixture
def user_service(user_repository):
    return UserService(user_repository)


@pytest.fixture
def admin_stats_service(user_repository, bet_repository, participation_repository):
    return AdminStatsService(user_repository, bet_repository, participation_repository)


# =============================================================================
# BUILDERS
# =============================================================================


@pytest.fixture
def make_user(user_repository, ledger_repository):
    """
    Create a user and fund it through the ledger.

    Usage:
        make_user("alice", balance=Decimal("100"))
    """

    def _make(user_id: str, balance=Decimal("0"), name: str | None = None, is_admin: bool = False):
        user_repository.add(user_id, name or user_id.title(), f"{user_id}@example.com", is_admin=is_admin)
        if Decimal(balance) > 0:
            with ledger_repository.atomic_transaction() as conn:
                ledger_repository.apply_balance_change(
                    conn, user_id, Decimal(balance), LedgerEntryType.CREDIT, "Initial funding"
                )
        return user_repository.get_by_id(user_id)

    return _make


@pytest.fixture
def make_bet(bet_service):
    """
    Create an active bet through the admin service.

    Usage:
        bet = make_bet(["Heads", "Tails"], commission_rate=Decimal("10"))
    """

    def _make(options=None, commission_rate=Decimal("10"), title: str = "Coin flip"):
        result = bet_service.create_bet(
            ADMIN, title, None, options or ["Heads", "Tails"], commission_rate=commission_rate
        )
        assert result.success, result.error
        return result.value

    return _make
