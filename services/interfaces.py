"""
Service layer interfaces (ABCs).

These abstract base classes define the contracts for the core services.
Services inherit from their corresponding interface to keep APIs consistent
and to make test doubles straightforward.

Usage:
    class MyService(IMyService):
        def my_method(self, param: str) -> Result[dict]:
            ...
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.models.bet import Bet
    from domain.models.ledger_entry import BalanceChange
    from domain.models.participation import Participation
    from services.admin_stats_service import AdminStats
    from services.balance_service import PaymentHistoryPage
    from services.bet_service import BetPage, PoolStats
    from services.permissions import AuthContext
    from services.result import Result
    from services.settlement_service import SettlementSummary


class IParticipationService(ABC):
    """Interface for joining bets and amending stakes."""

    @abstractmethod
    def participate(self, bet_id: int, user_id: str, option_id: int, amount) -> "Result[Participation]":
        """Stake ``amount`` on an option of an active bet."""
        ...

    @abstractmethod
    def edit_participation(
        self, bet_id: int, user_id: str, option_id: int, amount
    ) -> "Result[Participation]":
        """Change option and/or stake; the difference moves through the ledger."""
        ...

    @abstractmethod
    def get_participation(self, bet_id: int, user_id: str) -> "Participation | None":
        ...

    @abstractmethod
    def get_participations_for_bet(self, bet_id: int) -> "list[Participation]":
        ...

    @abstractmethod
    def get_participations_for_user(self, user_id: str) -> "list[Participation]":
        ...


class ISettlementService(ABC):
    """Interface for resolving bets."""

    @abstractmethod
    def settle(
        self, actor: "AuthContext", bet_id: int, winning_option_id: int
    ) -> "Result[SettlementSummary]":
        """Complete a bet and pay winners exactly once."""
        ...


class IBetService(ABC):
    """Interface for bet administration and pool statistics."""

    @abstractmethod
    def create_bet(
        self,
        actor: "AuthContext",
        title: str,
        description: str | None,
        options: list[str],
        commission_rate=None,
    ) -> "Result[Bet]":
        ...

    @abstractmethod
    def get_bet(self, bet_id: int) -> "Bet | None":
        ...

    @abstractmethod
    def list_bets(self, status: str | None = None, page: int = 1, limit: int | None = None) -> "Result[BetPage]":
        ...

    @abstractmethod
    def lock_bet(self, actor: "AuthContext", bet_id: int) -> "Result[Bet]":
        ...

    @abstractmethod
    def unlock_bet(self, actor: "AuthContext", bet_id: int) -> "Result[Bet]":
        ...

    @abstractmethod
    def update_bet_details(
        self, actor: "AuthContext", bet_id: int, title: str | None = None, description: str | None = None
    ) -> "Result[Bet]":
        ...

    @abstractmethod
    def change_commission(self, actor: "AuthContext", bet_id: int, commission_rate) -> "Result[Bet]":
        ...

    @abstractmethod
    def delete_bet(self, actor: "AuthContext", bet_id: int) -> "Result[None]":
        ...

    @abstractmethod
    def get_pool_stats(self, bet_id: int) -> "Result[PoolStats]":
        """Live pool figures; fails only when the bet is absent."""
        ...


class IBalanceService(ABC):
    """Interface for admin balance adjustments and payment history."""

    @abstractmethod
    def adjust_balance(
        self, actor: "AuthContext", user_id: str, direction: str, amount, description: str
    ) -> "Result[BalanceChange]":
        ...

    @abstractmethod
    def get_balance(self, user_id: str) -> "Result":
        ...

    @abstractmethod
    def get_payment_history(
        self, user_id: str, limit: int | None = None, offset: int = 0
    ) -> "Result[PaymentHistoryPage]":
        ...


class IAdminStatsService(ABC):
    @abstractmethod
    def get_stats(self, actor: "AuthContext", now: int | None = None) -> "Result[AdminStats]":
        ...


class IUserService(ABC):
    """Interface for user provisioning and profiles."""

    @abstractmethod
    def get_or_create_user(self, auth: "AuthContext", email: str = "", name: str | None = None) -> "Result":
        ...

    @abstractmethod
    def get_user(self, user_id: str) -> "Result":
        ...

    @abstractmethod
    def update_profile(self, user_id: str, name: str) -> "Result":
        ...

    @abstractmethod
    def list_users(
        self, actor: "AuthContext", search: str | None = None, page: int = 1, limit: int | None = None
    ) -> "Result":
        ...
