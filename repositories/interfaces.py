"""
Abstract repository interfaces for data access.

These interfaces define the contracts implemented by concrete repositories.
Methods that take a ``conn`` argument run inside the caller's open
transaction and never commit on their own.
"""

from abc import ABC, abstractmethod
from decimal import Decimal


class IUserRepository(ABC):
    @abstractmethod
    def add(self, user_id: str, name: str, email: str = "", is_admin: bool = False): ...

    @abstractmethod
    def get_by_id(self, user_id: str, conn=None): ...

    @abstractmethod
    def exists(self, user_id: str) -> bool: ...

    @abstractmethod
    def get_balance(self, user_id: str): ...

    @abstractmethod
    def update_profile(self, user_id: str, name: str | None = None, email: str | None = None) -> bool: ...

    @abstractmethod
    def set_admin(self, user_id: str, is_admin: bool) -> bool: ...

    @abstractmethod
    def search(self, search: str | None = None, limit: int = 20, offset: int = 0) -> list: ...

    @abstractmethod
    def count(self, search: str | None = None) -> int: ...

    @abstractmethod
    def count_created_since(self, since_ts: int) -> int: ...


class IBetRepository(ABC):
    @abstractmethod
    def create_bet(
        self,
        title: str,
        description: str | None,
        options,
        commission_rate: Decimal,
        created_by: str | None = None,
    ): ...

    @abstractmethod
    def get_by_id(self, bet_id: int, conn=None): ...

    @abstractmethod
    def list_bets(self, status: str | None = None, limit: int = 10, offset: int = 0) -> list: ...

    @abstractmethod
    def count_bets(self, status: str | None = None) -> int: ...

    @abstractmethod
    def update_status(self, conn, bet_id: int, status: str) -> None: ...

    @abstractmethod
    def update_details(self, conn, bet_id: int, title: str, description: str | None) -> None: ...

    @abstractmethod
    def update_commission_rate(self, conn, bet_id: int, commission_rate: Decimal) -> None: ...

    @abstractmethod
    def adjust_total_pool(self, conn, bet_id: int, delta) -> None: ...

    @abstractmethod
    def mark_completed(
        self,
        conn,
        bet_id: int,
        winning_option_id: int,
        total_pool,
        commission_amount,
        prize_pool,
    ) -> None: ...

    @abstractmethod
    def delete_bet(self, conn, bet_id: int) -> None: ...

    @abstractmethod
    def count_by_status(self) -> dict[str, int]: ...

    @abstractmethod
    def get_completed_totals(self) -> dict: ...

    @abstractmethod
    def count_created_since(self, since_ts: int) -> int: ...

    @abstractmethod
    def sum_commission_since(self, since_ts: int): ...


class IParticipationRepository(ABC):
    @abstractmethod
    def get(self, bet_id: int, user_id: str, conn=None): ...

    @abstractmethod
    def get_for_bet(self, bet_id: int, conn=None) -> list: ...

    @abstractmethod
    def get_for_user(self, user_id: str) -> list: ...

    @abstractmethod
    def count_for_bet(self, bet_id: int, conn=None) -> int: ...

    @abstractmethod
    def insert(self, conn, bet_id: int, user_id: str, option_id: int, amount): ...

    @abstractmethod
    def update(self, conn, participation_id: int, option_id: int, amount): ...

    @abstractmethod
    def count_all(self) -> int: ...

    @abstractmethod
    def count_created_since(self, since_ts: int) -> int: ...


class ILedgerRepository(ABC):
    @abstractmethod
    def apply_balance_change(
        self,
        conn,
        user_id: str,
        signed_amount,
        entry_type,
        description: str,
        reference_bet_id: int | None = None,
        actor_id: str | None = None,
    ): ...

    @abstractmethod
    def record_audit_entry(
        self,
        conn,
        user_id: str,
        amount,
        entry_type,
        description: str,
        reference_bet_id: int | None = None,
        actor_id: str | None = None,
    ): ...

    @abstractmethod
    def get_entries_for_user(self, user_id: str, limit: int = 50, offset: int = 0) -> list: ...

    @abstractmethod
    def count_entries_for_user(self, user_id: str) -> int: ...

    @abstractmethod
    def get_entries_for_bet(self, bet_id: int) -> list: ...

    @abstractmethod
    def sum_signed_amounts(self, user_id: str): ...

    @abstractmethod
    def find_inconsistencies(self) -> list[dict]: ...
