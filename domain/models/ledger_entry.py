"""
Ledger entry domain model.
"""

from dataclasses import dataclass
from enum import Enum

from domain.models.money import ZERO, Money


class LedgerEntryType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"
    BET_WIN = "bet_win"
    BET_LOSS = "bet_loss"
    ADMIN_ADJUSTMENT = "admin_adjustment"


# Entry types that document an outcome without moving money
AUDIT_ONLY_TYPES = frozenset({LedgerEntryType.BET_LOSS})


@dataclass(frozen=True)
class BalanceChange:
    """Snapshot returned by every balance mutation."""

    balance_before: Money
    balance_after: Money
    entry_id: int | None = None

    @property
    def delta(self) -> Money:
        return self.balance_after - self.balance_before


@dataclass(frozen=True)
class LedgerEntry:
    """
    Immutable audit record of a balance change.

    ``amount`` is signed. For audit-only entries (bet losses) it records the
    lost stake as a negative number while the balance snapshots are equal;
    ``signed_amount`` is the actual balance movement in every case.
    """

    id: int
    user_id: str
    type: LedgerEntryType
    amount: Money
    description: str
    balance_before: Money
    balance_after: Money
    reference_bet_id: int | None = None
    created_by: str | None = None
    created_at: int | None = None

    @property
    def signed_amount(self) -> Money:
        if self.type in AUDIT_ONLY_TYPES:
            return ZERO
        return self.amount

    @property
    def is_consistent(self) -> bool:
        return self.balance_after - self.balance_before == self.signed_amount
