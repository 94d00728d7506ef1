"""
Bet domain model.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from domain.models.money import ZERO, Money


class BetStatus(str, Enum):
    ACTIVE = "active"
    LOCKED = "locked"
    COMPLETED = "completed"


@dataclass(frozen=True)
class BetOption:
    """A single selectable outcome. ``id`` is unique within its bet."""

    id: int
    text: str


@dataclass(frozen=True)
class BetOptions:
    """
    Ordered, validated list of a bet's options.

    Invariants (checked on construction):
    - at least ``min_options`` entries
    - ids are positive and unique
    - text is non-empty after stripping
    """

    options: tuple[BetOption, ...]
    min_options: int = field(default=2, compare=False, repr=False)

    def __post_init__(self):
        if len(self.options) < self.min_options:
            raise ValueError(f"A bet needs at least {self.min_options} options.")
        seen: set[int] = set()
        for option in self.options:
            if option.id <= 0:
                raise ValueError(f"Option id must be positive: {option.id}")
            if option.id in seen:
                raise ValueError(f"Duplicate option id: {option.id}")
            if not option.text or not option.text.strip():
                raise ValueError("Option text must not be empty.")
            seen.add(option.id)

    @classmethod
    def from_texts(cls, texts: list[str], min_options: int = 2) -> "BetOptions":
        """Build options from display texts, numbering them 1..n in order."""
        return cls(
            tuple(BetOption(id=i, text=text.strip()) for i, text in enumerate(texts, start=1)),
            min_options=min_options,
        )

    def ids(self) -> list[int]:
        return [o.id for o in self.options]

    def get(self, option_id: int) -> BetOption | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def __contains__(self, option_id: object) -> bool:
        return any(o.id == option_id for o in self.options)

    def __iter__(self):
        return iter(self.options)

    def __len__(self) -> int:
        return len(self.options)


@dataclass
class Bet:
    """
    A multi-option bet.

    Pool fields are cached values; the pool calculator derives authoritative
    numbers from participations. ``winning_option_id`` is only set when the
    bet completes.
    """

    id: int
    title: str
    options: BetOptions
    status: BetStatus = BetStatus.ACTIVE
    commission_rate: Decimal = Decimal("1.00")
    description: str | None = None
    total_pool: Money = ZERO
    commission_amount: Money = ZERO
    prize_pool: Money = ZERO
    winning_option_id: int | None = None
    created_by: str | None = None
    created_at: int | None = None
    updated_at: int | None = None
    completed_at: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == BetStatus.COMPLETED

    def has_option(self, option_id: int) -> bool:
        return option_id in self.options
