"""
Participation domain model.
"""

from dataclasses import dataclass

from domain.models.money import Money


@dataclass
class Participation:
    """A user's single stake on one option of a bet (one per bet and user)."""

    id: int
    bet_id: int
    user_id: str
    option_id: int
    amount: Money
    created_at: int | None = None
    updated_at: int | None = None
