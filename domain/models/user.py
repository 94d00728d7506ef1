"""
User domain model.
"""

from dataclasses import dataclass

from domain.models.money import ZERO, Money


@dataclass
class User:
    """
    A platform user.

    ``id`` is issued by the external identity provider. The balance is only
    changed through ledger operations.
    """

    id: str
    name: str
    email: str = ""
    balance: Money = ZERO
    is_admin: bool = False
    created_at: int | None = None
    updated_at: int | None = None
