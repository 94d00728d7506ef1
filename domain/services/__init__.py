"""
Domain services containing pure business logic.
"""

from domain.services.bet_lifecycle import BetAction, ensure_allowed, ensure_deletable, is_allowed
from domain.services.pool_calculator import PoolCalculator

__all__ = ["BetAction", "PoolCalculator", "ensure_allowed", "ensure_deletable", "is_allowed"]
