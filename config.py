"""
Centralized configuration for the Friendly Bets backend.
"""

from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

load_dotenv()


def _parse_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_decimal(env_var: str, default: str) -> Decimal:
    raw = os.getenv(env_var)
    try:
        value = Decimal(raw if raw is not None else default)
    except InvalidOperation:
        return Decimal(default)
    return value if value.is_finite() else Decimal(default)


def _parse_bool(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


DB_PATH = os.getenv("DB_PATH", "friendly_bets.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SQLITE_BUSY_TIMEOUT_MS = _parse_int("SQLITE_BUSY_TIMEOUT_MS", 5000)
SQLITE_WAL_ENABLED = _parse_bool("SQLITE_WAL_ENABLED", True)

# Stakes must be a positive multiple of this unit (whole currency units)
MIN_STAKE_UNIT = _parse_int("MIN_STAKE_UNIT", 10)

# Largest single stake or adjustment; keeps hundredths well inside SQLite INTEGER
MAX_AMOUNT = _parse_int("MAX_AMOUNT", 1_000_000_000)

# Commission is a percentage of the pool, kept to two decimal places
DEFAULT_COMMISSION_RATE = _parse_decimal("DEFAULT_COMMISSION_RATE", "1.00")
MAX_COMMISSION_RATE = _parse_decimal("MAX_COMMISSION_RATE", "100.00")

MIN_BET_OPTIONS = _parse_int("MIN_BET_OPTIONS", 2)
MAX_BET_OPTIONS = _parse_int("MAX_BET_OPTIONS", 20)

# Listing defaults
DEFAULT_PAGE_SIZE = _parse_int("DEFAULT_PAGE_SIZE", 10)
USER_PAGE_SIZE = _parse_int("USER_PAGE_SIZE", 20)
PAYMENT_HISTORY_PAGE_SIZE = _parse_int("PAYMENT_HISTORY_PAGE_SIZE", 50)

# Window used by admin stats for "recent" counters
RECENT_WINDOW_SECONDS = _parse_int("RECENT_WINDOW_SECONDS", 86400)  # 24 hours

