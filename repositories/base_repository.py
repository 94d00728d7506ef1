"""
Shared SQLite plumbing for the bet, participation, ledger and user repositories.
"""

import logging
import sqlite3
from abc import ABC
from contextlib import contextmanager

import config
from database import Database

logger = logging.getLogger("friendly_bets.repositories")


class BaseRepository(ABC):
    """
    Opens connections to one ledger database file.

    Write methods on subclasses take the ``conn`` of an enclosing
    ``atomic_transaction()`` so a settlement or stake change can span
    several repositories and still commit once.
    """

    # Database files whose schema has been created in this process
    _prepared_paths = set()

    def __init__(self, db_path: str):
        self.db_path = db_path
        if db_path not in BaseRepository._prepared_paths:
            Database(db_path)
            BaseRepository._prepared_paths.add(db_path)

    def get_connection(self) -> sqlite3.Connection:
        """Open a connection with Row results, busy timeout and foreign keys on."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        if config.SQLITE_WAL_ENABLED:
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(f"PRAGMA busy_timeout={int(config.SQLITE_BUSY_TIMEOUT_MS)}")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def connection(self):
        """Yield a deferred-transaction connection; commit on exit, roll back on error."""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def atomic_transaction(self):
        """
        Yield a connection holding the write lock for the whole block.

        BEGIN IMMEDIATE is issued before any read, so a balance check followed
        by a debit, or a status check followed by settlement, sees no other
        writer in between. Any exception rolls back every ledger row and
        balance change made through ``conn``.
        """
        conn = self.get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def cursor(self):
        with self.connection() as conn:
            yield conn.cursor()
