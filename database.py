"""
Database handle for the Friendly Bets backend.

Constructing a Database runs schema creation and pending migrations, so a
fresh path is usable as soon as the object exists.
"""

import logging
import sqlite3
from contextlib import contextmanager

import config
from infrastructure.schema_manager import SchemaManager

logger = logging.getLogger("friendly_bets.database")


class Database:
    """Owns the SQLite file path and applies the schema on construction."""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or config.DB_PATH
        self.schema_manager = SchemaManager(self.db_path)
        self.schema_manager.initialize()

    def get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        if config.SQLITE_WAL_ENABLED:
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(f"PRAGMA busy_timeout={int(config.SQLITE_BUSY_TIMEOUT_MS)}")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def transaction(self):
        """
        Yield a connection holding the write lock (BEGIN IMMEDIATE).

        Commits on success, rolls back on any exception.
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
