"""
Tables, indexes and triggers for the bets ledger.

Money columns hold integer hundredths of a currency unit; commission rates
hold integer basis points (hundredths of a percent).
"""

import logging
import sqlite3

logger = logging.getLogger("friendly_bets.schema")


class SchemaManager:
    """
    Creates the ledger tables and applies named migrations exactly once.

    Applied migration names are stored in schema_migrations, so running
    initialize() against an up-to-date file changes nothing.
    """

    def __init__(self, db_path: str, use_uri: bool = False):
        self.db_path = db_path
        self.use_uri = use_uri

    def initialize(self) -> None:
        """Create missing tables, then apply migrations not yet recorded."""
        logger.info(f"Preparing ledger schema in {self.db_path}")
        conn = self._connect()
        try:
            with conn:
                cursor = conn.cursor()
                self._create_base_schema(cursor)
                self._create_schema_migrations_table(cursor)
                self._run_migrations(cursor)
        finally:
            # Closing checkpoints the WAL so the file can be copied as a template
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, uri=self.use_uri)
        conn.row_factory = sqlite3.Row
        if not self.use_uri:  # Skip WAL for in-memory databases
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA busy_timeout=5000")
        return conn

    def _create_base_schema(self, cursor) -> None:
        # Users (ids are issued by the identity provider)
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT NOT NULL DEFAULT '',
                balance INTEGER NOT NULL DEFAULT 0 CHECK (balance >= 0),
                is_admin INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL,
                updated_at INTEGER NOT NULL
            )
            """
        )

        # Bets
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS bets (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                description TEXT,
                status TEXT NOT NULL DEFAULT 'active'
                    CHECK (status IN ('active', 'locked', 'completed')),
                commission_rate_bps INTEGER NOT NULL DEFAULT 100
                    CHECK (commission_rate_bps BETWEEN 0 AND 10000),
                total_pool INTEGER NOT NULL DEFAULT 0,
                commission_amount INTEGER NOT NULL DEFAULT 0,
                prize_pool INTEGER NOT NULL DEFAULT 0,
                winning_option_id INTEGER,
                created_by TEXT,
                created_at INTEGER NOT NULL,
                updated_at INTEGER NOT NULL,
                completed_at INTEGER
            )
            """
        )

        # Bet participations
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS bet_participations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                bet_id INTEGER NOT NULL,
                user_id TEXT NOT NULL,
                option_id INTEGER NOT NULL,
                amount INTEGER NOT NULL CHECK (amount > 0),
                created_at INTEGER NOT NULL,
                updated_at INTEGER NOT NULL,
                FOREIGN KEY (bet_id) REFERENCES bets(id),
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
            """
        )

        # Ledger entries (payment history)
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS ledger_entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                type TEXT NOT NULL
                    CHECK (type IN ('credit', 'debit', 'bet_win', 'bet_loss', 'admin_adjustment')),
                amount INTEGER NOT NULL,
                description TEXT NOT NULL,
                reference_bet_id INTEGER,
                balance_before INTEGER NOT NULL,
                balance_after INTEGER NOT NULL,
                created_by TEXT,
                created_at INTEGER NOT NULL,
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
            """
        )

    # --- Migration bookkeeping ---

    def _create_schema_migrations_table(self, cursor) -> None:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

    def _run_migrations(self, cursor) -> None:
        applied = {row["name"] for row in cursor.execute("SELECT name FROM schema_migrations")}
        for name, action in self._get_migrations():
            if name in applied:
                continue
            logger.info(f"Migration {name} applied to {self.db_path}")
            action(cursor)
            cursor.execute(
                "INSERT INTO schema_migrations (name) VALUES (?)",
                (name,),
            )

    def _get_migrations(self):
        return [
            ("create_bet_options_table", self._migration_create_bet_options_table),
            ("add_participation_unique_index", self._migration_add_participation_unique_index),
            ("add_indexes_v1", self._migration_add_indexes_v1),
            ("add_ledger_append_only_triggers", self._migration_add_ledger_append_only_triggers),
            ("add_winning_option_immutable_trigger", self._migration_add_winning_option_immutable_trigger),
        ]

    # --- Migrations ---

    def _migration_create_bet_options_table(self, cursor) -> None:
        """Options live in their own table instead of a JSON blob on the bet row."""
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS bet_options (
                bet_id INTEGER NOT NULL,
                option_id INTEGER NOT NULL CHECK (option_id > 0),
                position INTEGER NOT NULL,
                text TEXT NOT NULL CHECK (length(trim(text)) > 0),
                PRIMARY KEY (bet_id, option_id),
                FOREIGN KEY (bet_id) REFERENCES bets(id) ON DELETE CASCADE
            )
            """
        )

    def _migration_add_participation_unique_index(self, cursor) -> None:
        """At most one participation per (bet, user)."""
        cursor.execute(
            """
            CREATE UNIQUE INDEX IF NOT EXISTS uq_bet_participations_bet_user
            ON bet_participations(bet_id, user_id)
            """
        )

    def _migration_add_indexes_v1(self, cursor) -> None:
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_bet_participations_user ON bet_participations(user_id)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_ledger_entries_user ON ledger_entries(user_id, created_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_ledger_entries_bet ON ledger_entries(reference_bet_id)"
        )
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_bets_status ON bets(status)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_bets_created_at ON bets(created_at)")

    def _migration_add_ledger_append_only_triggers(self, cursor) -> None:
        """Ledger entries can be inserted but never updated or deleted."""
        cursor.execute(
            """
            CREATE TRIGGER IF NOT EXISTS trg_ledger_entries_no_update
            BEFORE UPDATE ON ledger_entries
            BEGIN
                SELECT RAISE(ABORT, 'ledger entries are append-only');
            END
            """
        )
        cursor.execute(
            """
            CREATE TRIGGER IF NOT EXISTS trg_ledger_entries_no_delete
            BEFORE DELETE ON ledger_entries
            BEGIN
                SELECT RAISE(ABORT, 'ledger entries are append-only');
            END
            """
        )

    def _migration_add_winning_option_immutable_trigger(self, cursor) -> None:
        """Once a winning option is recorded it cannot change."""
        cursor.execute(
            """
            CREATE TRIGGER IF NOT EXISTS trg_bets_winning_option_immutable
            BEFORE UPDATE OF winning_option_id ON bets
            WHEN OLD.winning_option_id IS NOT NULL
                 AND (NEW.winning_option_id IS NULL OR NEW.winning_option_id != OLD.winning_option_id)
            BEGIN
                SELECT RAISE(ABORT, 'winning option is immutable once set');
            END
            """
        )
