"""
Repository for bets and their options.
"""

from __future__ import annotations

import sqlite3
import time
from decimal import Decimal

from domain.models.bet import Bet, BetOption, BetOptions, BetStatus
from domain.models.money import (
    ZERO,
    Money,
    from_minor,
    rate_from_basis_points,
    rate_to_basis_points,
    to_minor,
)
from repositories.base_repository import BaseRepository
from repositories.interfaces import IBetRepository


class BetRepository(BaseRepository, IBetRepository):
    """
    Handles CRUD operations against the bets and bet_options tables.

    Pool columns are cached values maintained by participation and settlement
    writes; they are never the source of truth for payouts.
    """

    def create_bet(
        self,
        title: str,
        description: str | None,
        options: BetOptions,
        commission_rate: Decimal,
        created_by: str | None = None,
    ) -> Bet:
        now = int(time.time())
        bps = rate_to_basis_points(commission_rate)
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO bets (title, description, status, commission_rate_bps,
                                  created_by, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (title, description, BetStatus.ACTIVE.value, bps, created_by, now, now),
            )
            bet_id = cursor.lastrowid
            cursor.executemany(
                "INSERT INTO bet_options (bet_id, option_id, position, text) VALUES (?, ?, ?, ?)",
                [(bet_id, option.id, position, option.text) for position, option in enumerate(options)],
            )
        return Bet(
            id=bet_id,
            title=title,
            description=description,
            options=options,
            commission_rate=rate_from_basis_points(bps),
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )

    def _load_options(self, cursor, bet_ids: list[int]) -> dict[int, BetOptions]:
        if not bet_ids:
            return {}
        placeholders = ",".join("?" for _ in bet_ids)
        cursor.execute(
            f"""
            SELECT bet_id, option_id, text FROM bet_options
            WHERE bet_id IN ({placeholders})
            ORDER BY bet_id, position
            """,
            bet_ids,
        )
        grouped: dict[int, list[BetOption]] = {}
        for row in cursor.fetchall():
            grouped.setdefault(row["bet_id"], []).append(BetOption(id=row["option_id"], text=row["text"]))
        # Stored rows were validated on write; min_options=0 tolerates legacy rows
        return {bet_id: BetOptions(tuple(opts), min_options=0) for bet_id, opts in grouped.items()}

    @staticmethod
    def _row_to_bet(row, options: BetOptions | None) -> Bet:
        return Bet(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            options=options if options is not None else BetOptions((), min_options=0),
            status=BetStatus(row["status"]),
            commission_rate=rate_from_basis_points(row["commission_rate_bps"]),
            total_pool=from_minor(row["total_pool"]),
            commission_amount=from_minor(row["commission_amount"]),
            prize_pool=from_minor(row["prize_pool"]),
            winning_option_id=row["winning_option_id"],
            created_by=row["created_by"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            completed_at=row["completed_at"],
        )

    def get_by_id(self, bet_id: int, conn: sqlite3.Connection | None = None) -> Bet | None:
        """
        Fetch a bet with its options.

        Pass ``conn`` to read inside an open transaction (fresh read under the
        write lock); otherwise a short-lived connection is used.
        """
        if conn is not None:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM bets WHERE id = ?", (bet_id,))
            row = cursor.fetchone()
            if not row:
                return None
            options = self._load_options(cursor, [bet_id]).get(bet_id)
            return self._row_to_bet(row, options)
        with self.connection() as own_conn:
            return self.get_by_id(bet_id, conn=own_conn)

    def list_bets(self, status: str | None = None, limit: int = 10, offset: int = 0) -> list[Bet]:
        """Bets newest first, optionally filtered by status."""
        where = "WHERE status = ?" if status else ""
        params: tuple = (BetStatus(status).value,) if status else ()
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT * FROM bets
                {where}
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = cursor.fetchall()
            options = self._load_options(cursor, [row["id"] for row in rows])
            return [self._row_to_bet(row, options.get(row["id"])) for row in rows]

    def count_bets(self, status: str | None = None) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            if status:
                cursor.execute(
                    "SELECT COUNT(*) AS count FROM bets WHERE status = ?", (BetStatus(status).value,)
                )
            else:
                cursor.execute("SELECT COUNT(*) AS count FROM bets")
            return int(cursor.fetchone()["count"])

    def update_status(self, conn: sqlite3.Connection, bet_id: int, status: str) -> None:
        conn.execute(
            "UPDATE bets SET status = ?, updated_at = ? WHERE id = ?",
            (BetStatus(status).value, int(time.time()), bet_id),
        )

    def update_details(
        self, conn: sqlite3.Connection, bet_id: int, title: str, description: str | None
    ) -> None:
        conn.execute(
            "UPDATE bets SET title = ?, description = ?, updated_at = ? WHERE id = ?",
            (title, description, int(time.time()), bet_id),
        )

    def update_commission_rate(
        self, conn: sqlite3.Connection, bet_id: int, commission_rate: Decimal
    ) -> None:
        conn.execute(
            "UPDATE bets SET commission_rate_bps = ?, updated_at = ? WHERE id = ?",
            (rate_to_basis_points(commission_rate), int(time.time()), bet_id),
        )

    def adjust_total_pool(self, conn: sqlite3.Connection, bet_id: int, delta: Money) -> None:
        """Shift the cached total pool by a signed amount."""
        conn.execute(
            "UPDATE bets SET total_pool = total_pool + ?, updated_at = ? WHERE id = ?",
            (to_minor(delta), int(time.time()), bet_id),
        )

    def mark_completed(
        self,
        conn: sqlite3.Connection,
        bet_id: int,
        winning_option_id: int,
        total_pool: Money,
        commission_amount: Money,
        prize_pool: Money,
    ) -> None:
        """
        Record the settlement outcome.

        A bet that is already completed matches no row, which raises
        ValueError and rolls back the caller's transaction.
        """
        now = int(time.time())
        cursor = conn.cursor()
        cursor.execute(
            """
            UPDATE bets
            SET status = ?, winning_option_id = ?, total_pool = ?, commission_amount = ?,
                prize_pool = ?, completed_at = ?, updated_at = ?
            WHERE id = ? AND status != ?
            """,
            (
                BetStatus.COMPLETED.value,
                winning_option_id,
                to_minor(total_pool),
                to_minor(commission_amount),
                to_minor(prize_pool),
                now,
                now,
                bet_id,
                BetStatus.COMPLETED.value,
            ),
        )
        if cursor.rowcount != 1:
            raise ValueError(f"Bet {bet_id} could not be marked completed.")

    def delete_bet(self, conn: sqlite3.Connection, bet_id: int) -> None:
        conn.execute("DELETE FROM bet_options WHERE bet_id = ?", (bet_id,))
        conn.execute("DELETE FROM bets WHERE id = ?", (bet_id,))

    def count_by_status(self) -> dict[str, int]:
        counts = {status.value: 0 for status in BetStatus}
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT status, COUNT(*) AS count FROM bets GROUP BY status")
            for row in cursor.fetchall():
                counts[row["status"]] = int(row["count"])
        return counts

    def get_completed_totals(self) -> dict:
        """Sums over completed bets: total pool, prize pool, commission, count."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT COUNT(*) AS count,
                       COALESCE(SUM(total_pool), 0) AS total_pool,
                       COALESCE(SUM(prize_pool), 0) AS prize_pool,
                       COALESCE(SUM(commission_amount), 0) AS commission
                FROM bets
                WHERE status = ?
                """,
                (BetStatus.COMPLETED.value,),
            )
            row = cursor.fetchone()
            return {
                "count": int(row["count"]),
                "total_pool": from_minor(row["total_pool"]),
                "prize_pool": from_minor(row["prize_pool"]),
                "commission": from_minor(row["commission"]),
            }

    def count_created_since(self, since_ts: int) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM bets WHERE created_at >= ?", (int(since_ts),)
            )
            return int(cursor.fetchone()["count"])

    def sum_commission_since(self, since_ts: int) -> Money:
        """Commission recorded on bets created since ``since_ts``."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COALESCE(SUM(commission_amount), 0) AS total FROM bets WHERE created_at >= ?",
                (int(since_ts),),
            )
            row = cursor.fetchone()
            return from_minor(row["total"]) if row else ZERO
