"""
Repository for bet participations.
"""

from __future__ import annotations

import sqlite3
import time

from domain import error_codes
from domain.errors import StateConflictError
from domain.models.money import Money, from_minor, to_minor
from domain.models.participation import Participation
from repositories.base_repository import BaseRepository
from repositories.interfaces import IParticipationRepository


class ParticipationRepository(BaseRepository, IParticipationRepository):
    """
    Handles the bet_participations table.

    The (bet_id, user_id) unique index is the authority on one participation
    per user per bet; a violating insert surfaces as a duplicate error.
    """

    @staticmethod
    def _row_to_participation(row) -> Participation:
        return Participation(
            id=row["id"],
            bet_id=row["bet_id"],
            user_id=row["user_id"],
            option_id=row["option_id"],
            amount=from_minor(row["amount"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get(self, bet_id: int, user_id: str, conn: sqlite3.Connection | None = None) -> Participation | None:
        if conn is not None:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM bet_participations WHERE bet_id = ? AND user_id = ?",
                (bet_id, user_id),
            )
            row = cursor.fetchone()
            return self._row_to_participation(row) if row else None
        with self.connection() as own_conn:
            return self.get(bet_id, user_id, conn=own_conn)

    def get_for_bet(self, bet_id: int, conn: sqlite3.Connection | None = None) -> list[Participation]:
        """All participations on a bet in insertion order."""
        if conn is not None:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM bet_participations WHERE bet_id = ? ORDER BY id ASC",
                (bet_id,),
            )
            return [self._row_to_participation(row) for row in cursor.fetchall()]
        with self.connection() as own_conn:
            return self.get_for_bet(bet_id, conn=own_conn)

    def get_for_user(self, user_id: str) -> list[Participation]:
        """A user's participations, newest first."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM bet_participations
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (user_id,),
            )
            return [self._row_to_participation(row) for row in cursor.fetchall()]

    def count_for_bet(self, bet_id: int, conn: sqlite3.Connection | None = None) -> int:
        if conn is not None:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM bet_participations WHERE bet_id = ?", (bet_id,)
            )
            return int(cursor.fetchone()["count"])
        with self.connection() as own_conn:
            return self.count_for_bet(bet_id, conn=own_conn)

    def insert(
        self,
        conn: sqlite3.Connection,
        bet_id: int,
        user_id: str,
        option_id: int,
        amount: Money,
    ) -> Participation:
        now = int(time.time())
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO bet_participations (bet_id, user_id, option_id, amount, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (bet_id, user_id, option_id, to_minor(amount), now, now),
            )
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" not in str(exc):
                raise
            raise StateConflictError(
                "You have already joined this bet. Edit your participation instead.",
                code=error_codes.DUPLICATE_PARTICIPATION,
            ) from exc
        return Participation(
            id=cursor.lastrowid,
            bet_id=bet_id,
            user_id=user_id,
            option_id=option_id,
            amount=amount,
            created_at=now,
            updated_at=now,
        )

    def update(
        self,
        conn: sqlite3.Connection,
        participation_id: int,
        option_id: int,
        amount: Money,
    ) -> Participation:
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE bet_participations SET option_id = ?, amount = ?, updated_at = ? WHERE id = ?",
            (option_id, to_minor(amount), int(time.time()), participation_id),
        )
        cursor.execute("SELECT * FROM bet_participations WHERE id = ?", (participation_id,))
        return self._row_to_participation(cursor.fetchone())

    def count_all(self) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM bet_participations")
            return int(cursor.fetchone()["count"])

    def count_created_since(self, since_ts: int) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM bet_participations WHERE created_at >= ?",
                (int(since_ts),),
            )
            return int(cursor.fetchone()["count"])
