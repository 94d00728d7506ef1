"""
Repository for user accounts.

Balances are read here but only ever written by LedgerRepository.
"""

from __future__ import annotations

import sqlite3
import time

from domain.models.money import Money, from_minor
from domain.models.user import User
from repositories.base_repository import BaseRepository
from repositories.interfaces import IUserRepository


class UserRepository(BaseRepository, IUserRepository):
    @staticmethod
    def _row_to_user(row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"] or "",
            balance=from_minor(row["balance"]),
            is_admin=bool(row["is_admin"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def add(self, user_id: str, name: str, email: str = "", is_admin: bool = False) -> User:
        """
        Insert a user with a zero balance.

        Raises:
            ValueError: if the user already exists
        """
        now = int(time.time())
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM users WHERE id = ?", (user_id,))
            if cursor.fetchone():
                raise ValueError(f"User {user_id} already exists.")
            try:
                cursor.execute(
                    """
                    INSERT INTO users (id, name, email, balance, is_admin, created_at, updated_at)
                    VALUES (?, ?, ?, 0, ?, ?, ?)
                    """,
                    (user_id, name, email or "", 1 if is_admin else 0, now, now),
                )
            except sqlite3.IntegrityError as exc:
                raise ValueError(f"User {user_id} already exists.") from exc
        return User(id=user_id, name=name, email=email or "", is_admin=is_admin, created_at=now, updated_at=now)

    def get_by_id(self, user_id: str, conn=None) -> User | None:
        if conn is not None:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cursor.fetchone()
            return self._row_to_user(row) if row else None
        with self.connection() as own_conn:
            return self.get_by_id(user_id, conn=own_conn)

    def exists(self, user_id: str) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM users WHERE id = ?", (user_id,))
            return cursor.fetchone() is not None

    def get_balance(self, user_id: str) -> Money | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT balance FROM users WHERE id = ?", (user_id,))
            row = cursor.fetchone()
            return from_minor(row["balance"]) if row else None

    def update_profile(self, user_id: str, name: str | None = None, email: str | None = None) -> bool:
        """Update name and/or email. Returns False if the user does not exist."""
        fields = []
        params: list = []
        if name is not None:
            fields.append("name = ?")
            params.append(name)
        if email is not None:
            fields.append("email = ?")
            params.append(email)
        fields.append("updated_at = ?")
        params.append(int(time.time()))
        params.append(user_id)
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"UPDATE users SET {', '.join(fields)} WHERE id = ?", params)
            return cursor.rowcount > 0

    def set_admin(self, user_id: str, is_admin: bool) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE users SET is_admin = ?, updated_at = ? WHERE id = ?",
                (1 if is_admin else 0, int(time.time()), user_id),
            )
            return cursor.rowcount > 0

    @staticmethod
    def _search_clause(search: str | None) -> tuple[str, tuple]:
        if not search:
            return "", ()
        pattern = f"%{search.strip().lower()}%"
        return "WHERE LOWER(name) LIKE ? OR LOWER(email) LIKE ?", (pattern, pattern)

    def search(self, search: str | None = None, limit: int = 20, offset: int = 0) -> list[User]:
        """Users matching ``search`` in name or email, newest first."""
        where, params = self._search_clause(search)
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT * FROM users
                {where}
                ORDER BY created_at DESC, id ASC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            return [self._row_to_user(row) for row in cursor.fetchall()]

    def count(self, search: str | None = None) -> int:
        where, params = self._search_clause(search)
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT COUNT(*) AS count FROM users {where}", params)
            return int(cursor.fetchone()["count"])

    def count_created_since(self, since_ts: int) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM users WHERE created_at >= ?", (int(since_ts),)
            )
            return int(cursor.fetchone()["count"])
