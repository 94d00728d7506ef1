"""
Repository for the balance ledger.

All balance mutations go through ``apply_balance_change``; it must be called
with the caller's open transaction so the balance read, the balance write and
the ledger insert commit or roll back together.
"""

from __future__ import annotations

import logging
import sqlite3
import time

from domain import error_codes
from domain.errors import InsufficientFundsError, NotFoundError, ValidationError
from domain.models.ledger_entry import (
    AUDIT_ONLY_TYPES,
    BalanceChange,
    LedgerEntry,
    LedgerEntryType,
)
from domain.models.money import ZERO, Money, from_minor, to_minor
from repositories.base_repository import BaseRepository
from repositories.interfaces import ILedgerRepository

logger = logging.getLogger("friendly_bets.repositories.ledger")


class LedgerRepository(BaseRepository, ILedgerRepository):
    """
    Handles balance mutations and the append-only ledger_entries table.
    """

    def _read_balance_minor(self, cursor, user_id: str) -> int:
        cursor.execute("SELECT balance FROM users WHERE id = ?", (user_id,))
        row = cursor.fetchone()
        if not row:
            raise NotFoundError(f"User {user_id} not found.", code=error_codes.USER_NOT_FOUND)
        return int(row["balance"])

    def _insert_entry(
        self,
        cursor,
        *,
        user_id: str,
        entry_type: LedgerEntryType,
        amount_minor: int,
        description: str,
        reference_bet_id: int | None,
        balance_before_minor: int,
        balance_after_minor: int,
        actor_id: str | None,
    ) -> int:
        cursor.execute(
            """
            INSERT INTO ledger_entries (
                user_id, type, amount, description, reference_bet_id,
                balance_before, balance_after, created_by, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                LedgerEntryType(entry_type).value,
                amount_minor,
                description,
                reference_bet_id,
                balance_before_minor,
                balance_after_minor,
                actor_id,
                int(time.time()),
            ),
        )
        return cursor.lastrowid

    def apply_balance_change(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        signed_amount: Money,
        entry_type: LedgerEntryType,
        description: str,
        reference_bet_id: int | None = None,
        actor_id: str | None = None,
    ) -> BalanceChange:
        """
        Move money in or out of a user's balance and record it.

        Reads the balance inside ``conn``'s transaction, writes the new balance
        and appends exactly one ledger entry whose snapshots match.

        Raises:
            NotFoundError: user does not exist (code user_not_found)
            InsufficientFundsError: the change would make the balance negative
            ValidationError: zero amount or an audit-only entry type
        """
        entry_type = LedgerEntryType(entry_type)
        if entry_type in AUDIT_ONLY_TYPES:
            raise ValidationError(f"{entry_type.value} entries do not move money.")
        delta_minor = to_minor(signed_amount)
        if delta_minor == 0:
            raise ValidationError("Balance change must be non-zero.", code=error_codes.INVALID_AMOUNT)

        cursor = conn.cursor()
        before = self._read_balance_minor(cursor, user_id)
        after = before + delta_minor
        if after < 0:
            raise InsufficientFundsError(
                f"Insufficient balance. Current balance is {from_minor(before):,.2f}."
            )

        cursor.execute(
            "UPDATE users SET balance = ?, updated_at = ? WHERE id = ?",
            (after, int(time.time()), user_id),
        )
        entry_id = self._insert_entry(
            cursor,
            user_id=user_id,
            entry_type=entry_type,
            amount_minor=delta_minor,
            description=description,
            reference_bet_id=reference_bet_id,
            balance_before_minor=before,
            balance_after_minor=after,
            actor_id=actor_id,
        )
        logger.debug(
            f"Ledger {entry_type.value} for {user_id}: {from_minor(before)} -> {from_minor(after)}"
        )
        return BalanceChange(
            balance_before=from_minor(before),
            balance_after=from_minor(after),
            entry_id=entry_id,
        )

    def record_audit_entry(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        amount: Money,
        entry_type: LedgerEntryType,
        description: str,
        reference_bet_id: int | None = None,
        actor_id: str | None = None,
    ) -> BalanceChange:
        """
        Append an entry that documents an outcome without touching the balance.

        The snapshots are both the current balance. ``amount`` is stored as
        given (a lost stake is recorded as a negative number).
        """
        entry_type = LedgerEntryType(entry_type)
        if entry_type not in AUDIT_ONLY_TYPES:
            raise ValidationError(f"{entry_type.value} entries must move money.")
        cursor = conn.cursor()
        balance = self._read_balance_minor(cursor, user_id)
        entry_id = self._insert_entry(
            cursor,
            user_id=user_id,
            entry_type=entry_type,
            amount_minor=to_minor(amount),
            description=description,
            reference_bet_id=reference_bet_id,
            balance_before_minor=balance,
            balance_after_minor=balance,
            actor_id=actor_id,
        )
        return BalanceChange(
            balance_before=from_minor(balance),
            balance_after=from_minor(balance),
            entry_id=entry_id,
        )

    @staticmethod
    def _row_to_entry(row) -> LedgerEntry:
        return LedgerEntry(
            id=row["id"],
            user_id=row["user_id"],
            type=LedgerEntryType(row["type"]),
            amount=from_minor(row["amount"]),
            description=row["description"],
            balance_before=from_minor(row["balance_before"]),
            balance_after=from_minor(row["balance_after"]),
            reference_bet_id=row["reference_bet_id"],
            created_by=row["created_by"],
            created_at=row["created_at"],
        )

    def get_entries_for_user(self, user_id: str, limit: int = 50, offset: int = 0) -> list[LedgerEntry]:
        """Return a user's entries, newest first."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM ledger_entries
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (user_id, limit, offset),
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    def count_entries_for_user(self, user_id: str) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM ledger_entries WHERE user_id = ?", (user_id,)
            )
            return int(cursor.fetchone()["count"])

    def get_entries_for_bet(self, bet_id: int) -> list[LedgerEntry]:
        """Return every entry referencing a bet, oldest first."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM ledger_entries WHERE reference_bet_id = ? ORDER BY id ASC",
                (bet_id,),
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    def sum_signed_amounts(self, user_id: str) -> Money:
        """Net balance movement across all of a user's entries."""
        audit_types = tuple(t.value for t in AUDIT_ONLY_TYPES)
        placeholders = ",".join("?" for _ in audit_types)
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT COALESCE(SUM(amount), 0) AS total
                FROM ledger_entries
                WHERE user_id = ? AND type NOT IN ({placeholders})
                """,
                (user_id, *audit_types),
            )
            row = cursor.fetchone()
            return from_minor(row["total"]) if row else ZERO

    def find_inconsistencies(self) -> list[dict]:
        """
        Users whose ledger does not explain their balance.

        Checks that every entry's snapshots differ by its signed amount and
        that each balance equals the net of the user's entries (users start
        at zero). Returns one dict per offending user.
        """
        audit_types = tuple(t.value for t in AUDIT_ONLY_TYPES)
        placeholders = ",".join("?" for _ in audit_types)
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT u.id AS user_id,
                       u.balance AS balance,
                       COALESCE(SUM(CASE WHEN le.type NOT IN ({placeholders}) THEN le.amount ELSE 0 END), 0)
                           AS ledger_total,
                       COALESCE(SUM(CASE
                           WHEN le.type IN ({placeholders}) AND le.balance_after != le.balance_before THEN 1
                           WHEN le.type NOT IN ({placeholders})
                                AND le.balance_after - le.balance_before != le.amount THEN 1
                           ELSE 0 END), 0) AS bad_entries
                FROM users u
                LEFT JOIN ledger_entries le ON le.user_id = u.id
                GROUP BY u.id, u.balance
                """,
                (*audit_types, *audit_types, *audit_types),
            )
            problems = []
            for row in cursor.fetchall():
                if row["balance"] != row["ledger_total"] or row["bad_entries"]:
                    problems.append(
                        {
                            "user_id": row["user_id"],
                            "balance": from_minor(row["balance"]),
                            "ledger_total": from_minor(row["ledger_total"]),
                            "bad_entries": int(row["bad_entries"]),
                        }
                    )
            return problems
