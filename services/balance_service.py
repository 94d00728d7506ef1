"""
Balance administration and payment history.
"""

import logging
from dataclasses import dataclass

import config
from domain import error_codes
from domain.errors import BettingError, ValidationError
from domain.models.ledger_entry import BalanceChange, LedgerEntry, LedgerEntryType
from domain.models.money import Money
from repositories.interfaces import ILedgerRepository, IUserRepository
from services.balance_validation import validate_positive_amount
from services.interfaces import IBalanceService
from services.permissions import AuthContext, require_admin
from services.result import Result

logger = logging.getLogger("friendly_bets.balance_service")

VALID_DIRECTIONS = {"credit", "debit"}


@dataclass(frozen=True)
class PaymentHistoryPage:
    entries: list[LedgerEntry]
    total_count: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.entries) < self.total_count


class BalanceService(IBalanceService):
    def __init__(self, user_repo: IUserRepository, ledger_repo: ILedgerRepository):
        self.user_repo = user_repo
        self.ledger_repo = ledger_repo

    def adjust_balance(
        self,
        actor: AuthContext,
        user_id: str,
        direction: str,
        amount,
        description: str,
    ) -> Result[BalanceChange]:
        """
        Admin credit or debit of a user's balance.

        Writes one admin_adjustment entry signed by ``direction`` and
        attributed to the acting admin.

        Returns:
            Result.ok(BalanceChange). Failure codes: permission_denied,
            unauthorized, validation_error, invalid_amount, user_not_found,
            insufficient_funds.
        """
        try:
            require_admin(actor)
            if direction not in VALID_DIRECTIONS:
                raise ValidationError(f"Invalid adjustment type: {direction!r}.")
            validated = validate_positive_amount(amount)
            if not validated:
                raise ValidationError(validated.error, code=validated.error_code)
            if not description or not description.strip():
                raise ValidationError("Description is required.")

            signed = validated.value if direction == "credit" else -validated.value
            with self.ledger_repo.atomic_transaction() as conn:
                change = self.ledger_repo.apply_balance_change(
                    conn,
                    user_id,
                    signed,
                    LedgerEntryType.ADMIN_ADJUSTMENT,
                    f"Admin adjustment: {description.strip()}",
                    actor_id=actor.user_id,
                )
        except BettingError as exc:
            logger.info(f"Balance adjustment for {user_id} rejected: {exc.code}")
            return Result.from_error(exc)

        logger.info(
            f"Admin {actor.user_id} {direction}ed {validated.value} to {user_id}: "
            f"{change.balance_before} -> {change.balance_after}"
        )
        return Result.ok(change)

    def get_balance(self, user_id: str) -> Result[Money]:
        balance = self.user_repo.get_balance(user_id)
        if balance is None:
            return Result.fail(f"User {user_id} not found.", code=error_codes.USER_NOT_FOUND)
        return Result.ok(balance)

    def get_payment_history(
        self, user_id: str, limit: int | None = None, offset: int = 0
    ) -> Result[PaymentHistoryPage]:
        """A user's ledger entries, newest first."""
        if limit is None:
            limit = config.PAYMENT_HISTORY_PAGE_SIZE
        if not self.user_repo.exists(user_id):
            return Result.fail(f"User {user_id} not found.", code=error_codes.USER_NOT_FOUND)
        limit = max(1, int(limit))
        offset = max(0, int(offset))
        return Result.ok(
            PaymentHistoryPage(
                entries=self.ledger_repo.get_entries_for_user(user_id, limit=limit, offset=offset),
                total_count=self.ledger_repo.count_entries_for_user(user_id),
                limit=limit,
                offset=offset,
            )
        )
