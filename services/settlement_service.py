"""
Settlement engine: resolves a bet and pays out its winners exactly once.

Settlement is all-or-nothing. The bet and its participations are re-read
under the write lock, every payout and loss record is written in the same
transaction, and any failure rolls the whole settlement back.
"""

import logging
from dataclasses import dataclass

from domain import error_codes
from domain.errors import BettingError, NotFoundError, ValidationError
from domain.models.ledger_entry import LedgerEntryType
from domain.models.money import ZERO, Money
from domain.services.bet_lifecycle import BetAction, ensure_allowed
from domain.services.pool_calculator import PoolCalculator
from repositories.interfaces import IBetRepository, ILedgerRepository, IParticipationRepository
from services.interfaces import ISettlementService
from services.permissions import AuthContext, require_admin
from services.result import Result

logger = logging.getLogger("friendly_bets.settlement_service")


@dataclass(frozen=True)
class SettlementSummary:
    bet_id: int
    winning_option_id: int
    total_pool: Money
    commission_amount: Money
    prize_pool: Money
    # Winners credited a non-zero share
    winners_count: int
    losers_count: int
    distributed_amount: Money
    # Part of the computed prize pool left with the house: the rounding
    # remainder, or everything when nobody picked the winning option
    undistributed_amount: Money


class SettlementService(ISettlementService):
    """Settles bets through the pool calculator and the ledger."""

    def __init__(
        self,
        bet_repo: IBetRepository,
        participation_repo: IParticipationRepository,
        ledger_repo: ILedgerRepository,
        pool_calculator: PoolCalculator | None = None,
    ):
        self.bet_repo = bet_repo
        self.participation_repo = participation_repo
        self.ledger_repo = ledger_repo
        self.pool_calculator = pool_calculator or PoolCalculator()

    def settle(
        self, actor: AuthContext, bet_id: int, winning_option_id: int
    ) -> Result[SettlementSummary]:
        """
        Complete a bet with ``winning_option_id`` and distribute the prize pool.

        Admin only. Winners are credited ``floor(prize_pool * stake /
        winning_stakes)`` each; losers get an audit-only loss entry.

        Returns:
            Result.ok(SettlementSummary). Failure codes: permission_denied,
            unauthorized, bet_not_found, bet_already_completed,
            invalid_winning_option, user_not_found.
        """
        try:
            require_admin(actor)
            with self.bet_repo.atomic_transaction() as conn:
                bet = self.bet_repo.get_by_id(bet_id, conn=conn)
                if bet is None:
                    raise NotFoundError(f"Bet {bet_id} not found.", code=error_codes.BET_NOT_FOUND)
                ensure_allowed(bet.status, BetAction.SETTLE)
                if not bet.has_option(winning_option_id):
                    raise ValidationError(
                        f"Option {winning_option_id} is not an option of this bet.",
                        code=error_codes.INVALID_WINNING_OPTION,
                    )

                participations = self.participation_repo.get_for_bet(bet_id, conn=conn)
                pool = self.pool_calculator.calculate_pool(
                    participations, bet.commission_rate, bet.options
                )
                shares = self.pool_calculator.calculate_prize_distribution(
                    participations, winning_option_id, pool.prize_pool
                )

                # Zero shares (e.g. a 100% commission) get no entry
                paid = [share for share in shares if share.amount > ZERO]
                for share in paid:
                    self.ledger_repo.apply_balance_change(
                        conn,
                        share.user_id,
                        share.amount,
                        LedgerEntryType.BET_WIN,
                        f"Prize from bet: {bet.title}",
                        reference_bet_id=bet_id,
                        actor_id=actor.user_id,
                    )

                losers = [p for p in participations if p.option_id != winning_option_id]
                for loser in losers:
                    self.ledger_repo.record_audit_entry(
                        conn,
                        loser.user_id,
                        -loser.amount,
                        LedgerEntryType.BET_LOSS,
                        f"Loss from bet: {bet.title}",
                        reference_bet_id=bet_id,
                        actor_id=actor.user_id,
                    )

                distributed = sum((share.amount for share in shares), ZERO)
                if shares:
                    # Rounding remainder of the split goes to the house as commission
                    commission = pool.total_pool - distributed
                    prize_pool = distributed
                else:
                    commission = pool.commission_amount
                    prize_pool = pool.prize_pool
                if distributed > pool.prize_pool or prize_pool + commission != pool.total_pool:
                    raise RuntimeError(
                        f"Settlement of bet {bet_id} would break conservation: "
                        f"total={pool.total_pool} commission={commission} "
                        f"distributed={distributed}"
                    )

                self.bet_repo.mark_completed(
                    conn,
                    bet_id,
                    winning_option_id,
                    pool.total_pool,
                    commission,
                    prize_pool,
                )
        except BettingError as exc:
            logger.warning(f"Settlement of bet {bet_id} rejected: {exc.code}: {exc}")
            return Result.from_error(exc)

        summary = SettlementSummary(
            bet_id=bet_id,
            winning_option_id=winning_option_id,
            total_pool=pool.total_pool,
            commission_amount=commission,
            prize_pool=prize_pool,
            winners_count=len(paid),
            losers_count=len(losers),
            distributed_amount=distributed,
            undistributed_amount=pool.prize_pool - distributed,
        )
        if participations and not shares:
            logger.info(f"Bet {bet_id} settled with no winners; prize pool {pool.prize_pool} retained")
        logger.info(
            f"Settled bet {bet_id} on option {winning_option_id}: total={summary.total_pool} "
            f"commission={summary.commission_amount} distributed={summary.distributed_amount} "
            f"winners={summary.winners_count} losers={summary.losers_count}"
        )
        return Result.ok(summary)

    def preview_distribution(self, bet_id: int, winning_option_id: int) -> Result[list]:
        """Prize shares settling on ``winning_option_id`` would pay right now."""
        bet = self.bet_repo.get_by_id(bet_id)
        if bet is None:
            return Result.fail(f"Bet {bet_id} not found.", code=error_codes.BET_NOT_FOUND)
        if not bet.has_option(winning_option_id):
            return Result.fail(
                f"Option {winning_option_id} is not an option of this bet.",
                code=error_codes.INVALID_WINNING_OPTION,
            )
        participations = self.participation_repo.get_for_bet(bet_id)
        pool = self.pool_calculator.calculate_pool(participations, bet.commission_rate, bet.options)
        return Result.ok(
            self.pool_calculator.calculate_prize_distribution(
                participations, winning_option_id, pool.prize_pool
            )
        )
