"""
Bet administration and pool statistics.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal

import config
from domain import error_codes
from domain.errors import BettingError, NotFoundError, ValidationError
from domain.models.bet import Bet, BetOptions, BetStatus
from domain.models.money import Money
from domain.services.bet_lifecycle import BetAction, ensure_allowed, ensure_deletable
from domain.services.pool_calculator import OptionBreakdown, PoolCalculator
from repositories.interfaces import IBetRepository, IParticipationRepository
from services.balance_validation import validate_commission_rate
from services.interfaces import IBetService
from services.permissions import AuthContext, require_admin
from services.result import Result

logger = logging.getLogger("friendly_bets.bet_service")


@dataclass(frozen=True)
class PoolStats:
    bet_id: int
    total_pool: Money
    prize_pool: Money
    commission: Money
    commission_rate: Decimal
    participant_count: int
    per_option: list[OptionBreakdown]


@dataclass(frozen=True)
class BetPage:
    bets: list[Bet]
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


class BetService(IBetService):
    """
    Creates and administers bets; serves live pool statistics.

    Status and commission changes re-read the bet under the write lock and
    go through the lifecycle guard.
    """

    def __init__(
        self,
        bet_repo: IBetRepository,
        participation_repo: IParticipationRepository,
        pool_calculator: PoolCalculator | None = None,
    ):
        self.bet_repo = bet_repo
        self.participation_repo = participation_repo
        self.pool_calculator = pool_calculator or PoolCalculator()

    def _load_bet(self, conn, bet_id: int) -> Bet:
        bet = self.bet_repo.get_by_id(bet_id, conn=conn)
        if bet is None:
            raise NotFoundError(f"Bet {bet_id} not found.", code=error_codes.BET_NOT_FOUND)
        return bet

    @staticmethod
    def _clean_title(title: str | None) -> str:
        if not title or not title.strip():
            raise ValidationError("Title is required.")
        return title.strip()

    @staticmethod
    def _require_rate(commission_rate) -> Decimal:
        validated = validate_commission_rate(commission_rate)
        if not validated:
            raise ValidationError(validated.error, code=validated.error_code)
        return validated.value

    def create_bet(
        self,
        actor: AuthContext,
        title: str,
        description: str | None,
        options: list[str],
        commission_rate=None,
    ) -> Result[Bet]:
        """
        Create an active bet. Options are display texts, numbered 1..n.

        ``commission_rate`` defaults to DEFAULT_COMMISSION_RATE percent.
        """
        try:
            require_admin(actor)
            clean_title = self._clean_title(title)
            if len(options or []) > config.MAX_BET_OPTIONS:
                raise ValidationError(f"A bet can have at most {config.MAX_BET_OPTIONS} options.")
            try:
                bet_options = BetOptions.from_texts(list(options or []), min_options=config.MIN_BET_OPTIONS)
            except ValueError as exc:
                raise ValidationError(str(exc), code=error_codes.INVALID_OPTION) from exc
            if commission_rate is None:
                commission_rate = config.DEFAULT_COMMISSION_RATE
            rate = self._require_rate(commission_rate)
        except BettingError as exc:
            return Result.from_error(exc)

        description = description.strip() if description and description.strip() else None
        bet = self.bet_repo.create_bet(
            clean_title, description, bet_options, rate, created_by=actor.user_id
        )
        logger.info(f"Bet {bet.id} created by {actor.user_id}: {bet.title} ({len(bet_options)} options, {rate}%)")
        return Result.ok(bet)

    def get_bet(self, bet_id: int) -> Bet | None:
        return self.bet_repo.get_by_id(bet_id)

    def list_bets(self, status: str | None = None, page: int = 1, limit: int | None = None) -> Result[BetPage]:
        """Paginated bets, newest first, optionally filtered by status."""
        if limit is None:
            limit = config.DEFAULT_PAGE_SIZE
        if status is not None:
            try:
                status = BetStatus(status).value
            except ValueError:
                return Result.fail(f"Unknown bet status: {status}", code=error_codes.VALIDATION_ERROR)
        page = max(1, int(page))
        limit = max(1, int(limit))

        total_count = self.bet_repo.count_bets(status)
        total_pages = math.ceil(total_count / limit) if total_count else 0
        bets = self.bet_repo.list_bets(status, limit=limit, offset=(page - 1) * limit)
        return Result.ok(
            BetPage(
                bets=bets,
                current_page=page,
                total_pages=total_pages,
                total_count=total_count,
                has_next=page < total_pages,
                has_prev=page > 1,
            )
        )

    def _transition(self, actor: AuthContext, bet_id: int, action: BetAction, new_status: BetStatus) -> Result[Bet]:
        try:
            require_admin(actor)
            with self.bet_repo.atomic_transaction() as conn:
                bet = self._load_bet(conn, bet_id)
                ensure_allowed(bet.status, action)
                self.bet_repo.update_status(conn, bet_id, new_status)
        except BettingError as exc:
            return Result.from_error(exc)
        logger.info(f"Bet {bet_id} {bet.status.value} -> {new_status.value} by {actor.user_id}")
        return Result.ok(self.bet_repo.get_by_id(bet_id))

    def lock_bet(self, actor: AuthContext, bet_id: int) -> Result[Bet]:
        """Stop accepting participations without settling."""
        return self._transition(actor, bet_id, BetAction.LOCK, BetStatus.LOCKED)

    def unlock_bet(self, actor: AuthContext, bet_id: int) -> Result[Bet]:
        return self._transition(actor, bet_id, BetAction.UNLOCK, BetStatus.ACTIVE)

    def update_bet_details(
        self,
        actor: AuthContext,
        bet_id: int,
        title: str | None = None,
        description: str | None = None,
    ) -> Result[Bet]:
        try:
            require_admin(actor)
            with self.bet_repo.atomic_transaction() as conn:
                bet = self._load_bet(conn, bet_id)
                ensure_allowed(bet.status, BetAction.UPDATE_DETAILS)
                new_title = self._clean_title(title) if title is not None else bet.title
                new_description = bet.description if description is None else (description.strip() or None)
                self.bet_repo.update_details(conn, bet_id, new_title, new_description)
        except BettingError as exc:
            return Result.from_error(exc)
        return Result.ok(self.bet_repo.get_by_id(bet_id))

    def change_commission(self, actor: AuthContext, bet_id: int, commission_rate) -> Result[Bet]:
        """Set a new commission percentage on an active or locked bet."""
        try:
            require_admin(actor)
            rate = self._require_rate(commission_rate)
            with self.bet_repo.atomic_transaction() as conn:
                bet = self._load_bet(conn, bet_id)
                ensure_allowed(bet.status, BetAction.CHANGE_COMMISSION)
                self.bet_repo.update_commission_rate(conn, bet_id, rate)
        except BettingError as exc:
            return Result.from_error(exc)
        logger.info(f"Bet {bet_id} commission {bet.commission_rate}% -> {rate}% by {actor.user_id}")
        return Result.ok(self.bet_repo.get_by_id(bet_id))

    def delete_bet(self, actor: AuthContext, bet_id: int) -> Result[None]:
        """Delete a bet that nobody has joined."""
        try:
            require_admin(actor)
            with self.bet_repo.atomic_transaction() as conn:
                bet = self._load_bet(conn, bet_id)
                count = self.participation_repo.count_for_bet(bet_id, conn=conn)
                ensure_deletable(bet.status, count)
                self.bet_repo.delete_bet(conn, bet_id)
        except BettingError as exc:
            return Result.from_error(exc)
        logger.info(f"Bet {bet_id} deleted by {actor.user_id}")
        return Result.ok()

    def get_pool_stats(self, bet_id: int) -> Result[PoolStats]:
        """
        Live pool figures computed from current participations.

        Read-only; fails only when the bet does not exist.
        """
        bet = self.bet_repo.get_by_id(bet_id)
        if bet is None:
            return Result.fail(f"Bet {bet_id} not found.", code=error_codes.BET_NOT_FOUND)
        participations = self.participation_repo.get_for_bet(bet_id)
        pool = self.pool_calculator.calculate_pool(participations, bet.commission_rate, bet.options)
        return Result.ok(
            PoolStats(
                bet_id=bet_id,
                total_pool=pool.total_pool,
                prize_pool=pool.prize_pool,
                commission=pool.commission_amount,
                commission_rate=pool.commission_rate,
                participant_count=len(participations),
                per_option=pool.option_breakdown,
            )
        )
