"""
Dashboard statistics for admins.
"""

import time
from dataclasses import dataclass

import config
from domain.errors import BettingError
from domain.models.bet import BetStatus
from domain.models.money import ZERO, Money, floor_money
from repositories.interfaces import IBetRepository, IParticipationRepository, IUserRepository
from services.interfaces import IAdminStatsService
from services.permissions import AuthContext, require_admin
from services.result import Result


@dataclass(frozen=True)
class AdminStats:
    total_users: int
    total_bets: int
    active_bets: int
    locked_bets: int
    completed_bets: int
    total_participations: int
    total_prize_pool: Money
    total_commission: Money
    average_pool_size: Money
    recent_users: int
    recent_bets: int
    recent_participations: int
    recent_commission: Money


class AdminStatsService(IAdminStatsService):
    def __init__(
        self,
        user_repo: IUserRepository,
        bet_repo: IBetRepository,
        participation_repo: IParticipationRepository,
        recent_window_seconds: int | None = None,
    ):
        self.user_repo = user_repo
        self.bet_repo = bet_repo
        self.participation_repo = participation_repo
        self.recent_window_seconds = (
            recent_window_seconds if recent_window_seconds is not None else config.RECENT_WINDOW_SECONDS
        )

    def get_stats(self, actor: AuthContext, now: int | None = None) -> Result[AdminStats]:
        """
        Platform totals plus counters for the recent window.

        Pool and commission totals cover completed bets, where those figures
        are final. ``now`` is injectable for tests.
        """
        try:
            require_admin(actor)
        except BettingError as exc:
            return Result.from_error(exc)

        now = int(now if now is not None else time.time())
        since = now - self.recent_window_seconds

        by_status = self.bet_repo.count_by_status()
        completed = self.bet_repo.get_completed_totals()
        average = floor_money(completed["total_pool"] / completed["count"]) if completed["count"] else ZERO

        return Result.ok(
            AdminStats(
                total_users=self.user_repo.count(),
                total_bets=sum(by_status.values()),
                active_bets=by_status.get(BetStatus.ACTIVE.value, 0),
                locked_bets=by_status.get(BetStatus.LOCKED.value, 0),
                completed_bets=by_status.get(BetStatus.COMPLETED.value, 0),
                total_participations=self.participation_repo.count_all(),
                total_prize_pool=completed["prize_pool"],
                total_commission=completed["commission"],
                average_pool_size=average,
                recent_users=self.user_repo.count_created_since(since),
                recent_bets=self.bet_repo.count_created_since(since),
                recent_participations=self.participation_repo.count_created_since(since),
                recent_commission=self.bet_repo.sum_commission_since(since),
            )
        )
