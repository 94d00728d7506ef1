"""
Pool calculation domain service.

Derives pool totals, commission, per-option breakdowns and prize shares from
participation records. Read-only: nothing here touches storage, so it is safe
to call at any frequency and from inside a settlement transaction.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from domain.models.bet import BetOptions
from domain.models.money import ZERO, Money, floor_money, percentage_of
from domain.models.participation import Participation


@dataclass(frozen=True)
class OptionBreakdown:
    option_id: int
    option_text: str
    total_amount: Money
    participant_count: int
    # Display-only estimate of payout per unit staked if this option wins
    potential_multiplier: Decimal


@dataclass(frozen=True)
class PoolCalculation:
    total_pool: Money
    commission_rate: Decimal
    commission_amount: Money
    prize_pool: Money
    option_breakdown: list[OptionBreakdown]


@dataclass(frozen=True)
class PrizeShare:
    user_id: str
    participation_id: int
    amount: Money
    win_ratio: Decimal
    original_stake: Money


class PoolCalculator:
    """
    Pure domain service for prize pool arithmetic.

    Rules:
    - commission = total_pool * rate / 100, rounded down to the cent
    - prize_pool = total_pool - commission
    - each winner gets floor(prize_pool * stake / winning_stakes); the
      rounding remainder is never paid out
    """

    @staticmethod
    def total_pool(participations: Iterable[Participation]) -> Money:
        return sum((p.amount for p in participations), ZERO)

    def calculate_pool(
        self,
        participations: list[Participation],
        commission_rate: Decimal,
        options: BetOptions,
    ) -> PoolCalculation:
        """
        Calculate pool information for a bet.

        Args:
            participations: All participations currently on the bet
            commission_rate: Percentage (0-100) taken by the house
            options: The bet's options, used for the per-option breakdown

        Returns:
            PoolCalculation with totals and one breakdown row per option
        """
        total = self.total_pool(participations)
        commission = percentage_of(total, commission_rate)
        prize_pool = total - commission

        breakdown = []
        for option in options:
            on_option = [p for p in participations if p.option_id == option.id]
            option_total = self.total_pool(on_option)
            multiplier = floor_money(prize_pool / option_total) if option_total > 0 else ZERO
            breakdown.append(
                OptionBreakdown(
                    option_id=option.id,
                    option_text=option.text,
                    total_amount=option_total,
                    participant_count=len(on_option),
                    potential_multiplier=multiplier,
                )
            )

        return PoolCalculation(
            total_pool=total,
            commission_rate=commission_rate,
            commission_amount=commission,
            prize_pool=prize_pool,
            option_breakdown=breakdown,
        )

    def calculate_prize_distribution(
        self,
        participations: list[Participation],
        winning_option_id: int,
        prize_pool: Money,
    ) -> list[PrizeShare]:
        """
        Split the prize pool among participations on the winning option.

        Shares are proportional to stake and rounded down, so the sum of
        shares never exceeds the prize pool. Returns an empty list when nobody
        staked the winning option.
        """
        winners = [p for p in participations if p.option_id == winning_option_id]
        winner_total = self.total_pool(winners)
        if winner_total <= 0:
            return []

        shares = []
        for winner in winners:
            win_ratio = winner.amount / winner_total
            # Multiply before dividing so exact splits stay exact
            prize = floor_money(prize_pool * winner.amount / winner_total)
            shares.append(
                PrizeShare(
                    user_id=winner.user_id,
                    participation_id=winner.id,
                    amount=prize,
                    win_ratio=win_ratio,
                    original_stake=winner.amount,
                )
            )
        return shares
