"""
Participation management: joining a bet and amending a stake.

Each operation runs in one write-locked transaction covering the lifecycle
check, the ledger movement, the participation row and the bet's cached pool.
"""

import logging

import config
from domain import error_codes
from domain.errors import BettingError, NotFoundError, StateConflictError, ValidationError
from domain.models.bet import Bet
from domain.models.ledger_entry import LedgerEntryType
from domain.models.money import ZERO, Money
from domain.models.participation import Participation
from domain.services.bet_lifecycle import BetAction, ensure_allowed
from repositories.interfaces import IBetRepository, ILedgerRepository, IParticipationRepository
from services.balance_validation import validate_stake_amount
from services.interfaces import IParticipationService
from services.result import Result

logger = logging.getLogger("friendly_bets.participation_service")


class ParticipationService(IParticipationService):
    """Creates and amends participations, moving stakes through the ledger."""

    def __init__(
        self,
        bet_repo: IBetRepository,
        participation_repo: IParticipationRepository,
        ledger_repo: ILedgerRepository,
        stake_unit: int | None = None,
    ):
        self.bet_repo = bet_repo
        self.participation_repo = participation_repo
        self.ledger_repo = ledger_repo
        self.stake_unit = stake_unit if stake_unit is not None else config.MIN_STAKE_UNIT

    def _load_bet(self, conn, bet_id: int) -> Bet:
        bet = self.bet_repo.get_by_id(bet_id, conn=conn)
        if bet is None:
            raise NotFoundError(f"Bet {bet_id} not found.", code=error_codes.BET_NOT_FOUND)
        return bet

    @staticmethod
    def _require_option(bet: Bet, option_id: int) -> None:
        if not bet.has_option(option_id):
            raise ValidationError(
                f"Option {option_id} is not an option of this bet.",
                code=error_codes.INVALID_OPTION,
            )

    def _require_stake(self, amount) -> Money:
        validated = validate_stake_amount(amount, self.stake_unit)
        if not validated:
            raise ValidationError(validated.error, code=validated.error_code)
        return validated.value

    def participate(self, bet_id: int, user_id: str, option_id: int, amount) -> Result[Participation]:
        """
        Join a bet by staking ``amount`` on ``option_id``.

        Returns:
            Result.ok(Participation) on success. Failure codes: bet_not_found,
            bet_not_active, invalid_option, invalid_amount,
            duplicate_participation, insufficient_funds, user_not_found.
        """
        try:
            with self.participation_repo.atomic_transaction() as conn:
                bet = self._load_bet(conn, bet_id)
                ensure_allowed(bet.status, BetAction.PARTICIPATE)
                self._require_option(bet, option_id)
                stake = self._require_stake(amount)

                if self.participation_repo.get(bet_id, user_id, conn=conn) is not None:
                    raise StateConflictError(
                        "You have already joined this bet. Edit your participation instead.",
                        code=error_codes.DUPLICATE_PARTICIPATION,
                    )

                self.ledger_repo.apply_balance_change(
                    conn,
                    user_id,
                    -stake,
                    LedgerEntryType.DEBIT,
                    f"Bet participation: {bet.title}",
                    reference_bet_id=bet_id,
                )
                participation = self.participation_repo.insert(conn, bet_id, user_id, option_id, stake)
                self.bet_repo.adjust_total_pool(conn, bet_id, stake)
        except BettingError as exc:
            logger.info(f"Participation rejected for user {user_id} on bet {bet_id}: {exc.code}")
            return Result.from_error(exc)

        logger.info(f"User {user_id} staked {stake} on option {option_id} of bet {bet_id}")
        return Result.ok(participation)

    def edit_participation(
        self, bet_id: int, user_id: str, option_id: int, amount
    ) -> Result[Participation]:
        """
        Change the option and/or stake of an existing participation.

        The difference between the new and old stake is debited (increase)
        or credited back (decrease). An unchanged stake moves no money.

        Returns:
            Result.ok(Participation) on success. Failure codes as for
            participate, plus participation_not_found.
        """
        try:
            with self.participation_repo.atomic_transaction() as conn:
                bet = self._load_bet(conn, bet_id)
                ensure_allowed(bet.status, BetAction.EDIT_PARTICIPATION)
                self._require_option(bet, option_id)
                stake = self._require_stake(amount)

                existing = self.participation_repo.get(bet_id, user_id, conn=conn)
                if existing is None:
                    raise NotFoundError(
                        "You have not joined this bet yet.",
                        code=error_codes.PARTICIPATION_NOT_FOUND,
                    )

                delta = stake - existing.amount
                if delta > ZERO:
                    self.ledger_repo.apply_balance_change(
                        conn,
                        user_id,
                        -delta,
                        LedgerEntryType.DEBIT,
                        f"Bet participation increase: {bet.title}",
                        reference_bet_id=bet_id,
                    )
                elif delta < ZERO:
                    self.ledger_repo.apply_balance_change(
                        conn,
                        user_id,
                        -delta,
                        LedgerEntryType.CREDIT,
                        f"Bet participation decrease: {bet.title}",
                        reference_bet_id=bet_id,
                    )

                participation = self.participation_repo.update(conn, existing.id, option_id, stake)
                if delta != ZERO:
                    self.bet_repo.adjust_total_pool(conn, bet_id, delta)
        except BettingError as exc:
            logger.info(f"Participation edit rejected for user {user_id} on bet {bet_id}: {exc.code}")
            return Result.from_error(exc)

        logger.info(
            f"User {user_id} amended bet {bet_id}: option {existing.option_id}->{option_id}, "
            f"stake {existing.amount}->{stake}"
        )
        return Result.ok(participation)

    def get_participation(self, bet_id: int, user_id: str) -> Participation | None:
        return self.participation_repo.get(bet_id, user_id)

    def get_participations_for_bet(self, bet_id: int) -> list[Participation]:
        return self.participation_repo.get_for_bet(bet_id)

    def get_participations_for_user(self, user_id: str) -> list[Participation]:
        return self.participation_repo.get_for_user(user_id)
