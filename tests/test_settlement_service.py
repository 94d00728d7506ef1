"""
Tests for bet settlement and prize distribution.
"""

from decimal import Decimal

import pytest

from domain import error_codes as domain_codes
from domain.errors import NotFoundError
from domain.models.bet import BetStatus
from domain.models.ledger_entry import LedgerEntryType
from services import error_codes
from tests.conftest import ADMIN, NON_ADMIN


@pytest.fixture
def coin_bet(make_bet):
    return make_bet(["Heads", "Tails"], commission_rate=Decimal("10"))


@pytest.fixture
def staked_coin_bet(coin_bet, make_user, participation_service):
    """Alice has 100 on Heads, Bob has 100 on Tails; both started with 200."""
    make_user("alice", balance=Decimal("200"))
    make_user("bob", balance=Decimal("200"))
    assert participation_service.participate(coin_bet.id, "alice", 1, Decimal("100")).success
    assert participation_service.participate(coin_bet.id, "bob", 2, Decimal("100")).success
    return coin_bet


class TestSettle:
    def test_sole_winner_takes_prize_pool(
        self, settlement_service, staked_coin_bet, user_repository, ledger_repository, bet_repository
    ):
        result = settlement_service.settle(ADMIN, staked_coin_bet.id, 1)

        assert result.success, result.error
        summary = result.value
        assert summary.total_pool == Decimal("200.00")
        assert summary.commission_amount == Decimal("20.00")
        assert summary.prize_pool == Decimal("180.00")
        assert summary.distributed_amount == Decimal("180.00")
        assert (summary.winners_count, summary.losers_count) == (1, 1)

        assert user_repository.get_balance("alice") == Decimal("280.00")
        assert user_repository.get_balance("bob") == Decimal("100.00")

        win = ledger_repository.get_entries_for_user("alice", limit=1)[0]
        assert win.type == LedgerEntryType.BET_WIN
        assert win.amount == Decimal("180.00")
        assert win.description == "Prize from bet: Coin flip"
        assert win.created_by == ADMIN.user_id

        loss = ledger_repository.get_entries_for_user("bob", limit=1)[0]
        assert loss.type == LedgerEntryType.BET_LOSS
        assert loss.balance_before == loss.balance_after == Decimal("100.00")
        assert loss.amount == Decimal("-100.00")

        bet = bet_repository.get_by_id(staked_coin_bet.id)
        assert bet.status == BetStatus.COMPLETED
        assert bet.winning_option_id == 1
        assert bet.completed_at is not None
        assert (bet.total_pool, bet.commission_amount, bet.prize_pool) == (
            Decimal("200.00"),
            Decimal("20.00"),
            Decimal("180.00"),
        )

    def test_winning_option_without_stakers(
        self, settlement_service, make_bet, make_user, participation_service, ledger_repository, bet_repository
    ):
        bet = make_bet(["A", "B", "C"])
        make_user("alice", balance=Decimal("100"))
        make_user("bob", balance=Decimal("100"))
        participation_service.participate(bet.id, "alice", 1, Decimal("100"))
        participation_service.participate(bet.id, "bob", 2, Decimal("100"))

        result = settlement_service.settle(ADMIN, bet.id, 3)

        assert result.success
        assert result.value.winners_count == 0
        assert result.value.undistributed_amount == Decimal("180.00")
        completed = bet_repository.get_by_id(bet.id)
        assert completed.status == BetStatus.COMPLETED
        assert completed.prize_pool == Decimal("180.00")
        entry_types = {e.type for e in ledger_repository.get_entries_for_bet(bet.id)}
        assert LedgerEntryType.BET_WIN not in entry_types
        assert LedgerEntryType.BET_LOSS in entry_types

    def test_bet_without_participations(self, settlement_service, coin_bet, bet_repository):
        result = settlement_service.settle(ADMIN, coin_bet.id, 2)

        assert result.success
        assert result.value.total_pool == Decimal("0")
        assert bet_repository.get_by_id(coin_bet.id).status == BetStatus.COMPLETED

    def test_locked_bet_can_be_settled(self, settlement_service, bet_service, staked_coin_bet):
        assert bet_service.lock_bet(ADMIN, staked_coin_bet.id).success
        assert settlement_service.settle(ADMIN, staked_coin_bet.id, 2).success

    def test_settling_twice_pays_once(self, settlement_service, staked_coin_bet, user_repository):
        assert settlement_service.settle(ADMIN, staked_coin_bet.id, 1).success

        again = settlement_service.settle(ADMIN, staked_coin_bet.id, 1)

        assert again.success is False
        assert again.error_code == error_codes.BET_ALREADY_COMPLETED
        assert user_repository.get_balance("alice") == Decimal("280.00")

    def test_invalid_winning_option(self, settlement_service, staked_coin_bet, bet_repository):
        result = settlement_service.settle(ADMIN, staked_coin_bet.id, 7)
        assert result.error_code == error_codes.INVALID_WINNING_OPTION
        assert bet_repository.get_by_id(staked_coin_bet.id).status == BetStatus.ACTIVE

    def test_unknown_bet(self, settlement_service):
        assert settlement_service.settle(ADMIN, 404, 1).error_code == error_codes.BET_NOT_FOUND

    def test_requires_admin(self, settlement_service, staked_coin_bet, bet_repository):
        result = settlement_service.settle(NON_ADMIN, staked_coin_bet.id, 1)
        assert result.error_code == error_codes.PERMISSION_DENIED
        assert bet_repository.get_by_id(staked_coin_bet.id).status == BetStatus.ACTIVE

    def test_failure_mid_settlement_rolls_everything_back(
        self, settlement_service, staked_coin_bet, user_repository, ledger_repository, bet_repository, monkeypatch
    ):
        def missing_user(*args, **kwargs):
            raise NotFoundError("User bob not found.", code=domain_codes.USER_NOT_FOUND)

        # Winners are paid before losers are recorded, so alice's credit must roll back
        monkeypatch.setattr(ledger_repository, "record_audit_entry", missing_user)

        result = settlement_service.settle(ADMIN, staked_coin_bet.id, 1)

        assert result.error_code == error_codes.USER_NOT_FOUND
        assert user_repository.get_balance("alice") == Decimal("100.00")
        assert bet_repository.get_by_id(staked_coin_bet.id).status == BetStatus.ACTIVE
        assert not [
            e for e in ledger_repository.get_entries_for_bet(staked_coin_bet.id) if e.type == LedgerEntryType.BET_WIN
        ]


class TestRounding:
    def test_remainder_goes_to_commission(
        self, settlement_service, make_bet, make_user, participation_service, user_repository
    ):
        bet = make_bet(["Red", "Black"], commission_rate=Decimal("0"))
        for name in ("a", "b", "c"):
            make_user(name, balance=Decimal("10"))
            participation_service.participate(bet.id, name, 1, Decimal("10"))
        make_user("d", balance=Decimal("60"))
        participation_service.participate(bet.id, "d", 2, Decimal("60"))
        make_user("e", balance=Decimal("10"))
        participation_service.participate(bet.id, "e", 2, Decimal("10"))

        # prize pool 100 split three ways: 33.33 each, 0.01 left over
        summary = settlement_service.settle(ADMIN, bet.id, 1).value

        assert [user_repository.get_balance(n) for n in ("a", "b", "c")] == [Decimal("33.33")] * 3
        assert summary.distributed_amount == Decimal("99.99")
        assert summary.commission_amount == Decimal("0.01")
        assert summary.distributed_amount + summary.commission_amount == summary.total_pool

    def test_full_commission_pays_nothing(
        self, settlement_service, make_bet, make_user, participation_service, user_repository, ledger_repository
    ):
        bet = make_bet(commission_rate=Decimal("100"))
        make_user("a", balance=Decimal("10"))
        participation_service.participate(bet.id, "a", 1, Decimal("10"))

        summary = settlement_service.settle(ADMIN, bet.id, 1).value

        assert summary.commission_amount == Decimal("10.00")
        assert summary.distributed_amount == Decimal("0")
        assert summary.winners_count == 0
        assert user_repository.get_balance("a") == Decimal("0.00")
        assert all(e.type != LedgerEntryType.BET_WIN for e in ledger_repository.get_entries_for_user("a"))


class TestPreviewDistribution:
    def test_preview_matches_settlement_and_writes_nothing(
        self, settlement_service, staked_coin_bet, ledger_repository
    ):
        entries_before = len(ledger_repository.get_entries_for_bet(staked_coin_bet.id))

        preview = settlement_service.preview_distribution(staked_coin_bet.id, 2)

        assert preview.success
        assert [(s.user_id, s.amount) for s in preview.value] == [("bob", Decimal("180.00"))]
        assert len(ledger_repository.get_entries_for_bet(staked_coin_bet.id)) == entries_before

    def test_preview_unknown_option(self, settlement_service, staked_coin_bet):
        result = settlement_service.preview_distribution(staked_coin_bet.id, 9)
        assert result.error_code == error_codes.INVALID_WINNING_OPTION
