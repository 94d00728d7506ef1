"""
Tests for concurrent settlement and participation.

Each call runs on its own thread with its own SQLite connection, the way
concurrent requests would reach the services.
"""

import asyncio
from decimal import Decimal

import pytest

from domain.models.ledger_entry import LedgerEntryType
from services import error_codes
from tests.conftest import ADMIN


@pytest.mark.asyncio
async def test_concurrent_settle_pays_out_once(
    settlement_service, participation_service, make_bet, make_user, user_repository, ledger_repository
):
    bet = make_bet(commission_rate=Decimal("10"))
    make_user("alice", balance=Decimal("100"))
    make_user("bob", balance=Decimal("100"))
    participation_service.participate(bet.id, "alice", 1, Decimal("100"))
    participation_service.participate(bet.id, "bob", 2, Decimal("100"))

    results = await asyncio.gather(
        asyncio.to_thread(settlement_service.settle, ADMIN, bet.id, 1),
        asyncio.to_thread(settlement_service.settle, ADMIN, bet.id, 1),
    )

    successes = [r for r in results if r.success]
    failures = [r for r in results if not r.success]
    assert len(successes) == 1
    assert [f.error_code for f in failures] == [error_codes.BET_ALREADY_COMPLETED]
    assert user_repository.get_balance("alice") == Decimal("180.00")
    wins = [e for e in ledger_repository.get_entries_for_bet(bet.id) if e.type == LedgerEntryType.BET_WIN]
    assert len(wins) == 1


@pytest.mark.asyncio
async def test_concurrent_settle_with_different_winners(settlement_service, participation_service, make_bet, make_user,
                                                        bet_repository):
    bet = make_bet()
    make_user("alice", balance=Decimal("10"))
    participation_service.participate(bet.id, "alice", 1, Decimal("10"))

    results = await asyncio.gather(
        asyncio.to_thread(settlement_service.settle, ADMIN, bet.id, 1),
        asyncio.to_thread(settlement_service.settle, ADMIN, bet.id, 2),
    )

    assert sum(1 for r in results if r.success) == 1
    winner = next(r for r in results if r.success).value.winning_option_id
    assert bet_repository.get_by_id(bet.id).winning_option_id == winner


@pytest.mark.asyncio
async def test_concurrent_participate_creates_one_row(
    participation_service, make_bet, make_user, participation_repository, user_repository
):
    bet = make_bet()
    make_user("carol", balance=Decimal("100"))

    results = await asyncio.gather(
        *(asyncio.to_thread(participation_service.participate, bet.id, "carol", 1, Decimal("20")) for _ in range(4))
    )

    assert sum(1 for r in results if r.success) == 1
    assert {r.error_code for r in results if not r.success} == {error_codes.DUPLICATE_PARTICIPATION}
    assert participation_repository.count_for_bet(bet.id) == 1
    assert user_repository.get_balance("carol") == Decimal("80.00")


@pytest.mark.asyncio
async def test_concurrent_stakes_never_overdraw(
    participation_service, make_bet, make_user, user_repository
):
    make_user("dave", balance=Decimal("50"))
    bets = [make_bet(title=f"Race {i}") for i in range(3)]

    results = await asyncio.gather(
        *(asyncio.to_thread(participation_service.participate, b.id, "dave", 1, Decimal("30")) for b in bets)
    )

    assert sum(1 for r in results if r.success) == 1
    assert {r.error_code for r in results if not r.success} == {error_codes.INSUFFICIENT_FUNDS}
    assert user_repository.get_balance("dave") == Decimal("20.00")
