"""
Property-based tests for pool arithmetic and ledger consistency.

The calculator properties run against plain values. The ledger properties
build a fresh database per example.
"""

import tempfile
from decimal import Decimal
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain.models.bet import BetOptions
from domain.models.participation import Participation
from domain.services.pool_calculator import PoolCalculator
from repositories.bet_repository import BetRepository
from repositories.ledger_repository import LedgerRepository
from repositories.participation_repository import ParticipationRepository
from repositories.user_repository import UserRepository
from services.bet_service import BetService
from services.participation_service import ParticipationService
from services.settlement_service import SettlementService
from tests.conftest import ADMIN


# =============================================================================
# STRATEGIES
# =============================================================================

commission_rates = st.decimals(min_value=0, max_value=100, places=2, allow_nan=False, allow_infinity=False)

# (option_id, stake in units of 10)
stakes = st.lists(
    st.tuples(st.integers(min_value=1, max_value=3), st.integers(min_value=1, max_value=50)),
    min_size=0,
    max_size=12,
)


def _participations(raw):
    return [
        Participation(id=i, bet_id=1, user_id=f"user{i}", option_id=option, amount=Decimal(units * 10))
        for i, (option, units) in enumerate(raw, start=1)
    ]


# =============================================================================
# CALCULATOR PROPERTIES
# =============================================================================


@given(raw=stakes, rate=commission_rates, winner=st.integers(min_value=1, max_value=3))
def test_distribution_never_exceeds_prize_pool(raw, rate, winner):
    calculator = PoolCalculator()
    participations = _participations(raw)
    pool = calculator.calculate_pool(participations, rate, BetOptions.from_texts(["A", "B", "C"]))
    shares = calculator.calculate_prize_distribution(participations, winner, pool.prize_pool)

    distributed = sum((s.amount for s in shares), Decimal("0"))
    assert pool.prize_pool + pool.commission_amount == pool.total_pool
    assert Decimal("0") <= pool.commission_amount <= pool.total_pool
    assert distributed <= pool.prize_pool
    assert all(s.amount >= 0 for s in shares)
    # Each winner loses strictly less than a cent to rounding
    if shares:
        assert pool.prize_pool - distributed < Decimal("0.01") * len(shares)


@given(raw=stakes, rate=commission_rates)
def test_breakdown_sums_to_total(raw, rate):
    calculator = PoolCalculator()
    participations = _participations(raw)
    pool = calculator.calculate_pool(participations, rate, BetOptions.from_texts(["A", "B", "C"]))

    assert sum((o.total_amount for o in pool.option_breakdown), Decimal("0")) == pool.total_pool
    assert sum(o.participant_count for o in pool.option_breakdown) == len(participations)


# =============================================================================
# LEDGER PROPERTIES
# =============================================================================


def _services(db_path):
    users = UserRepository(db_path)
    bets = BetRepository(db_path)
    parts = ParticipationRepository(db_path)
    ledger = LedgerRepository(db_path)
    return (
        users,
        ledger,
        BetService(bets, parts),
        ParticipationService(bets, parts, ledger, stake_unit=10),
        SettlementService(bets, parts, ledger),
    )


@pytest.mark.slow
@settings(max_examples=15, deadline=None)
@given(
    raw=st.lists(
        st.tuples(st.integers(min_value=1, max_value=2), st.integers(min_value=1, max_value=20)),
        min_size=1,
        max_size=6,
    ),
    rate=commission_rates,
    winner=st.integers(min_value=1, max_value=2),
)
def test_settlement_conserves_money(raw, rate, winner):
    with tempfile.TemporaryDirectory() as tmp:
        users, ledger, bet_service, participation_service, settlement_service = _services(
            str(Path(tmp) / "prop.db")
        )
        bet = bet_service.create_bet(ADMIN, "Property", None, ["A", "B"], rate).value
        funded = Decimal("1000")
        for i, (option, units) in enumerate(raw):
            user_id = f"user{i}"
            users.add(user_id, user_id)
            with ledger.atomic_transaction() as conn:
                ledger.apply_balance_change(conn, user_id, funded, "credit", "seed")
            assert participation_service.participate(bet.id, user_id, option, Decimal(units * 10)).success

        summary = settlement_service.settle(ADMIN, bet.id, winner).value

        balances = sum((users.get_balance(f"user{i}") for i in range(len(raw))), Decimal("0"))
        assert balances == funded * len(raw) - summary.total_pool + summary.distributed_amount
        assert summary.prize_pool + summary.commission_amount == summary.total_pool
        if summary.winners_count:
            assert summary.distributed_amount + summary.commission_amount == summary.total_pool
        else:
            assert summary.distributed_amount == 0
        assert ledger.find_inconsistencies() == []


@pytest.mark.slow
@settings(max_examples=15, deadline=None)
@given(
    first=st.integers(min_value=1, max_value=10),
    edits=st.lists(
        st.tuples(st.integers(min_value=1, max_value=2), st.integers(min_value=1, max_value=10)),
        min_size=1,
        max_size=5,
    ),
)
def test_amendments_keep_balance_plus_stake_constant(first, edits):
    with tempfile.TemporaryDirectory() as tmp:
        users, ledger, bet_service, participation_service, _ = _services(str(Path(tmp) / "prop.db"))
        bet = bet_service.create_bet(ADMIN, "Amend", None, ["A", "B"], Decimal("0")).value
        users.add("amy", "Amy")
        with ledger.atomic_transaction() as conn:
            ledger.apply_balance_change(conn, "amy", Decimal("100"), "credit", "seed")

        assert participation_service.participate(bet.id, "amy", 1, Decimal(first * 10)).success
        for option, units in edits:
            assert participation_service.edit_participation(bet.id, "amy", option, Decimal(units * 10)).success
            stake = participation_service.get_participation(bet.id, "amy").amount
            assert users.get_balance("amy") + stake == Decimal("100")

        assert ledger.find_inconsistencies() == []
