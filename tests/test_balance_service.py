"""
Tests for admin balance adjustments and payment history.
"""

from decimal import Decimal

import pytest

from domain.models.ledger_entry import LedgerEntryType
from services import error_codes
from tests.conftest import ADMIN, NON_ADMIN


class TestAdjustBalance:
    def test_credit(self, balance_service, make_user, ledger_repository):
        make_user("alice")

        result = balance_service.adjust_balance(ADMIN, "alice", "credit", Decimal("500"), "Welcome bonus")

        assert result.success, result.error
        assert result.value.balance_before == Decimal("0.00")
        assert result.value.balance_after == Decimal("500.00")
        entry = ledger_repository.get_entries_for_user("alice", limit=1)[0]
        assert entry.type == LedgerEntryType.ADMIN_ADJUSTMENT
        assert entry.description == "Admin adjustment: Welcome bonus"
        assert entry.created_by == ADMIN.user_id

    def test_debit(self, balance_service, make_user, user_repository):
        make_user("bob", balance=Decimal("100"))

        result = balance_service.adjust_balance(ADMIN, "bob", "debit", "25.75", "Correction")

        assert result.value.delta == Decimal("-25.75")
        assert user_repository.get_balance("bob") == Decimal("74.25")

    def test_debit_cannot_go_negative(self, balance_service, make_user, user_repository):
        make_user("carol", balance=Decimal("10"))

        result = balance_service.adjust_balance(ADMIN, "carol", "debit", Decimal("11"), "Oops")

        assert result.error_code == error_codes.INSUFFICIENT_FUNDS
        assert user_repository.get_balance("carol") == Decimal("10.00")

    def test_unknown_direction(self, balance_service, make_user):
        make_user("dave")
        result = balance_service.adjust_balance(ADMIN, "dave", "refund", Decimal("1"), "x")
        assert result.error_code == error_codes.VALIDATION_ERROR

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), "abc"])
    def test_invalid_amount(self, balance_service, make_user, amount):
        make_user("erin")
        result = balance_service.adjust_balance(ADMIN, "erin", "credit", amount, "x")
        assert result.error_code == error_codes.INVALID_AMOUNT

    @pytest.mark.parametrize("amount", ["1e30", "1e20", "100000000000000000000"])
    def test_amount_beyond_storage_is_invalid(self, balance_service, make_user, user_repository, amount):
        make_user("ivy")

        result = balance_service.adjust_balance(ADMIN, "ivy", "credit", amount, "x")

        assert result.error_code == error_codes.INVALID_AMOUNT
        assert user_repository.get_balance("ivy") == Decimal("0.00")

    def test_description_required(self, balance_service, make_user):
        make_user("finn")
        result = balance_service.adjust_balance(ADMIN, "finn", "credit", Decimal("1"), "  ")
        assert result.error_code == error_codes.VALIDATION_ERROR

    def test_unknown_user(self, balance_service):
        result = balance_service.adjust_balance(ADMIN, "ghost", "credit", Decimal("1"), "x")
        assert result.error_code == error_codes.USER_NOT_FOUND

    def test_requires_admin(self, balance_service, make_user, user_repository):
        make_user("gus")
        result = balance_service.adjust_balance(NON_ADMIN, "gus", "credit", Decimal("1000"), "Free money")
        assert result.error_code == error_codes.PERMISSION_DENIED
        assert user_repository.get_balance("gus") == Decimal("0.00")


class TestReads:
    def test_get_balance(self, balance_service, make_user):
        make_user("alice", balance=Decimal("42"))
        assert balance_service.get_balance("alice").value == Decimal("42.00")
        assert balance_service.get_balance("nobody").error_code == error_codes.USER_NOT_FOUND

    def test_payment_history_pages(self, balance_service, make_user):
        make_user("bob")
        for i in range(1, 6):
            balance_service.adjust_balance(ADMIN, "bob", "credit", Decimal(i), f"grant {i}")

        first = balance_service.get_payment_history("bob", limit=2).value
        rest = balance_service.get_payment_history("bob", limit=10, offset=2).value

        assert first.total_count == 5
        assert [e.description for e in first.entries] == ["Admin adjustment: grant 5", "Admin adjustment: grant 4"]
        assert first.has_more is True
        assert len(rest.entries) == 3
        assert rest.has_more is False

    def test_payment_history_unknown_user(self, balance_service):
        assert balance_service.get_payment_history("nobody").error_code == error_codes.USER_NOT_FOUND
