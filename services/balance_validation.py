"""
Amount and balance validation utilities.

Centralizes checks used across participation, bet administration and
balance adjustment. Balance sufficiency is checked by the ledger inside the
write transaction, not here.
"""

from decimal import Decimal

import config
from domain.models.money import ZERO, Money, format_money, to_money
from services import error_codes
from services.result import Result


def parse_amount(value) -> Result[Money]:
    """
    Convert raw input to a money value.

    Returns:
        Result.ok(amount) for a finite two-place number
        no larger than MAX_AMOUNT
        Result.fail(error, code=invalid_amount) otherwise
    """
    try:
        amount = to_money(value)
    except (TypeError, ValueError) as exc:
        return Result.fail(str(exc), code=error_codes.INVALID_AMOUNT)
    if amount > config.MAX_AMOUNT:
        return Result.fail(
            f"Amount must not exceed {format_money(Decimal(config.MAX_AMOUNT))}.",
            code=error_codes.INVALID_AMOUNT,
        )
    return Result.ok(amount)


def validate_stake_amount(value, unit: int | None = None) -> Result[Money]:
    """
    Check a stake is a positive multiple of the stake unit.

    Examples:
        >>> validate_stake_amount(Decimal("10"))
        Result(success=True, value=Decimal('10.00'))

        >>> validate_stake_amount(Decimal("15"))
        Result(success=False, error="...", error_code="invalid_amount")
    """
    if unit is None:
        unit = config.MIN_STAKE_UNIT

    parsed = parse_amount(value)
    if not parsed:
        return parsed
    amount = parsed.value

    if amount < unit:
        return Result.fail(
            f"Minimum stake is {unit}.",
            code=error_codes.INVALID_AMOUNT,
        )
    if amount % unit != 0:
        return Result.fail(
            f"Stake must be a multiple of {unit}.",
            code=error_codes.INVALID_AMOUNT,
        )
    return Result.ok(amount)


def validate_positive_amount(value) -> Result[Money]:
    """Any amount strictly greater than zero (used for admin adjustments)."""
    parsed = parse_amount(value)
    if not parsed:
        return parsed
    if parsed.value <= ZERO:
        return Result.fail("Amount must be positive.", code=error_codes.INVALID_AMOUNT)
    return parsed


def validate_commission_rate(value) -> Result[Decimal]:
    """Commission is a percentage between 0 and MAX_COMMISSION_RATE, two places."""
    try:
        rate = to_money(value)
    except (TypeError, ValueError):
        return Result.fail("Commission rate must be a number.", code=error_codes.INVALID_COMMISSION_RATE)
    max_rate = to_money(config.MAX_COMMISSION_RATE)
    if rate < ZERO or rate > max_rate:
        return Result.fail(
            f"Commission rate must be between 0 and {max_rate}.",
            code=error_codes.INVALID_COMMISSION_RATE,
        )
    return Result.ok(rate)

