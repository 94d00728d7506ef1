"""
Fixed-point money helpers.

Every currency value in the system is a ``Decimal`` with exactly two places.
Values only enter the domain through ``to_money`` so binary floats never
reach balance arithmetic. Storage uses integer minor units (hundredths).
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

Money = Decimal


def to_money(value: Decimal | int | str) -> Money:
    """
    Convert a value to a two-place Decimal.

    Accepts Decimal, int, or a numeric string. Floats are rejected outright;
    callers holding a float must decide how to convert it themselves.

    Raises:
        TypeError: If value is a float, bool, or other unsupported type
        ValueError: If the value is not a finite number or has sub-cent precision
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Money values must not be {type(value).__name__}: {value!r}")
    if not isinstance(value, (Decimal, int, str)):
        raise TypeError(f"Unsupported money type: {type(value).__name__}")
    try:
        dec = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Not a valid amount: {value!r}") from None
    if not dec.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    try:
        quantized = dec.quantize(CENT, rounding=ROUND_DOWN)
    except InvalidOperation:
        raise ValueError(f"Amount is too large: {value!r}") from None
    if quantized != dec:
        raise ValueError(f"Amount has more than two decimal places: {value!r}")
    return quantized


def floor_money(value: Decimal) -> Money:
    """Round a Decimal down to the smallest currency unit."""
    return value.quantize(CENT, rounding=ROUND_DOWN)


def percentage_of(amount: Money, rate: Decimal) -> Money:
    """Return ``amount * rate / 100`` rounded down to the cent."""
    return floor_money(amount * rate / HUNDRED)


def to_minor(amount: Money) -> int:
    """Convert a money value to integer hundredths for storage."""
    return int(to_money(amount) * 100)


def from_minor(minor: int | None) -> Money:
    """Convert stored integer hundredths back to a money value."""
    if minor is None:
        return ZERO
    return (Decimal(int(minor)) / 100).quantize(CENT)


def rate_to_basis_points(rate: Decimal) -> int:
    """Commission percentage (two places) to integer basis points."""
    return int(to_money(rate) * 100)


def rate_from_basis_points(bps: int | None) -> Decimal:
    if bps is None:
        return ZERO
    return (Decimal(int(bps)) / 100).quantize(CENT)


def format_money(amount: Money) -> str:
    """Format an amount for ledger descriptions, e.g. '1,250.00'."""
    return f"{amount:,.2f}"
