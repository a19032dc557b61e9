"""Fixed-point money utilities.

All amounts and balances are Decimal quantized to 2 places. No float.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize to 2 decimal places: Decimal('12.345') -> Decimal('12.35').

    Floats are rejected; build the Decimal from a string instead.
    """
    if isinstance(value, float):
        raise TypeError("Money must not be built from float")
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_display(amount: Decimal) -> str:
    """Display string: Decimal('1500') -> '$1,500.00', Decimal('-12.5') -> '-$12.50'."""
    amount = to_money(amount)
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"


def validate_positive(amount: Decimal, field: str = "amount") -> Decimal:
    """Return the quantized amount, or raise ValueError if it is not > 0."""
    quantized = to_money(amount)
    if quantized <= ZERO:
        raise ValueError(f"{field} must be greater than 0, got {quantized}")
    return quantized
