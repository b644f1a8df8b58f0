"""Currency rounding helpers."""

from decimal import ROUND_HALF_UP, Decimal

WHOLE_UNIT = Decimal("1")
CENT = Decimal("0.01")


def round_whole(amount: Decimal) -> Decimal:
    """
    Round to the nearest whole currency unit, halves away from zero.

    Example:
        >>> round_whole(Decimal("1350.5"))
        Decimal('1351')
    """
    return amount.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def round_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
