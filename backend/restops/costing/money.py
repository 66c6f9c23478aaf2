"""Currency rounding shared by every calculator."""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float) -> int:
    """Round to the nearest whole currency unit, halves away from zero.

    Goes through ``Decimal(str(value))`` so float noise such as
    ``100000 * 0.09 == 9000.000000000002`` does not leak into totals.
    """
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
