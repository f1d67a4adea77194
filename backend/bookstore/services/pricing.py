"""Price conversion helpers."""

from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def convert_price(price: float, rate: float) -> float:
    """Convert ``price`` with ``rate`` and round half-up to 2 decimal places.

    Decimal arithmetic avoids binary float artifacts, e.g. 1.005 rounds to
    1.01 rather than 1.0.
    """
    converted = Decimal(str(price)) * Decimal(str(rate))
    return float(converted.quantize(_CENT, rounding=ROUND_HALF_UP))
