"""
Pricing primitives.

All amounts are whole currency units (XOF has no sub-unit). Arithmetic is
done on Decimal and rounded half-up once, at the end, so the same inputs
always give the same integer.
"""

from decimal import Decimal, ROUND_HALF_UP

from shared.config.constants import QUALITY_MULTIPLIERS, QualityTier

Number = int | float | Decimal


def to_decimal(value: Number) -> Decimal:
    """Exact Decimal for ints and Decimals; floats go through their repr."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_currency(value: Number) -> int:
    """Round to the nearest whole currency unit, halves away from zero."""
    return int(to_decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def quality_multiplier(quality: str) -> Decimal:
    """Multiplier of a quality tier; unknown tiers price as standard."""
    return QUALITY_MULTIPLIERS.get(quality, QUALITY_MULTIPLIERS[QualityTier.STANDARD])


def unit_line_price(
    base_price: Number,
    quantity: Number,
    quality: str = QualityTier.STANDARD,
    family_size: int = 1,
) -> int:
    """
    Price of a line: base price x quantity x quality multiplier x family size.

    >>> unit_line_price(2000, 2, "premium")
    6000
    """
    raw = (
        to_decimal(base_price)
        * to_decimal(quantity)
        * quality_multiplier(quality)
        * to_decimal(family_size)
    )
    return round_currency(raw)


def delivery_fee_for(subtotal: int, fee: int, free_threshold: int) -> int:
    """Delivery is free once the subtotal reaches the threshold."""
    return 0 if subtotal >= free_threshold else fee
