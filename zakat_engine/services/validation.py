"""Input coercion shared by the calculator and the nisab service."""
import math
from decimal import Decimal, ROUND_HALF_UP, localcontext

from zakat_engine.constants import WEIGHT_UNITS
from zakat_engine.exceptions import InvalidInput, InvalidWeightUnit, NegativeValue


def to_non_negative(value, field: str) -> float:
    """Coerce value to float, rejecting negatives, NaN and non-numbers."""
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number", field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be a number", field=field)
    # NaN fails every comparison, so it is rejected here too
    if not number >= 0:
        raise NegativeValue(field)
    if math.isinf(number):
        raise InvalidInput(f"{field} must be finite", field=field)
    return number


def to_grams(weight: float, unit: str) -> float:
    """Convert a weight in the given unit (gram or troy ounce) to grams."""
    try:
        factor = WEIGHT_UNITS[unit]
    except (KeyError, TypeError):
        raise InvalidWeightUnit(unit)
    return weight * factor


def round_money(value: float, precision: int) -> float:
    """Round half away from zero, unlike the built-in round()."""
    quantum = Decimal(1).scaleb(-precision)
    amount = Decimal(str(value))
    with localcontext() as ctx:
        # quantize needs every digit down to the quantum
        ctx.prec = max(ctx.prec, amount.adjusted() + precision + 2)
        return float(amount.quantize(quantum, rounding=ROUND_HALF_UP))
