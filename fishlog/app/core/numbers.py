# fishlog/app/core/numbers.py
from decimal import Decimal, ROUND_HALF_UP


def round_half_away(value: float, digits: int = 0) -> float:
    """
    Round to `digits` decimals with halves going away from zero (2.5 -> 3, -2.5 -> -3).

    Python's round() goes to even, which would turn a 12.5% success rate into 12.
    """
    # repr() keeps the shortest decimal form, so 0.25 rounds as 0.25 and not 0.2499...
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))
