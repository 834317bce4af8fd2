import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, -2.5 -> -2).

    Builtin round() rounds half to even, which makes week totals drift
    depending on parity.
    """
    return math.floor(value + 0.5)


def round_tenths(value: float) -> float:
    return round_half_up(value * 10) / 10
