"""Numeric helpers shared by derivation and display code."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round to `digits` decimals with halves going toward +infinity.

    round_half_up(0.125, 2) == 0.13 and round_half_up(-0.375, 2) == -0.37,
    where the built-in round() would give 0.12 and -0.38.
    """
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale
