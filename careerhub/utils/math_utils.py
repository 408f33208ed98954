"""
Numeric helpers shared by the statistics and the API monitor.
"""

import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going up.

    The built-in ``round`` sends halves to the even neighbour (12.5 -> 12);
    dashboard percentages and averages show 12.5 as 13.
    """
    return math.floor(value + 0.5)
