# galaxion/utils/numbers.py
import math


def round_half_up(value: float) -> int:
    """Nearest integer with halves going up (2.5 -> 3, 12.5 -> 13), unlike round() which goes to even."""
    return math.floor(value + 0.5)
