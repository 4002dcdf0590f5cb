"""Helpers shared by the metrics engines."""
import math
from collections import Counter
from typing import Iterable, Optional, Sized


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for non-negative values (2.5 -> 3), unlike ``round``."""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def denominator(items: Sized) -> int:
    """Length of ``items``, with an empty collection counting as 1."""
    return len(items) or 1


def most_common(values: Iterable[str]) -> Optional[str]:
    """Most frequent value; ties go to the value seen first."""
    counts = Counter(values)
    if not counts:
        return None
    best = max(counts.values())
    return next(value for value, count in counts.items() if count == best)
