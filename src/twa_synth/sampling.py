"""
TWA Synthetic Wellness - Sampling Primitives
============================================
Weighted categorical draws, probability redistribution and bounded
arithmetic shared by the demographic and behaviour samplers.

Every function that consumes randomness takes an explicit
``np.random.Generator`` so that draws can be replayed from a seed and
isolated per worker.
"""

from typing import List, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def weighted_choice(rng: np.random.Generator, items: Sequence[T], weights: Sequence[float]) -> T:
    """
    Pick one item by walking the cumulative weights.

    Weights need not sum to 1. Returns the first item whose cumulative
    weight exceeds a uniform draw scaled by the total weight, so zero-weight
    items are never chosen; falls back to the last item when rounding
    leaves the draw at the total.
    """
    if len(items) != len(weights):
        raise ValueError(f"{len(items)} items but {len(weights)} weights")
    if not items:
        raise ValueError("Cannot choose from an empty sequence")

    cumulative = np.cumsum(np.asarray(weights, dtype=float))
    target = rng.random() * cumulative[-1]
    idx = int(np.searchsorted(cumulative, target, side="right"))
    return items[min(idx, len(items) - 1)]


def shift_toward_higher(probabilities: Sequence[float], factor: float) -> List[float]:
    """
    Move probability mass from the lower half of an ordered category list
    to the upper half.

    Each lower-half entry (index < len/2) loses ``(factor - 1) * 0.1``
    (floored at 0), each upper-half entry gains the same amount (capped at
    1), and the result is renormalised. Assumes the categories are ordered
    low to high.
    """
    return _shift(probabilities, factor, toward_higher=True)


def shift_toward_lower(probabilities: Sequence[float], factor: float) -> List[float]:
    """Mirror image of :func:`shift_toward_higher`."""
    return _shift(probabilities, factor, toward_higher=False)


def _shift(probabilities: Sequence[float], factor: float, toward_higher: bool) -> List[float]:
    amount = (factor - 1) * 0.1
    half = len(probabilities) / 2
    shifted = []
    for i, p in enumerate(probabilities):
        lower_half = i < half
        if lower_half == toward_higher:
            shifted.append(max(0.0, p - amount))
        else:
            shifted.append(min(1.0, p + amount))

    total = sum(shifted)
    return [p / total for p in shifted]


def uniform_noise(rng: np.random.Generator, low: float, high: float) -> float:
    """Bounded multiplicative noise factor drawn uniformly from [low, high)"""
    return low + rng.random() * (high - low)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float, digits: int = 0):
    """Round halves away from zero for positive values (``round`` uses banker's rounding)"""
    scale = 10 ** digits
    rounded = float(np.floor(value * scale + 0.5)) / scale
    return int(rounded) if digits == 0 else rounded
