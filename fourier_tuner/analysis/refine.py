"""Locate an extremum in a score array and refine it to sub-sample precision.

Shared by the time-domain (AMDF minimum), frequency-domain (spectrum
maximum) pitch detectors and the spectral peak detector.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class RefinedExtremum:
    """An extremum of a score array."""

    index: int  # Integer position of the extremum
    position: float  # Refined position (index + parabolic offset)
    value: float  # Score at the integer position


def parabolic_offset(y_prev: float, y_curr: float, y_next: float) -> float:
    """Offset of the vertex of the parabola through three equally spaced samples.

    Works for both minima and maxima. Returns 0.0 when the three points are
    collinear or the vertex falls a full sample or more away.
    """
    denominator = 2 * (2 * y_curr - y_prev - y_next)
    if denominator == 0:
        return 0.0
    offset = (y_next - y_prev) / denominator
    if not np.isfinite(offset) or abs(offset) >= 1:
        return 0.0
    return float(offset)


def refine_at(scores: Sequence[float], index: int, lo: int, hi: int) -> float:
    """Parabolically refine ``index`` when both neighbours lie within [lo, hi]."""
    if lo < index < hi:
        return index + parabolic_offset(scores[index - 1], scores[index], scores[index + 1])
    return float(index)


def locate_and_refine(
    scores: Sequence[float],
    lo: int,
    hi: int,
    mode: str = "max",
) -> Optional[RefinedExtremum]:
    """Find the extremum of ``scores[lo..hi]`` (inclusive) and refine it.

    Args:
        scores: Score per integer position
        lo: First position searched
        hi: Last position searched
        mode: "max" for a peak, "min" for a trough

    Returns:
        RefinedExtremum, or None if the range is empty. Ties resolve to the
        lowest index.
    """
    if mode not in ("min", "max"):
        raise ValueError(f"mode must be 'min' or 'max', got {mode!r}")

    values = np.asarray(scores, dtype=np.float64)
    lo = max(lo, 0)
    hi = min(hi, len(values) - 1)
    if hi < lo:
        return None

    window = values[lo : hi + 1]
    offset = int(np.argmin(window)) if mode == "min" else int(np.argmax(window))
    index = lo + offset
    return RefinedExtremum(
        index=index,
        position=refine_at(values, index, lo, hi),
        value=float(values[index]),
    )
