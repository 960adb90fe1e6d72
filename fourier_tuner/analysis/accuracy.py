"""Reconstruction accuracy: how closely one wave follows another."""

import math
from typing import List, Sequence

import numpy as np

from ..core import AccuracyResult, WavePoint, wave_times, wave_values

NO_OVERLAP = AccuracyResult(mse=math.inf, accuracy_percent=0.0)


def nearest_index(times: Sequence[float], t: float) -> int:
    """
    Index of the sample nearest to ``t`` in a sorted time array.

    Ties between two neighbours resolve to the later one.
    """
    if len(times) == 0:
        raise ValueError("times is empty")

    left = int(np.searchsorted(times, t, side="left"))
    if left == 0:
        return 0
    if left >= len(times):
        return len(times) - 1
    # times[left - 1] < t <= times[left]
    if t - times[left - 1] < times[left] - t:
        return left - 1
    return left


def resample_nearest(points: Sequence[WavePoint], grid: Sequence[float]) -> np.ndarray:
    """Values of ``points`` at each grid time, by nearest sample."""
    times = wave_times(points)
    values = wave_values(points)
    return np.array([values[nearest_index(times, t)] for t in grid])


class AccuracyEvaluator:
    """Compare an original wave with its reconstruction."""

    def __init__(self, num_samples: int = 1000):
        """
        Args:
            num_samples: Grid points over the overlapping time range
        """
        if num_samples < 1:
            raise ValueError(f"num_samples must be at least 1, got {num_samples}")
        self.num_samples = num_samples

    def common_grid(
        self,
        original: Sequence[WavePoint],
        reconstructed: Sequence[WavePoint],
    ) -> List[float]:
        """Evenly spaced times over the overlap, or [] if there is none."""
        if len(original) == 0 or len(reconstructed) == 0:
            return []
        start = max(original[0].t, reconstructed[0].t)
        end = min(original[-1].t, reconstructed[-1].t)
        span = end - start
        if span <= 0:
            return []
        return [start + i * span / self.num_samples for i in range(self.num_samples)]

    def evaluate(
        self,
        original: Sequence[WavePoint],
        reconstructed: Sequence[WavePoint],
    ) -> AccuracyResult:
        """
        Mean squared error and percent accuracy of a reconstruction.

        Args:
            original: Reference wave, ordered by time
            reconstructed: Wave to score, ordered by time

        Returns:
            AccuracyResult; (inf, 0) for empty inputs or no time overlap
        """
        grid = self.common_grid(original, reconstructed)
        if not grid:
            return NO_OVERLAP

        o = resample_nearest(original, grid)
        r = resample_nearest(reconstructed, grid)

        mse = float(np.mean((o - r) ** 2))
        power = float(np.mean(o ** 2))
        if power > 0:
            error_ratio = min(1.0, mse / power)
        else:
            error_ratio = 0.0 if mse == 0 else 1.0

        accuracy_percent = float(np.clip(100 * (1 - error_ratio), 0.0, 100.0))
        return AccuracyResult(mse=mse, accuracy_percent=accuracy_percent)


def accuracy(
    original: Sequence[WavePoint],
    reconstructed: Sequence[WavePoint],
    num_samples: int = 1000,
) -> AccuracyResult:
    """Shortcut for ``AccuracyEvaluator(num_samples).evaluate(...)``."""
    return AccuracyEvaluator(num_samples).evaluate(original, reconstructed)
