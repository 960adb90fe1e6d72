"""Sample buffer utilities."""

from typing import Sequence, Union

import numpy as np

from ..core import WavePoint, wave_values

ArrayLike = Union[np.ndarray, Sequence[float]]


def as_buffer(samples: ArrayLike) -> np.ndarray:
    """Copy samples into a 1-D float64 array."""
    buffer = np.asarray(samples, dtype=np.float64)
    if buffer.ndim != 1:
        raise ValueError(f"Expected a 1-D buffer, got shape {buffer.shape}")
    return buffer


def points_to_buffer(points: Sequence[WavePoint]) -> np.ndarray:
    """Extract the sample values of a wave."""
    return wave_values(points)


def rms(samples: ArrayLike) -> float:
    """Root-mean-square level of a buffer (0.0 when empty)."""
    buffer = as_buffer(samples)
    if len(buffer) == 0:
        return 0.0
    return float(np.sqrt(np.mean(buffer**2)))


def peak_level(samples: ArrayLike) -> float:
    """Largest absolute sample value (0.0 when empty)."""
    buffer = as_buffer(samples)
    if len(buffer) == 0:
        return 0.0
    return float(np.abs(buffer).max())


def normalize_samples(samples: ArrayLike, target_amplitude: float = 0.9) -> np.ndarray:
    """Scale a buffer so its peak equals ``target_amplitude``.

    An all-zero buffer is returned as zeros.
    """
    buffer = as_buffer(samples)
    peak = peak_level(buffer)
    if peak > 0:
        return buffer * (target_amplitude / peak)
    return np.zeros_like(buffer)


def get_duration(samples: ArrayLike, sample_rate: int) -> float:
    """Get duration in seconds."""
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")
    return len(as_buffer(samples)) / sample_rate
