"""Fourier series decomposition and reconstruction.

Decomposition approximates the continuous Fourier integrals with a Riemann
sum over the sampled points. It is exact only when the samples span an
integer number of periods of the fundamental; other windows leak energy
into neighbouring harmonics and that is not corrected here.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core import (
    DEFAULT_HARMONICS,
    FourierCoefficients,
    SAMPLE_RATE,
    SpectralPoint,
    WavePoint,
    make_wave,
    wave_times,
    wave_values,
)
from .cache import ReconstructionCache, fingerprint

logger = logging.getLogger(__name__)


class FourierAnalyzer:
    """Decompose sampled waves into harmonics and rebuild them."""

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        cache: Optional[ReconstructionCache] = None,
    ):
        """
        Initialize FourierAnalyzer.

        Args:
            sample_rate: Default sample rate for reconstructions
            cache: Optional reconstruction cache; without one nothing is cached
        """
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.sample_rate = sample_rate
        self.cache = cache

    def decompose(
        self,
        wave: Sequence[WavePoint],
        fundamental_frequency: Optional[float] = None,
        max_harmonics: int = DEFAULT_HARMONICS,
    ) -> FourierCoefficients:
        """
        Compute Fourier series coefficients of a periodic wave.

        Args:
            wave: Wave points ordered by time
            fundamental_frequency: Fundamental in Hz; read from the first
                point when omitted
            max_harmonics: Number of harmonics to compute (>= 1)

        Returns:
            FourierCoefficients with ``max_harmonics`` cosine and sine terms.
            All zeros for an empty wave or when no fundamental is known.
        """
        if max_harmonics < 1:
            raise ValueError(f"max_harmonics must be at least 1, got {max_harmonics}")
        if fundamental_frequency is not None and fundamental_frequency <= 0:
            raise ValueError(
                f"fundamental_frequency must be positive, got {fundamental_frequency}"
            )

        if len(wave) == 0:
            return FourierCoefficients.zeros(max_harmonics)

        frequency = fundamental_frequency
        if frequency is None:
            frequency = wave[0].frequency
        if not frequency:
            logger.debug("No fundamental available, returning zero coefficients")
            return FourierCoefficients.zeros(max_harmonics)

        t = wave_times(wave)
        values = wave_values(wave)
        n_points = len(values)

        harmonics = np.arange(1, max_harmonics + 1)[:, np.newaxis]
        angles = 2 * np.pi * harmonics * frequency * t[np.newaxis, :]

        a = (2.0 / n_points) * (np.cos(angles) @ values)
        b = (2.0 / n_points) * (np.sin(angles) @ values)

        return FourierCoefficients(a0=float(values.mean()), a=tuple(a), b=tuple(b))

    def reconstruct(
        self,
        coefficients: FourierCoefficients,
        duration: float,
        frequency: float,
        num_harmonics: int,
        sample_rate: Optional[int] = None,
    ) -> Tuple[WavePoint, ...]:
        """
        Rebuild a waveform from (possibly truncated) Fourier coefficients.

        Args:
            coefficients: Fourier coefficients
            duration: Output duration in seconds
            frequency: Fundamental in Hz
            num_harmonics: Harmonics to include (capped at the number available)
            sample_rate: Output sample rate (default: the analyzer's)

        Returns:
            Tuple of wave points, ``floor(sample_rate * duration)`` long
        """
        sample_rate = self.sample_rate if sample_rate is None else sample_rate
        if frequency <= 0:
            raise ValueError(f"frequency must be positive, got {frequency}")
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        if duration < 0:
            raise ValueError(f"duration must not be negative, got {duration}")
        if num_harmonics < 0:
            raise ValueError(f"num_harmonics must not be negative, got {num_harmonics}")

        used = min(num_harmonics, coefficients.num_harmonics)
        a = coefficients.a[:used]
        b = coefficients.b[:used]

        key = None
        if self.cache is not None:
            key = fingerprint(coefficients.a0, a, b, duration, frequency, used, sample_rate)
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Reconstruction cache hit (%d harmonics)", used)
                return cached

        samples = int(np.floor(sample_rate * duration))
        t = np.arange(samples, dtype=np.float64) / sample_rate
        values = np.full(samples, coefficients.a0, dtype=np.float64)
        if used:
            harmonics = np.arange(1, used + 1)[np.newaxis, :]
            angles = 2 * np.pi * harmonics * frequency * t[:, np.newaxis]
            values += np.cos(angles) @ np.asarray(a) + np.sin(angles) @ np.asarray(b)

        result = tuple(make_wave(t, values, frequency))
        if key is not None:
            self.cache.put(key, result)
        return result

    def clear_cache(self) -> None:
        """Empty the reconstruction cache, if one was injected."""
        if self.cache is not None:
            self.cache.clear()


def to_amplitude_phase(coefficients: FourierCoefficients) -> List[Dict[str, float]]:
    """
    Convert coefficients to amplitude/phase form.

    The DC term comes first with phase 0 (positive) or pi (negative).
    Harmonic phases are ``atan2(b, a)`` wrapped into [0, 2*pi).

    Returns:
        List of {"harmonic", "amplitude", "phase"} dicts
    """
    result = [
        {
            "harmonic": 0,
            "amplitude": abs(coefficients.a0),
            "phase": 0.0 if coefficients.a0 >= 0 else float(np.pi),
        }
    ]
    for n, (an, bn) in enumerate(zip(coefficients.a, coefficients.b), start=1):
        phase = float(np.arctan2(bn, an))
        if phase < 0:
            phase += 2 * np.pi
        result.append({"harmonic": n, "amplitude": float(np.hypot(an, bn)), "phase": phase})
    return result


def from_amplitude_phase(items: Sequence[Dict[str, float]]) -> FourierCoefficients:
    """Inverse of ``to_amplitude_phase``.

    Arrays are sized by the highest harmonic present; missing harmonics are
    zero. A DC phase below pi/2 means a positive DC term.
    """
    if not items:
        return FourierCoefficients(a0=0.0)

    max_harmonic = max(int(item["harmonic"]) for item in items)
    a = np.zeros(max_harmonic)
    b = np.zeros(max_harmonic)
    a0 = 0.0
    for item in items:
        harmonic = int(item["harmonic"])
        amplitude, phase = item["amplitude"], item["phase"]
        if harmonic == 0:
            a0 = amplitude * (1 if phase < np.pi / 2 else -1)
        else:
            a[harmonic - 1] = amplitude * np.cos(phase)
            b[harmonic - 1] = amplitude * np.sin(phase)
    return FourierCoefficients(a0=a0, a=tuple(a), b=tuple(b))


def spectral_points(
    coefficients: FourierCoefficients,
    fundamental_frequency: Optional[float] = None,
) -> List[SpectralPoint]:
    """Spectrum of a coefficient set for display: DC plus one point per harmonic."""
    points = [
        SpectralPoint(
            harmonic=0,
            amplitude=abs(coefficients.a0),
            frequency=0.0 if fundamental_frequency else None,
            kind="DC",
        )
    ]
    for n, (an, bn) in enumerate(zip(coefficients.a, coefficients.b), start=1):
        points.append(
            SpectralPoint(
                harmonic=n,
                amplitude=float(np.hypot(an, bn)),
                frequency=fundamental_frequency * n if fundamental_frequency else None,
                phase=float(np.arctan2(bn, an)),
                kind="Harmonic",
            )
        )
    return points


def filter_coefficients(
    coefficients: FourierCoefficients,
    threshold: float = 0.01,
) -> FourierCoefficients:
    """Zero out harmonics weaker than ``threshold`` times the strongest one.

    The DC term is kept as is.
    """
    a = np.asarray(coefficients.a, dtype=np.float64)
    b = np.asarray(coefficients.b, dtype=np.float64)
    if len(a) == 0:
        return coefficients

    amplitudes = np.hypot(a, b)
    weak = amplitudes < amplitudes.max() * threshold
    a[weak] = 0.0
    b[weak] = 0.0
    return FourierCoefficients(a0=coefficients.a0, a=tuple(a), b=tuple(b))


def dominant_harmonics(
    coefficients: FourierCoefficients,
    count: int = 5,
) -> List[Tuple[int, float]]:
    """Strongest harmonics as (harmonic number, amplitude), loudest first."""
    amplitudes = np.hypot(coefficients.a, coefficients.b)
    order = np.argsort(-amplitudes, kind="stable")[:count]
    return [(int(i) + 1, float(amplitudes[i])) for i in order]


def power_spectrum(signal: Sequence[float], sample_rate: int) -> List[SpectralPoint]:
    """
    Magnitude spectrum of a power-of-two length signal.

    Args:
        signal: Time-domain samples (length 2^k)
        sample_rate: Sample rate in Hz

    Returns:
        Bins 0..N/2 with amplitude |X|/N, frequency and phase
    """
    samples = np.asarray(signal, dtype=np.float64)
    n = len(samples)
    if n == 0 or n & (n - 1):
        raise ValueError(f"FFT requires a power-of-two length, got {n}")
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")

    spectrum = np.fft.rfft(samples)
    magnitudes = np.abs(spectrum) / n
    phases = np.angle(spectrum)
    return [
        SpectralPoint(
            harmonic=k,
            amplitude=float(magnitudes[k]),
            frequency=k * sample_rate / n,
            phase=float(phases[k]),
        )
        for k in range(len(spectrum))
    ]
