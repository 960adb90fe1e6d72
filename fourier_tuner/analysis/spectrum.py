"""Magnitude spectra in the analyser-node convention and helpers around them.

Spectra here are dB magnitudes of a Blackman-windowed real FFT, scaled by
1/N, with ``fft_size // 2`` bins (the Nyquist bin is dropped). That is the
shape a browser analyser node hands to the frequency-domain detectors.
"""

from typing import List, Sequence

import librosa
import numpy as np

from ..core import DEFAULT_FFT_SIZE, Harmonic, SpectralPoint
from ..core.constants import MAX_PEAK_FREQUENCY, MIN_FREQUENCY


def db_to_linear(spectrum_db: Sequence[float]) -> np.ndarray:
    """Convert dB magnitudes to linear amplitude (10^(dB/20))."""
    return librosa.db_to_amplitude(np.asarray(spectrum_db, dtype=np.float64))


def linear_to_db(amplitudes: Sequence[float]) -> np.ndarray:
    """Convert linear amplitudes to dB, relative to 1.0."""
    return librosa.amplitude_to_db(
        np.asarray(amplitudes, dtype=np.float64),
        ref=1.0,
        amin=1e-12,
        top_db=None,
    )


def magnitude_spectrum_db(
    buffer: Sequence[float],
    fft_size: int = DEFAULT_FFT_SIZE,
) -> np.ndarray:
    """
    dB magnitude spectrum of the first ``fft_size`` samples of a buffer.

    Args:
        buffer: Time-domain samples; zero-padded if shorter than fft_size
        fft_size: FFT length (power of two)

    Returns:
        Array of ``fft_size // 2`` dB values
    """
    from scipy.signal import get_window

    if fft_size <= 0 or fft_size & (fft_size - 1):
        raise ValueError(f"fft_size must be a power of two, got {fft_size}")

    frame = np.zeros(fft_size)
    samples = np.asarray(buffer, dtype=np.float64)[:fft_size]
    frame[: len(samples)] = samples

    window = get_window("blackman", fft_size, fftbins=False)
    magnitudes = np.abs(np.fft.rfft(frame * window)) / fft_size
    return linear_to_db(magnitudes[: fft_size // 2])


def spectrum_to_points(
    spectrum_db: Sequence[float],
    sample_rate: int,
    fft_size: int,
    fmin: float = MIN_FREQUENCY,
    fmax: float = MAX_PEAK_FREQUENCY,
) -> List[SpectralPoint]:
    """
    Linear spectral points for the bins whose frequency lies in [fmin, fmax].

    Args:
        spectrum_db: dB magnitudes per bin
        sample_rate: Sample rate in Hz
        fft_size: FFT length the spectrum came from
        fmin: Lowest frequency kept
        fmax: Highest frequency kept

    Returns:
        SpectralPoints with bin index, linear amplitude and frequency
    """
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")
    if fft_size <= 0:
        raise ValueError(f"fft_size must be positive, got {fft_size}")

    amplitudes = db_to_linear(spectrum_db)
    bin_width = sample_rate / fft_size
    return [
        SpectralPoint(harmonic=i, amplitude=float(amplitude), frequency=i * bin_width)
        for i, amplitude in enumerate(amplitudes)
        if fmin <= i * bin_width <= fmax
    ]


def find_harmonics(
    spectrum_db: Sequence[float],
    sample_rate: int,
    fft_size: int,
    fundamental: float,
    max_harmonic: int = 10,
    tolerance_bins: int = 2,
    min_relative: float = 1.0,
) -> List[Harmonic]:
    """
    Harmonic profile of a note: the strongest bin near each multiple of the
    fundamental.

    Args:
        spectrum_db: dB magnitudes per bin
        sample_rate: Sample rate in Hz
        fft_size: FFT length the spectrum came from
        fundamental: Fundamental frequency in Hz
        max_harmonic: Highest harmonic searched
        tolerance_bins: Search half-width around each expected bin
        min_relative: Minimum amplitude, in percent of the fundamental

    Returns:
        Harmonics, the fundamental first with relative amplitude 100
    """
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")
    if fundamental <= 0:
        raise ValueError(f"fundamental must be positive, got {fundamental}")

    amplitudes = db_to_linear(spectrum_db)
    if len(amplitudes) == 0:
        return []

    bin_width = sample_rate / fft_size
    fundamental_bin = int(np.floor(fundamental / bin_width + 0.5))
    if fundamental_bin >= len(amplitudes):
        return []
    fundamental_amplitude = float(amplitudes[fundamental_bin])

    harmonics = [
        Harmonic(
            harmonic=1,
            frequency=float(fundamental),
            amplitude=fundamental_amplitude,
            relative_amplitude=100.0,
        )
    ]
    if fundamental_amplitude <= 0:
        return harmonics

    tolerance = bin_width * tolerance_bins
    for n in range(2, max_harmonic + 1):
        expected = fundamental * n
        if expected > sample_rate / 2:
            break

        lo = max(0, int(np.floor((expected - tolerance) / bin_width)))
        hi = min(len(amplitudes) - 1, int(np.ceil((expected + tolerance) / bin_width)))
        if hi < lo:
            break
        best = lo + int(np.argmax(amplitudes[lo : hi + 1]))
        relative = float(amplitudes[best]) / fundamental_amplitude * 100

        if relative > min_relative:
            harmonics.append(
                Harmonic(
                    harmonic=n,
                    frequency=best * bin_width,
                    amplitude=float(amplitudes[best]),
                    relative_amplitude=relative,
                )
            )

    return harmonics
