"""Fundamental frequency estimation for the tuner.

Three interchangeable strategies:

- ``AMDFPitchDetector``: average magnitude difference function over a
  time-domain buffer, with parabolic sub-sample refinement.
- ``FFTPeakPitchDetector``: strongest bin of a dB magnitude spectrum, with
  parabolic sub-bin refinement.
- ``YINPitchDetector``: librosa's YIN over a time-domain buffer.

All return ``None`` rather than a low-confidence guess.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import librosa
import numpy as np

from ..core import DEFAULT_FFT_SIZE, PitchEstimate, SAMPLE_RATE
from ..core.constants import (
    AMDF_THRESHOLD,
    MAX_ANALYSIS_FREQUENCY,
    MIN_FREQUENCY,
    MIN_SIGNAL_LEVEL,
    PITCH_FMAX,
    PITCH_FMIN,
    SPECTRUM_NOISE_FLOOR,
)
from .refine import locate_and_refine, refine_at
from .spectrum import db_to_linear, magnitude_spectrum_db

logger = logging.getLogger(__name__)

# Half-width, in lags, of the window searched for the doubled period
CONFIRMATION_WINDOW = 5


class PitchDetector(ABC):
    """Abstract base class for pitch detection strategies."""

    method = ""

    def __init__(self, sample_rate: int = SAMPLE_RATE):
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.sample_rate = sample_rate

    @abstractmethod
    def detect(self, data: Sequence[float]) -> Optional[PitchEstimate]:
        """
        Estimate the fundamental frequency.

        Args:
            data: Detector input (time-domain buffer or dB spectrum)

        Returns:
            PitchEstimate, or None if no pitch was found
        """
        pass

    def detect_frame(self, frame: Sequence[float]) -> Optional[PitchEstimate]:
        """Estimate the pitch of a time-domain frame."""
        return self.detect(frame)


class AMDFPitchDetector(PitchDetector):
    """Time-domain pitch detection with the average magnitude difference function."""

    method = "amdf"

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        fmin: float = PITCH_FMIN,
        fmax: float = PITCH_FMAX,
        threshold: float = AMDF_THRESHOLD,
        min_signal: float = MIN_SIGNAL_LEVEL,
        octave_tolerance: float = 0.1,
    ):
        """
        Initialize AMDFPitchDetector.

        Args:
            sample_rate: Sample rate in Hz
            fmin: Lowest detectable frequency
            fmax: Highest detectable frequency
            threshold: Largest AMDF value accepted as a period
            min_signal: Peak level below which the buffer is silence
            octave_tolerance: Fraction of the AMDF range within which a
                shorter-lag minimum beats the global minimum
        """
        super().__init__(sample_rate)
        if not 0 < fmin < fmax:
            raise ValueError(f"Need 0 < fmin < fmax, got fmin={fmin}, fmax={fmax}")
        self.fmin = fmin
        self.fmax = fmax
        self.threshold = threshold
        self.min_signal = min_signal
        self.octave_tolerance = octave_tolerance

    @staticmethod
    def amdf(samples: np.ndarray, period: int) -> float:
        """Mean absolute difference between the buffer and itself shifted by ``period``."""
        return float(np.mean(np.abs(samples[:-period] - samples[period:])))

    def _pick_period(self, scores: np.ndarray) -> int:
        """Index of the shortest-lag local minimum close enough to the global minimum."""
        lowest = float(scores.min())
        margin = self.octave_tolerance * (float(scores.max()) - lowest)

        interior = scores[1:-1]
        is_minimum = (interior <= scores[:-2]) & (interior <= scores[2:])
        candidates = np.flatnonzero(is_minimum & (interior <= lowest + margin)) + 1
        if len(candidates):
            return int(candidates[0])
        return int(np.argmin(scores))

    def detect(self, buffer: Sequence[float]) -> Optional[PitchEstimate]:
        samples = np.asarray(buffer, dtype=np.float64)
        if len(samples) == 0 or np.max(np.abs(samples)) < self.min_signal:
            return None

        samples = samples - samples.mean()

        min_period = int(np.floor(self.sample_rate / self.fmax))
        max_period = min(int(np.floor(self.sample_rate / self.fmin)), len(samples) - 1)
        min_period = max(min_period, 1)
        if max_period - min_period + 1 < 3:
            logger.debug("Buffer too short for period search (%d samples)", len(samples))
            return None

        periods = np.arange(min_period, max_period + 1)
        scores = np.array([self.amdf(samples, p) for p in periods])

        lowest = float(scores.min())
        if lowest > self.threshold:
            logger.debug("Weak periodicity: minimum AMDF %.4f", lowest)
            return None

        best = self._pick_period(scores)
        best_period = int(periods[best])
        best_score = float(scores[best])

        refined_period = min_period + refine_at(scores, best, 0, len(scores) - 1)
        confirmed = self._confirm(samples, best_period)

        confidence = float(np.clip(1.0 - best_score / self.threshold, 0.0, 1.0))
        if not confirmed:
            confidence *= 0.5

        logger.debug(
            "AMDF period %d (refined %.3f), score %.4f, confirmed=%s",
            best_period,
            refined_period,
            best_score,
            confirmed,
        )
        return PitchEstimate(
            frequency=self.sample_rate / refined_period,
            confidence=confidence,
            confirmed=confirmed,
            method=self.method,
        )

    def _confirm(self, samples: np.ndarray, period: int) -> bool:
        """Check that the doubled period is also a minimum."""
        doubled = 2 * period
        lo = doubled - CONFIRMATION_WINDOW
        hi = min(doubled + CONFIRMATION_WINDOW, len(samples) - 1)
        if lo < 1 or hi < lo:
            return False

        lags = np.arange(lo, hi + 1)
        scores = [self.amdf(samples, lag) for lag in lags]
        best_lag = int(lags[int(np.argmin(scores))])
        return abs(best_lag - doubled) < CONFIRMATION_WINDOW


class FFTPeakPitchDetector(PitchDetector):
    """Frequency-domain pitch detection from the strongest spectrum bin."""

    method = "fft"

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        fft_size: int = DEFAULT_FFT_SIZE,
        fmin: float = MIN_FREQUENCY,
        fmax: float = MAX_ANALYSIS_FREQUENCY,
        noise_floor: float = SPECTRUM_NOISE_FLOOR,
    ):
        """
        Initialize FFTPeakPitchDetector.

        Args:
            sample_rate: Sample rate in Hz
            fft_size: FFT length the spectra come from
            fmin: Lowest frequency searched
            fmax: Highest frequency searched
            noise_floor: Linear amplitude below which nothing is detected
        """
        super().__init__(sample_rate)
        if fft_size <= 0:
            raise ValueError(f"fft_size must be positive, got {fft_size}")
        if not 0 < fmin < fmax:
            raise ValueError(f"Need 0 < fmin < fmax, got fmin={fmin}, fmax={fmax}")
        self.fft_size = fft_size
        self.fmin = fmin
        self.fmax = fmax
        self.noise_floor = noise_floor

    @property
    def bin_width(self) -> float:
        return self.sample_rate / self.fft_size

    def detect(self, spectrum_db: Sequence[float]) -> Optional[PitchEstimate]:
        amplitudes = db_to_linear(spectrum_db)
        if len(amplitudes) == 0:
            return None

        # Bin 0 is DC, never a pitch
        lo = max(1, int(np.ceil(self.fmin / self.bin_width)))
        hi = min(len(amplitudes) - 1, int(np.floor(self.fmax / self.bin_width)))
        peak = locate_and_refine(amplitudes, lo, hi, mode="max")
        if peak is None or peak.value < self.noise_floor:
            logger.debug("No spectral peak above noise floor")
            return None

        frequency = peak.position * self.bin_width
        if frequency <= 0:
            return None
        logger.debug(
            "Spectral peak at bin %d (refined %.3f), %.2f Hz",
            peak.index,
            peak.position,
            frequency,
        )
        return PitchEstimate(frequency=frequency, confidence=1.0, method=self.method)

    def detect_frame(self, frame: Sequence[float]) -> Optional[PitchEstimate]:
        return self.detect(magnitude_spectrum_db(frame, self.fft_size))


class YINPitchDetector(PitchDetector):
    """YIN pitch detection via librosa, reduced to one estimate per buffer."""

    method = "yin"

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        fmin: float = PITCH_FMIN,
        fmax: float = PITCH_FMAX,
        frame_length: int = 2048,
        min_signal: float = MIN_SIGNAL_LEVEL,
    ):
        super().__init__(sample_rate)
        if not 0 < fmin < fmax:
            raise ValueError(f"Need 0 < fmin < fmax, got fmin={fmin}, fmax={fmax}")
        self.fmin = fmin
        self.fmax = fmax
        self.frame_length = frame_length
        self.min_signal = min_signal

    def detect(self, buffer: Sequence[float]) -> Optional[PitchEstimate]:
        samples = np.asarray(buffer, dtype=np.float64)
        if len(samples) < self.frame_length:
            return None
        if np.max(np.abs(samples)) < self.min_signal:
            return None

        f0 = librosa.yin(
            samples,
            fmin=self.fmin,
            fmax=self.fmax,
            sr=self.sample_rate,
            frame_length=self.frame_length,
        )
        f0 = f0[np.isfinite(f0)]
        if len(f0) == 0:
            return None

        frequency = float(np.median(f0))
        # Spread of the per-frame estimates, in semitones
        spread = float(np.std(12 * np.log2(f0 / frequency)))
        logger.debug("YIN median %.2f Hz over %d frames", frequency, len(f0))
        return PitchEstimate(
            frequency=frequency,
            confidence=float(np.clip(1.0 - spread, 0.0, 1.0)),
            method=self.method,
        )


DETECTORS = {
    AMDFPitchDetector.method: AMDFPitchDetector,
    FFTPeakPitchDetector.method: FFTPeakPitchDetector,
    YINPitchDetector.method: YINPitchDetector,
}


def create_detector(method: str, sample_rate: int = SAMPLE_RATE, **kwargs) -> PitchDetector:
    """
    Build a pitch detector by method name.

    Args:
        method: "amdf", "fft" or "yin"
        sample_rate: Sample rate in Hz
        **kwargs: Passed to the detector constructor

    Returns:
        PitchDetector instance
    """
    if method not in DETECTORS:
        raise ValueError(f"Unknown pitch method: {method}. Use one of {sorted(DETECTORS)}")
    return DETECTORS[method](sample_rate=sample_rate, **kwargs)
