"""Value objects passed between the analysis layers.

All records are frozen dataclasses. They carry data only; the analyzers
that produce them live in ``fourier_tuner.analysis``. Sequences inside
records are tuples so a record can be cached and shared safely.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class WavePoint:
    """One sample of a waveform."""

    t: float  # Time in seconds
    value: float  # Amplitude at time t
    frequency: Optional[float] = None  # Fundamental of the wave, if known


@dataclass(frozen=True)
class FourierCoefficients:
    """Fourier series coefficients of a periodic waveform.

    Index ``i`` of ``a`` and ``b`` holds harmonic ``i + 1``.
    """

    a0: float  # DC component
    a: Tuple[float, ...] = field(default_factory=tuple)  # Cosine terms
    b: Tuple[float, ...] = field(default_factory=tuple)  # Sine terms

    def __post_init__(self):
        # Accept any sequence, store tuples
        object.__setattr__(self, "a", tuple(float(x) for x in self.a))
        object.__setattr__(self, "b", tuple(float(x) for x in self.b))
        if len(self.a) != len(self.b):
            raise ValueError(
                f"Coefficient lengths differ: len(a)={len(self.a)}, len(b)={len(self.b)}"
            )

    @property
    def num_harmonics(self) -> int:
        return len(self.a)

    @classmethod
    def zeros(cls, num_harmonics: int) -> "FourierCoefficients":
        """All-zero coefficients for ``num_harmonics`` harmonics."""
        return cls(a0=0.0, a=(0.0,) * num_harmonics, b=(0.0,) * num_harmonics)


@dataclass(frozen=True)
class SpectralPoint:
    """One point of a spectrum (a harmonic or an FFT bin)."""

    harmonic: int  # Harmonic number or bin index
    amplitude: float  # Linear amplitude, >= 0
    frequency: Optional[float] = None  # Hz
    phase: Optional[float] = None  # Radians
    kind: Optional[str] = None  # "DC" or "Harmonic" when built from coefficients


@dataclass(frozen=True)
class NoteMatch:
    """Result of a note lookup."""

    note_name: str  # e.g. "A4", "C#5"
    cents: int  # Deviation from the matched note


@dataclass(frozen=True)
class DetectedNote:
    """A note found in a signal."""

    note_name: str
    cents: int
    frequency: float
    amplitude: Optional[float] = None


@dataclass(frozen=True)
class AccuracyResult:
    """Agreement between an original and a reconstructed wave."""

    mse: float
    accuracy_percent: float


@dataclass(frozen=True)
class PitchEstimate:
    """A detected fundamental frequency.

    Detectors return ``None`` (``NOT_DETECTED``) instead of a
    low-confidence guess.
    """

    frequency: float
    confidence: float = 1.0  # 0.0 - 1.0
    confirmed: bool = True  # Period confirmed at twice the lag (AMDF only)
    method: str = ""


NOT_DETECTED = None


@dataclass(frozen=True)
class Harmonic:
    """One overtone of a detected note, relative to its fundamental."""

    harmonic: int
    frequency: float
    amplitude: float
    relative_amplitude: float  # Percent of the fundamental


@dataclass(frozen=True)
class TunerReading:
    """Output of one tuner analysis step."""

    volume: float  # RMS of the frame
    estimate: Optional[PitchEstimate] = None
    raw_note: Optional[NoteMatch] = None
    stable_note: Optional[DetectedNote] = None

    @property
    def detected(self) -> bool:
        return self.estimate is not None


def make_wave(
    times: Iterable[float],
    values: Iterable[float],
    frequency: Optional[float] = None,
) -> List[WavePoint]:
    """Zip time and value arrays into wave points."""
    return [
        WavePoint(t=float(t), value=float(v), frequency=frequency)
        for t, v in zip(times, values)
    ]


def wave_times(points: Sequence[WavePoint]) -> np.ndarray:
    """Time axis of a wave as an array."""
    return np.fromiter((p.t for p in points), dtype=np.float64, count=len(points))


def wave_values(points: Sequence[WavePoint]) -> np.ndarray:
    """Sample values of a wave as an array."""
    return np.fromiter((p.value for p in points), dtype=np.float64, count=len(points))
