"""Spectral peak detection for chords and harmonic inspection."""

import logging
import warnings
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence

from ..core import DetectedNote, EXTENDED_NOTE_FREQUENCIES, SpectralPoint
from .notes import NoteMapper
from .refine import parabolic_offset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeakDetectionConfig:
    """Configuration for spectral peak detection.

    Attributes:
        dense_threshold: Fraction of the maximum amplitude a peak must exceed
            when the spectrum has more than ``dense_size`` points (default: 0.05)
        sparse_threshold: Same fraction for smaller spectra (default: 0.10)
        dense_size: Point count above which a spectrum is dense (default: 1000)
        min_separation: Peaks this close (Hz) to the last accepted one are
            dropped (default: 5)
        max_peaks: Number of peaks kept, strongest first (default: 5)
        interpolate: Refine peak frequencies parabolically (default: False)
    """

    dense_threshold: float = 0.05
    sparse_threshold: float = 0.10
    dense_size: int = 1000
    min_separation: float = 5.0
    max_peaks: int = 5
    interpolate: bool = False

    def __post_init__(self):
        for name in ("dense_threshold", "sparse_threshold"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.min_separation < 0:
            raise ValueError(f"min_separation must not be negative, got {self.min_separation}")
        if self.max_peaks < 1:
            raise ValueError(f"max_peaks must be at least 1, got {self.max_peaks}")

    def threshold_fraction(self, spectrum_size: int) -> float:
        if spectrum_size > self.dense_size:
            return self.dense_threshold
        return self.sparse_threshold


class SpectralPeakDetector:
    """Find the strongest local maxima of a spectrum and name them."""

    def __init__(
        self,
        config: Optional[PeakDetectionConfig] = None,
        note_mapper: Optional[NoteMapper] = None,
    ):
        """
        Initialize SpectralPeakDetector.

        Args:
            config: Peak detection policy (default: PeakDetectionConfig())
            note_mapper: Mapper used for note names (default: C2..C7 table)
        """
        self.config = config or PeakDetectionConfig()
        self.note_mapper = note_mapper or NoteMapper(table=EXTENDED_NOTE_FREQUENCIES)

    def find_peaks(
        self,
        spectrum: Sequence[SpectralPoint],
        reference_frequencies: Optional[Mapping[str, float]] = None,
    ) -> List[DetectedNote]:
        """
        Detect peaks in a linear spectrum.

        Args:
            spectrum: Spectral points ordered by frequency
            reference_frequencies: Note table to name peaks against
                (default: the mapper's table)

        Returns:
            Up to ``max_peaks`` detected notes, ascending by frequency
        """
        if len(spectrum) == 0:
            return []

        if reference_frequencies is not None and len(reference_frequencies) == 0:
            warnings.warn("Empty reference table given, using the default note table")
            reference_frequencies = None

        max_amplitude = max(point.amplitude for point in spectrum)
        threshold = max_amplitude * self.config.threshold_fraction(len(spectrum))

        accepted = []
        last_frequency = None
        for i in range(1, len(spectrum) - 1):
            point = spectrum[i]
            if point.frequency is None:
                continue
            if not (
                point.amplitude > threshold
                and point.amplitude > spectrum[i - 1].amplitude
                and point.amplitude > spectrum[i + 1].amplitude
            ):
                continue

            frequency = point.frequency
            if self.config.interpolate:
                frequency = self._interpolate(spectrum, i)

            if (
                last_frequency is not None
                and abs(frequency - last_frequency) <= self.config.min_separation
            ):
                logger.debug(
                    "Dropped peak at %.2f Hz, too close to %.2f Hz", frequency, last_frequency
                )
                continue

            accepted.append((frequency, point.amplitude))
            last_frequency = frequency

        accepted.sort(key=lambda peak: peak[1], reverse=True)
        kept = sorted(accepted[: self.config.max_peaks], key=lambda peak: peak[0])

        notes = []
        for frequency, amplitude in kept:
            match = self.note_mapper.nearest_in_table(frequency, reference_frequencies)
            notes.append(
                DetectedNote(
                    note_name=match.note_name,
                    cents=match.cents,
                    frequency=float(frequency),
                    amplitude=float(amplitude),
                )
            )
        return notes

    @staticmethod
    def _interpolate(spectrum: Sequence[SpectralPoint], i: int) -> float:
        """Parabolic frequency estimate around point ``i``."""
        prev_point, point, next_point = spectrum[i - 1], spectrum[i], spectrum[i + 1]
        if prev_point.frequency is None or next_point.frequency is None:
            return point.frequency
        offset = parabolic_offset(prev_point.amplitude, point.amplitude, next_point.amplitude)
        step = (next_point.frequency - prev_point.frequency) / 2
        return point.frequency + offset * step
