"""Tuner analysis step and the host-side loop that drives it."""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from ..analysis.notes import NoteMapper
from ..analysis.pitch import PitchDetector
from ..core import TunerReading
from ..core.constants import VOLUME_THRESHOLD
from ..input.buffers import as_buffer, rms
from .stability import StabilityFilter

logger = logging.getLogger(__name__)

R = TypeVar("R")


class TunerSession:
    """One tuner: a pitch detector, a note mapper and a stability filter."""

    def __init__(
        self,
        detector: PitchDetector,
        note_mapper: Optional[NoteMapper] = None,
        stability: Optional[StabilityFilter] = None,
        volume_threshold: float = VOLUME_THRESHOLD,
    ):
        """
        Initialize TunerSession.

        Args:
            detector: Any pitch detection strategy
            note_mapper: Note lookup (default: MIDI formula at A4 = 440 Hz)
            stability: Debounce filter (default: 3 repeats after the first sighting)
            volume_threshold: RMS at or below which a frame is ignored
        """
        self.detector = detector
        self.note_mapper = note_mapper or NoteMapper()
        self.stability = stability or StabilityFilter()
        self.volume_threshold = volume_threshold

    def analyze_once(self, frame: Sequence[float]) -> TunerReading:
        """
        Analyze one frame.

        Args:
            frame: Time-domain samples

        Returns:
            TunerReading; ``stable_note`` is set once the note has settled
        """
        samples = as_buffer(frame)
        volume = rms(samples)
        if volume <= self.volume_threshold:
            self.stability.reset()
            return TunerReading(volume=volume)

        estimate = self.detector.detect_frame(samples)
        if estimate is None or estimate.frequency <= 0:
            self.stability.update(None)
            return TunerReading(volume=volume)

        raw_note = self.note_mapper.map(estimate.frequency)
        stable_note = None
        if self.stability.update(raw_note):
            stable_note = self.note_mapper.detected(estimate.frequency, amplitude=volume)

        return TunerReading(
            volume=volume,
            estimate=estimate,
            raw_note=raw_note,
            stable_note=stable_note,
        )

    def reset(self) -> None:
        self.stability.reset()


@dataclass(frozen=True)
class CancellationToken:
    """Handle for one run of an AnalysisLoop."""

    generation: int


class AnalysisLoop:
    """Host-side scheduler boundary around an analysis step.

    Each ``start()`` hands out a token for the current generation; ``stop()``
    moves to a new generation so every outstanding token goes stale at once.
    Ticks with a stale token do nothing.
    """

    def __init__(self, step: Callable[[Sequence[float]], R]):
        self.step = step
        self.generation = 0
        self.active = False
        self._in_tick = False

    def start(self) -> CancellationToken:
        self.generation += 1
        self.active = True
        logger.debug("Analysis loop started (generation %d)", self.generation)
        return CancellationToken(self.generation)

    def stop(self) -> None:
        self.generation += 1
        self.active = False
        logger.debug("Analysis loop stopped (generation %d)", self.generation)

    def is_current(self, token: CancellationToken) -> bool:
        return self.active and token.generation == self.generation

    def tick(self, token: CancellationToken, frame: Sequence[float]) -> Optional[R]:
        """
        Run one step if ``token`` is still current.

        Raises:
            RuntimeError: If called from inside a running step
        """
        if self._in_tick:
            raise RuntimeError("AnalysisLoop.tick is not reentrant")
        if not self.is_current(token):
            return None

        self._in_tick = True
        try:
            return self.step(frame)
        finally:
            self._in_tick = False

    def run(self, frames: Iterable[Sequence[float]]) -> List[R]:
        """Start, tick over every frame until exhausted or stopped, and return the results."""
        token = self.start()
        results = []
        for frame in frames:
            if not self.is_current(token):
                break
            results.append(self.tick(token, frame))
        if self.is_current(token):
            self.stop()
        return results
