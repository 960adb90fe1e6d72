"""Frequency to note-name mapping.

Two lookup strategies sit behind one ``NoteMapper`` interface:

- ``MIDI``: equal-tempered formula relative to a reference A4.
- ``TABLE``: nearest entry of a ``name -> Hz`` table by absolute Hz distance.

They can disagree by a note or a cent for frequencies close to a semitone
boundary, because the table is searched linearly in Hz while the formula
rounds in log space. Callers choose explicitly.
"""

import math
import warnings
from enum import Enum
from typing import Mapping, Optional

import numpy as np

from ..core import (
    DetectedNote,
    EXTENDED_NOTE_FREQUENCIES,
    NOTE_NAMES,
    NoteMatch,
    REFERENCE_A4,
)
from ..core.constants import A4_MIDI


class NoteStrategy(Enum):
    """Note lookup strategies."""
    MIDI = "midi"
    TABLE = "table"


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _check_frequency(frequency: float) -> None:
    if not frequency > 0:
        raise ValueError(f"frequency must be positive, got {frequency}")


def cents_between(frequency: float, reference: float) -> float:
    """Signed distance in cents from ``reference`` to ``frequency``."""
    _check_frequency(frequency)
    _check_frequency(reference)
    return 1200.0 * float(np.log2(frequency / reference))


def identify_note(frequency: float, reference_a4: float = REFERENCE_A4) -> NoteMatch:
    """Nearest equal-tempered note by the MIDI formula.

    Args:
        frequency: Frequency in Hz (> 0)
        reference_a4: Tuning reference for A4 in Hz

    Returns:
        NoteMatch with the note name (e.g. "A4") and cents deviation
    """
    _check_frequency(frequency)
    _check_frequency(reference_a4)

    midi = 12 * math.log2(frequency / reference_a4) + A4_MIDI
    rounded = _round_half_up(midi)
    cents = _round_half_up((midi - rounded) * 100)

    octave = math.floor((rounded - 12) / 12)
    name = NOTE_NAMES[rounded % 12]
    return NoteMatch(note_name=f"{name}{octave}", cents=cents)


def nearest_in_table(frequency: float, table: Mapping[str, float]) -> NoteMatch:
    """Nearest table entry by absolute Hz distance.

    Ties keep the entry seen first in iteration order.

    Raises:
        ValueError: If the table is empty or frequency is not positive
    """
    _check_frequency(frequency)
    if not table:
        raise ValueError("Note table is empty")

    best_name, best_freq, best_diff = "", 0.0, math.inf
    for name, table_freq in table.items():
        diff = abs(frequency - table_freq)
        if diff < best_diff:
            best_name, best_freq, best_diff = name, table_freq, diff

    cents = _round_half_up(cents_between(frequency, best_freq))
    return NoteMatch(note_name=best_name, cents=cents)


class NoteMapper:
    """Map frequencies to note names with a chosen lookup strategy."""

    def __init__(
        self,
        strategy: NoteStrategy | str = NoteStrategy.MIDI,
        reference_a4: float = REFERENCE_A4,
        table: Optional[Mapping[str, float]] = None,
    ):
        """
        Initialize NoteMapper.

        Args:
            strategy: NoteStrategy.MIDI or NoteStrategy.TABLE
            reference_a4: Reference pitch for the MIDI strategy
            table: Note table for the TABLE strategy (default: C2..C7)
        """
        _check_frequency(reference_a4)
        self.strategy = NoteStrategy(strategy)
        self.reference_a4 = reference_a4
        if table is not None and len(table) == 0:
            warnings.warn("Empty note table given, using the C2..C7 default table")
            table = None
        self.table = dict(table) if table is not None else EXTENDED_NOTE_FREQUENCIES

    def identify_note(self, frequency: float) -> NoteMatch:
        return identify_note(frequency, self.reference_a4)

    def nearest_in_table(
        self,
        frequency: float,
        table: Optional[Mapping[str, float]] = None,
    ) -> NoteMatch:
        return nearest_in_table(frequency, table if table else self.table)

    def map(self, frequency: float) -> NoteMatch:
        """Look up a frequency with the configured strategy."""
        if self.strategy is NoteStrategy.TABLE:
            return self.nearest_in_table(frequency)
        return self.identify_note(frequency)

    def detected(self, frequency: float, amplitude: Optional[float] = None) -> DetectedNote:
        """Build a DetectedNote record for a frequency."""
        match = self.map(frequency)
        return DetectedNote(
            note_name=match.note_name,
            cents=match.cents,
            frequency=float(frequency),
            amplitude=amplitude,
        )
