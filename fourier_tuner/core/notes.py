"""Equal-tempered note frequency tables.

The tables are configuration consumed by the analyzers, not computed by
them. Frequencies are rounded to 0.01 Hz like a printed tuning chart.
"""

import re
from typing import Dict

import numpy as np

from .constants import A4_MIDI, NOTE_NAMES, REFERENCE_A4

_NOTE_RE = re.compile(r"^([A-G]#?)(-?\d+)$")


def midi_to_frequency(midi: float, reference_a4: float = REFERENCE_A4) -> float:
    """Convert MIDI pitch to frequency (Hz)."""
    return reference_a4 * (2 ** ((midi - A4_MIDI) / 12.0))


def frequency_to_midi(frequency: float, reference_a4: float = REFERENCE_A4) -> int:
    """Convert frequency (Hz) to the nearest MIDI pitch."""
    if frequency <= 0:
        raise ValueError(f"frequency must be positive, got {frequency}")
    return int(np.floor(A4_MIDI + 12 * np.log2(frequency / reference_a4) + 0.5))


def midi_to_name(midi: int) -> str:
    """Get note name (e.g., 'C4', 'A#3') for a MIDI pitch."""
    octave = (midi - 12) // 12
    return f"{NOTE_NAMES[midi % 12]}{octave}"


def name_to_midi(name: str) -> int:
    """Parse a note name such as 'C#4' into a MIDI pitch."""
    match = _NOTE_RE.match(name.strip())
    if match is None:
        raise ValueError(f"Invalid note name: {name!r}")
    pitch, octave = match.groups()
    return NOTE_NAMES.index(pitch) + 12 * (int(octave) + 1)


def note_to_frequency(name: str, reference_a4: float = REFERENCE_A4) -> float:
    """Frequency of a named note, e.g. ``note_to_frequency("A4") == 440.0``."""
    return midi_to_frequency(name_to_midi(name), reference_a4)


def build_note_table(
    first: str = "C2",
    last: str = "C7",
    reference_a4: float = REFERENCE_A4,
    decimals: int = 2,
) -> Dict[str, float]:
    """Build a ``name -> Hz`` table from ``first`` to ``last`` inclusive."""
    lo, hi = name_to_midi(first), name_to_midi(last)
    if hi < lo:
        raise ValueError(f"Empty note range: {first}..{last}")
    return {
        midi_to_name(m): round(midi_to_frequency(m, reference_a4), decimals)
        for m in range(lo, hi + 1)
    }


# Middle octave, C4 to C5
NOTE_FREQUENCIES: Dict[str, float] = build_note_table("C4", "C5")

# Range of most instruments, C2 to C7
EXTENDED_NOTE_FREQUENCIES: Dict[str, float] = build_note_table("C2", "C7")
