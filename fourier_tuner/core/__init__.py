"""Core types and constants for Fourier Tuner."""

from .types import (
    WavePoint,
    FourierCoefficients,
    SpectralPoint,
    NoteMatch,
    DetectedNote,
    AccuracyResult,
    PitchEstimate,
    NOT_DETECTED,
    Harmonic,
    TunerReading,
    make_wave,
    wave_times,
    wave_values,
)
from .constants import (
    NOTE_NAMES,
    SAMPLE_RATE,
    DEFAULT_FFT_SIZE,
    MAX_HARMONICS,
    DEFAULT_HARMONICS,
    REFERENCE_A4,
)
from .notes import (
    NOTE_FREQUENCIES,
    EXTENDED_NOTE_FREQUENCIES,
    build_note_table,
    note_to_frequency,
    midi_to_frequency,
    frequency_to_midi,
)

__all__ = [
    "WavePoint",
    "FourierCoefficients",
    "SpectralPoint",
    "NoteMatch",
    "DetectedNote",
    "AccuracyResult",
    "PitchEstimate",
    "NOT_DETECTED",
    "Harmonic",
    "TunerReading",
    "make_wave",
    "wave_times",
    "wave_values",
    "NOTE_NAMES",
    "SAMPLE_RATE",
    "DEFAULT_FFT_SIZE",
    "MAX_HARMONICS",
    "DEFAULT_HARMONICS",
    "REFERENCE_A4",
    "NOTE_FREQUENCIES",
    "EXTENDED_NOTE_FREQUENCIES",
    "build_note_table",
    "note_to_frequency",
    "midi_to_frequency",
    "frequency_to_midi",
]
