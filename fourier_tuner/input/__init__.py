"""Input layer - Signal sources and sample buffers.

Capture is out of scope; this layer synthesizes the periodic test signals
the analyzers consume and provides small buffer utilities.
"""

from .buffers import (
    as_buffer,
    points_to_buffer,
    rms,
    peak_level,
    normalize_samples,
    get_duration,
)
from .generators import (
    WaveType,
    time_axis,
    sine_wave,
    cosine_wave,
    square_wave,
    pulse_wave,
    sawtooth_wave,
    inverse_sawtooth_wave,
    triangle_wave,
    white_noise,
    fm_wave,
    combine_waves,
    harmonic_wave,
    square_wave_fourier,
    sawtooth_wave_fourier,
    triangle_wave_fourier,
    apply_envelope,
    generate,
)

__all__ = [
    "as_buffer",
    "points_to_buffer",
    "rms",
    "peak_level",
    "normalize_samples",
    "get_duration",
    "WaveType",
    "time_axis",
    "sine_wave",
    "cosine_wave",
    "square_wave",
    "pulse_wave",
    "sawtooth_wave",
    "inverse_sawtooth_wave",
    "triangle_wave",
    "white_noise",
    "fm_wave",
    "combine_waves",
    "harmonic_wave",
    "square_wave_fourier",
    "sawtooth_wave_fourier",
    "triangle_wave_fourier",
    "apply_envelope",
    "generate",
]
