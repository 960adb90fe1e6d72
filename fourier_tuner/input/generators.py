"""Synthetic waveform generators.

Every generator samples ``floor(sample_rate * duration)`` points at
``t = i / sample_rate`` and returns a list of ``WavePoint`` tagged with
the wave's fundamental, which is what ``FourierAnalyzer.decompose`` reads
when no explicit fundamental is given.
"""

from enum import Enum
from typing import List, Optional, Sequence

import numpy as np
from scipy import signal

from ..core import SAMPLE_RATE, WavePoint, make_wave, wave_times, wave_values


class WaveType(Enum):
    """Waveforms available to the generator dispatcher."""
    SINE = "sine"
    COSINE = "cosine"
    SQUARE = "square"
    SAWTOOTH = "sawtooth"
    INVERSE_SAWTOOTH = "inverse_sawtooth"
    TRIANGLE = "triangle"
    PULSE = "pulse"


def _check(frequency: float, sample_rate: int) -> None:
    if frequency <= 0:
        raise ValueError(f"frequency must be positive, got {frequency}")
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")


def time_axis(duration: float, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Sample times for ``duration`` seconds."""
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")
    samples = max(0, int(np.floor(sample_rate * duration)))
    return np.arange(samples, dtype=np.float64) / sample_rate


def sine_wave(
    frequency: float,
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
    phase: float = 0.0,
) -> List[WavePoint]:
    """amplitude * sin(2*pi*f*t + phase)"""
    _check(frequency, sample_rate)
    t = time_axis(duration, sample_rate)
    values = amplitude * np.sin(2 * np.pi * frequency * t + phase)
    return make_wave(t, values, frequency)


def cosine_wave(
    frequency: float,
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Sine wave shifted by 90 degrees."""
    return sine_wave(frequency, amplitude, duration, sample_rate, phase=np.pi / 2)


def square_wave(
    frequency: float,
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """+amplitude for the first half of each period, -amplitude for the second."""
    return pulse_wave(frequency, amplitude, duration, sample_rate, duty_cycle=0.5)


def pulse_wave(
    frequency: float,
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
    duty_cycle: float = 0.5,
) -> List[WavePoint]:
    """Rectangular wave that is high for ``duty_cycle`` of each period."""
    _check(frequency, sample_rate)
    duty = float(np.clip(duty_cycle, 0.0, 1.0))
    t = time_axis(duration, sample_rate)
    values = amplitude * signal.square(2 * np.pi * frequency * t, duty=duty)
    return make_wave(t, values, frequency)


def sawtooth_wave(
    frequency: float,
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Linear rise from -amplitude to +amplitude, then a sharp drop."""
    _check(frequency, sample_rate)
    t = time_axis(duration, sample_rate)
    values = amplitude * signal.sawtooth(2 * np.pi * frequency * t)
    return make_wave(t, values, frequency)


def inverse_sawtooth_wave(
    frequency: float,
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Linear fall from +amplitude to -amplitude, then a sharp rise."""
    _check(frequency, sample_rate)
    t = time_axis(duration, sample_rate)
    values = amplitude * signal.sawtooth(2 * np.pi * frequency * t, width=0.0)
    return make_wave(t, values, frequency)


def triangle_wave(
    frequency: float,
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Triangle starting at zero, peaking at a quarter period."""
    _check(frequency, sample_rate)
    t = time_axis(duration, sample_rate)
    values = amplitude * signal.sawtooth(2 * np.pi * frequency * t + np.pi / 2, width=0.5)
    return make_wave(t, values, frequency)


def white_noise(
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
    seed: Optional[int] = None,
) -> List[WavePoint]:
    """Uniform noise in [-amplitude, amplitude]. Points carry no frequency."""
    rng = np.random.default_rng(seed)
    t = time_axis(duration, sample_rate)
    values = amplitude * rng.uniform(-1.0, 1.0, size=len(t))
    return make_wave(t, values)


def fm_wave(
    carrier_frequency: float,
    modulator_frequency: float,
    modulation_index: float,
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Frequency-modulated sine."""
    _check(carrier_frequency, sample_rate)
    t = time_axis(duration, sample_rate)
    modulation = modulation_index * np.sin(2 * np.pi * modulator_frequency * t)
    values = amplitude * np.sin(2 * np.pi * carrier_frequency * t + modulation)
    return make_wave(t, values, carrier_frequency)


def combine_waves(
    waves: Sequence[Sequence[WavePoint]],
    amplitude_scaling: float = 0.8,
    frequency: Optional[float] = None,
) -> List[WavePoint]:
    """Sum waves sample by sample on the time axis of the first one.

    Shorter waves contribute only where they have samples.
    """
    if not waves:
        return []
    reference = waves[0]
    total = np.zeros(len(reference))
    for wave in waves:
        values = wave_values(wave)[: len(reference)]
        total[: len(values)] += values
    return make_wave(wave_times(reference), total * amplitude_scaling, frequency)


def harmonic_wave(
    fundamental_frequency: float,
    harmonic_weights: Sequence[float],
    base_amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Sum of sines at integer multiples of the fundamental.

    ``harmonic_weights[i]`` scales harmonic ``i + 1``; zero weights are skipped.
    """
    harmonics = [
        sine_wave(fundamental_frequency * (i + 1), base_amplitude * w, duration, sample_rate)
        for i, w in enumerate(harmonic_weights)
        if w != 0
    ]
    if not harmonics:
        _check(fundamental_frequency, sample_rate)
        t = time_axis(duration, sample_rate)
        return make_wave(t, np.zeros(len(t)), fundamental_frequency)
    return combine_waves(harmonics, frequency=fundamental_frequency)


def square_wave_fourier(
    frequency: float,
    amplitude: float,
    duration: float,
    num_harmonics: int = 10,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Band-limited square wave from its first ``num_harmonics`` odd harmonics."""
    harmonics = [
        sine_wave(frequency * n, amplitude * 4 / (n * np.pi), duration, sample_rate)
        for n in range(1, num_harmonics * 2, 2)
    ]
    return combine_waves(harmonics, frequency=frequency)


def sawtooth_wave_fourier(
    frequency: float,
    amplitude: float,
    duration: float,
    num_harmonics: int = 10,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Band-limited sawtooth with alternating-sign harmonics."""
    harmonics = [
        sine_wave(
            frequency * n,
            amplitude * (2 / (n * np.pi)) * (-1 if n % 2 == 0 else 1),
            duration,
            sample_rate,
        )
        for n in range(1, num_harmonics + 1)
    ]
    return combine_waves(harmonics, frequency=frequency)


def triangle_wave_fourier(
    frequency: float,
    amplitude: float,
    duration: float,
    num_harmonics: int = 10,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Band-limited triangle from odd harmonics falling off as 1/n^2."""
    harmonics = [
        sine_wave(
            frequency * n,
            amplitude * (8 / (np.pi**2 * n**2)) * (1 if n % 4 == 1 else -1),
            duration,
            sample_rate,
        )
        for n in range(1, num_harmonics * 2, 2)
    ]
    return combine_waves(harmonics, frequency=frequency)


def apply_envelope(
    wave: Sequence[WavePoint],
    attack_time: float,
    decay_time: float,
    sustain_level: float,
    release_time: float,
) -> List[WavePoint]:
    """Shape a wave with an ADSR envelope (times in seconds)."""
    if not wave:
        return []
    t = wave_times(wave)
    total = t[-1]
    sustain = float(np.clip(sustain_level, 0.0, 1.0))
    attack_end = attack_time
    decay_end = attack_end + decay_time
    release_start = total - release_time

    with np.errstate(divide="ignore", invalid="ignore"):
        gain = np.select(
            [t < attack_end, t < decay_end, t < release_start],
            [
                t / attack_time,
                1 - (1 - sustain) * ((t - attack_end) / decay_time),
                np.full_like(t, sustain),
            ],
            default=sustain * (1 - (t - release_start) / release_time)
            if release_time > 0
            else sustain,
        )

    return [
        WavePoint(t=p.t, value=p.value * float(g), frequency=p.frequency)
        for p, g in zip(wave, gain)
    ]


_GENERATORS = {
    WaveType.SINE: sine_wave,
    WaveType.COSINE: cosine_wave,
    WaveType.SQUARE: square_wave,
    WaveType.SAWTOOTH: sawtooth_wave,
    WaveType.INVERSE_SAWTOOTH: inverse_sawtooth_wave,
    WaveType.TRIANGLE: triangle_wave,
    WaveType.PULSE: pulse_wave,
}


def generate(
    kind: WaveType | str,
    frequency: float,
    amplitude: float,
    duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> List[WavePoint]:
    """Generate a wave by type name."""
    wave_type = WaveType(kind) if isinstance(kind, str) else kind
    return _GENERATORS[wave_type](frequency, amplitude, duration, sample_rate)
