"""Tests for synthetic wave generators and buffer helpers."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from fourier_tuner.core import wave_values
from fourier_tuner.input import (
    WaveType,
    apply_envelope,
    as_buffer,
    combine_waves,
    cosine_wave,
    fm_wave,
    generate,
    get_duration,
    harmonic_wave,
    inverse_sawtooth_wave,
    normalize_samples,
    peak_level,
    points_to_buffer,
    pulse_wave,
    rms,
    sawtooth_wave,
    sine_wave,
    square_wave,
    square_wave_fourier,
    triangle_wave,
    white_noise,
)

SR = 44100


class TestGenerators:
    """Test the periodic generators."""

    def test_length_and_times(self):
        wave = sine_wave(440.0, 1.0, 0.01, SR)
        assert len(wave) == int(np.floor(SR * 0.01))
        assert wave[0].t == 0.0
        assert wave[1].t == pytest.approx(1 / SR)
        assert all(p.frequency == 440.0 for p in wave)

    def test_sine_and_cosine(self):
        assert sine_wave(100.0, 2.0, 0.01, SR)[0].value == 0.0
        assert cosine_wave(100.0, 2.0, 0.01, SR)[0].value == pytest.approx(2.0)

    def test_square_levels(self):
        values = wave_values(square_wave(100.0, 3.0, 0.02, SR))
        assert set(np.unique(values)) <= {-3.0, 3.0}
        assert np.mean(values > 0) == pytest.approx(0.5, abs=0.01)

    def test_pulse_duty_cycle(self):
        values = wave_values(pulse_wave(100.0, 1.0, 0.1, SR, duty_cycle=0.25))
        assert np.mean(values > 0) == pytest.approx(0.25, abs=0.01)

    def test_sawtooth_direction(self):
        rising = wave_values(sawtooth_wave(100.0, 1.0, 0.005, SR))
        falling = wave_values(inverse_sawtooth_wave(100.0, 1.0, 0.005, SR))
        assert rising[0] == pytest.approx(-1.0)
        assert falling[0] == pytest.approx(1.0)
        assert np.all(np.diff(rising[:200]) > 0)
        assert np.all(np.diff(falling[:200]) < 0)

    def test_triangle_shape(self):
        values = wave_values(triangle_wave(100.0, 1.0, 0.01, SR))
        assert values[0] == pytest.approx(0.0, abs=1e-9)
        # Quarter period of 100 Hz is 110.25 samples
        assert values[110] == pytest.approx(1.0, abs=0.01)
        assert values.max() <= 1.0 + 1e-9

    def test_square_fourier_approaches_square(self):
        exact = wave_values(square_wave(100.0, 1.0, 0.01, SR))
        approx = wave_values(square_wave_fourier(100.0, 1.0, 0.01, num_harmonics=30))
        # Away from the edges the series is close to the square wave
        assert np.median(np.abs(exact - approx / 0.8)) < 0.1

    def test_harmonic_wave(self):
        wave = harmonic_wave(100.0, [1.0, 0.0, 0.5], 1.0, 0.01, SR)
        t = np.array([p.t for p in wave])
        expected = 0.8 * (np.sin(2 * np.pi * 100 * t) + 0.5 * np.sin(2 * np.pi * 300 * t))
        assert_allclose(wave_values(wave), expected, atol=1e-12)

    def test_harmonic_wave_all_zero(self):
        wave = harmonic_wave(100.0, [0.0, 0.0], 1.0, 0.01, SR)
        assert len(wave) == int(np.floor(SR * 0.01))
        assert np.all(wave_values(wave) == 0.0)

    def test_combine_waves(self):
        a = sine_wave(100.0, 1.0, 0.01, SR)
        combined = combine_waves([a, a], amplitude_scaling=0.5)
        assert_allclose(wave_values(combined), wave_values(a))
        assert combine_waves([]) == []

    def test_fm_wave_bounded(self):
        values = wave_values(fm_wave(440.0, 5.0, 2.0, 1.0, 0.05, SR))
        assert np.abs(values).max() <= 1.0

    def test_white_noise(self):
        first = white_noise(0.5, 0.01, SR, seed=3)
        second = white_noise(0.5, 0.01, SR, seed=3)
        assert first == second
        assert np.abs(wave_values(first)).max() <= 0.5
        assert first[0].frequency is None

    def test_envelope(self):
        wave = sine_wave(100.0, 1.0, 0.1, SR)
        shaped = wave_values(apply_envelope(wave, 0.01, 0.01, 0.5, 0.02))
        original = wave_values(wave)
        assert shaped[0] == 0.0
        # Sustain region keeps half the amplitude
        middle = int(0.05 * SR)
        assert shaped[middle] == pytest.approx(0.5 * original[middle])
        assert apply_envelope([], 0.1, 0.1, 0.5, 0.1) == []

    def test_generate_dispatch(self):
        assert generate("sine", 100.0, 1.0, 0.01, SR) == sine_wave(100.0, 1.0, 0.01, SR)
        assert generate(WaveType.SQUARE, 100.0, 1.0, 0.01, SR) == square_wave(100.0, 1.0, 0.01, SR)

    def test_generate_unknown(self):
        with pytest.raises(ValueError):
            generate("noise", 100.0, 1.0, 0.01, SR)

    def test_invalid_frequency(self):
        with pytest.raises(ValueError):
            sine_wave(0.0, 1.0, 0.01, SR)
        with pytest.raises(ValueError):
            square_wave(100.0, 1.0, 0.01, sample_rate=0)


class TestBuffers:
    """Test buffer helpers."""

    def test_rms_of_sine(self):
        buffer = points_to_buffer(sine_wave(500.0, 1.0, 0.02, SR))
        assert rms(buffer) == pytest.approx(1 / np.sqrt(2), rel=1e-6)

    def test_rms_empty(self):
        assert rms([]) == 0.0
        assert peak_level([]) == 0.0

    def test_normalize(self):
        normalized = normalize_samples([0.1, -0.2, 0.05])
        assert peak_level(normalized) == pytest.approx(0.9)
        assert normalized[1] == pytest.approx(-0.9)

    def test_normalize_silence(self):
        assert np.all(normalize_samples(np.zeros(4)) == 0.0)

    def test_as_buffer_rejects_2d(self):
        with pytest.raises(ValueError):
            as_buffer(np.zeros((2, 2)))

    def test_duration(self):
        assert get_duration(np.zeros(44100), SR) == 1.0
        with pytest.raises(ValueError):
            get_duration(np.zeros(10), 0)
