"""Tests for pitch detection strategies and parabolic refinement."""

import numpy as np
import pytest

from fourier_tuner.analysis.notes import identify_note
from fourier_tuner.analysis.pitch import (
    AMDFPitchDetector,
    FFTPeakPitchDetector,
    YINPitchDetector,
    create_detector,
)
from fourier_tuner.analysis.refine import locate_and_refine, parabolic_offset, refine_at
from fourier_tuner.analysis.spectrum import magnitude_spectrum_db

SR = 44100


def tone(frequency, n_samples, amplitude=0.5, sr=SR):
    t = np.arange(n_samples) / sr
    return amplitude * np.sin(2 * np.pi * frequency * t)


class TestParabolicRefinement:
    """Test the shared locate-and-refine routine."""

    def test_symmetric_neighbours(self):
        assert parabolic_offset(1.0, 2.0, 1.0) == 0.0

    def test_vertex_offset(self):
        # y = -(x - 0.25)^2 sampled at -1, 0, 1
        ys = [-(x - 0.25) ** 2 for x in (-1, 0, 1)]
        assert parabolic_offset(*ys) == pytest.approx(0.25)

    def test_minimum_offset(self):
        ys = [(x + 0.3) ** 2 for x in (-1, 0, 1)]
        assert parabolic_offset(*ys) == pytest.approx(-0.3)

    def test_collinear(self):
        assert parabolic_offset(1.0, 2.0, 3.0) == 0.0

    def test_far_vertex_rejected(self):
        assert parabolic_offset(0.0, 1.0, 1.9) == 0.0

    def test_locate_max(self):
        scores = [0.0, 1.0, 3.0, 2.0, 0.0]
        peak = locate_and_refine(scores, 0, 4, mode="max")
        assert peak.index == 2
        assert peak.value == 3.0
        assert 2.0 < peak.position < 2.5

    def test_locate_min_ties_go_low(self):
        peak = locate_and_refine([5.0, 1.0, 1.0, 5.0], 0, 3, mode="min")
        assert peak.index == 1

    def test_no_refinement_at_edge(self):
        peak = locate_and_refine([3.0, 2.0, 1.0], 0, 2, mode="max")
        assert peak.index == 0
        assert peak.position == 0.0
        assert refine_at([3.0, 2.0, 1.0], 2, 0, 2) == 2.0

    def test_empty_range(self):
        assert locate_and_refine([1.0, 2.0], 5, 9) is None

    def test_bad_mode(self):
        with pytest.raises(ValueError):
            locate_and_refine([1.0, 2.0, 1.0], 0, 2, mode="peak")


class TestAMDFPitchDetector:
    """Test the time-domain detector."""

    @pytest.fixture
    def detector(self):
        return AMDFPitchDetector(sample_rate=SR)

    def test_a4(self, detector):
        estimate = detector.detect(tone(440.0, 4096))

        assert estimate is not None
        assert abs(estimate.frequency - 440.0) <= 1.0
        assert estimate.method == "amdf"
        assert estimate.confirmed
        assert 0.0 < estimate.confidence <= 1.0

        match = identify_note(estimate.frequency)
        assert match.note_name == "A4"
        assert abs(match.cents) <= 5

    @pytest.mark.parametrize("frequency", [110.0, 220.0, 329.63, 440.0, 659.25])
    def test_no_subharmonic(self, detector, frequency):
        """Multiples of the period must not win over the period itself."""
        estimate = detector.detect(tone(frequency, 4096))
        assert estimate is not None
        assert abs(estimate.frequency - frequency) <= 1.0

    def test_dc_offset_ignored(self, detector):
        estimate = detector.detect(tone(440.0, 4096) + 0.3)
        assert abs(estimate.frequency - 440.0) <= 1.0

    def test_silence(self, detector):
        assert detector.detect(np.zeros(4096)) is None
        assert detector.detect(tone(440.0, 4096, amplitude=0.005)) is None

    def test_empty(self, detector):
        assert detector.detect([]) is None

    def test_buffer_too_short(self, detector):
        assert detector.detect(tone(440.0, 30)) is None

    def test_noise_is_rejected(self, detector):
        rng = np.random.default_rng(0)
        assert detector.detect(rng.uniform(-1, 1, 4096)) is None

    def test_unconfirmed_halves_confidence(self):
        """A buffer too short for the doubled period is not confirmed."""
        detector = AMDFPitchDetector(sample_rate=SR, fmin=400.0, fmax=1500.0)
        estimate = detector.detect(tone(440.0, 150))
        assert estimate is not None
        assert not estimate.confirmed
        assert estimate.confidence <= 0.5

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            AMDFPitchDetector(sample_rate=0)
        with pytest.raises(ValueError):
            AMDFPitchDetector(fmin=500.0, fmax=100.0)

    def test_threshold_gates_global_minimum(self):
        """The shortest-lag candidate may score above the threshold when the minimum does not."""
        scores = {2: 1.0, 3: 0.6, 4: 0.25, 5: 0.6, 6: 1.0, 7: 0.5, 8: 0.15, 9: 0.5, 10: 1.0}

        class ScriptedAMDF(AMDFPitchDetector):
            def amdf(self, samples, period):
                return scores.get(period, 1.0)

        detector = ScriptedAMDF(
            sample_rate=1000, fmin=100.0, fmax=500.0, threshold=0.2, octave_tolerance=0.2
        )
        estimate = detector.detect(tone(250.0, 64, sr=1000))

        assert estimate is not None
        assert estimate.frequency == pytest.approx(250.0)
        assert estimate.confirmed


class TestFFTPeakPitchDetector:
    """Test the frequency-domain detector."""

    @pytest.fixture
    def detector(self):
        return FFTPeakPitchDetector(sample_rate=SR, fft_size=8192)

    def test_a4(self, detector):
        spectrum = magnitude_spectrum_db(tone(440.0, 8192), 8192)
        estimate = detector.detect(spectrum)

        assert estimate is not None
        assert abs(estimate.frequency - 440.0) <= 1.0
        assert estimate.confidence == 1.0

        match = identify_note(estimate.frequency)
        assert match.note_name == "A4"
        assert abs(match.cents) <= 5

    def test_refinement_beats_bin_resolution(self, detector):
        """440 Hz sits about a quarter of a bin away from the nearest bin centre."""
        spectrum = magnitude_spectrum_db(tone(440.0, 8192), 8192)
        nearest_bin = round(440.0 / detector.bin_width) * detector.bin_width
        estimate = detector.detect(spectrum)
        assert abs(estimate.frequency - 440.0) < abs(nearest_bin - 440.0)

    def test_detect_frame(self, detector):
        estimate = detector.detect_frame(tone(261.63, 8192))
        assert identify_note(estimate.frequency).note_name == "C4"

    def test_silence(self, detector):
        assert detector.detect(magnitude_spectrum_db(np.zeros(8192), 8192)) is None

    def test_empty_spectrum(self, detector):
        assert detector.detect([]) is None

    def test_out_of_range_peak_ignored(self):
        detector = FFTPeakPitchDetector(sample_rate=SR, fft_size=8192, fmax=1000.0)
        frame = tone(3000.0, 8192) + tone(440.0, 8192, amplitude=0.1)
        estimate = detector.detect_frame(frame)
        assert abs(estimate.frequency - 440.0) <= 1.0

    def test_dc_bin_never_reported(self):
        spectrum = np.full(1024, -120.0)
        spectrum[0] = 0.0
        detector = FFTPeakPitchDetector(sample_rate=SR, fft_size=2048)
        assert detector.detect(spectrum) is None

    def test_dc_offset_frame(self):
        detector = FFTPeakPitchDetector(sample_rate=SR, fft_size=2048)
        estimate = detector.detect_frame(tone(440.0, 2048) + 0.3)

        assert estimate is not None
        assert estimate.frequency > 0
        assert abs(estimate.frequency - 440.0) <= 3.0

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            FFTPeakPitchDetector(fmin=2000.0, fmax=20.0)
        with pytest.raises(ValueError):
            FFTPeakPitchDetector(fmin=0.0)
        with pytest.raises(ValueError):
            FFTPeakPitchDetector(fft_size=0)


class TestYINPitchDetector:
    """Test the librosa YIN strategy."""

    @pytest.fixture
    def detector(self):
        return YINPitchDetector(sample_rate=SR, frame_length=4096)

    def test_a4(self, detector):
        estimate = detector.detect(tone(440.0, 16384))
        assert estimate is not None
        assert abs(estimate.frequency - 440.0) <= 2.0
        assert estimate.method == "yin"

    def test_short_buffer(self, detector):
        assert detector.detect(tone(440.0, 1024)) is None

    def test_silence(self, detector):
        assert detector.detect(np.zeros(16384)) is None


class TestCreateDetector:
    def test_known_methods(self):
        assert isinstance(create_detector("amdf"), AMDFPitchDetector)
        assert isinstance(create_detector("fft", fft_size=4096), FFTPeakPitchDetector)
        assert isinstance(create_detector("yin"), YINPitchDetector)

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            create_detector("autocorrelation")
