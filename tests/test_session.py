"""Tests for stability filtering, the tuner step and the analysis loop."""

import numpy as np
import pytest

from fourier_tuner.core import NoteMatch, PitchEstimate
from fourier_tuner.analysis.pitch import AMDFPitchDetector, FFTPeakPitchDetector, PitchDetector
from fourier_tuner.processing import AnalysisLoop, StabilityFilter, TunerSession

SR = 44100


def tone(frequency, n_samples=4096, amplitude=0.5):
    t = np.arange(n_samples) / SR
    return amplitude * np.sin(2 * np.pi * frequency * t)


class ScriptedDetector(PitchDetector):
    """Returns a fixed sequence of frequencies (None = not detected)."""

    def __init__(self, frequencies):
        super().__init__(SR)
        self.frequencies = list(frequencies)

    def detect(self, data):
        frequency = self.frequencies.pop(0)
        if frequency is None:
            return None
        return PitchEstimate(frequency=frequency, method="scripted")


class TestStabilityFilter:
    """Test the debounce rule."""

    def test_three_repeats_after_first_sighting(self):
        stability = StabilityFilter(required=3)
        a4 = NoteMatch("A4", 0)
        assert [stability.update(a4) for _ in range(5)] == [False, False, False, True, True]

    def test_change_restarts_run(self):
        stability = StabilityFilter(required=3)
        stability.update(NoteMatch("A4", 0))
        stability.update(NoteMatch("A4", 0))
        assert stability.update(NoteMatch("B4", 0)) is False
        assert stability.count == 0
        stability.update(NoteMatch("B4", 0))
        stability.update(NoteMatch("B4", 0))
        assert stability.update(NoteMatch("B4", 0)) is True

    def test_cents_do_not_matter(self):
        stability = StabilityFilter(required=1)
        stability.update(NoteMatch("A4", -3))
        assert stability.update(NoteMatch("A4", 4)) is True

    def test_none_resets(self):
        stability = StabilityFilter(required=2)
        stability.update(NoteMatch("A4", 0))
        assert stability.update(None) is False
        assert stability.count == 0
        assert stability.update(NoteMatch("A4", 0)) is False
        assert not stability.stable

    def test_invalid_required(self):
        with pytest.raises(ValueError):
            StabilityFilter(required=0)


class TestTunerSession:
    """Test the single analysis step."""

    def test_stable_on_fourth_frame(self):
        session = TunerSession(AMDFPitchDetector(sample_rate=SR))
        readings = [session.analyze_once(tone(440.0)) for _ in range(4)]

        assert all(r.raw_note.note_name == "A4" for r in readings)
        assert all(r.stable_note is None for r in readings[:3])
        assert readings[3].stable_note.note_name == "A4"
        assert abs(readings[3].stable_note.frequency - 440.0) <= 1.0
        assert readings[3].stable_note.amplitude == pytest.approx(readings[3].volume)

    def test_quiet_frame(self):
        session = TunerSession(ScriptedDetector([440.0, 440.0]))
        session.analyze_once(tone(440.0))
        reading = session.analyze_once(tone(440.0, amplitude=0.001))

        assert reading.estimate is None
        assert not reading.detected
        assert session.stability.count == 0

    def test_not_detected_resets(self):
        session = TunerSession(ScriptedDetector([440.0, None, 440.0, 440.0, 440.0, 440.0]))
        readings = [session.analyze_once(tone(440.0)) for _ in range(6)]

        assert readings[1].estimate is None
        assert readings[4].stable_note is None
        assert readings[5].stable_note.note_name == "A4"

    def test_fft_detector_with_dc_offset(self):
        session = TunerSession(FFTPeakPitchDetector(sample_rate=SR, fft_size=2048))
        reading = session.analyze_once(tone(440.0, n_samples=2048) + 0.3)

        assert reading.detected
        assert reading.raw_note.note_name == "A4"

    def test_zero_frequency_is_not_detected(self):
        session = TunerSession(ScriptedDetector([440.0, 0.0]))
        session.analyze_once(tone(440.0))
        reading = session.analyze_once(tone(440.0))

        assert reading.estimate is None
        assert session.stability.count == 0
        assert session.stability.current is None

    def test_reset(self):
        session = TunerSession(ScriptedDetector([440.0, 440.0, 440.0]))
        session.analyze_once(tone(440.0))
        session.analyze_once(tone(440.0))
        session.reset()
        assert session.analyze_once(tone(440.0)).stable_note is None


class TestAnalysisLoop:
    """Test the host loop and cancellation."""

    def test_tick_runs_step(self):
        loop = AnalysisLoop(lambda frame: sum(frame))
        token = loop.start()
        assert loop.tick(token, [1, 2, 3]) == 6

    def test_stale_token_is_noop(self):
        calls = []
        loop = AnalysisLoop(calls.append)
        token = loop.start()
        loop.stop()

        assert loop.tick(token, [1]) is None
        assert calls == []

    def test_restart_invalidates_old_token(self):
        calls = []
        loop = AnalysisLoop(calls.append)
        old = loop.start()
        loop.stop()
        new = loop.start()

        loop.tick(old, "old")
        loop.tick(new, "new")
        assert calls == ["new"]

    def test_reentrant_tick(self):
        holder = {}

        def step(frame):
            return loop.tick(holder["token"], frame)

        loop = AnalysisLoop(step)
        holder["token"] = loop.start()
        with pytest.raises(RuntimeError):
            loop.tick(holder["token"], [0])

    def test_run(self):
        loop = AnalysisLoop(len)
        assert loop.run([[1], [1, 2], [1, 2, 3]]) == [1, 2, 3]
        assert not loop.active

    def test_stop_during_run(self):
        def step(frame):
            if frame == 2:
                loop.stop()
            return frame

        loop = AnalysisLoop(step)
        assert loop.run(iter([1, 2, 3, 4])) == [1, 2]

    def test_run_with_tuner(self):
        session = TunerSession(AMDFPitchDetector(sample_rate=SR))
        loop = AnalysisLoop(session.analyze_once)
        readings = loop.run(tone(440.0) for _ in range(4))
        assert readings[-1].stable_note.note_name == "A4"
