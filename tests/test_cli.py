"""Tests for the command-line interface."""

from typer.testing import CliRunner

from fourier_tuner.cli import app

runner = CliRunner()


class TestNoteCommand:
    def test_a4(self):
        result = runner.invoke(app, ["note", "440"])
        assert result.exit_code == 0
        assert "A4" in result.output
        assert "midi" in result.output
        assert "table" in result.output

    def test_invalid_frequency(self):
        result = runner.invoke(app, ["note", "0"])
        assert result.exit_code == 1


class TestDecomposeCommand:
    def test_square_wave(self):
        result = runner.invoke(app, ["decompose", "--wave", "square", "--harmonics", "20"])
        assert result.exit_code == 0
        assert "Accuracy" in result.output

    def test_truncated_reconstruction(self):
        result = runner.invoke(app, ["decompose", "--harmonics", "10", "--use", "3"])
        assert result.exit_code == 0
        assert "3 harmonics" in result.output

    def test_unknown_wave(self):
        result = runner.invoke(app, ["decompose", "--wave", "noise"])
        assert result.exit_code == 1


class TestTuneCommand:
    def test_amdf(self):
        result = runner.invoke(app, ["tune", "--frequency", "440", "--cycles", "3"])
        assert result.exit_code == 0
        assert "A4" in result.output

    def test_fft_with_noise(self):
        result = runner.invoke(
            app,
            ["tune", "--method", "fft", "--frame-size", "8192", "--noise", "0.01", "--cycles", "3"],
        )
        assert result.exit_code == 0
        assert "A4" in result.output

    def test_unknown_method(self):
        result = runner.invoke(app, ["tune", "--method", "zero-crossing"])
        assert result.exit_code == 1

    def test_verbose(self):
        result = runner.invoke(app, ["--verbose", "tune", "--cycles", "1"])
        assert result.exit_code == 0


class TestChordCommand:
    def test_octave(self):
        result = runner.invoke(app, ["chord", "440", "880"])
        assert result.exit_code == 0
        assert "A4" in result.output
        assert "A5" in result.output

    def test_harmonic_profile(self):
        result = runner.invoke(app, ["chord", "220", "--harmonics"])
        assert result.exit_code == 0
        assert "Harmonics of A3" in result.output

    def test_bad_fft_size(self):
        result = runner.invoke(app, ["chord", "440", "--fft-size", "1000"])
        assert result.exit_code == 1
