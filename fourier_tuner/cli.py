"""Command-line interface for Fourier Tuner.

Drives the analysis engine on synthetic signals:
- note: Name a frequency with both lookup strategies
- decompose: Fourier coefficients and reconstruction accuracy of a wave
- tune: Run the tuner loop over generated frames
- chord: Spectral peaks of a generated chord
"""

import logging
from typing import List, Optional

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core import EXTENDED_NOTE_FREQUENCIES, MAX_HARMONICS, SAMPLE_RATE

app = typer.Typer(
    name="fourier-tuner",
    help="Fourier analysis, pitch detection and tuning on synthetic signals",
    rich_markup_mode="markdown",
)
console = Console()


@app.callback()
def main_options(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show per-frame debug logging"
    ),
):
    """Fourier Tuner developer tools."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


@app.command()
def note(
    frequency: float = typer.Argument(..., help="Frequency in Hz"),
    reference: float = typer.Option(440.0, "--reference", "-r", help="Reference A4 in Hz"),
):
    """Name a frequency by MIDI formula and by nearest table entry."""
    from .analysis import NoteMapper, NoteStrategy

    if frequency <= 0 or reference <= 0:
        console.print("[red]Error: frequency and reference must be positive[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{frequency:.2f} Hz")
    table.add_column("Strategy", style="cyan")
    table.add_column("Note", style="green")
    table.add_column("Cents", style="yellow")

    for strategy in NoteStrategy:
        mapper = NoteMapper(strategy=strategy, reference_a4=reference)
        match = mapper.map(frequency)
        table.add_row(strategy.value, match.note_name, f"{match.cents:+d}")

    console.print(table)


@app.command()
def decompose(
    wave: str = typer.Option("square", "--wave", "-w", help="Wave type (sine, square, sawtooth, ...)"),
    frequency: float = typer.Option(500.0, "--frequency", "-f", help="Fundamental in Hz"),
    amplitude: float = typer.Option(10000.0, "--amplitude", "-a", help="Peak amplitude"),
    duration: float = typer.Option(0.01, "--duration", "-d", help="Duration in seconds"),
    harmonics: int = typer.Option(MAX_HARMONICS, "--harmonics", "-n", help="Harmonics to compute"),
    use: Optional[int] = typer.Option(
        None, "--use", "-u", help="Harmonics used for reconstruction (default: all)"
    ),
    top: int = typer.Option(10, "--top", help="Harmonics shown in the table"),
):
    """Decompose a generated wave and score its reconstruction."""
    from .analysis import AccuracyEvaluator, FourierAnalyzer, to_amplitude_phase
    from .input import WaveType, generate

    valid = [w.value for w in WaveType]
    if wave not in valid:
        console.print(f"[red]Error: Unknown wave '{wave}'. Valid: {', '.join(valid)}[/red]")
        raise typer.Exit(1)

    try:
        original = generate(wave, frequency, amplitude, duration)
        analyzer = FourierAnalyzer()
        coefficients = analyzer.decompose(original, frequency, max_harmonics=harmonics)
        used = harmonics if use is None else use
        rebuilt = analyzer.reconstruct(coefficients, duration, frequency, used)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    result = AccuracyEvaluator().evaluate(original, rebuilt)

    console.print(f"\n[bold]{wave.title()} wave:[/bold] {frequency:g} Hz, {len(original)} samples")
    console.print(f"  DC: {coefficients.a0:.4f}")

    table = Table(title="Harmonics")
    table.add_column("n", style="cyan")
    table.add_column("Frequency (Hz)", style="green")
    table.add_column("Amplitude", style="yellow")
    table.add_column("Phase (rad)", style="magenta")

    rows = to_amplitude_phase(coefficients)[1:]
    rows.sort(key=lambda row: row["amplitude"], reverse=True)
    for row in rows[:top]:
        table.add_row(
            str(row["harmonic"]),
            f"{row['harmonic'] * frequency:.1f}",
            f"{row['amplitude']:.4f}",
            f"{row['phase']:.3f}",
        )
    console.print(table)

    console.print(f"  Reconstruction with {min(used, harmonics)} harmonics")
    console.print(f"  MSE: {result.mse:.4f}")
    console.print(f"  [green]Accuracy: {result.accuracy_percent:.2f}%[/green]")


@app.command()
def tune(
    frequency: float = typer.Option(440.0, "--frequency", "-f", help="Tone frequency in Hz"),
    method: str = typer.Option("amdf", "--method", "-m", help="Pitch method: amdf, fft or yin"),
    cycles: int = typer.Option(5, "--cycles", "-c", help="Frames to analyze"),
    noise: float = typer.Option(0.0, "--noise", help="Noise amplitude added to each frame"),
    amplitude: float = typer.Option(0.5, "--amplitude", "-a", help="Tone amplitude"),
    frame_size: int = typer.Option(4096, "--frame-size", help="Samples per frame"),
    reference: float = typer.Option(440.0, "--reference", "-r", help="Reference A4 in Hz"),
):
    """Run synthetic frames through the tuner loop."""
    from .analysis import NoteMapper, create_detector
    from .input import sine_wave, white_noise
    from .input.buffers import points_to_buffer
    from .processing import AnalysisLoop, TunerSession

    try:
        kwargs = {"fft_size": frame_size} if method == "fft" else {}
        detector = create_detector(method, SAMPLE_RATE, **kwargs)
        duration = frame_size / SAMPLE_RATE
        tone = points_to_buffer(sine_wave(frequency, amplitude, duration))
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    def frames():
        for i in range(cycles):
            if noise > 0:
                yield tone + points_to_buffer(white_noise(noise, duration, seed=i))
            else:
                yield tone

    session = TunerSession(detector, NoteMapper(reference_a4=reference))
    loop = AnalysisLoop(session.analyze_once)
    readings = loop.run(frames())

    table = Table(title=f"Tuner ({method})")
    table.add_column("Cycle", style="cyan")
    table.add_column("Volume", style="blue")
    table.add_column("Frequency (Hz)", style="green")
    table.add_column("Note", style="yellow")
    table.add_column("Stable", style="magenta")

    for i, reading in enumerate(readings, start=1):
        if reading.estimate is None:
            table.add_row(str(i), f"{reading.volume:.3f}", "-", "-", "-")
            continue
        note_text = f"{reading.raw_note.note_name} {reading.raw_note.cents:+d}c"
        stable = reading.stable_note.note_name if reading.stable_note else ""
        table.add_row(
            str(i),
            f"{reading.volume:.3f}",
            f"{reading.estimate.frequency:.2f}",
            note_text,
            stable,
        )

    console.print(table)


@app.command()
def chord(
    frequencies: List[float] = typer.Argument(..., help="Chord tone frequencies in Hz"),
    fft_size: int = typer.Option(8192, "--fft-size", help="FFT length (power of two)"),
    max_peaks: int = typer.Option(5, "--max-peaks", help="Peaks to report (up to 12)"),
    harmonics: bool = typer.Option(False, "--harmonics", help="Show the harmonic profile of the lowest peak"),
):
    """Detect the notes of a generated chord from its spectrum."""
    from .analysis import (
        PeakDetectionConfig,
        SpectralPeakDetector,
        find_harmonics,
        magnitude_spectrum_db,
        spectrum_to_points,
    )
    from .input import sine_wave
    from .input.buffers import points_to_buffer

    duration = fft_size / SAMPLE_RATE
    try:
        config = PeakDetectionConfig(max_peaks=max_peaks)
        buffer = np.zeros(fft_size)
        for f in frequencies:
            tone = points_to_buffer(sine_wave(f, 0.3, duration))[:fft_size]
            buffer[: len(tone)] += tone
        spectrum_db = magnitude_spectrum_db(buffer, fft_size)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    points = spectrum_to_points(spectrum_db, SAMPLE_RATE, fft_size)
    peaks = SpectralPeakDetector(config).find_peaks(points, EXTENDED_NOTE_FREQUENCIES)

    if not peaks:
        console.print("[yellow]No peaks detected![/yellow]")
        return

    _show_peaks_table(peaks)

    if harmonics:
        profile = find_harmonics(spectrum_db, SAMPLE_RATE, fft_size, peaks[0].frequency)
        table = Table(title=f"Harmonics of {peaks[0].note_name}")
        table.add_column("n", style="cyan")
        table.add_column("Frequency (Hz)", style="green")
        table.add_column("Relative (%)", style="yellow")
        for h in profile:
            table.add_row(str(h.harmonic), f"{h.frequency:.1f}", f"{h.relative_amplitude:.1f}")
        console.print(table)


def _show_peaks_table(peaks):
    """Display detected peaks in a table."""
    table = Table(title="Detected Notes")
    table.add_column("Note", style="cyan")
    table.add_column("Frequency (Hz)", style="green")
    table.add_column("Cents", style="yellow")
    table.add_column("Amplitude", style="magenta")

    for peak in peaks:
        table.add_row(
            peak.note_name,
            f"{peak.frequency:.2f}",
            f"{peak.cents:+d}",
            f"{peak.amplitude:.4f}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
