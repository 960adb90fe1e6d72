"""Global constants for Fourier Tuner."""

# Pitch names
NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Audio processing defaults
SAMPLE_RATE = 44100
DEFAULT_FFT_SIZE = 2048

# Fourier series defaults
MAX_HARMONICS = 50
DEFAULT_HARMONICS = 10

# Frequency ranges (Hz)
MIN_FREQUENCY = 20.0
MAX_ANALYSIS_FREQUENCY = 2000.0
MAX_PEAK_FREQUENCY = 5000.0

# Tuning
REFERENCE_A4 = 440.0
A4_MIDI = 69

# Time-domain pitch search
PITCH_FMIN = 50.0
PITCH_FMAX = 1500.0
AMDF_THRESHOLD = 0.2
MIN_SIGNAL_LEVEL = 0.01  # peak level below which a buffer counts as silence

# Frequency-domain pitch search
SPECTRUM_NOISE_FLOOR = 0.001

# Real-time tuner
VOLUME_THRESHOLD = 0.01  # RMS
NOTE_STABILITY_THRESHOLD = 3  # repeats of a note after its first sighting before display
