"""Analysis layer - Numeric signal analysis.

This layer turns buffers and spectra into plain result records:
- Fourier series decomposition and reconstruction
- Pitch detection (AMDF, FFT peak, YIN)
- Spectral peak detection
- Note mapping
- Reconstruction accuracy
"""

from .accuracy import AccuracyEvaluator, accuracy, nearest_index, resample_nearest
from .cache import ReconstructionCache, fingerprint
from .fourier import (
    FourierAnalyzer,
    to_amplitude_phase,
    from_amplitude_phase,
    spectral_points,
    filter_coefficients,
    dominant_harmonics,
    power_spectrum,
)
from .notes import NoteMapper, NoteStrategy, identify_note, nearest_in_table, cents_between
from .peaks import PeakDetectionConfig, SpectralPeakDetector
from .pitch import (
    PitchDetector,
    AMDFPitchDetector,
    FFTPeakPitchDetector,
    YINPitchDetector,
    create_detector,
)
from .refine import RefinedExtremum, parabolic_offset, locate_and_refine
from .spectrum import (
    db_to_linear,
    linear_to_db,
    magnitude_spectrum_db,
    spectrum_to_points,
    find_harmonics,
)

__all__ = [
    "AccuracyEvaluator",
    "accuracy",
    "nearest_index",
    "resample_nearest",
    "ReconstructionCache",
    "fingerprint",
    "FourierAnalyzer",
    "to_amplitude_phase",
    "from_amplitude_phase",
    "spectral_points",
    "filter_coefficients",
    "dominant_harmonics",
    "power_spectrum",
    "NoteMapper",
    "NoteStrategy",
    "identify_note",
    "nearest_in_table",
    "cents_between",
    "PeakDetectionConfig",
    "SpectralPeakDetector",
    "PitchDetector",
    "AMDFPitchDetector",
    "FFTPeakPitchDetector",
    "YINPitchDetector",
    "create_detector",
    "RefinedExtremum",
    "parabolic_offset",
    "locate_and_refine",
    "db_to_linear",
    "linear_to_db",
    "magnitude_spectrum_db",
    "spectrum_to_points",
    "find_harmonics",
]
