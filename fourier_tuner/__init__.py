"""Fourier Tuner - Signal analysis engine for a wave visualizer and tuner.

Architecture Layers:
    1. core/       - Value objects, constants, note tables
    2. input/      - Synthetic wave generators and buffer helpers
    3. analysis/   - Fourier series, pitch detection, spectral peaks, accuracy
    4. processing/ - Stability filtering and the tuner loop
"""

__version__ = "0.1.0"

# Core types
from .core import (
    WavePoint,
    FourierCoefficients,
    SpectralPoint,
    NoteMatch,
    DetectedNote,
    AccuracyResult,
    PitchEstimate,
    NOT_DETECTED,
)

# Input layer
from .input import WaveType, generate

# Analysis layer
from .analysis import (
    FourierAnalyzer,
    ReconstructionCache,
    AMDFPitchDetector,
    FFTPeakPitchDetector,
    YINPitchDetector,
    SpectralPeakDetector,
    PeakDetectionConfig,
    NoteMapper,
    NoteStrategy,
    AccuracyEvaluator,
)

# Processing layer
from .processing import StabilityFilter, TunerSession, AnalysisLoop

__all__ = [
    # Core
    "WavePoint",
    "FourierCoefficients",
    "SpectralPoint",
    "NoteMatch",
    "DetectedNote",
    "AccuracyResult",
    "PitchEstimate",
    "NOT_DETECTED",
    # Input
    "WaveType",
    "generate",
    # Analysis
    "FourierAnalyzer",
    "ReconstructionCache",
    "AMDFPitchDetector",
    "FFTPeakPitchDetector",
    "YINPitchDetector",
    "SpectralPeakDetector",
    "PeakDetectionConfig",
    "NoteMapper",
    "NoteStrategy",
    "AccuracyEvaluator",
    # Processing
    "StabilityFilter",
    "TunerSession",
    "AnalysisLoop",
]
