"""Processing layer - Per-cycle tuner logic.

This layer turns per-frame pitch estimates into readings:
- Stability (debounce) filtering
- The single analysis step of a tuner session
- The host loop with cancellation
"""

from .stability import StabilityFilter
from .session import TunerSession, AnalysisLoop, CancellationToken

__all__ = [
    "StabilityFilter",
    "TunerSession",
    "AnalysisLoop",
    "CancellationToken",
]
