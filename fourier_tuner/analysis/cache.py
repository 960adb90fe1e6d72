"""Bounded LRU cache for waveform reconstructions.

Interactive views ask for the same reconstruction over and over while a
slider moves, so ``FourierAnalyzer`` can be given one of these. The cache is
owned by whoever injects it; there is no module-level instance.
"""

import hashlib
import logging
from collections import OrderedDict
from threading import Lock
from typing import Generic, Hashable, Optional, Sequence, TypeVar

import numpy as np

logger = logging.getLogger(__name__)

V = TypeVar("V")


def fingerprint(
    a0: float,
    a: Sequence[float],
    b: Sequence[float],
    duration: float,
    frequency: float,
    num_harmonics: int,
    sample_rate: int,
) -> str:
    """Cache key for a reconstruction request.

    Hashes the request parameters and every coefficient that takes part in
    the reconstruction, so coefficient sets differing only in a high
    harmonic get different keys.

    Args:
        a0: DC term
        a: Cosine terms actually used (already truncated to num_harmonics)
        b: Sine terms actually used
        duration: Duration in seconds
        frequency: Fundamental in Hz
        num_harmonics: Harmonic count actually used
        sample_rate: Output sample rate

    Returns:
        Hex-encoded SHA-256 digest
    """
    digest = hashlib.sha256()
    digest.update(f"{duration!r}|{frequency!r}|{sample_rate!r}|{num_harmonics}".encode())
    digest.update(np.asarray([a0], dtype=np.float64).tobytes())
    digest.update(np.asarray(a, dtype=np.float64).tobytes())
    digest.update(np.asarray(b, dtype=np.float64).tobytes())
    return digest.hexdigest()


class ReconstructionCache(Generic[V]):
    """Thread-safe LRU cache.

    Args:
        max_size: Maximum number of entries (default: 128)
    """

    def __init__(self, max_size: int = 128):
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self.hits = 0
        self.misses = 0
        self._entries: "OrderedDict[Hashable, V]" = OrderedDict()
        self._lock = Lock()

    def get(self, key: Hashable) -> Optional[V]:
        """Return the cached value and mark it recently used, or None."""
        with self._lock:
            if key not in self._entries:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return self._entries[key]

    def put(self, key: Hashable, value: V) -> None:
        """Store a value, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted reconstruction %s", str(evicted)[:12])
            self._entries[key] = value

    def clear(self) -> None:
        """Drop all entries (session end, harmonic range change)."""
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        return self.size()
