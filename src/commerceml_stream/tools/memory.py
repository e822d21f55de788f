"""Process memory tracking for streaming runs.

Streaming keeps memory bounded by the largest open subtree, not by document
size. :class:`MemoryTracker` samples the resident set size of the current
process so that bound can be observed on real files.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import psutil

from commerceml_stream.shared.logging import get_logger

BYTES_PER_MB = 1024 * 1024


@dataclass
class MemorySample:
    """Single resident memory measurement."""

    resident_memory_mb: float
    events_processed: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resident_memory_mb": self.resident_memory_mb,
            "events_processed": self.events_processed,
            "timestamp": self.timestamp,
        }


class MemoryTracker:
    """Samples process RSS every ``sample_interval`` events and keeps the peak.

    Examples:
        >>> tracker = MemoryTracker(sample_interval=1000)
        >>> tracker.maybe_sample(1000)
        >>> tracker.peak_mb is not None
        True
    """

    def __init__(
        self,
        sample_interval: int = 1000,
        max_history: int = 100,
        correlation_id: Optional[str] = None
    ) -> None:
        if sample_interval <= 0:
            raise ValueError("sample_interval must be > 0")
        self.sample_interval = sample_interval
        self.max_history = max_history
        self.peak_mb: Optional[float] = None
        self.history: List[MemorySample] = []
        self._process = psutil.Process()
        self.logger = get_logger(__name__, correlation_id, "memory_tracker")

    def sample(self, events_processed: int = 0) -> MemorySample:
        """Measure resident memory now."""
        rss_mb = self._process.memory_info().rss / BYTES_PER_MB
        sample = MemorySample(resident_memory_mb=rss_mb, events_processed=events_processed)
        if self.peak_mb is None or rss_mb > self.peak_mb:
            self.peak_mb = rss_mb
        self.history.append(sample)
        if len(self.history) > self.max_history:
            del self.history[0]
        return sample

    def maybe_sample(self, events_processed: int) -> None:
        """Sample when ``events_processed`` reaches the next interval boundary."""
        if events_processed % self.sample_interval == 0:
            sample = self.sample(events_processed)
            self.logger.debug(
                "Memory sample",
                extra={
                    "rss_mb": sample.resident_memory_mb,
                    "events_processed": events_processed,
                },
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "peak_mb": self.peak_mb,
            "samples": [s.to_dict() for s in self.history],
        }
