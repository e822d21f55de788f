"""Developer tools for streaming runs."""

from .memory import MemorySample, MemoryTracker

__all__ = [
    "MemorySample",
    "MemoryTracker",
]
