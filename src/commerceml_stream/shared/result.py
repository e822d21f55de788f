"""Result objects and diagnostic types for streaming runs.

This module defines the metrics collected by a parser instance while it consumes
events, and the result object returned by the high-level ``parse_*`` helpers.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CRITICAL = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class StreamMetrics:
    """Counters describing one streaming run."""

    events_processed: int = 0
    elements_seen: int = 0
    text_events: int = 0
    matches_activated: int = 0
    records_emitted: Dict[str, int] = field(default_factory=dict)
    max_depth: int = 0
    peak_active_matches: int = 0
    peak_buffered_nodes: int = 0
    processing_time_ms: float = 0.0
    bytes_read: int = 0
    peak_rss_mb: Optional[float] = None

    @property
    def total_records(self) -> int:
        """Total records emitted across all rules."""
        return sum(self.records_emitted.values())

    @property
    def events_per_second(self) -> float:
        """Calculate events processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_processed * 1000.0) / self.processing_time_ms

    def record_emission(self, rule_name: str) -> None:
        """Count one emitted record for a rule."""
        self.records_emitted[rule_name] = self.records_emitted.get(rule_name, 0) + 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary representation."""
        return {
            "events_processed": self.events_processed,
            "elements_seen": self.elements_seen,
            "text_events": self.text_events,
            "matches_activated": self.matches_activated,
            "records_emitted": dict(self.records_emitted),
            "total_records": self.total_records,
            "max_depth": self.max_depth,
            "peak_active_matches": self.peak_active_matches,
            "peak_buffered_nodes": self.peak_buffered_nodes,
            "processing_time_ms": self.processing_time_ms,
            "events_per_second": self.events_per_second,
            "bytes_read": self.bytes_read,
            "peak_rss_mb": self.peak_rss_mb,
        }


@dataclass
class RunResult:
    """Outcome of a complete streaming run."""

    success: bool = True
    cancelled: bool = False
    records: Dict[str, List[Any]] = field(default_factory=dict)
    metrics: StreamMetrics = field(default_factory=StreamMetrics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    error: Optional[BaseException] = None
    correlation_id: Optional[str] = None

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add a diagnostic entry to the result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics filtered by severity level."""
        return [d for d in self.diagnostics if d.severity == severity]

    @property
    def has_errors(self) -> bool:
        """Check if any error-level diagnostics exist."""
        return any(
            d.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for d in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get summary of run results."""
        return {
            "success": self.success,
            "cancelled": self.cancelled,
            "record_counts": {name: len(items) for name, items in self.records.items()},
            "metrics": self.metrics.to_dict(),
            "diagnostic_count": len(self.diagnostics),
            "has_errors": self.has_errors,
            "error": str(self.error) if self.error else None,
        }
