"""Shared utilities for streaming CommerceML parsing.

This module provides the configuration objects, result types, error hierarchy and
logging helpers used across all processing layers.
"""

from .config import (
    CollectorConfig,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    StreamingConfig,
)
from .errors import (
    DuplicateRuleError,
    ListenerError,
    MappingError,
    ReentrancyError,
    RuleError,
    StreamParserError,
    StructuralError,
    TokenizerError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    RunResult,
    StreamMetrics,
)

__all__ = [
    "CollectorConfig",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "StreamingConfig",
    "DuplicateRuleError",
    "ListenerError",
    "MappingError",
    "ReentrancyError",
    "RuleError",
    "StreamParserError",
    "StructuralError",
    "TokenizerError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "RunResult",
    "StreamMetrics",
]
