"""Configuration classes for streaming CommerceML parsing.

This module provides configuration objects for the subtree collector, the
streaming token source and the parser as a whole.
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from .errors import StreamParserError

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class CollectorConfig:
    """Configuration for subtree collection."""

    strip_whitespace: bool = True
    collapse_text_nodes: bool = True  # Attribute-less leaf elements become plain text
    max_depth: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate collector configuration."""
        if self.max_depth is not None and self.max_depth <= 0:
            raise ValueError("max_depth must be > 0 or None")


@dataclass
class StreamingConfig:
    """Configuration for feeding the token source."""

    chunk_size: int = 65536
    encoding: Optional[str] = None
    keep_namespaces: bool = False
    progress_callback_interval: int = 10000
    enable_memory_tracking: bool = False
    memory_sample_interval: int = 1000

    def __post_init__(self) -> None:
        """Validate streaming configuration."""
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self.progress_callback_interval <= 0:
            raise ValueError("progress_callback_interval must be > 0")
        if self.memory_sample_interval <= 0:
            raise ValueError("memory_sample_interval must be > 0")


class ConfigError(StreamParserError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_COMPONENTS = ("collector", "streaming")


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for a streaming rule parser.

    Immutable, so one instance may be shared by parsers running on different
    threads.
    """

    collector: CollectorConfig = field(default_factory=CollectorConfig)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)
    logging_level: str = "INFO"
    correlation_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.collector.__post_init__()
            self.streaming.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ConfigValidationError(
                f"logging_level must be one of {VALID_LOGGING_LEVELS}",
                field_name="logging_level",
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Nested fields use double-underscore notation.

        Example:
            >>> config = ParserConfig().override(
            ...     streaming__chunk_size=4096,
            ...     collector__strip_whitespace=False,
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration section: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for key, value in nested_overrides.items():
                if key in _COMPONENTS and isinstance(value, dict):
                    new_fields[key] = replace(getattr(self, key), **value)
                else:
                    new_fields[key] = value
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration override: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for config_field in fields(self):
            value = getattr(self, config_field.name)
            if config_field.name in _COMPONENTS:
                value = {f.name: getattr(value, f.name) for f in fields(value)}
            result[config_field.name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Raises:
            ConfigValidationError: If the dictionary has unknown keys or bad values
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {sorted(unknown)}",
                suggestions=sorted(known),
            )

        values: Dict[str, Any] = dict(data)
        try:
            if "collector" in data:
                values["collector"] = CollectorConfig(**data["collector"])
            if "streaming" in data:
                values["streaming"] = StreamingConfig(**data["streaming"])
            return cls(**values)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Configuration is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def low_memory(cls) -> "ParserConfig":
        """Create configuration for constrained hosts with memory tracking."""
        return cls(
            streaming=StreamingConfig(
                chunk_size=8192,
                enable_memory_tracking=True,
            ),
            name="low_memory",
        )

    @classmethod
    def raw_text(cls) -> "ParserConfig":
        """Create configuration that keeps text content exactly as delivered."""
        return cls(
            collector=CollectorConfig(strip_whitespace=False),
            name="raw_text",
        )
