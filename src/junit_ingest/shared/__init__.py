"""Shared utilities for JUnit report ingestion.

This module provides the configuration objects, exception hierarchy and
logging helpers used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    DurationPolicy,
    IngestConfig,
    MappingConfig,
)
from .errors import (
    ContentError,
    DurationError,
    EntityError,
    IngestError,
    ParseError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "DurationPolicy",
    "IngestConfig",
    "MappingConfig",
    "ContentError",
    "DurationError",
    "EntityError",
    "IngestError",
    "ParseError",
    "CorrelationLogger",
    "get_logger",
]
