"""Shared utilities for XML navigation and search.

This module provides the permissive tag comparison, configuration objects,
diagnostic types and logging helpers used across all components.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ExtractionConfig,
    GlobalConfig,
    NavigatorConfig,
    SearchConfig,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .matching import (
    fold_case,
    local_name,
    namespace_prefix,
    tags_match,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ExtractionConfig",
    "GlobalConfig",
    "NavigatorConfig",
    "SearchConfig",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "fold_case",
    "local_name",
    "namespace_prefix",
    "tags_match",
    "DiagnosticEntry",
    "DiagnosticSeverity",
]
