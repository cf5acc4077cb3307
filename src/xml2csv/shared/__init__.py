"""Shared utilities for xml2csv.

This module provides shared configuration objects, result types, errors and
logging helpers used across all pipeline stages.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)
from .config import (
    PRESETS,
    ConfigError,
    ConfigValidationError,
    ConverterConfig,
    DiscardPolicy,
    GlobalConfig,
    NamingConfig,
    RenderConfig,
    TokenizerConfig,
    TreeConfig,
)
from .errors import (
    InputReadError,
    MismatchedCloseError,
    StructuralError,
    UnclosedTagError,
    UnexpectedTagError,
    UnterminatedTagError,
    XML2CSVError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "PRESETS",
    "ConfigError",
    "ConfigValidationError",
    "ConverterConfig",
    "DiscardPolicy",
    "GlobalConfig",
    "NamingConfig",
    "RenderConfig",
    "TokenizerConfig",
    "TreeConfig",
    "InputReadError",
    "MismatchedCloseError",
    "StructuralError",
    "UnclosedTagError",
    "UnexpectedTagError",
    "UnterminatedTagError",
    "XML2CSVError",
    "CorrelationLogger",
    "get_logger",
]
