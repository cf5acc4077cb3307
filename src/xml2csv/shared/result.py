"""Result objects and diagnostic types for xml2csv.

This module defines the diagnostic entries and performance counters that
accompany every conversion.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Output is valid but may surprise the reader
    ERROR = auto()      # Conversion failed


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
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
class PerformanceMetrics:
    """Counters and timings collected over one conversion."""

    processing_time_ms: float = 0.0
    memory_used_bytes: int = 0
    bytes_processed: int = 0
    tokens_generated: int = 0
    nodes_created: int = 0
    columns_discovered: int = 0
    columns_discarded: int = 0
    rows_emitted: int = 0

    @property
    def bytes_per_second(self) -> float:
        """Calculate input bytes processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_processed * 1000.0) / self.processing_time_ms

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens generated per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_generated * 1000.0) / self.processing_time_ms

    @property
    def discard_rate(self) -> float:
        """Fraction of discovered columns removed by the discard policy."""
        if self.columns_discovered == 0:
            return 0.0
        return self.columns_discarded / self.columns_discovered

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to a plain dictionary."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "memory_used_bytes": self.memory_used_bytes,
            "bytes_processed": self.bytes_processed,
            "tokens_generated": self.tokens_generated,
            "nodes_created": self.nodes_created,
            "columns_discovered": self.columns_discovered,
            "columns_discarded": self.columns_discarded,
            "rows_emitted": self.rows_emitted,
            "bytes_per_second": self.bytes_per_second,
            "tokens_per_second": self.tokens_per_second,
            "discard_rate": self.discard_rate,
        }
