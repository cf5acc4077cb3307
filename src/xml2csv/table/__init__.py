"""Table layer for xml2csv.

Key Components:
    DiscardAnalyzer: Finds tag names that never carry information
    ColumnNamer: Assigns unique path-derived names to every leaf
    TableRenderer: Lays records out as quoted, delimited rows
    Table: Header plus row values
"""

from .discard import DiscardAnalyzer
from .naming import (
    ColumnCollision,
    ColumnNamer,
    ColumnTable,
    FinalColumnSet,
    NamingResult,
)
from .renderer import Table, TableRenderer, normalize_content

__all__ = [
    "ColumnCollision",
    "ColumnNamer",
    "ColumnTable",
    "DiscardAnalyzer",
    "FinalColumnSet",
    "NamingResult",
    "Table",
    "TableRenderer",
    "normalize_content",
]
