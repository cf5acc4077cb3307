"""Developer tools for xml2csv.

This module provides pipeline profiling and tree inspection helpers.
"""

from .debugging import describe_node, format_tree, iter_tree_lines, print_tree
from .profiling import PipelineProfiler, ProfilingSession, StageProfiler, StageTiming

__all__ = [
    "PipelineProfiler",
    "ProfilingSession",
    "StageProfiler",
    "StageTiming",
    "describe_node",
    "format_tree",
    "iter_tree_lines",
    "print_tree",
]
