"""Tree building layer for xml2csv.

Key Components:
    XMLTreeBuilder: Rebuilds the element tree from tag tokens
    Node: One element in first-child / next-sibling form
    ContentStats: Distinct leaf values per tag name
    BuildResult: Root node, statistics and counters
"""

from .builder import (
    BuildResult,
    ContentStats,
    Node,
    XMLTreeBuilder,
    iter_children,
    iter_subtree,
)

__all__ = [
    "BuildResult",
    "ContentStats",
    "Node",
    "XMLTreeBuilder",
    "iter_children",
    "iter_subtree",
]
