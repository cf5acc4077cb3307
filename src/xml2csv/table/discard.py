"""Detection of fields that never carry information.

The decision is made per tag name, not per path: a name judged
uninformative is dropped everywhere it appears in the document.
"""

from typing import FrozenSet, Iterable, Optional, Set

from xml2csv.shared import DiscardPolicy, get_logger
from xml2csv.tree import ContentStats, Node, iter_subtree


class DiscardAnalyzer:
    """Decides which tag names to exclude from the table."""

    def __init__(
        self,
        policy: Optional[DiscardPolicy] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.policy = policy or DiscardPolicy()
        self.logger = get_logger(__name__, correlation_id, "discard_analyzer")

    def is_uninformative(self, values: FrozenSet[str]) -> bool:
        """Apply the discard heuristic to one tag name's observed values."""
        if not values:
            return True
        if len(values) > self.policy.max_distinct_values:
            return False
        return all(value in self.policy.uninformative_values for value in values)

    def analyze(self, stats: ContentStats) -> Set[str]:
        """Return the tag names whose content never varies meaningfully.

        Args:
            stats: Content statistics collected while building the tree

        Returns:
            Set of namespace-qualified tag names to discard
        """
        if not self.policy.enabled:
            self.logger.debug("Discard policy disabled")
            return set()

        discarded = {
            name for name, values in stats.items() if self.is_uninformative(values)
        }
        self.logger.info(
            "Discard analysis completed",
            extra={
                "tag_names": len(stats),
                "discarded": sorted(discarded),
            }
        )
        return discarded

    def mark(self, root: Optional[Node], names: Iterable[str]) -> int:
        """Flag every leaf whose tag name is in ``names``.

        Returns:
            Number of leaves flagged
        """
        if root is None:
            return 0
        names = set(names)
        marked = 0
        for node in iter_subtree(root):
            node.discard = node.is_leaf and node.name in names
            if node.discard:
                marked += 1
        return marked
