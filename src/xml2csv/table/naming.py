"""Column naming.

Every leaf gets a column name built from the display names of its ancestors
below the record level, joined with a separator. Repeated sibling tag names
under one parent are made unique with a numeric suffix: the first ``phone``
stays ``phone``, the second becomes ``phone1``, the third ``phone2``.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from xml2csv.shared import NamingConfig, get_logger
from xml2csv.tree import Node, iter_subtree


@dataclass
class ColumnTable:
    """Column names in first-seen order with a name -> position map."""

    names: List[str] = field(default_factory=list)
    index: Dict[str, int] = field(default_factory=dict)

    def add(self, name: str) -> int:
        """Return the slot for ``name``, appending it if new."""
        slot = self.index.get(name)
        if slot is None:
            slot = len(self.names)
            self.index[name] = slot
            self.names.append(name)
        return slot

    def __contains__(self, name: object) -> bool:
        return name in self.index

    def __len__(self) -> int:
        return len(self.names)


@dataclass
class FinalColumnSet:
    """Sorted, non-discarded columns; this order is the table header."""

    names: List[str] = field(default_factory=list)
    index: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_names(cls, names: List[str]) -> "FinalColumnSet":
        ordered = sorted(names)
        return cls(names=ordered, index={name: i for i, name in enumerate(ordered)})

    def __contains__(self, name: object) -> bool:
        return name in self.index

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)


@dataclass
class ColumnCollision:
    """Distinct tag names that resolved to the same column path."""

    column: str
    tag_names: List[str]


@dataclass
class NamingResult:
    """Outcome of one naming walk."""

    columns: ColumnTable = field(default_factory=ColumnTable)
    final: FinalColumnSet = field(default_factory=FinalColumnSet)
    discarded_columns: List[str] = field(default_factory=list)
    collisions: List[ColumnCollision] = field(default_factory=list)


# (node, path prefix, sibling counter); the counter is None at record level
_Frame = Tuple[Node, str, Optional[Dict[str, int]]]


class ColumnNamer:
    """Assigns path-derived column names to every leaf of a document."""

    def __init__(
        self,
        config: Optional[NamingConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or NamingConfig()
        self.logger = get_logger(__name__, correlation_id, "column_namer")

    def assign(self, root: Optional[Node]) -> NamingResult:
        """Name every leaf under ``root`` and compute the final column set.

        The direct children of ``root`` are the records. Neither the root
        nor the record contributes to column names.

        Args:
            root: Document element, as returned by the tree builder

        Returns:
            NamingResult with the first-seen column table and the sorted
            final column set
        """
        result = NamingResult()
        if root is None or root.first_child is None:
            return result

        skipped = set(self.config.skipped_tags)
        separator = self.config.separator
        kept: Set[str] = set()
        tag_by_column: Dict[str, str] = {}
        collisions: Dict[str, Set[str]] = {}

        stack: List[_Frame] = [(root.first_child, "", None)]
        while stack:
            node, prefix, siblings = stack.pop()
            # Siblings go on the stack first so the subtree is finished
            # before the walk moves right.
            if node.next_sibling is not None:
                stack.append((node.next_sibling, prefix, siblings))

            if node.name in skipped:
                for descendant in iter_subtree(node):
                    descendant.column_name = None
                continue

            node.duplicate_index = 0
            node.column_base = node.display_name
            if siblings is not None:
                seen = siblings.get(node.name)
                if seen is None:
                    siblings[node.name] = 0
                else:
                    siblings[node.name] = seen + 1
                    node.duplicate_index = seen + 1
                    node.column_base = f"{node.display_name}{node.duplicate_index}"

            if node.is_leaf:
                column = prefix + node.column_base
                result.columns.add(column)
                node.column_name = column
                if not node.discard:
                    kept.add(column)

                first_tag = tag_by_column.setdefault(column, node.name)
                if first_tag != node.name:
                    collisions.setdefault(column, {first_tag}).add(node.name)
                continue

            node.column_name = None
            child_prefix = "" if siblings is None else prefix + node.column_base + separator
            stack.append((node.first_child, child_prefix, {}))

        result.discarded_columns = [
            name for name in result.columns.names if name not in kept
        ]
        result.final = FinalColumnSet.from_names(
            [name for name in result.columns.names if name in kept]
        )
        result.collisions = [
            ColumnCollision(column=column, tag_names=sorted(names))
            for column, names in collisions.items()
        ]

        self.logger.info(
            "Column naming completed",
            extra={
                "columns_discovered": len(result.columns),
                "columns_final": len(result.final),
                "columns_discarded": len(result.discarded_columns),
                "collisions": len(result.collisions),
            }
        )
        return result
