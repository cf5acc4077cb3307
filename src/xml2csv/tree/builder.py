"""Tree building from a flat token stream.

This module reconstructs the element tree of a document from its tag tokens
using an explicit stack of open elements, and collects per-tag content
statistics for the discard pass on the way.

The tree uses a first-child / next-sibling layout: a parent owns its eldest
child, and every child owns the sibling that follows it.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, List, Optional, Set, Union

from xml2csv.shared import (
    MismatchedCloseError,
    StructuralError,
    TreeConfig,
    UnclosedTagError,
    UnexpectedTagError,
    get_logger,
)
from xml2csv.tokenization import Token, TokenizationResult


@dataclass(eq=False)
class Node:
    """One element of the document tree.

    ``content`` is only meaningful for leaves; ``column_base`` and
    ``column_name`` are filled in by the column namer.
    """

    name: str
    display_name: str
    content: str = ""
    first_child: Optional["Node"] = field(default=None, repr=False)
    next_sibling: Optional["Node"] = field(default=None, repr=False)
    child_count: int = 0
    discard: bool = False
    duplicate_index: int = 0
    column_base: str = ""
    column_name: Optional[str] = None
    depth: int = 0
    offset: int = 0
    is_self_closing: bool = False
    _last_child: Optional["Node"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Default the column base to the display name."""
        if not self.column_base:
            self.column_base = self.display_name

    @property
    def is_container(self) -> bool:
        """True iff the node has at least one child element."""
        return self.child_count > 0

    @property
    def is_leaf(self) -> bool:
        """True iff the node carries content rather than children."""
        return self.child_count == 0

    def append_child(self, child: "Node") -> None:
        """Append ``child`` at the end of this node's sibling chain."""
        if self.first_child is None:
            self.first_child = child
        else:
            # _last_child always points at the tail of the chain
            self._last_child.next_sibling = child
        self._last_child = child
        self.child_count += 1
        child.depth = self.depth + 1

    def iter_children(self) -> Iterator["Node"]:
        """Yield direct children in document order."""
        return iter_children(self)


def iter_children(node: Node) -> Iterator[Node]:
    """Yield the direct children of ``node`` in document order."""
    child = node.first_child
    while child is not None:
        yield child
        child = child.next_sibling


def iter_subtree(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all its descendants in document order.

    Siblings of ``node`` itself are not visited.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        children = list(iter_children(current))
        stack.extend(reversed(children))


class ContentStats:
    """Distinct trimmed content values observed per tag name."""

    def __init__(self) -> None:
        self._values: Dict[str, Set[str]] = {}

    def record(self, name: str, content: str) -> None:
        """Record one leaf occurrence of ``name`` carrying ``content``."""
        self._values.setdefault(name, set()).add(content.strip())

    def values(self, name: str) -> FrozenSet[str]:
        """Distinct trimmed values seen for ``name``."""
        return frozenset(self._values.get(name, ()))

    def items(self) -> Iterator:
        """Iterate ``(name, values)`` pairs."""
        for name, values in self._values.items():
            yield name, frozenset(values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)


@dataclass
class BuildResult:
    """Reconstructed tree plus the statistics gathered while building it."""

    root: Optional[Node] = None
    stats: ContentStats = field(default_factory=ContentStats)
    node_count: int = 0
    max_depth: int = 0
    token_count: int = 0
    processing_time_ms: float = 0.0
    # Byte offsets of leaf content that needed replacement characters
    undecodable_offsets: List[int] = field(default_factory=list)

    @property
    def record_count(self) -> int:
        """Number of direct children of the document element."""
        return self.root.child_count if self.root else 0


class XMLTreeBuilder:
    """Builds a document tree from tag tokens.

    Any structural inconsistency aborts the build with a
    :class:`StructuralError`; nothing is repaired.
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree configuration (depth guard)
            correlation_id: Optional correlation ID for tracking one conversion
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tree_builder")

    def build(
        self,
        tokens: Union[TokenizationResult, List[Token]],
        data: bytes,
        encoding: str = "utf-8",
    ) -> BuildResult:
        """Build the document tree.

        Args:
            tokens: Tokenization result or plain token list
            data: The buffer the tokens were scanned from
            encoding: Encoding used to decode leaf content

        Returns:
            BuildResult with the root node and content statistics

        Raises:
            StructuralError: The tokens do not form a single balanced tree
        """
        start_time = time.time()
        token_list = tokens.tokens if isinstance(tokens, TokenizationResult) else tokens
        self.logger.info("Starting tree building", extra={"token_count": len(token_list)})

        result = BuildResult(token_count=len(token_list))
        stats = result.stats
        stack: List[Node] = []
        count = len(token_list)

        i = 0
        while i < count:
            token = token_list[i]

            if token.is_declaration:
                i += 1
                continue

            if result.root is None:
                if token.is_closing:
                    raise self._fail(UnexpectedTagError(
                        token.name, i, token.start, "closing tag before any element"
                    ))
                result.root = self._new_node(token)
                result.node_count = 1
                if not token.is_self_closing:
                    stack.append(result.root)
                i += 1
                continue

            if not stack:
                raise self._fail(UnexpectedTagError(
                    token.name, i, token.start, "document element is already closed"
                ))
            parent = stack[-1]

            if token.is_self_closing:
                node = self._new_node(token)
                node.is_self_closing = True
                parent.append_child(node)
                stats.record(token.name, "")
                result.node_count += 1
                result.max_depth = max(result.max_depth, node.depth)
                i += 1
                continue

            if token.is_closing:
                if token.name != parent.name:
                    raise self._fail(MismatchedCloseError(
                        parent.name, token.name, i, token.start
                    ))
                stack.pop()
                i += 1
                continue

            node = self._new_node(token)
            parent.append_child(node)
            result.node_count += 1
            result.max_depth = max(result.max_depth, node.depth)

            # One-token lookahead: <a>text</a> is a leaf
            following = token_list[i + 1] if i + 1 < count else None
            if following is not None and following.closes(token):
                node.content = self._decode(
                    data[token.end:following.start], encoding, token.end, result
                )
                stats.record(token.name, node.content)
                i += 2
                continue

            if len(stack) >= self.config.max_tree_depth:
                raise self._fail(StructuralError(
                    f"element '{token.name}' exceeds maximum tree depth "
                    f"{self.config.max_tree_depth}",
                    offset=token.start,
                    token_index=i,
                ))
            stack.append(node)
            i += 1

        if stack:
            raise self._fail(UnclosedTagError(
                [node.name for node in stack], offset=len(data)
            ))

        result.processing_time_ms = (time.time() - start_time) * 1000
        self.logger.info(
            "Tree building completed",
            extra={
                "node_count": result.node_count,
                "record_count": result.record_count,
                "max_depth": result.max_depth,
                "tag_names_with_content": len(stats),
            }
        )
        return result

    def _new_node(self, token: Token) -> Node:
        return Node(
            name=token.name,
            display_name=token.display_name,
            offset=token.start,
        )

    def _decode(self, raw: bytes, encoding: str, offset: int, result: BuildResult) -> str:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            result.undecodable_offsets.append(offset)
            self.logger.warning(
                "Leaf content is not valid in the detected encoding",
                extra={"encoding": encoding, "offset": offset}
            )
            return raw.decode(encoding, errors="replace")

    def _fail(self, error: StructuralError) -> StructuralError:
        """Log a structural failure and hand the error back for raising."""
        self.logger.error(
            "Tree building failed",
            extra={
                "error_type": type(error).__name__,
                "offset": error.offset,
                "token_index": error.token_index,
            }
        )
        return error
