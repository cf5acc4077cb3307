"""Debugging helpers for inspecting a reconstructed document tree."""

from typing import Iterator, List, Optional, TextIO, Tuple

from xml2csv.tree import Node, iter_children

INDENT = "    "


def describe_node(node: Node) -> str:
    """``name:content`` with namespace colons in the name replaced by ``_``."""
    return f"{node.name.replace(':', '_')}:{node.content}"


def iter_tree_lines(root: Node, show_columns: bool = False) -> Iterator[str]:
    """Yield one line per node, indented four spaces per level below ``root``."""
    stack: List[Tuple[Node, int]] = [(root, 0)]
    while stack:
        node, level = stack.pop()
        line = INDENT * level + describe_node(node)
        if show_columns and node.column_name is not None:
            line += f"  -> {node.column_name}"
            if node.discard:
                line += " (discarded)"
        yield line
        children = list(iter_children(node))
        stack.extend((child, level + 1) for child in reversed(children))


def format_tree(root: Optional[Node], show_columns: bool = False) -> str:
    """Render the whole tree as text; an empty document renders as ``""``."""
    if root is None:
        return ""
    return "\n".join(iter_tree_lines(root, show_columns=show_columns))


def print_tree(root: Optional[Node], stream: TextIO, show_columns: bool = False) -> None:
    if root is None:
        return
    for line in iter_tree_lines(root, show_columns=show_columns):
        stream.write(line + "\n")
