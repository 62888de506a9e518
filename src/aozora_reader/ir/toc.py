"""Table-of-contents tree built from a document's flat heading list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from aozora_reader.ir.schema import Heading


@dataclass
class HeadingNode:
    """One entry of the outline, with the headings nested beneath it."""

    heading: Heading
    level: int
    children: list[HeadingNode] = field(default_factory=list)
    index: int = 0  # pre-order position in the finished tree


def build_heading_tree(headings: list[Heading]) -> list[HeadingNode]:
    """Nest headings by level into an outline.

    Uses a stack-based algorithm:
    - When encountering a heading, pop from the stack until the top is a
      heading with a strictly lower level number (the parent).
    - Nest under that parent, or at the root if the stack is empty.

    Args:
        headings: Headings in document order.

    Returns:
        Root nodes of the outline.
    """
    if not headings:
        return []

    root: list[HeadingNode] = []
    stack: list[HeadingNode] = []

    for heading in headings:
        node = HeadingNode(heading=heading, level=heading.level.rank)

        while stack and stack[-1].level >= node.level:
            stack.pop()

        if stack:
            stack[-1].children.append(node)
        else:
            root.append(node)

        stack.append(node)

    for index, node in enumerate(flatten_tree(root)):
        node.index = index

    return root


def flatten_tree(tree: list[HeadingNode]) -> list[HeadingNode]:
    """Return all nodes in pre-order."""
    result: list[HeadingNode] = []
    for node in tree:
        result.append(node)
        result.extend(flatten_tree(node.children))
    return result


def find_node_by_id(tree: list[HeadingNode], heading_id: str) -> Optional[HeadingNode]:
    for node in flatten_tree(tree):
        if node.heading.id == heading_id:
            return node
    return None


def find_parent_node(tree: list[HeadingNode], heading_id: str) -> Optional[HeadingNode]:
    for node in flatten_tree(tree):
        if any(child.heading.id == heading_id for child in node.children):
            return node
    return None


def get_ancestor_nodes(tree: list[HeadingNode], heading_id: str) -> list[HeadingNode]:
    """Return the chain of ancestors (outermost first), excluding the node itself."""

    def find_path(nodes: list[HeadingNode], path: list[HeadingNode]) -> Optional[list[HeadingNode]]:
        for node in nodes:
            if node.heading.id == heading_id:
                return path
            found = find_path(node.children, path + [node])
            if found is not None:
                return found
        return None

    return find_path(tree, []) or []
