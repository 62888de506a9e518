"""Tests for building the heading outline."""

from aozora_reader.ir.schema import Heading, HeadingLevel, Range
from aozora_reader.ir.toc import (
    build_heading_tree,
    find_node_by_id,
    find_parent_node,
    flatten_tree,
    get_ancestor_nodes,
)


def _heading(text, level):
    return Heading(level=level, text=text, id=text, range=Range.span(0, 1))


L, M, S = HeadingLevel.LARGE, HeadingLevel.MEDIUM, HeadingLevel.SMALL


class TestBuildHeadingTree:
    def test_empty(self):
        assert build_heading_tree([]) == []

    def test_nesting_by_level(self):
        tree = build_heading_tree([_heading("一", L), _heading("一・一", M), _heading("細目", S), _heading("二", L)])
        assert [n.heading.text for n in tree] == ["一", "二"]
        assert tree[0].children[0].heading.text == "一・一"
        assert tree[0].children[0].children[0].heading.text == "細目"

    def test_same_level_siblings(self):
        tree = build_heading_tree([_heading("a", M), _heading("b", M)])
        assert [n.heading.text for n in tree] == ["a", "b"]

    def test_skipped_level_nests_under_nearest(self):
        tree = build_heading_tree([_heading("top", L), _heading("leaf", S)])
        assert tree[0].children[0].heading.text == "leaf"

    def test_starts_below_top_level(self):
        tree = build_heading_tree([_heading("small", S), _heading("large", L)])
        assert [n.heading.text for n in tree] == ["small", "large"]

    def test_preorder_indices(self):
        tree = build_heading_tree([_heading("a", L), _heading("b", M), _heading("c", L)])
        assert [n.index for n in flatten_tree(tree)] == [0, 1, 2]
        assert [n.heading.text for n in flatten_tree(tree)] == ["a", "b", "c"]


class TestTreeQueries:
    def _tree(self):
        return build_heading_tree([_heading("a", L), _heading("b", M), _heading("c", S), _heading("d", L)])

    def test_find_node(self):
        assert find_node_by_id(self._tree(), "c").level == 3
        assert find_node_by_id(self._tree(), "missing") is None

    def test_find_parent(self):
        assert find_parent_node(self._tree(), "c").heading.text == "b"
        assert find_parent_node(self._tree(), "a") is None

    def test_ancestors(self):
        assert [n.heading.text for n in get_ancestor_nodes(self._tree(), "c")] == ["a", "b"]
        assert get_ancestor_nodes(self._tree(), "d") == []
