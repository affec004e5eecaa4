"""Tests for the sorted code index."""

from __future__ import annotations

from quhua.core.region import DivisionRecord
from quhua.hierarchy import CodeIndex, RegionNode


def _node(code: str, name: str = "x") -> RegionNode:
    return RegionNode(record=DivisionRecord(code, name, 2, "1"))


class TestCodeIndex:
    """Tests for CodeIndex lookup and duplicate detection."""

    def test_find_existing_code(self):
        nodes = [_node("320100000000"), _node("110100000000"), _node("210100000000")]
        index = CodeIndex(nodes)
        assert index.find("110100000000") is nodes[1]
        assert index.find("320100000000") is nodes[0]

    def test_find_missing_code(self):
        index = CodeIndex([_node("110100000000"), _node("320100000000")])
        assert index.find("210100000000") is None
        assert index.find("999999999999") is None
        assert index.find("") is None

    def test_find_requires_exact_match(self):
        index = CodeIndex([_node("110100000000")])
        assert index.find("1101") is None
        assert index.find("1101000000000") is None

    def test_empty_index(self):
        index = CodeIndex([])
        assert len(index) == 0
        assert index.find("110100000000") is None
        assert index.duplicate_codes() == []

    def test_contains(self):
        index = CodeIndex([_node("110100000000")])
        assert "110100000000" in index
        assert "320100000000" not in index
        assert 110100000000 not in index

    def test_duplicate_resolves_to_first_in_input(self):
        first = _node("110100000000", "first")
        second = _node("110100000000", "second")
        index = CodeIndex([_node("320100000000"), first, second])
        assert index.find("110100000000") is first

    def test_duplicate_codes_sorted_and_unique(self):
        nodes = [
            _node("320100000000"),
            _node("110100000000"),
            _node("320100000000"),
            _node("110100000000"),
            _node("110100000000"),
            _node("210100000000"),
        ]
        index = CodeIndex(nodes)
        assert len(index) == 6
        assert index.duplicate_codes() == ["110100000000", "320100000000"]

    def test_code_point_ordering(self):
        # Non-digit codes still resolve; ordering is by code point
        nodes = [_node("b"), _node("B"), _node("区"), _node("a")]
        index = CodeIndex(nodes)
        for node in nodes:
            assert index.find(node.code) is node
