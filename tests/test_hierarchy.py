"""Tests for the classification tree."""

from datetime import date

import pytest

from src.rates.hierarchy import ClassificationTree, HierarchyError
from tests.factories import make_classification


def _tree() -> ClassificationTree:
    return ClassificationTree.from_nested([
        {
            "code": "EL",
            "name": "Electrical",
            "children": [
                {"code": "EL-AP1", "name": "Year 1"},
                {"code": "EL-AP2", "name": "Year 2", "children": [{"code": "EL-AP2-A", "name": "Adult"}]},
            ],
        },
        {"code": "PL", "name": "Plumbing"},
    ])


class TestClassificationTree:
    def test_roots(self) -> None:
        assert sorted(n.code for n in _tree().roots()) == ["EL", "PL"]

    def test_ancestors(self) -> None:
        assert [n.code for n in _tree().ancestors("EL-AP2-A")] == ["EL-AP2", "EL"]

    def test_descendants_breadth_first(self) -> None:
        codes = [n.code for n in _tree().descendants("EL")]
        assert codes[:2] == ["EL-AP1", "EL-AP2"] or codes[:2] == ["EL-AP2", "EL-AP1"]
        assert codes[2] == "EL-AP2-A"

    def test_descendants_of_whole_forest(self) -> None:
        tree = _tree()
        assert len(list(tree.descendants())) == len(tree) == 5

    def test_contains_and_get(self) -> None:
        tree = _tree()
        assert "PL" in tree
        assert "XX" not in tree
        assert tree.get("EL-AP1").parent_code == "EL"

    def test_duplicate_code(self) -> None:
        tree = ClassificationTree()
        tree.add("A", "a")
        with pytest.raises(HierarchyError, match="Duplicate"):
            tree.add("A", "again")

    def test_unknown_parent(self) -> None:
        tree = ClassificationTree()
        tree.add("A", "a", parent_code="MISSING")
        with pytest.raises(HierarchyError, match="unknown parent"):
            tree.check()

    def test_cycle(self) -> None:
        tree = ClassificationTree()
        tree.add("A", "a", parent_code="C")
        tree.add("B", "b", parent_code="A")
        tree.add("C", "c", parent_code="B")
        with pytest.raises(HierarchyError, match="Cycle"):
            tree.check()

    def test_self_parent(self) -> None:
        tree = ClassificationTree()
        tree.add("A", "a", parent_code="A")
        with pytest.raises(HierarchyError):
            tree.check()

    def test_from_classifications_keeps_latest_version(self) -> None:
        tree = ClassificationTree.from_classifications([
            make_classification("EL", "27.00", valid_from=date(2023, 7, 1)),
            make_classification("EL", "28.00", valid_from=date(2024, 7, 1)),
        ])
        assert len(tree) == 1
        assert str(tree.get("EL").classification.base_rate) == "28.00"

    def test_descendants_of_a_wide_tree(self) -> None:
        tree = ClassificationTree()
        tree.add("ROOT", "root")
        for i in range(5000):
            tree.add(f"L{i}", "leaf", parent_code="ROOT")
        tree.add("DEEP", "deep", parent_code="L4999")
        codes = [n.code for n in tree.check().descendants("ROOT")]
        assert len(codes) == 5001
        assert codes[-1] == "DEEP"
