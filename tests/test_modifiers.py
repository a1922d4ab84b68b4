"""Tests for apprentice rate modifiers."""

from decimal import Decimal
from pathlib import Path

import pytest

from config import load_yaml_config
from src.rates.modifiers import ADD, MULTIPLY, ModifierTable, load_modifier_table
from src.rates.models import ClassificationSelector


@pytest.fixture
def table() -> ModifierTable:
    return load_modifier_table("apprentice_modifiers.yaml")


class TestShippedTable:
    def test_defaults(self, table: ModifierTable) -> None:
        rules = table.rules_for("MA000010")
        assert rules.adult.kind == MULTIPLY
        assert rules.adult.value == Decimal("1.15")
        assert rules.year12.value == Decimal("1.05")
        assert rules.sectors["construction"].kind == ADD

    def test_award_override_merges_over_defaults(self, table: ModifierTable) -> None:
        rules = table.rules_for("MA000025")
        assert rules.sectors["electrical"].value == Decimal("0.42")
        assert rules.sectors["construction"].value == Decimal("0.50")
        assert rules.adult.value == Decimal("1.15")

    def test_adult_override(self, table: ModifierTable) -> None:
        assert table.rules_for("MA000020").adult.value == Decimal("1.12")


class TestApply:
    def test_no_flags_no_change(self, table: ModifierTable) -> None:
        rate, adjustments = table.apply("MA000025", ClassificationSelector(code="X"), Decimal("20"))
        assert rate == Decimal("20")
        assert adjustments == []

    def test_adult(self, table: ModifierTable) -> None:
        rate, adjustments = table.apply("MA000010", ClassificationSelector(is_adult=True), Decimal("20"))
        assert rate == Decimal("23.00")
        assert adjustments[0].amount == Decimal("3.00")

    def test_order_is_adult_then_year12_then_sector(self, table: ModifierTable) -> None:
        selector = ClassificationSelector(is_adult=True, has_completed_year12=True, sector="electrical")
        rate, adjustments = table.apply("MA000025", selector, Decimal("20"))
        assert [a.name for a in adjustments] == ["adult", "year12", "sector:electrical"]
        assert rate == Decimal("20") * Decimal("1.15") * Decimal("1.05") + Decimal("0.42")

    def test_unknown_sector_is_skipped(self, table: ModifierTable) -> None:
        rate, adjustments = table.apply("MA000025", ClassificationSelector(sector="aviation"), Decimal("20"))
        assert rate == Decimal("20")
        assert adjustments == []

    def test_empty_table(self) -> None:
        rate, _ = ModifierTable.empty().apply("MA000025", ClassificationSelector(is_adult=True), Decimal("20"))
        assert rate == Decimal("20")


class TestParsing:
    def test_bad_kind(self) -> None:
        with pytest.raises(ValueError, match="kind"):
            ModifierTable.from_dict({"defaults": {"adult": {"kind": "divide", "value": 2}}})

    def test_non_positive_multiplier(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            ModifierTable.from_dict({"defaults": {"adult": {"kind": "multiply", "value": 0}}})

    def test_empty_dict(self) -> None:
        table = ModifierTable.from_dict({})
        assert table.rules_for("any").adult is None


class TestLoadYamlConfig:
    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_config(path) == {}

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_yaml_config(path)

    def test_absolute_path_table(self, tmp_path: Path) -> None:
        path = tmp_path / "modifiers.yaml"
        path.write_text("defaults:\n  adult:\n    kind: add\n    value: '1.00'\n")
        table = load_modifier_table(path)
        assert table.rules_for("MA000025").adult.value == Decimal("1.00")
