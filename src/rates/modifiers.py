"""Apprentice rate modifiers: adult, year 12 completion and sector.

The modifier values are statutory configuration, not code. They are read
from ``config/apprentice_modifiers.yaml``; per-award entries override the
defaults for that award only.
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, NamedTuple

from config import load_yaml_config
from src.rates.models import Adjustment, ClassificationSelector

logger = logging.getLogger(__name__)

MULTIPLY = "multiply"
ADD = "add"


class ModifierRule(NamedTuple):
    """One adjustment: ``rate * value`` (multiply) or ``rate + value`` (add)."""

    kind: str
    value: Decimal
    description: str = ""

    def apply(self, rate: Decimal) -> Decimal:
        if self.kind == MULTIPLY:
            return rate * self.value
        return rate + self.value


class ModifierSet(NamedTuple):
    adult: ModifierRule | None
    year12: ModifierRule | None
    sectors: dict[str, ModifierRule]


def _parse_rule(raw: dict[str, Any], where: str) -> ModifierRule:
    kind = raw.get("kind")
    if kind not in (MULTIPLY, ADD):
        raise ValueError(f"{where}: kind must be '{MULTIPLY}' or '{ADD}', got {kind!r}")
    value = Decimal(str(raw["value"]))
    if kind == MULTIPLY and value <= 0:
        raise ValueError(f"{where}: multiplier must be positive")
    return ModifierRule(kind, value, raw.get("description", ""))


def _parse_set(raw: dict[str, Any], where: str) -> ModifierSet:
    adult = raw.get("adult")
    year12 = raw.get("year12")
    return ModifierSet(
        adult=_parse_rule(adult, f"{where}.adult") if adult else None,
        year12=_parse_rule(year12, f"{where}.year12") if year12 else None,
        sectors={
            name: _parse_rule(rule, f"{where}.sectors.{name}")
            for name, rule in (raw.get("sectors") or {}).items()
        },
    )


class ModifierTable:
    """Default modifiers plus per-award overrides."""

    def __init__(self, defaults: ModifierSet, awards: dict[str, ModifierSet] | None = None) -> None:
        self.defaults = defaults
        self.awards = awards or {}

    @classmethod
    def empty(cls) -> "ModifierTable":
        return cls(ModifierSet(None, None, {}))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModifierTable":
        defaults = _parse_set(data.get("defaults") or {}, "defaults")
        awards = {
            code: _parse_set(raw or {}, f"awards.{code}")
            for code, raw in (data.get("awards") or {}).items()
        }
        return cls(defaults, awards)

    def rules_for(self, award_code: str) -> ModifierSet:
        """Effective modifiers for one award, overrides merged over defaults."""
        override = self.awards.get(award_code)
        if override is None:
            return self.defaults
        return ModifierSet(
            adult=override.adult or self.defaults.adult,
            year12=override.year12 or self.defaults.year12,
            sectors={**self.defaults.sectors, **override.sectors},
        )

    def apply(
        self,
        award_code: str,
        selector: ClassificationSelector,
        base_rate: Decimal,
    ) -> tuple[Decimal, list[Adjustment]]:
        """Apply the selector's modifiers to ``base_rate`` in order adult, year12, sector."""
        rules = self.rules_for(award_code)
        steps: list[tuple[str, ModifierRule]] = []
        if selector.is_adult and rules.adult:
            steps.append(("adult", rules.adult))
        if selector.has_completed_year12 and rules.year12:
            steps.append(("year12", rules.year12))
        if selector.sector:
            rule = rules.sectors.get(selector.sector)
            if rule is None:
                logger.info("No modifier for sector %s in award %s", selector.sector, award_code)
            else:
                steps.append((f"sector:{selector.sector}", rule))

        rate = base_rate
        adjustments: list[Adjustment] = []
        for name, rule in steps:
            adjusted = rule.apply(rate)
            adjustments.append(Adjustment(
                name=name,
                kind=rule.kind,
                value=rule.value,
                amount=adjusted - rate,
                description=rule.description,
            ))
            rate = adjusted
        return rate, adjustments


def load_modifier_table(filename: str | Path) -> ModifierTable:
    """Load the modifier table from a YAML file in config/ (or an absolute path)."""
    table = ModifierTable.from_dict(load_yaml_config(filename))
    logger.info("Loaded apprentice modifiers for %d award override(s)", len(table.awards))
    return table
