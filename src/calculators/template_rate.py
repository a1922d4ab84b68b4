"""Charge rate implied by an organisation's rate template."""

from collections.abc import Iterable
from decimal import Decimal

from src.calculators.charge_rate import validate_base_rate
from src.errors import InvalidCostConfig
from src.rates.models import RateTemplate

_HUNDRED = Decimal("100")

# Template field -> breakdown label. Each is a percent of the base rate.
_PERCENT_FIELDS: dict[str, str] = {
    "base_margin": "margin",
    "super_rate": "super",
    "leave_loading": "leave",
    "workers_comp_rate": "workers_comp",
    "payroll_tax_rate": "payroll_tax",
    "training_cost_rate": "training",
    "other_costs_rate": "other",
    "casual_loading": "casual",
}


def template_components(template: RateTemplate, hours: Decimal = Decimal("1")) -> dict[str, Decimal]:
    """Dollar amount of each template component over ``hours``.

    Includes ``funding_offset`` as a negative amount, so the values sum to
    the template's charge.
    """
    base = validate_base_rate(template.base_rate)
    if hours <= 0:
        raise InvalidCostConfig("Hours must be positive", hours=str(hours))

    negative = [f for f in (*_PERCENT_FIELDS, "funding_offset") if getattr(template, f) < 0]
    if negative:
        raise InvalidCostConfig(
            f"Template percentages must not be negative: {', '.join(negative)}",
            fields={f: str(getattr(template, f)) for f in negative},
        )

    components = {"base": base * hours}
    for field, label in _PERCENT_FIELDS.items():
        components[label] = base * (getattr(template, field) / _HUNDRED) * hours
    components["funding_offset"] = -(base * (template.funding_offset / _HUNDRED) * hours)
    return components


def calculate_template_charge_rate(template: RateTemplate, hours: Decimal = Decimal("1")) -> Decimal:
    """Template charge over ``hours``: base plus percent add-ons, less funding offset."""
    return sum(template_components(template, hours).values(), Decimal("0"))


def calculate_bulk_charge_rates(
    templates: Iterable[RateTemplate],
    hours: Decimal = Decimal("1"),
) -> dict[str, Decimal]:
    """Charge per template id."""
    return {t.id: calculate_template_charge_rate(t, hours) for t in templates}
