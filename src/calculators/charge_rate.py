"""Hourly charge rate calculator: base wage plus on-costs plus margin."""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel

from src.errors import InvalidBaseRate, InvalidCostConfig
from src.rates.models import Money

# Leave loading is configured as an annual percentage; dividing by 5 spreads
# it to an approximate hourly add-on.
LEAVE_LOADING_DIVISOR = Decimal("5")

STANDARD_WEEKLY_HOURS = Decimal("38")
WEEKS_PER_YEAR = Decimal("52")

_HUNDRED = Decimal("100")
_ZERO = Decimal("0")
_ONE = Decimal("1")


class CostConfig(BaseModel):
    """On-cost fractions for one calculation (0.115 means 11.5%)."""

    super_rate: Money
    wc_rate: Money
    payroll_tax_rate: Money
    leave_loading: Money
    admin_rate: Money
    profit_margin: Money


DEFAULT_COST_CONFIG = CostConfig(
    super_rate=Decimal("0.115"),
    wc_rate=Decimal("0.047"),
    payroll_tax_rate=Decimal("0.0485"),
    leave_loading=Decimal("0.175"),
    admin_rate=Decimal("0.17"),
    profit_margin=Decimal("0.15"),
)


class BreakdownItem(BaseModel):
    label: str
    amount: Money
    percentage_of_charge_rate: Money


class ChargeRateResult(BaseModel):
    base_rate: Money
    total_cost: Money
    charge_rate: Money
    breakdown: list[BreakdownItem]


def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str/Decimal to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidBaseRate(f"Not a number: {value!r}") from e


def validate_base_rate(base_rate: Any) -> Decimal:
    """Return ``base_rate`` as a Decimal, or raise InvalidBaseRate if not positive."""
    base = to_decimal(base_rate)
    if not base.is_finite() or base <= _ZERO:
        raise InvalidBaseRate(f"Base rate must be greater than zero, got {base_rate}", base_rate=str(base_rate))
    return base


def validate_cost_config(config: CostConfig) -> None:
    """Reject any fraction outside [0, 1]. Values are never clamped."""
    bad = {
        name: str(value)
        for name, value in config.model_dump().items()
        if not value.is_finite() or not (_ZERO <= value <= _ONE)
    }
    if bad:
        fields = ", ".join(sorted(bad))
        raise InvalidCostConfig(f"Cost config fractions must be between 0 and 1: {fields}", fields=bad)


def calculate_charge_rate(base_rate: Any, config: CostConfig) -> ChargeRateResult:
    """Calculate the hourly charge rate for a host employer.

    Every on-cost is a fraction of the base rate (they do not compound);
    profit is a fraction of the total cost. Nothing is rounded here.

    Args:
        base_rate: Hourly base wage (must be > 0).
        config: On-cost and margin fractions, each in [0, 1].

    Returns:
        ChargeRateResult whose breakdown amounts sum exactly to charge_rate.

    Raises:
        InvalidBaseRate: base_rate is not a positive number.
        InvalidCostConfig: any config fraction is outside [0, 1].
    """
    base = validate_base_rate(base_rate)
    validate_cost_config(config)

    components = [
        ("Base rate", base),
        ("Superannuation", base * config.super_rate),
        ("Workers' compensation", base * config.wc_rate),
        ("Payroll tax", base * config.payroll_tax_rate),
        ("Leave loading", base * config.leave_loading / LEAVE_LOADING_DIVISOR),
        ("Admin overhead", base * config.admin_rate),
    ]
    total_cost = sum((amount for _, amount in components), _ZERO)
    profit = total_cost * config.profit_margin
    components.append(("Profit margin", profit))
    charge_rate = total_cost + profit

    breakdown = [
        BreakdownItem(
            label=label,
            amount=amount,
            percentage_of_charge_rate=amount / charge_rate * _HUNDRED,
        )
        for label, amount in components
    ]

    return ChargeRateResult(
        base_rate=base,
        total_cost=total_cost,
        charge_rate=charge_rate,
        breakdown=breakdown,
    )


def generate_quote(result: ChargeRateResult) -> dict[str, Any]:
    """Weekly and annual figures for a charge rate, at 38 hours a week."""
    weekly = result.charge_rate * STANDARD_WEEKLY_HOURS
    return {
        "base_rate": float(result.base_rate),
        "charge_rate": float(result.charge_rate),
        "weekly_charge": float(weekly),
        "annual_charge": float(weekly * WEEKS_PER_YEAR),
        "weekly_hours": float(STANDARD_WEEKLY_HOURS),
        "breakdown": {item.label: float(item.amount) for item in result.breakdown},
    }
