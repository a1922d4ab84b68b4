"""Tests for the annualised charge rate calculator."""

from decimal import Decimal

import pytest

from src.calculators.annual_charge_rate import (
    AnnualCostConfig,
    BillableOptions,
    WorkConfig,
    billable_hours,
    calculate_annual_charge_rate,
    total_annual_hours,
)
from src.errors import InvalidBaseRate, InvalidCostConfig


class TestHours:
    def test_total_hours(self) -> None:
        assert total_annual_hours(WorkConfig()) == Decimal("1976")

    def test_default_billable_hours(self) -> None:
        # 45 unbilled days = 9 weeks, plus 5 training weeks: 38 weeks of 38 hours
        assert billable_hours(WorkConfig(), AnnualCostConfig(), BillableOptions()) == Decimal("1444")

    def test_billing_everything(self) -> None:
        everything = BillableOptions(
            include_annual_leave=True,
            include_public_holidays=True,
            include_sick_leave=True,
            include_training_time=True,
            include_adverse_weather=True,
        )
        assert billable_hours(WorkConfig(), AnnualCostConfig(), everything) == Decimal("1976")


class TestCalculate:
    def test_defaults_at_20_an_hour(self) -> None:
        result = calculate_annual_charge_rate(Decimal("20"))

        assert result.base_wage == Decimal("39520")
        assert result.oncosts.superannuation == Decimal("4544.8")
        # leave loading capped at 152 hours
        assert result.oncosts.leave_loading == Decimal("532")
        assert result.oncosts.study_cost == Decimal("850")
        assert result.oncosts.total == Decimal("16719.36")
        assert result.total_cost == Decimal("56239.36")
        assert result.cost_per_hour == result.total_cost / Decimal("1444")
        assert result.charge_rate == result.cost_per_hour * Decimal("1.15")

    def test_more_billable_hours_lowers_rate(self) -> None:
        base = calculate_annual_charge_rate(Decimal("20"))
        billed = calculate_annual_charge_rate(Decimal("20"), billable=BillableOptions(include_training_time=True))
        assert billed.charge_rate < base.charge_rate

    def test_zero_margin(self) -> None:
        result = calculate_annual_charge_rate(Decimal("20"), margin=Decimal("0"))
        assert result.charge_rate == result.cost_per_hour

    def test_rejects_non_positive_rate(self) -> None:
        with pytest.raises(InvalidBaseRate):
            calculate_annual_charge_rate(Decimal("0"))

    def test_rejects_fraction_above_one(self) -> None:
        with pytest.raises(InvalidCostConfig) as exc:
            calculate_annual_charge_rate(Decimal("20"), costs=AnnualCostConfig(super_rate=Decimal("11.5")))
        assert "super_rate" in exc.value.context["fields"]

    def test_rejects_margin_above_one(self) -> None:
        with pytest.raises(InvalidCostConfig):
            calculate_annual_charge_rate(Decimal("20"), margin=Decimal("1.5"))

    def test_no_billable_hours(self) -> None:
        work = WorkConfig(weeks_per_year=Decimal("10"))
        with pytest.raises(InvalidCostConfig, match="No billable hours"):
            calculate_annual_charge_rate(Decimal("20"), work=work)
