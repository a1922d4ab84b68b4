"""Annualised charge rate: on-costs over a working year, spread over billable hours.

Where the hourly calculator applies percentages to one hour, this one builds
the year: total paid hours, the hours a host employer is actually billed for
once leave, public holidays, sick days, adverse weather and off-the-job
training are excluded, and fixed annual costs such as study and PPE.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from src.calculators.charge_rate import validate_base_rate
from src.errors import InvalidCostConfig
from src.rates.models import Money

# Leave loading is paid on at most four weeks of 38 hours.
MAX_LEAVE_LOADING_HOURS = Decimal("152")

_ZERO = Decimal("0")
_ONE = Decimal("1")


class WorkConfig(BaseModel):
    hours_per_day: Money = Decimal("7.6")
    days_per_week: Money = Decimal("5")
    weeks_per_year: Money = Decimal("52")
    annual_leave_days: Money = Decimal("20")
    public_holidays: Money = Decimal("10")
    sick_leave_days: Money = Decimal("10")
    training_weeks: Money = Decimal("5")


class AnnualCostConfig(BaseModel):
    """Annual on-costs. Rates are fractions; study and PPE are dollars per year."""

    super_rate: Money = Decimal("0.115")
    wc_rate: Money = Decimal("0.047")
    payroll_tax_rate: Money = Decimal("0.0485")
    leave_loading: Money = Decimal("0.175")
    study_cost: Money = Decimal("850")
    ppe_cost: Money = Decimal("300")
    admin_rate: Money = Decimal("0.17")
    adverse_weather_days: Money = Decimal("5")


class BillableOptions(BaseModel):
    """Which non-working time is still billed to the host employer."""

    include_annual_leave: bool = False
    include_public_holidays: bool = False
    include_sick_leave: bool = False
    include_training_time: bool = False
    include_adverse_weather: bool = False


class AnnualOnCosts(BaseModel):
    superannuation: Money
    workers_comp: Money
    payroll_tax: Money
    leave_loading: Money
    study_cost: Money
    ppe_cost: Money
    admin_cost: Money

    @property
    def total(self) -> Decimal:
        return sum(self.model_dump().values(), _ZERO)


class AnnualChargeRate(BaseModel):
    pay_rate: Money
    total_hours: Money
    billable_hours: Money
    base_wage: Money
    oncosts: AnnualOnCosts
    total_cost: Money
    cost_per_hour: Money
    margin: Money
    charge_rate: Money


def total_annual_hours(work: WorkConfig) -> Decimal:
    return work.hours_per_day * work.days_per_week * work.weeks_per_year


def billable_hours(work: WorkConfig, costs: AnnualCostConfig, billable: BillableOptions) -> Decimal:
    """Paid hours minus the time not billed to the host employer."""
    unbilled_days = _ZERO
    if not billable.include_annual_leave:
        unbilled_days += work.annual_leave_days
    if not billable.include_public_holidays:
        unbilled_days += work.public_holidays
    if not billable.include_sick_leave:
        unbilled_days += work.sick_leave_days
    if not billable.include_adverse_weather:
        unbilled_days += costs.adverse_weather_days

    unbilled_weeks = unbilled_days / work.days_per_week
    if not billable.include_training_time:
        unbilled_weeks += work.training_weeks

    billable_weeks = work.weeks_per_year - unbilled_weeks
    return work.hours_per_day * work.days_per_week * billable_weeks


def annual_oncosts(pay_rate: Decimal, hours: Decimal, costs: AnnualCostConfig) -> AnnualOnCosts:
    base_wage = pay_rate * hours
    leave_hours = min(hours, MAX_LEAVE_LOADING_HOURS)
    return AnnualOnCosts(
        superannuation=base_wage * costs.super_rate,
        workers_comp=base_wage * costs.wc_rate,
        payroll_tax=base_wage * costs.payroll_tax_rate,
        leave_loading=pay_rate * leave_hours * costs.leave_loading,
        study_cost=costs.study_cost,
        ppe_cost=costs.ppe_cost,
        admin_cost=base_wage * costs.admin_rate,
    )


def _check_annual_config(work: WorkConfig, costs: AnnualCostConfig, margin: Decimal) -> None:
    bad: dict[str, Any] = {}
    for name in ("super_rate", "wc_rate", "payroll_tax_rate", "leave_loading", "admin_rate"):
        value = getattr(costs, name)
        if not (_ZERO <= value <= _ONE):
            bad[name] = str(value)
    for name in ("study_cost", "ppe_cost", "adverse_weather_days"):
        if getattr(costs, name) < _ZERO:
            bad[name] = str(getattr(costs, name))
    for name, value in work.model_dump().items():
        if value < _ZERO:
            bad[name] = str(value)
    if work.hours_per_day <= _ZERO or work.days_per_week <= _ZERO:
        bad.setdefault("hours_per_day", str(work.hours_per_day))
    if not (_ZERO <= margin <= _ONE):
        bad["margin"] = str(margin)
    if bad:
        raise InvalidCostConfig(
            f"Invalid annual cost configuration: {', '.join(sorted(bad))}", fields=bad
        )


def calculate_annual_charge_rate(
    pay_rate: Any,
    work: WorkConfig | None = None,
    costs: AnnualCostConfig | None = None,
    billable: BillableOptions | None = None,
    margin: Decimal = Decimal("0.15"),
) -> AnnualChargeRate:
    """Calculate an hourly charge rate from annual wage and on-costs.

    Args:
        pay_rate: Apprentice hourly pay rate (must be > 0).
        work: Working year; defaults to 7.6h x 5d x 52w.
        costs: Annual on-costs; defaults to typical GTO settings.
        billable: Which non-working time is billed.
        margin: Profit margin fraction applied to cost per billable hour.

    Raises:
        InvalidBaseRate: pay_rate is not positive.
        InvalidCostConfig: a setting is out of range or no hours are billable.
    """
    rate = validate_base_rate(pay_rate)
    work = work or WorkConfig()
    costs = costs or AnnualCostConfig()
    billable = billable or BillableOptions()
    margin = Decimal(str(margin))
    _check_annual_config(work, costs, margin)

    total_hours = total_annual_hours(work)
    billed = billable_hours(work, costs, billable)
    if billed <= _ZERO:
        raise InvalidCostConfig("No billable hours remain after exclusions", billable_hours=str(billed))

    base_wage = rate * total_hours
    oncosts = annual_oncosts(rate, total_hours, costs)
    total_cost = base_wage + oncosts.total
    cost_per_hour = total_cost / billed

    return AnnualChargeRate(
        pay_rate=rate,
        total_hours=total_hours,
        billable_hours=billed,
        base_wage=base_wage,
        oncosts=oncosts,
        total_cost=total_cost,
        cost_per_hour=cost_per_hour,
        margin=margin,
        charge_rate=cost_per_hour * (_ONE + margin),
    )
