"""Internal award, classification and rate models.

These are the types the resolver, calculators and validator work with. The
upstream wire format lives in ``src.fairwork.schemas`` and is converted into
these at the repository boundary.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Decimal in Python, float in JSON. Rounding is left to the presentation layer.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# --- Award data ---


class Penalty(BaseModel):
    """A penalty rate multiplier (e.g. Saturday 1.5x)."""

    model_config = ConfigDict(frozen=True)

    code: str
    rate: Money
    description: str = ""


class Allowance(BaseModel):
    """A fixed allowance in dollars."""

    model_config = ConfigDict(frozen=True)

    code: str
    amount: Money
    description: str = ""


class PayRate(BaseModel):
    """Point-in-time snapshot of what a classification pays."""

    model_config = ConfigDict(frozen=True)

    base_rate: Money
    casual_loading: Money | None = None
    penalties: tuple[Penalty, ...] = ()
    allowances: tuple[Allowance, ...] = ()
    effective_from: date
    effective_to: date | None = None  # exclusive; None = open-ended
    award_code: str | None = None
    classification_code: str | None = None

    def covers(self, day: date) -> bool:
        """True if ``day`` falls in [effective_from, effective_to)."""
        if day < self.effective_from:
            return False
        return self.effective_to is None or day < self.effective_to


class Classification(BaseModel):
    """A pay grade within an award."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    level: str | None = None
    grade: str | None = None
    year_of_experience: int | None = None
    qualifications: tuple[str, ...] = ()
    parent_code: str | None = None
    valid_from: date
    valid_to: date | None = None
    base_rate: Money

    def as_pay_rate(self, award_code: str | None = None) -> PayRate:
        """This classification version as an effective-dated rate snapshot."""
        return PayRate(
            base_rate=self.base_rate,
            effective_from=self.valid_from,
            effective_to=self.valid_to,
            award_code=award_code,
            classification_code=self.code,
        )


class Award(BaseModel):
    """A published version of a modern award."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    industry: str
    occupation: str | None = None
    effective_from: date
    effective_to: date | None = None
    classifications: tuple[Classification, ...] = ()

    @property
    def is_current(self) -> bool:
        return self.effective_to is None

    def versions_of(self, classification_code: str) -> list[Classification]:
        """All versions of one classification held by this award."""
        return [c for c in self.classifications if c.code == classification_code]


# --- Resolution ---


class ClassificationSelector(BaseModel):
    """Which classification to resolve, and the apprentice modifiers to apply.

    ``code`` selects exactly. Without it, the tree below ``parent_code`` (or
    the whole award) is searched for ``apprentice_year``.
    """

    code: str | None = None
    parent_code: str | None = None
    apprentice_year: int | None = Field(default=None, ge=1)
    is_adult: bool = False
    has_completed_year12: bool = False
    sector: str | None = None

    def describe(self) -> str:
        if self.code:
            return f"code={self.code}"
        parts = []
        if self.parent_code:
            parts.append(f"parent={self.parent_code}")
        if self.apprentice_year is not None:
            parts.append(f"year={self.apprentice_year}")
        return ", ".join(parts) or "no criteria"


class Adjustment(BaseModel):
    """A modifier applied to a resolved base rate."""

    name: str
    kind: str  # "multiply" | "add"
    value: Money
    amount: Money  # dollars added to the rate by this step
    description: str = ""


class ResolvedRate(BaseModel):
    """Outcome of resolving a rate: the statutory snapshot and the adjusted rate."""

    award_code: str
    classification_code: str
    classification_name: str
    as_of: date
    statutory_rate: PayRate
    pay_rate: PayRate
    adjustments: list[Adjustment] = []


# --- Rate templates ---


class RateTemplateStatus(str, Enum):
    DRAFT = "draft"
    VALIDATED = "validated"
    ACTIVE = "active"
    SUPERSEDED = "superseded"


class RateTemplate(BaseModel):
    """An organisation's pricing template.

    Percentage fields are whole percents (15 means 15%).
    """

    id: str
    code: str
    name: str
    base_rate: Money
    base_margin: Money = Decimal("0")
    super_rate: Money = Decimal("0")
    leave_loading: Money = Decimal("0")
    workers_comp_rate: Money = Decimal("0")
    payroll_tax_rate: Money = Decimal("0")
    training_cost_rate: Money = Decimal("0")
    other_costs_rate: Money = Decimal("0")
    casual_loading: Money = Decimal("0")
    funding_offset: Money = Decimal("0")
    effective_from: date
    effective_to: date | None = None
    status: RateTemplateStatus = RateTemplateStatus.DRAFT

    award_code: str
    classification: ClassificationSelector

    def in_force(self, day: date) -> bool:
        if day < self.effective_from:
            return False
        return self.effective_to is None or day < self.effective_to


class TemplateValidation(BaseModel):
    """Result of checking a template against the statutory minimum."""

    is_valid: bool
    minimum_rate: Money
    effective_rate: Money
    difference: Money
    award_code: str
    classification_code: str
    as_of: date
    warnings: list[str] = []
