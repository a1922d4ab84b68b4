"""Wire schemas for the Fair Work rates API.

The upstream speaks camelCase JSON with float money values. These models
validate a response before anything else touches it and convert it into the
internal types in ``src.rates.models``. A payload that fails validation raises
``UpstreamMalformed``; it is never partially accepted.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from src.errors import UpstreamMalformed
from src.rates.models import Allowance, Award, Classification, PayRate, Penalty

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ClassificationSchema(_WireModel):
    code: str
    name: str
    level: str | None = None
    grade: str | None = None
    year_of_experience: int | None = None
    qualifications: list[str] | None = None
    parent_code: str | None = None
    valid_from: date
    valid_to: date | None = None
    base_rate: Decimal = Field(gt=0)

    def to_model(self) -> Classification:
        return Classification(
            code=self.code,
            name=self.name,
            level=self.level,
            grade=self.grade,
            year_of_experience=self.year_of_experience,
            qualifications=tuple(self.qualifications or ()),
            parent_code=self.parent_code,
            valid_from=self.valid_from,
            valid_to=self.valid_to,
            base_rate=self.base_rate,
        )


class AwardSchema(_WireModel):
    code: str
    name: str
    industry: str
    occupation: str | None = None
    effective_from: date
    effective_to: date | None = None
    description: str | None = None
    coverage: str | None = None
    classifications: list[ClassificationSchema]

    def to_model(self) -> Award:
        return Award(
            code=self.code,
            name=self.name,
            industry=self.industry,
            occupation=self.occupation,
            effective_from=self.effective_from,
            effective_to=self.effective_to,
            classifications=tuple(c.to_model() for c in self.classifications),
        )


class PenaltySchema(_WireModel):
    code: str
    rate: Decimal
    description: str = ""


class AllowanceSchema(_WireModel):
    code: str
    amount: Decimal
    description: str = ""


class PayRateSchema(_WireModel):
    base_rate: Decimal = Field(gt=0)
    casual_loading: Decimal | None = None
    penalties: list[PenaltySchema] | None = None
    allowances: list[AllowanceSchema] | None = None
    effective_from: date
    effective_to: date | None = None
    award_code: str | None = None
    classification_code: str | None = None

    def to_model(self) -> PayRate:
        return PayRate(
            base_rate=self.base_rate,
            casual_loading=self.casual_loading,
            penalties=tuple(Penalty(**p.model_dump()) for p in self.penalties or ()),
            allowances=tuple(Allowance(**a.model_dump()) for a in self.allowances or ()),
            effective_from=self.effective_from,
            effective_to=self.effective_to,
            award_code=self.award_code,
            classification_code=self.classification_code,
        )


class HierarchyNodeSchema(_WireModel):
    code: str
    name: str
    children: list["HierarchyNodeSchema"] | None = None


class RateValidationResponseSchema(_WireModel):
    is_valid: bool
    minimum_rate: Decimal
    difference: Decimal


class BaseRateResponseSchema(_WireModel):
    base_rate: Decimal


def parse_payload(schema: type[T] | Any, payload: Any, what: str) -> T:
    """Validate ``payload`` against ``schema`` (a model or a typing form like list[X]).

    Raises:
        UpstreamMalformed: if validation fails.
    """
    try:
        return TypeAdapter(schema).validate_python(payload)
    except ValidationError as e:
        logger.error("Malformed %s payload from Fair Work API: %d error(s)", what, e.error_count())
        raise UpstreamMalformed(
            f"Fair Work API returned a malformed {what} payload",
            errors=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e
