"""Model and payload factories shared across tests."""

from datetime import date
from decimal import Decimal
from typing import Any

from src.rates.models import Award, Classification, ClassificationSelector, PayRate, RateTemplate

BASE_URL = "https://fairwork.test/api"


# --- Wire payload factories (camelCase, as the Fair Work API sends them) ---


def classification_payload(
    code: str = "EL-AP1",
    name: str = "Electrician apprentice year 1",
    base_rate: float = 18.92,
    valid_from: str = "2024-07-01",
    **extra: Any,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "code": code,
        "name": name,
        "validFrom": valid_from,
        "baseRate": base_rate,
    }
    payload.update(extra)
    return payload


def award_payload(code: str = "MA000025", classifications: list[dict] | None = None) -> dict[str, Any]:
    return {
        "code": code,
        "name": "Electrical, Electronic and Communications Contracting Award 2020",
        "industry": "Electrical contracting",
        "effectiveFrom": "2024-07-01",
        "classifications": classifications
        if classifications is not None
        else [
            classification_payload("EL", "Electrical worker", 27.21),
            classification_payload("EL-AP1", "Apprentice year 1", 18.92, parentCode="EL", yearOfExperience=1),
            classification_payload("EL-AP2", "Apprentice year 2", 21.78, parentCode="EL", yearOfExperience=2),
        ],
    }


# --- Internal model factories ---


def make_rate(
    base: str,
    start: date,
    end: date | None = None,
    classification_code: str | None = None,
    award_code: str | None = None,
) -> PayRate:
    return PayRate(
        base_rate=Decimal(base),
        effective_from=start,
        effective_to=end,
        classification_code=classification_code,
        award_code=award_code,
    )


def make_classification(
    code: str,
    base: str,
    valid_from: date = date(2024, 1, 1),
    valid_to: date | None = None,
    parent_code: str | None = None,
    year: int | None = None,
) -> Classification:
    return Classification(
        code=code,
        name=f"Classification {code}",
        base_rate=Decimal(base),
        valid_from=valid_from,
        valid_to=valid_to,
        parent_code=parent_code,
        year_of_experience=year,
    )


def make_award(code: str = "MA000025", classifications: list[Classification] | None = None) -> Award:
    return Award(
        code=code,
        name=f"Award {code}",
        industry="Electrical contracting",
        effective_from=date(2024, 1, 1),
        classifications=tuple(classifications or ()),
    )


def make_template(base: str = "30.00", **overrides: Any) -> RateTemplate:
    fields: dict[str, Any] = {
        "id": "tpl-1",
        "code": "ELEC-STD",
        "name": "Electrical standard",
        "base_rate": Decimal(base),
        "effective_from": date(2024, 1, 1),
        "award_code": "MA000025",
        "classification": ClassificationSelector(code="EL"),
    }
    fields.update(overrides)
    return RateTemplate(**fields)

