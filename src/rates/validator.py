"""Rate template compliance: a template must pay at least the award minimum."""

import logging
from datetime import date
from decimal import Decimal

from src.calculators.template_rate import calculate_template_charge_rate
from src.errors import InvalidStatusTransition, RateEngineError, ResolverError
from src.rates.models import RateTemplate, RateTemplateStatus, TemplateValidation
from src.rates.resolver import RateResolver

logger = logging.getLogger(__name__)

# Casual employees are entitled to at least a 25% loading.
MIN_CASUAL_LOADING = Decimal("25")

_TRANSITIONS: dict[RateTemplateStatus, frozenset[RateTemplateStatus]] = {
    RateTemplateStatus.DRAFT: frozenset({RateTemplateStatus.VALIDATED}),
    RateTemplateStatus.VALIDATED: frozenset({RateTemplateStatus.ACTIVE, RateTemplateStatus.DRAFT}),
    RateTemplateStatus.ACTIVE: frozenset({RateTemplateStatus.SUPERSEDED}),
    RateTemplateStatus.SUPERSEDED: frozenset(),
}


def transition(template: RateTemplate, status: RateTemplateStatus) -> RateTemplate:
    """Return a copy of ``template`` moved to ``status``.

    Raises:
        InvalidStatusTransition: the lifecycle does not allow the move.
    """
    if status not in _TRANSITIONS[template.status]:
        raise InvalidStatusTransition(
            f"Template {template.id} cannot move from {template.status.value} to {status.value}",
            template_id=template.id,
            current=template.status.value,
            requested=status.value,
        )
    return template.model_copy(update={"status": status})


class TemplateValidator:
    """Checks rate templates against the statutory floor from the resolver."""

    def __init__(self, resolver: RateResolver) -> None:
        self._resolver = resolver

    async def validate(self, template: RateTemplate, as_of: date) -> TemplateValidation:
        """Compare the template's hourly rate with the award minimum on ``as_of``.

        Raises:
            ResolverError: the minimum could not be resolved. The underlying
                error is chained; a compliance check never passes on an
                unknown floor.
            InvalidBaseRate, InvalidCostConfig: the template itself is invalid.
        """
        try:
            resolved = await self._resolver.resolve(template.award_code, template.classification, as_of)
        except RateEngineError as e:
            logger.warning(
                "Cannot validate template %s: minimum for %s unresolved (%s)",
                template.id, template.award_code, e.code,
            )
            raise ResolverError(
                f"Cannot resolve the minimum rate for template {template.id}: {e.message}",
                cause=e,
                template_id=template.id,
            ) from e

        minimum = resolved.pay_rate.base_rate
        effective = calculate_template_charge_rate(template)
        difference = effective - minimum

        warnings: list[str] = []
        if template.casual_loading and template.casual_loading < MIN_CASUAL_LOADING:
            warnings.append(f"Casual loading {template.casual_loading}% is below {MIN_CASUAL_LOADING}%")
        if not template.in_force(as_of):
            warnings.append(f"Template is not in force on {as_of.isoformat()}")

        result = TemplateValidation(
            is_valid=effective >= minimum,
            minimum_rate=minimum,
            effective_rate=effective,
            difference=difference,
            award_code=template.award_code,
            classification_code=resolved.classification_code,
            as_of=as_of,
            warnings=warnings,
        )
        logger.info(
            "Template %s %s: effective %s vs minimum %s",
            template.id, "passes" if result.is_valid else "fails", effective, minimum,
        )
        return result

    async def validate_and_mark(self, template: RateTemplate, as_of: date) -> tuple[RateTemplate, TemplateValidation]:
        """Validate a draft and, if it passes, move it to ``validated``."""
        result = await self.validate(template, as_of)
        if result.is_valid and template.status == RateTemplateStatus.DRAFT:
            template = transition(template, RateTemplateStatus.VALIDATED)
        return template, result
