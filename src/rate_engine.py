"""Rate engine: wires the repository, cache, resolver and calculators together."""

import logging
import time
from datetime import date
from typing import Any

from pydantic import BaseModel

from config.settings import Settings, settings
from src.calculators.charge_rate import ChargeRateResult, CostConfig, calculate_charge_rate
from src.fairwork.client import FairWorkClient
from src.fairwork.repository import AwardRepository
from src.rates.cache import RateCache
from src.rates.modifiers import ModifierTable, load_modifier_table
from src.rates.models import (
    Award,
    ClassificationSelector,
    PayRate,
    RateTemplate,
    ResolvedRate,
    TemplateValidation,
)
from src.rates.resolver import RateResolver
from src.rates.validator import TemplateValidator

logger = logging.getLogger(__name__)


class ChargeRateQuote(BaseModel):
    """A resolved award rate and the charge rate built on it."""

    resolved: ResolvedRate
    charge: ChargeRateResult


class RateEngine:
    """Entry point for callers: resolve rates, price them, check templates.

    Owns the cache instance; construct one engine per process (or per test)
    and close it on shutdown.
    """

    def __init__(
        self,
        repository: AwardRepository,
        modifiers: ModifierTable | None = None,
        client: FairWorkClient | None = None,
    ) -> None:
        self.repository = repository
        self.resolver = RateResolver(repository, modifiers)
        self.validator = TemplateValidator(self.resolver)
        self._client = client

    @classmethod
    def from_settings(cls, config: Settings = settings, client: FairWorkClient | None = None) -> "RateEngine":
        """Build an engine against the configured Fair Work API."""
        client = client or FairWorkClient(
            base_url=config.fairwork_api_url,
            api_key=config.fairwork_api_key,
            environment=config.fairwork_environment,
            timeout=config.fairwork_timeout_seconds,
        )
        cache = RateCache(
            ttl_seconds=config.rate_cache_ttl_seconds,
            max_entries=config.rate_cache_max_entries,
        )
        modifiers = load_modifier_table(config.modifier_table)
        logger.info(
            "Rate engine using %s (%s), cache TTL %.0fs",
            client.base_url, client.environment, cache.ttl_seconds,
        )
        return cls(AwardRepository(client, cache), modifiers, client=client)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def get_active_awards(self) -> list[Award]:
        return await self.repository.get_active_awards()

    async def get_award(self, code: str) -> Award | None:
        return await self.repository.get_award(code)

    async def resolve(self, award_code: str, selector: ClassificationSelector, as_of: date) -> ResolvedRate:
        return await self.resolver.resolve(award_code, selector, as_of)

    async def resolve_rate(self, award_code: str, selector: ClassificationSelector, as_of: date) -> PayRate:
        return await self.resolver.resolve_rate(award_code, selector, as_of)

    def calculate_charge_rate(self, base_rate: Any, cost_config: CostConfig) -> ChargeRateResult:
        return calculate_charge_rate(base_rate, cost_config)

    async def validate_template(self, template: RateTemplate, as_of: date) -> TemplateValidation:
        return await self.validator.validate(template, as_of)

    async def quote(
        self,
        award_code: str,
        selector: ClassificationSelector,
        as_of: date,
        cost_config: CostConfig,
    ) -> ChargeRateQuote:
        """Resolve the award rate, then price it with ``cost_config``."""
        start = time.monotonic()
        resolved = await self.resolve(award_code, selector, as_of)
        charge = calculate_charge_rate(resolved.pay_rate.base_rate, cost_config)
        logger.info(
            "Quoted %s/%s: charge rate %s (%.0fms)",
            award_code,
            resolved.classification_code,
            charge.charge_rate,
            (time.monotonic() - start) * 1000,
        )
        return ChargeRateQuote(resolved=resolved, charge=charge)
