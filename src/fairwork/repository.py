"""Cached, read-only access to award, classification and rate data."""

import logging
from datetime import date
from decimal import Decimal

from src.fairwork.client import FairWorkClient
from src.fairwork.schemas import RateValidationResponseSchema
from src.rates.cache import RateCache, make_key
from src.rates.hierarchy import ClassificationTree
from src.rates.models import Award, Classification, PayRate

logger = logging.getLogger(__name__)

_PREFIX = "fairwork"


class AwardRepository:
    """Read-through layer over ``FairWorkClient``.

    Every lookup goes through the injected ``RateCache``; identical queries
    inside the TTL reuse the first answer and concurrent identical misses
    share one upstream call. Template validation and base-rate calculation
    pass straight through, since their answers depend on mutable templates.
    """

    def __init__(self, client: FairWorkClient, cache: RateCache) -> None:
        self._client = client
        self._cache = cache

    @property
    def cache(self) -> RateCache:
        return self._cache

    async def get_active_awards(self) -> list[Award]:
        return await self._cache.get_or_compute(
            make_key(f"{_PREFIX}:awards:active"),
            self._client.get_active_awards,
        )

    async def get_award(self, code: str) -> Award | None:
        return await self._cache.get_or_compute(
            make_key(f"{_PREFIX}:award:{code}"),
            lambda: self._client.get_award(code),
        )

    async def get_current_rates(self) -> list[PayRate]:
        return await self._cache.get_or_compute(
            make_key(f"{_PREFIX}:rates:current"),
            self._client.get_current_rates,
        )

    async def get_rates_for_date(self, day: date) -> list[PayRate]:
        return await self._cache.get_or_compute(
            make_key(f"{_PREFIX}:rates", date=day),
            lambda: self._client.get_rates_for_date(day),
        )

    async def get_classifications(self) -> list[Classification]:
        return await self._cache.get_or_compute(
            make_key(f"{_PREFIX}:classifications"),
            self._client.get_classifications,
        )

    async def get_classification_hierarchy(self) -> ClassificationTree | None:
        return await self._cache.get_or_compute(
            make_key(f"{_PREFIX}:classifications:hierarchy"),
            self._client.get_classification_hierarchy,
        )

    async def get_pay_rates(self, award: Award, classification_code: str, as_of: date) -> list[PayRate]:
        """Every known rate snapshot for one classification of ``award``.

        Snapshots come from the classification's versions inside the award,
        plus any rates published for ``as_of`` that name both this award and
        the classification (these carry penalties and allowances). Classification
        codes repeat across awards, so feed entries without an award code are
        left out.
        """
        snapshots = [c.as_pay_rate(award.code) for c in award.versions_of(classification_code)]
        published = await self.get_rates_for_date(as_of)
        snapshots.extend(
            r for r in published
            if r.award_code == award.code and r.classification_code == classification_code
        )
        logger.debug(
            "Collected %d rate snapshots for %s/%s", len(snapshots), award.code, classification_code
        )
        return snapshots

    async def validate_rate(
        self,
        rate: Decimal,
        award_code: str,
        classification_code: str,
        day: date | None = None,
    ) -> RateValidationResponseSchema:
        return await self._client.validate_rate(rate, award_code, classification_code, day)

    async def calculate_base_rate(self, template_id: str) -> Decimal | None:
        return await self._client.calculate_base_rate(template_id)

    def invalidate_award(self, code: str) -> bool:
        """Forget a cached award, e.g. after a Fair Work variation is published."""
        return self._cache.invalidate(make_key(f"{_PREFIX}:award:{code}"))

    def invalidate_all(self) -> int:
        return self._cache.invalidate_prefix(f"{_PREFIX}:")
