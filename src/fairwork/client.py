"""Async HTTP client for the Fair Work award rates API."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any

import httpx

from config.settings import settings
from src.errors import UpstreamError, UpstreamMalformed, UpstreamUnavailable
from src.fairwork.schemas import (
    AwardSchema,
    BaseRateResponseSchema,
    ClassificationSchema,
    HierarchyNodeSchema,
    PayRateSchema,
    RateValidationResponseSchema,
    parse_payload,
)
from src.rates.hierarchy import ClassificationTree, HierarchyError
from src.rates.models import Award, Classification, PayRate

logger = logging.getLogger(__name__)

_MISSING = object()


class FairWorkClient:
    """Read-only client for award, classification and rate data.

    Every upstream failure surfaces as a typed error: connection problems,
    timeouts and 5xx responses as ``UpstreamUnavailable``; payloads that fail
    schema validation as ``UpstreamMalformed``. Lookups of a single resource
    return None on 404 instead of raising.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        environment: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.fairwork_api_url).rstrip("/")
        self.environment = environment or settings.fairwork_environment
        self.timeout = timeout if timeout is not None else settings.fairwork_timeout_seconds
        key = api_key if api_key is not None else settings.fairwork_api_key
        self._headers = {
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "X-Environment": self.environment,
        }
        self._client = http_client
        self._owns_client = http_client is None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self.timeout,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying connection pool if this client created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FairWorkClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        allow_missing: bool = False,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return decoded JSON (or _MISSING on an allowed 404)."""
        url = f"{self.base_url}{path}"
        try:
            response = await self._http().request(
                method,
                url,
                headers=self._headers,
                json=body,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning("Fair Work API timed out after %.1fs: %s %s", self.timeout, method, path)
            raise UpstreamUnavailable(f"Fair Work API timed out on {path}", path=path) from e
        except httpx.TransportError as e:
            logger.warning("Fair Work API unreachable: %s %s (%s)", method, path, e)
            raise UpstreamUnavailable(f"Fair Work API unreachable on {path}", path=path) from e

        if response.status_code == 404 and allow_missing:
            return _MISSING
        if response.status_code >= 500 or response.status_code == 429:
            logger.warning("Fair Work API returned %d for %s %s", response.status_code, method, path)
            raise UpstreamUnavailable(
                f"Fair Work API returned {response.status_code} on {path}",
                path=path,
                status=response.status_code,
            )
        if response.is_error:
            logger.error("Fair Work API rejected %s %s with %d", method, path, response.status_code)
            raise UpstreamError(
                f"Fair Work API returned {response.status_code} on {path}",
                path=path,
                status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error("Fair Work API returned non-JSON body for %s %s", method, path)
            raise UpstreamMalformed(f"Fair Work API returned a non-JSON body on {path}", path=path) from e

    # --- Awards ---

    async def get_active_awards(self) -> list[Award]:
        """All awards currently in force (no effective_to).

        Superseded versions in the feed are dropped. Two current versions of
        one award code raise ``UpstreamMalformed``.
        """
        payload = await self._request("GET", "/awards/active")
        awards = parse_payload(list[AwardSchema], payload, "active awards")
        result: list[Award] = []
        seen: set[str] = set()
        for award in (a.to_model() for a in awards):
            if not award.is_current:
                logger.debug("Skipping superseded version of %s (ended %s)", award.code, award.effective_to)
                continue
            if award.code in seen:
                logger.error("Fair Work API returned two current versions of %s", award.code)
                raise UpstreamMalformed(
                    f"Fair Work API returned two current versions of award {award.code}",
                    award_code=award.code,
                )
            seen.add(award.code)
            result.append(award)
        logger.info("Fetched %d active awards", len(result))
        return result

    async def get_award(self, code: str) -> Award | None:
        """Current version of an award, or None if the source does not know it."""
        payload = await self._request("GET", f"/awards/{code}", allow_missing=True)
        if payload is _MISSING:
            logger.info("Award %s not found upstream", code)
            return None
        return parse_payload(AwardSchema, payload, "award").to_model()

    # --- Rates ---

    async def get_current_rates(self) -> list[PayRate]:
        payload = await self._request("GET", "/awards/active/rates/current")
        return [r.to_model() for r in parse_payload(list[PayRateSchema], payload, "current rates")]

    async def get_rates_for_date(self, day: date) -> list[PayRate]:
        """Rates effective on ``day`` across all active awards. Future dates are allowed."""
        if not isinstance(day, date):
            raise TypeError(f"Expected a date, got {type(day).__name__}")
        payload = await self._request("GET", f"/awards/active/rates/{day.isoformat()}")
        return [r.to_model() for r in parse_payload(list[PayRateSchema], payload, "rates")]

    # --- Classifications ---

    async def get_classifications(self) -> list[Classification]:
        payload = await self._request("GET", "/awards/active/classifications")
        schemas = parse_payload(list[ClassificationSchema], payload, "classifications")
        return [c.to_model() for c in schemas]

    async def get_classification_hierarchy(self) -> ClassificationTree | None:
        """Classification tree across active awards, or None if unpublished."""
        payload = await self._request(
            "GET", "/awards/active/classifications/hierarchy", allow_missing=True
        )
        if payload is _MISSING:
            return None
        if isinstance(payload, dict):
            payload = [payload]
        roots = parse_payload(list[HierarchyNodeSchema], payload, "classification hierarchy")
        try:
            return ClassificationTree.from_nested(r.model_dump() for r in roots)
        except HierarchyError as e:
            logger.error("Classification hierarchy is not a tree: %s", e)
            raise UpstreamMalformed(f"Classification hierarchy is not a tree: {e}") from e

    # --- Templates ---

    async def validate_rate(
        self,
        rate: Decimal,
        award_code: str,
        classification_code: str,
        day: date | None = None,
    ) -> RateValidationResponseSchema:
        """Ask the source whether ``rate`` meets the minimum for a classification."""
        body: dict[str, Any] = {
            "rate": float(rate),
            "awardCode": award_code,
            "classificationCode": classification_code,
        }
        if day is not None:
            body["date"] = day.isoformat()
        payload = await self._request("POST", "/rates/validate", body=body)
        return parse_payload(RateValidationResponseSchema, payload, "rate validation")

    async def calculate_base_rate(self, template_id: str) -> Decimal | None:
        payload = await self._request("GET", f"/rates/calculate/{template_id}", allow_missing=True)
        if payload is _MISSING:
            return None
        return parse_payload(BaseRateResponseSchema, payload, "base rate").base_rate
