"""API routes for the award rate engine."""

import logging
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.calculators.annual_charge_rate import (
    AnnualChargeRate,
    AnnualCostConfig,
    BillableOptions,
    WorkConfig,
    calculate_annual_charge_rate,
)
from src.calculators.charge_rate import ChargeRateResult, CostConfig, calculate_charge_rate
from src.errors import AwardNotFound, RateEngineError
from src.rate_engine import ChargeRateQuote
from src.rates.models import (
    Award,
    ClassificationSelector,
    Money,
    RateTemplate,
    ResolvedRate,
    TemplateValidation,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ResolveRequest(BaseModel):
    """Request body for /rates/resolve."""

    award_code: str
    classification: ClassificationSelector
    as_of: date | None = None


class ChargeRateRequest(BaseModel):
    """Request body for /charge-rates/calculate."""

    base_rate: Money
    cost_config: CostConfig


class QuoteRequest(ResolveRequest):
    """Request body for /charge-rates/quote."""

    cost_config: CostConfig


class AnnualChargeRateRequest(BaseModel):
    """Request body for /charge-rates/annual."""

    pay_rate: Money
    work: WorkConfig = WorkConfig()
    costs: AnnualCostConfig = AnnualCostConfig()
    billable: BillableOptions = BillableOptions()
    margin: Money = Decimal("0.15")


class TemplateValidationRequest(BaseModel):
    """Request body for /templates/validate."""

    template: RateTemplate
    as_of: date | None = None


async def rate_engine_error_handler(request: Request, exc: RateEngineError) -> JSONResponse:
    """Map typed engine errors to their HTTP status."""
    if exc.http_status >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse({"error": exc.to_dict()}, status_code=exc.http_status)


@router.get("/health")
async def health(request: Request) -> dict:  # type: ignore[type-arg]
    """Health check endpoint with cache stats."""
    result: dict[str, object] = {"status": "ok"}
    engine = getattr(request.app.state, "engine", None)
    if engine is not None:
        stats = engine.repository.cache.stats()
        result["cache"] = {**stats._asdict(), "hit_rate": round(stats.hit_rate, 3)}
    return result


@router.get("/awards", response_model=list[Award])
async def list_awards(request: Request) -> list[Award]:
    """Awards currently in force."""
    return await request.app.state.engine.get_active_awards()


@router.get("/awards/{code}", response_model=Award)
async def get_award(code: str, request: Request) -> Award:
    """Current version of one award."""
    award = await request.app.state.engine.get_award(code)
    if award is None:
        raise AwardNotFound(code)
    return award


@router.post("/rates/resolve", response_model=ResolvedRate)
async def resolve_rate(body: ResolveRequest, request: Request) -> ResolvedRate:
    """Resolve the applicable award rate for a classification on a date."""
    as_of = body.as_of or date.today()
    return await request.app.state.engine.resolve(body.award_code, body.classification, as_of)


@router.post("/charge-rates/calculate", response_model=ChargeRateResult)
async def charge_rate(body: ChargeRateRequest) -> ChargeRateResult:
    """Price a base rate with on-costs and margin."""
    return calculate_charge_rate(body.base_rate, body.cost_config)


@router.post("/charge-rates/quote", response_model=ChargeRateQuote)
async def quote(body: QuoteRequest, request: Request) -> ChargeRateQuote:
    """Resolve an award rate and price it in one call."""
    as_of = body.as_of or date.today()
    return await request.app.state.engine.quote(
        body.award_code, body.classification, as_of, body.cost_config
    )


@router.post("/charge-rates/annual", response_model=AnnualChargeRate)
async def annual_charge_rate(body: AnnualChargeRateRequest) -> AnnualChargeRate:
    """Annualised charge rate over billable hours."""
    return calculate_annual_charge_rate(
        body.pay_rate, body.work, body.costs, body.billable, body.margin
    )


@router.post("/templates/validate", response_model=TemplateValidation)
async def validate_template(body: TemplateValidationRequest, request: Request) -> TemplateValidation:
    """Check a rate template against the award minimum."""
    as_of = body.as_of or date.today()
    return await request.app.state.engine.validate_template(body.template, as_of)
