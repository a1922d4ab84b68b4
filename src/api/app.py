"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config.settings import settings
from src.api.routes import rate_engine_error_handler, router
from src.errors import RateEngineError
from src.rate_engine import RateEngine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: build the rate engine and its cache. Shutdown: close the upstream client."""
    logging.basicConfig(level=settings.log_level)
    logger.info("Starting up...")

    app.state.engine = RateEngine.from_settings(settings)

    yield

    logger.info("Shutting down...")
    await app.state.engine.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="GTO Award Rate Engine", lifespan=lifespan)
    app.add_exception_handler(RateEngineError, rate_engine_error_handler)  # type: ignore[arg-type]
    app.include_router(router)
    return app
