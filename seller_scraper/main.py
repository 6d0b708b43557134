from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from seller_scraper.config import configure_logging, get_scraper_settings


def _validate_env() -> None:
    """
    Validate scraper settings at startup.

    Raises RuntimeError for invalid values so the process fails before it
    accepts a run it could never execute.
    """

    settings = get_scraper_settings()
    if settings.browser == "playwright":
        try:
            import playwright.sync_api  # noqa: F401
        except ImportError as exc:
            raise RuntimeError(
                "SCRAPER_BROWSER=playwright requires the 'playwright' package. "
                "Install it or set SCRAPER_BROWSER=static."
            ) from exc


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Stop the background run scheduler on shutdown."""
    settings = get_scraper_settings()
    logging.getLogger(__name__).info(
        "Seller scraper ready browser=%s default_delay_ms=%d",
        settings.browser,
        settings.default_delay_ms,
    )
    try:
        yield
    finally:
        from seller_scraper.services.run_orchestrator import get_run_orchestrator

        if get_run_orchestrator.cache_info().currsize:
            get_run_orchestrator().shutdown()
            logging.getLogger(__name__).info("Run scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging()
    _validate_env()

    application = FastAPI(
        title="Seller Scraper API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from seller_scraper.api.routers import runs_router

    application.include_router(runs_router)
    return application


app = create_app()
