from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ethermine_exporter.api.health import router as health_router
from ethermine_exporter.api.index import router as index_router
from ethermine_exporter.api.metrics_endpoint import router as metrics_router
from ethermine_exporter.api.scrape import router as scrape_router
from ethermine_exporter.core.config import APP_NAME, APP_VERSION, Settings, load_settings
from ethermine_exporter.core.errors import ExporterError
from ethermine_exporter.core.logging import setup_logging
from ethermine_exporter.middleware.metrics import MetricsMiddleware
from ethermine_exporter.middleware.request_context import (
    RequestContextMiddleware,
    install_request_id_filter,
)
from ethermine_exporter.services.catalog import TargetCatalog
from ethermine_exporter.services.orchestrator import ScrapeOrchestrator
from ethermine_exporter.services.scraper import Scraper, build_http_client

logger = logging.getLogger(__name__)


async def _exporter_error_handler(_request: Request, exc: ExporterError) -> PlainTextResponse:
    return PlainTextResponse(exc.render(), status_code=exc.status_code)


async def _http_error_handler(
    _request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    if exc.status_code == 404:
        body = "404 - Page not found.\n"
    else:
        body = f"{exc.status_code} - {exc.detail}\n"
    return PlainTextResponse(body, status_code=exc.status_code, headers=exc.headers)


def create_app(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> FastAPI:
    """Build the exporter application.

    ``settings`` is the only configuration the app reads.  ``transport``
    replaces the network for the upstream HTTP client (tests).
    """
    catalog = TargetCatalog(settings.targets)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # One pooled client for all upstream calls, closed on shutdown.
        async with build_http_client(settings, transport) as client:
            scraper = Scraper(
                client,
                deadline_seconds=settings.scrape_timeout_seconds,
                concurrent=settings.scrape_concurrent,
            )
            app.state.orchestrator = ScrapeOrchestrator(catalog, scraper)
            yield

    app = FastAPI(
        title=APP_NAME,
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.catalog = catalog

    app.add_exception_handler(ExporterError, _exporter_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    # Middleware execution order: last-added runs first (outermost layer).
    # RequestContext (outermost) → Metrics → route handler
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(index_router)
    app.include_router(scrape_router)
    app.include_router(metrics_router)
    app.include_router(health_router)

    return app


def build_app() -> FastAPI:
    """Uvicorn factory: configure logging from the environment and build the app."""
    settings = load_settings()
    setup_logging(settings.effective_log_level, json_format=settings.log_json)
    install_request_id_filter()
    logger.info(
        "%s %s configured  pools=%d log_level=%s debug=%s concurrent=%s",
        APP_NAME,
        APP_VERSION,
        len(settings.targets),
        settings.effective_log_level,
        settings.debug,
        settings.scrape_concurrent,
    )
    return create_app(settings)
