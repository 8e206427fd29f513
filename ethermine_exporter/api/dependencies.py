from __future__ import annotations

from fastapi import Request

from ethermine_exporter.core.config import Settings
from ethermine_exporter.services.catalog import TargetCatalog
from ethermine_exporter.services.orchestrator import ScrapeOrchestrator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> TargetCatalog:
    return request.app.state.catalog


def get_orchestrator(request: Request) -> ScrapeOrchestrator:
    """The orchestrator is created in the app lifespan with the shared HTTP client."""
    return request.app.state.orchestrator
