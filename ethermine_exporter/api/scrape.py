"""Scrape endpoints: /pool and /miner.

Prometheus calls these with the pool (and miner address) as query
parameters, typically through a scrape config like:

  - job_name: ethermine-miner
    metrics_path: /miner
    params:
      pool: [ethermine]
    static_configs:
      - targets: ["0x1234..."]
    relabel_configs:
      - source_labels: [__address__]
        target_label: __param_target
      - target_label: __address__
        replacement: exporter:8080

Each request builds its own registry; errors raised by the orchestrator
are rendered as plain text by the ExporterError handler in main.py.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from ethermine_exporter.api.dependencies import get_orchestrator
from ethermine_exporter.services.orchestrator import ScrapeOrchestrator

router = APIRouter(tags=["scrape"])


def _render(registry: CollectorRegistry) -> Response:
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


@router.get("/pool", include_in_schema=False)
async def pool_metrics(
    orchestrator: Annotated[ScrapeOrchestrator, Depends(get_orchestrator)],
    pool: str | None = None,
) -> Response:
    """Pool-wide hash rate, miner/worker counts, prices and per-server hash rate."""
    return _render(await orchestrator.scrape_pool(pool))


@router.get("/miner", include_in_schema=False)
async def miner_metrics(
    orchestrator: Annotated[ScrapeOrchestrator, Depends(get_orchestrator)],
    pool: str | None = None,
    target: str | None = None,
) -> Response:
    """Hash rate, shares, balances and income for one miner address and its workers."""
    return _render(await orchestrator.scrape_miner(pool, target))
