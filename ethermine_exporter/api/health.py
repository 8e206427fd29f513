"""Liveness endpoint.

The exporter holds no connections of its own between scrapes, so being
able to answer is the whole health check.  Upstream availability is
reported per scrape (HTTP 500 on /pool or /miner) and through
upstream_requests_total on /metrics, not here: a pool API outage is not
a reason to restart the exporter.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ethermine_exporter.api.dependencies import get_catalog
from ethermine_exporter.services.catalog import TargetCatalog

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(catalog: Annotated[TargetCatalog, Depends(get_catalog)]) -> dict:
    return {"status": "ok", "pools": len(catalog)}
