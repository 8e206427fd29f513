"""The exporter's own metrics endpoint.

/metrics serves the process-wide default registry: request counts and
latency, upstream call counts and latency, scrape outcomes.  Pool and
miner data is served by /pool and /miner from per-request registries
and never appears here.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose the exporter's own metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
