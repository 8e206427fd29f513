from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ethermine_exporter.api.dependencies import get_catalog
from ethermine_exporter.core.config import APP_NAME, APP_VERSION
from ethermine_exporter.services.catalog import TargetCatalog

router = APIRouter(tags=["index"])


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def index(catalog: Annotated[TargetCatalog, Depends(get_catalog)]) -> str:
    """Human-readable landing page listing pools and metric paths."""
    lines = [f"{APP_NAME} version {APP_VERSION}.", "", "Pool IDs:"]
    lines += [f"- {pool_id}" for pool_id in catalog.ids()]
    lines += [
        "",
        "Metrics paths:",
        "- Pool: /pool?pool=<pool>",
        "- Miner: /miner?pool=<pool>&target=<miner-address>",
        "- Exporter: /metrics",
    ]
    return "\n".join(lines) + "\n"
