"""Per-request scrape pipeline.

  resolve pool -> fetch -> validate -> (reduce) -> assemble

Each step either hands its result to the next or raises an
ExporterError, which ends the request.  Query parameters are checked
before anything touches the network, so a bad request never costs an
upstream call.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from prometheus_client import CollectorRegistry

from ethermine_exporter.core.errors import (
    AssemblyError,
    ClientInputError,
    ExporterError,
    UnknownTargetError,
)
from ethermine_exporter.core.metrics import SCRAPES
from ethermine_exporter.models.target import Target
from ethermine_exporter.models.upstream import (
    MinerStats,
    PoolBasicStats,
    ServerHistory,
    WorkerList,
)
from ethermine_exporter.services.assembler import build_miner_registry, build_pool_registry
from ethermine_exporter.services.catalog import TargetCatalog
from ethermine_exporter.services.reducer import reduce_latest
from ethermine_exporter.services.scraper import Scraper
from ethermine_exporter.services.validator import validate

logger = logging.getLogger(__name__)

POOL_BASIC_PATH = "/poolStats"
POOL_SERVERS_PATH = "/servers/history"
MINER_STATS_PATH = "/miner/{miner}/currentStats"
MINER_WORKERS_PATH = "/miner/{miner}/workers"


def _require(value: str | None, message: str) -> str:
    if not value:
        raise ClientInputError(message)
    return value


def miner_url(target: Target, path_template: str, miner_address: str) -> str:
    # The address is user input; keep it inside one path segment.
    return target.base_address + path_template.format(miner=quote(miner_address, safe=""))


class ScrapeOrchestrator:
    def __init__(self, catalog: TargetCatalog, scraper: Scraper) -> None:
        self._catalog = catalog
        self._scraper = scraper

    async def scrape_pool(self, pool_id: str | None) -> CollectorRegistry:
        try:
            registry = await self._scrape_pool(pool_id)
        except ExporterError as exc:
            self._record_failure("pool", exc, pool=pool_id)
            raise
        SCRAPES.labels(kind="pool", outcome="ok").inc()
        return registry

    async def scrape_miner(
        self, pool_id: str | None, miner_address: str | None
    ) -> CollectorRegistry:
        try:
            registry = await self._scrape_miner(pool_id, miner_address)
        except ExporterError as exc:
            self._record_failure("miner", exc, pool=pool_id, miner=miner_address)
            raise
        SCRAPES.labels(kind="miner", outcome="ok").inc()
        return registry

    async def _scrape_pool(self, pool_id: str | None) -> CollectorRegistry:
        pool_id = _require(pool_id, "Missing pool.")
        target = self._catalog.resolve(pool_id)

        basic_raw, servers_raw = await self._scraper.fetch_all(
            [
                target.base_address + POOL_BASIC_PATH,
                target.base_address + POOL_SERVERS_PATH,
            ]
        )
        stats = validate(basic_raw, PoolBasicStats)
        samples = validate(servers_raw, ServerHistory)

        return build_pool_registry(target, stats, reduce_latest(samples))

    async def _scrape_miner(
        self, pool_id: str | None, miner_address: str | None
    ) -> CollectorRegistry:
        pool_id = _require(pool_id, "Missing pool.")
        miner_address = _require(miner_address, "Missing miner address.")
        try:
            target = self._catalog.resolve(pool_id)
        except UnknownTargetError as exc:
            raise UnknownTargetError(exc.target_id, "Pool not found.", status_code=404) from None

        stats_raw, workers_raw = await self._scraper.fetch_all(
            [
                miner_url(target, MINER_STATS_PATH, miner_address),
                miner_url(target, MINER_WORKERS_PATH, miner_address),
            ]
        )
        stats = validate(stats_raw, MinerStats)
        workers = validate(workers_raw, WorkerList)

        return build_miner_registry(target, miner_address, stats, workers)

    @staticmethod
    def _record_failure(
        kind: str, exc: ExporterError, *, pool: str | None, miner: str | None = None
    ) -> None:
        SCRAPES.labels(kind=kind, outcome=exc.outcome).inc()
        extra = {"pool": pool, "miner": miner}
        if isinstance(exc, AssemblyError):
            logger.error("Failed to assemble %s metrics: %s", kind, exc.detail, extra=extra)
        elif isinstance(exc, ClientInputError):
            logger.debug("Rejected %s scrape: %s", kind, exc.message, extra=extra)
        else:
            logger.info("%s scrape failed: %s", kind.capitalize(), exc.message, extra=extra)
