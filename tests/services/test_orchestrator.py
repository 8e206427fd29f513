from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest
from prometheus_client import REGISTRY

from ethermine_exporter.core.errors import (
    ClientInputError,
    UnknownTargetError,
    UpstreamNoDataError,
)
from ethermine_exporter.models.target import DEFAULT_TARGETS
from ethermine_exporter.services.catalog import TargetCatalog
from ethermine_exporter.services.orchestrator import (
    MINER_STATS_PATH,
    ScrapeOrchestrator,
    miner_url,
)
from tests.conftest import envelope


class StubScraper:
    """Returns canned bodies by URL and records what was asked for."""

    def __init__(self, bodies: dict[str, bytes] | None = None) -> None:
        self.bodies = bodies or {}
        self.requested: list[list[str]] = []

    async def fetch_all(self, urls: Sequence[str]) -> list[bytes]:
        self.requested.append(list(urls))
        return [self.bodies[url] for url in urls]


def _orchestrator(scraper: StubScraper) -> ScrapeOrchestrator:
    return ScrapeOrchestrator(TargetCatalog(DEFAULT_TARGETS), scraper)  # type: ignore[arg-type]


def _scrapes(kind: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value("scrapes_total", {"kind": kind, "outcome": outcome})
    return value if value is not None else 0.0


@pytest.mark.parametrize("pool", [None, ""])
def test_pool_missing_parameter(pool: str | None) -> None:
    scraper = StubScraper()
    with pytest.raises(ClientInputError, match="Missing pool."):
        asyncio.run(_orchestrator(scraper).scrape_pool(pool))
    assert scraper.requested == []


def test_pool_unknown_is_400_without_upstream_call() -> None:
    scraper = StubScraper()
    with pytest.raises(UnknownTargetError) as excinfo:
        asyncio.run(_orchestrator(scraper).scrape_pool("doesnotexist"))
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Invalid pool."
    assert scraper.requested == []


def test_miner_unknown_pool_is_404() -> None:
    scraper = StubScraper()
    with pytest.raises(UnknownTargetError) as excinfo:
        asyncio.run(_orchestrator(scraper).scrape_miner("doesnotexist", "0xabc"))
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Pool not found."
    assert scraper.requested == []


def test_miner_parameters_checked_before_pool_lookup() -> None:
    scraper = StubScraper()
    with pytest.raises(ClientInputError, match="Missing miner address.") as excinfo:
        asyncio.run(_orchestrator(scraper).scrape_miner("doesnotexist", None))
    assert excinfo.value.status_code == 400


def test_pool_requests_both_endpoints() -> None:
    base = "https://api.ethermine.org"
    scraper = StubScraper(
        {
            base + "/poolStats": envelope({"poolStats": {"hashRate": 1}}),
            base + "/servers/history": envelope([]),
        }
    )
    registry = asyncio.run(_orchestrator(scraper).scrape_pool("ethermine"))
    assert scraper.requested == [[base + "/poolStats", base + "/servers/history"]]
    assert registry.get_sample_value(
        "ethermine_pool_hashrate_hps", {"pool": "ethermine", "pool_name": "Ethermine"}
    ) == 1


def test_no_data_outcome_is_counted() -> None:
    base = "https://api-zcash.flypool.org"
    scraper = StubScraper(
        {
            base + "/miner/t1new/currentStats": envelope("NO DATA"),
            base + "/miner/t1new/workers": envelope("NO DATA"),
        }
    )
    before = _scrapes("miner", "no_data")
    with pytest.raises(UpstreamNoDataError):
        asyncio.run(_orchestrator(scraper).scrape_miner("flypool-zcash", "t1new"))
    assert _scrapes("miner", "no_data") - before == 1


def test_miner_url_escapes_address() -> None:
    target = TargetCatalog(DEFAULT_TARGETS).resolve("ethermine")
    url = miner_url(target, MINER_STATS_PATH, "../poolStats?x=1")
    assert url == "https://api.ethermine.org/miner/..%2FpoolStats%3Fx%3D1/currentStats"


def test_miner_url_keeps_plain_address() -> None:
    target = TargetCatalog(DEFAULT_TARGETS).resolve("ethermine")
    url = miner_url(target, MINER_STATS_PATH, "0xAbC123")
    assert url == "https://api.ethermine.org/miner/0xAbC123/currentStats"
