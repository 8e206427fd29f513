"""HTTP access to the pool APIs.

The Scraper only moves bytes.  It does not look at the status code or
the body: a 502 page from a load balancer is returned like any other
body and rejected later by the validator.  Anything that stops us from
getting a body at all (DNS, refused connection, TLS, timeout, broken
read) becomes an UpstreamTransportError.

DEADLINES
-----------
Two limits apply to every scrape:

  - each upstream call has its own timeout (UPSTREAM_TIMEOUT_SECONDS),
    enforced by httpx;
  - all upstream calls made for one /pool or /miner request share one
    deadline (SCRAPE_TIMEOUT_SECONDS), enforced by asyncio.wait_for.

If the inbound request is cancelled (client went away, server shutting
down) the cancellation reaches the upstream calls through the same
task tree, so no call outlives the request that asked for it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence

import httpx

from ethermine_exporter.core.config import APP_NAME, APP_VERSION, Settings
from ethermine_exporter.core.errors import UpstreamTransportError
from ethermine_exporter.core.metrics import UPSTREAM_DURATION, UPSTREAM_REQUESTS

logger = logging.getLogger(__name__)


def build_http_client(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """Create the shared client used for every upstream call.

    ``transport`` is only passed by tests (httpx.MockTransport).
    """
    return httpx.AsyncClient(
        headers={
            "Accept": "application/json",
            "User-Agent": f"{APP_NAME}/{APP_VERSION}",
        },
        timeout=settings.upstream_timeout_seconds,
        follow_redirects=True,
        transport=transport,
    )


def _describe(exc: Exception) -> str:
    # httpx timeouts often carry an empty message
    return str(exc) or type(exc).__name__


class Scraper:
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        deadline_seconds: float,
        concurrent: bool = True,
    ) -> None:
        self._client = client
        self._deadline_seconds = deadline_seconds
        self._concurrent = concurrent

    async def fetch(self, url: str) -> bytes:
        """GET one URL and return the raw body."""
        try:
            request = self._client.build_request("GET", url)
        except httpx.InvalidURL as exc:
            raise UpstreamTransportError(_describe(exc)) from exc

        host = request.url.host
        logger.debug("Sending scrape request: %s", url, extra={"upstream_url": url})
        start = time.monotonic()
        try:
            response = await self._client.send(request)
        except httpx.HTTPError as exc:
            UPSTREAM_REQUESTS.labels(host=host, outcome="transport_error").inc()
            logger.warning(
                "Failed to scrape target %s: %s",
                url,
                _describe(exc),
                extra={"upstream_url": url},
            )
            raise UpstreamTransportError(_describe(exc)) from exc
        finally:
            UPSTREAM_DURATION.labels(host=host).observe(time.monotonic() - start)

        UPSTREAM_REQUESTS.labels(host=host, outcome="ok").inc()
        if not response.is_success:
            logger.debug(
                "Upstream answered %d for %s",
                response.status_code,
                url,
                extra={"upstream_url": url},
            )
        return response.content

    async def fetch_all(self, urls: Sequence[str]) -> list[bytes]:
        """Fetch several URLs under one shared deadline.

        Bodies are returned in the order of ``urls``.  The first failure
        (in ``urls`` order) is raised and the remaining calls are
        cancelled.
        """
        if self._concurrent:
            work = self._fetch_concurrently(urls)
        else:
            work = self._fetch_sequentially(urls)
        try:
            return await asyncio.wait_for(work, timeout=self._deadline_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "Scrape deadline of %gs exceeded for %s", self._deadline_seconds, list(urls)
            )
            raise UpstreamTransportError(
                f"deadline of {self._deadline_seconds:g}s exceeded"
            ) from None

    async def _fetch_sequentially(self, urls: Sequence[str]) -> list[bytes]:
        return [await self.fetch(url) for url in urls]

    async def _fetch_concurrently(self, urls: Sequence[str]) -> list[bytes]:
        if not urls:
            return []
        tasks = [asyncio.ensure_future(self.fetch(url)) for url in urls]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        # Retrieve every exception so none is reported as "never retrieved".
        failures = [
            task.exception()
            for task in tasks
            if task.done() and not task.cancelled()
        ]
        for failure in failures:
            if failure is not None:
                raise failure
        return [task.result() for task in tasks]
