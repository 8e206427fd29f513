from __future__ import annotations

import json
from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from ethermine_exporter.core.config import Settings
from ethermine_exporter.main import create_app
from ethermine_exporter.models.target import DEFAULT_TARGETS

ETHERMINE = "https://api.ethermine.org"
MINER = "0x1234567890abcdef1234567890abcdef12345678"


def envelope(data: object, status: str = "OK") -> bytes:
    """Encode a payload the way the pool API wraps it."""
    return json.dumps({"status": status, "data": data}).encode()


class FakeUpstream:
    """Stand-in for the pool APIs, served through httpx.MockTransport.

    Register a body (or an exception) per URL; every request is
    recorded in ``calls`` so tests can assert no upstream call happened.
    Unregistered URLs answer 404 with an HTML body, like a real CDN.
    """

    def __init__(self) -> None:
        self._routes: dict[str, tuple[int, bytes] | Exception] = {}
        self.calls: list[httpx.Request] = []

    def add(self, url: str, body: bytes, status_code: int = 200) -> None:
        self._routes[url] = (status_code, body)

    def fail(self, url: str, exc: Exception) -> None:
        self._routes[url] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self._routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, content=b"<html>Not Found</html>")
        if isinstance(route, Exception):
            raise route
        status_code, body = route
        return httpx.Response(status_code, content=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "log_level": "info",
        "log_json": False,
        "debug": False,
        "endpoint": ":8080",
        "upstream_timeout_seconds": 5.0,
        "scrape_timeout_seconds": 5.0,
        "scrape_concurrent": True,
        "targets": DEFAULT_TARGETS,
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def client(settings: Settings, upstream: FakeUpstream) -> Iterator[TestClient]:
    # The context manager runs the lifespan, which builds the HTTP client.
    with TestClient(create_app(settings, transport=upstream.transport)) as test_client:
        yield test_client
