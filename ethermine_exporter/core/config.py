from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Literal

from ethermine_exporter.models.target import DEFAULT_TARGETS, Target

APP_NAME = "ethermine-exporter"
APP_VERSION = "1.2.0"

LogLevel = Literal["debug", "info", "warning", "error"]

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _parse_positive_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number (got {raw!r})") from None
    if value <= 0:
        raise ValueError(f"{name} must be > 0 (got {raw!r})")
    return value


def parse_endpoint(endpoint: str) -> tuple[str, int]:
    """Split a ``host:port`` bind address.

    An empty host (``":8080"``) binds every interface.
    """
    host, sep, port_raw = endpoint.rpartition(":")
    if not sep:
        raise ValueError(f"ENDPOINT must look like host:port (got {endpoint!r})")
    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"ENDPOINT port must be an integer (got {endpoint!r})") from None
    if not 0 < port <= 65535:
        raise ValueError(f"ENDPOINT port must be between 1 and 65535 (got {port})")
    return host.strip("[]") or "0.0.0.0", port


@dataclass(frozen=True)
class Settings:
    log_level: LogLevel
    log_json: bool
    debug: bool
    endpoint: str
    upstream_timeout_seconds: float
    scrape_timeout_seconds: float
    scrape_concurrent: bool
    targets: tuple[Target, ...] = field(default=DEFAULT_TARGETS)

    @property
    def effective_log_level(self) -> LogLevel:
        return "debug" if self.debug else self.log_level

    @property
    def bind(self) -> tuple[str, int]:
        return parse_endpoint(self.endpoint)

    def with_overrides(self, *, debug: bool | None = None, endpoint: str | None = None) -> Settings:
        """Return a copy with command-line overrides applied."""
        changes: dict[str, object] = {}
        if debug is not None:
            changes["debug"] = debug
        if endpoint is not None:
            parse_endpoint(endpoint)
            changes["endpoint"] = endpoint
        return replace(self, **changes)  # type: ignore[arg-type]


def load_settings() -> Settings:
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    endpoint = _getenv("ENDPOINT", ":8080")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    parse_endpoint(endpoint)

    return Settings(  # type: ignore[arg-type]
        log_level=log_level_raw,
        log_json=_parse_bool("LOG_JSON", _getenv("LOG_JSON", "false")),
        debug=_parse_bool("DEBUG", _getenv("DEBUG", "false")),
        endpoint=endpoint,
        upstream_timeout_seconds=_parse_positive_float(
            "UPSTREAM_TIMEOUT_SECONDS", _getenv("UPSTREAM_TIMEOUT_SECONDS", "10")
        ),
        scrape_timeout_seconds=_parse_positive_float(
            "SCRAPE_TIMEOUT_SECONDS", _getenv("SCRAPE_TIMEOUT_SECONDS", "20")
        ),
        scrape_concurrent=_parse_bool(
            "SCRAPE_CONCURRENT", _getenv("SCRAPE_CONCURRENT", "true")
        ),
    )
