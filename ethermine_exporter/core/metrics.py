"""The exporter's own instrumentation.

These metrics live in the default ``prometheus_client.REGISTRY`` and are
served on /metrics.  They describe the exporter process (how many
scrapes it served, how slow the upstream API was), not the pools.

Pool and miner data never goes here.  Those values are assembled into
a fresh ``CollectorRegistry`` for each /pool or /miner request (see
services/assembler.py), so one process can serve any number of pools
and miner addresses without the default registry accumulating a label
set per miner it has ever seen.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # A scrape is dominated by the upstream round-trips, so the buckets
    # reach well past typical API latencies.
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Upstream API metrics (populated by the Scraper)
# ---------------------------------------------------------------------------

UPSTREAM_REQUESTS = Counter(
    "upstream_requests_total",
    "Requests sent to pool APIs by host and outcome",
    ["host", "outcome"],  # "ok" or "transport_error"
)

UPSTREAM_DURATION = Histogram(
    "upstream_request_duration_seconds",
    "Pool API request duration in seconds",
    ["host"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# ---------------------------------------------------------------------------
# Scrape outcomes (populated by the ScrapeOrchestrator)
# ---------------------------------------------------------------------------

SCRAPES = Counter(
    "scrapes_total",
    "Pool and miner scrapes by kind and outcome",
    ["kind", "outcome"],  # kind: "pool" | "miner"; outcome: "ok" or ExporterError.outcome
)
