"""Build a request-scoped Prometheus registry from validated pool data.

WHY A NEW REGISTRY PER REQUEST
--------------------------------
prometheus_client's default REGISTRY is process-wide.  If /miner
requests wrote into it, every miner address ever scraped would stay in
the output forever, and scraping pool A would also return pool B's
last values.  Instead, each /pool or /miner request gets its own
``CollectorRegistry``: it is filled here, rendered once by
``generate_latest(registry)`` and dropped.

LABELS
--------
Every metric in a registry carries the same constant labels that
identify the scrape target, e.g. for a miner scrape:

  ethermine_miner_shares_valid{miner="0xabc",pool="ethermine"} 42.0

so the output is self-describing even without Prometheus relabeling.
Collections (servers, workers) add one variable label on top.

prometheus_client has no "const labels" option, so constant labels are
declared as ordinary label names and bound once with ``.labels(...)``.

NAMING
--------
``{namespace}_{subsystem}_{name}``, e.g. ``ethermine_pool_hashrate_hps``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from prometheus_client import CollectorRegistry, Gauge

from ethermine_exporter.core.config import APP_VERSION
from ethermine_exporter.core.errors import AssemblyError
from ethermine_exporter.models.target import Target
from ethermine_exporter.models.upstream import (
    MinerStats,
    PoolBasicStats,
    ServerSample,
    WorkerSample,
)

NAMESPACE = "ethermine"

# Upstream income rates are per minute; the exposed rates are per second.
SECONDS_PER_MINUTE = 60


class GaugeFamily:
    """A gauge with one variable label and its constant labels pre-bound."""

    def __init__(
        self,
        gauge: Gauge,
        full_name: str,
        const_labels: Mapping[str, str],
        label_name: str,
    ) -> None:
        self._gauge = gauge
        self._full_name = full_name
        self._const_labels = dict(const_labels)
        self._label_name = label_name
        self._seen: set[str] = set()

    def set(self, key: str, value: float) -> None:
        if key in self._seen:
            raise AssemblyError(
                f"{self._full_name}: duplicate {self._label_name}={key!r}"
            )
        self._seen.add(key)
        self._gauge.labels(**self._const_labels, **{self._label_name: key}).set(value)


class MetricSet:
    """A fresh registry plus the constant labels every metric in it carries.

    The registry holds pool and miner data only.  Process and runtime
    collectors are not registered here; the exporter's own metrics live
    on the default registry and are served at /metrics.
    """

    def __init__(self, const_labels: Mapping[str, str], *, namespace: str = NAMESPACE) -> None:
        self.registry = CollectorRegistry()
        self.const_labels = dict(const_labels)
        self._namespace = namespace

    def _register(
        self,
        subsystem: str,
        name: str,
        documentation: str,
        label_names: Iterable[str],
    ) -> tuple[Gauge, str]:
        full_name = f"{self._namespace}_{subsystem}_{name}"
        try:
            gauge = Gauge(
                name,
                documentation,
                labelnames=list(label_names),
                namespace=self._namespace,
                subsystem=subsystem,
                registry=self.registry,
            )
        except ValueError as exc:
            # Duplicated timeseries or an invalid label name.
            raise AssemblyError(f"{full_name}: {exc}") from exc
        return gauge, full_name

    def gauge(
        self,
        subsystem: str,
        name: str,
        documentation: str,
        extra_labels: Mapping[str, str] | None = None,
    ) -> Gauge:
        """Register a single-series gauge and return the bound series."""
        labels = {**self.const_labels, **(extra_labels or {})}
        gauge, _ = self._register(subsystem, name, documentation, labels)
        return gauge.labels(**labels) if labels else gauge

    def gauge_family(
        self,
        subsystem: str,
        name: str,
        documentation: str,
        label_name: str,
    ) -> GaugeFamily:
        """Register a gauge with one variable label.

        A family nobody sets still renders its HELP/TYPE lines, just
        without samples.
        """
        if label_name in self.const_labels:
            raise AssemblyError(
                f"{self._namespace}_{subsystem}_{name}: label {label_name!r} "
                "is already a constant label"
            )
        gauge, full_name = self._register(
            subsystem, name, documentation, [*self.const_labels, label_name]
        )
        return GaugeFamily(gauge, full_name, self.const_labels, label_name)

    def exporter_info(self) -> None:
        self.gauge(
            "exporter", "info", "Metadata about the exporter.", {"version": APP_VERSION}
        ).set(1)


# ---------------------------------------------------------------------------
# Pool
# ---------------------------------------------------------------------------


def build_pool_registry(
    target: Target,
    stats: PoolBasicStats,
    servers: Mapping[str, ServerSample],
) -> CollectorRegistry:
    """Registry for /pool.  ``servers`` is already reduced to one sample each."""
    metrics = MetricSet({"pool": target.id, "pool_name": target.name})
    metrics.exporter_info()

    metrics.gauge(
        "pool", "info", "Metadata about the pool.", {"currency": target.currency.symbol}
    ).set(1)

    metrics.gauge(
        "pool", "hashrate_hps", "Current total hash rate of the pool (H/s)."
    ).set(stats.pool_stats.hash_rate)
    metrics.gauge(
        "pool", "miner_count", "Current total number of miners in the pool."
    ).set(stats.pool_stats.miners)
    metrics.gauge(
        "pool", "worker_count", "Current total number of workers in the pool."
    ).set(stats.pool_stats.workers)
    metrics.gauge("pool", "price_usd", "Current price (USD).").set(stats.price.usd)
    metrics.gauge("pool", "price_btc", "Current price (BTC).").set(stats.price.btc)

    server_hash_rate = metrics.gauge_family(
        "pool", "server_hashrate_hps", "Current hash rate per server (H/s).", "server"
    )
    for server, sample in servers.items():
        server_hash_rate.set(server, sample.hash_rate)

    return metrics.registry


# ---------------------------------------------------------------------------
# Miner
# ---------------------------------------------------------------------------

_MINER_GAUGES: tuple[tuple[str, str, Callable[[MinerStats], float]], ...] = (
    (
        "last_seen_seconds",
        "Delta between time of last statistics entry and when any workers "
        "from the miner was last seen (s).",
        lambda s: s.timestamp - s.last_seen_timestamp,
    ),
    (
        "hashrate_reported_hps",
        "Total hash rate for a miner as reported by the miner (H/s).",
        lambda s: s.reported_hash_rate,
    ),
    (
        "hashrate_current_hps",
        "Total current hash rate for a miner (H/s).",
        lambda s: s.current_hash_rate,
    ),
    (
        "hashrate_average_hps",
        "Total average hash rate for a miner (H/s).",
        lambda s: s.average_hash_rate,
    ),
    ("shares_valid", "Total number of valid shares for a miner.", lambda s: s.valid_shares),
    (
        "shares_invalid",
        "Total number of invalid shares for a miner.",
        lambda s: s.invalid_shares,
    ),
    ("shares_stale", "Total number of stale shares for a miner.", lambda s: s.stale_shares),
    ("workers_active", "Number of active workers.", lambda s: s.active_workers),
)

_WORKER_GAUGES: tuple[tuple[str, str, Callable[[WorkerSample], float]], ...] = (
    (
        "last_seen_seconds",
        "Delta between time of last statistics entry and when the worker "
        "was last seen (s).",
        lambda w: w.timestamp - w.last_seen_timestamp,
    ),
    (
        "hashrate_reported_hps",
        "Current hash rate for a worker as reported from the worker (H/s).",
        lambda w: w.reported_hash_rate,
    ),
    (
        "hashrate_current_hps",
        "Current hash rate for a worker (H/s).",
        lambda w: w.current_hash_rate,
    ),
    ("shares_valid", "Number of valid shares for a worker.", lambda w: w.valid_shares),
    ("shares_invalid", "Number of invalid shares for a worker.", lambda w: w.invalid_shares),
    ("shares_stale", "Number of stale shares for a worker.", lambda w: w.stale_shares),
)


def build_miner_registry(
    target: Target,
    miner_address: str,
    stats: MinerStats,
    workers: Iterable[WorkerSample],
) -> CollectorRegistry:
    """Registry for /miner.

    Balances are converted from base units to whole coins.  Income is
    exposed per second, plus the deprecated per-minute gauges that
    older dashboards still query.
    """
    metrics = MetricSet({"pool": target.id, "miner": miner_address})
    currency = {"currency": target.currency.symbol}
    metrics.exporter_info()

    metrics.gauge(
        "miner",
        "info",
        "Metadata about the miner.",
        {"pool_name": target.name, "pool_currency": target.currency.symbol},
    ).set(1)

    for name, documentation, value in _MINER_GAUGES:
        metrics.gauge("miner", name, documentation).set(value(stats))

    metrics.gauge(
        "miner", "balance_unpaid_coins", "Unpaid balance for a miner.", currency
    ).set(target.to_display_units(stats.unpaid_base_units))
    metrics.gauge(
        "miner", "balance_unconfirmed_coins", "Unconfirmed balance for a miner.", currency
    ).set(target.to_display_units(stats.unconfirmed_base_units))

    metrics.gauge("miner", "income_coins", "Mined coins per second.", currency).set(
        stats.coins_per_minute / SECONDS_PER_MINUTE
    )
    metrics.gauge(
        "miner", "income_usd", "Mined coins per second (converted to USD)."
    ).set(stats.usd_per_minute / SECONDS_PER_MINUTE)
    metrics.gauge(
        "miner", "income_btc", "Mined coins per second (converted to BTC)."
    ).set(stats.btc_per_minute / SECONDS_PER_MINUTE)

    # Deprecated per-minute views
    metrics.gauge(
        "miner", "income_minute_coins", "(Deprecated) Mined coins per minute.", currency
    ).set(stats.coins_per_minute)
    metrics.gauge(
        "miner",
        "income_minute_usd",
        "(Deprecated) Mined coins per minute (converted to USD).",
    ).set(stats.usd_per_minute)
    metrics.gauge(
        "miner",
        "income_minute_btc",
        "(Deprecated) Mined coins per minute (converted to BTC).",
    ).set(stats.btc_per_minute)

    families = [
        (metrics.gauge_family("worker", name, documentation, "worker"), value)
        for name, documentation, value in _WORKER_GAUGES
    ]
    for worker in workers:
        for family, value in families:
            family.set(worker.name, value(worker))

    return metrics.registry
