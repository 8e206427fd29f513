"""Wire models for the Ethermine/Flypool REST API.

Every endpoint answers with the same envelope:

  {"status": "OK", "data": <payload>}

where ``<payload>`` is an object, an array, or the literal string
"NO DATA".  The envelope is a generic pydantic model parameterized by
the payload type, so a caller asks for ``Envelope[MinerStats]`` or
``Envelope[WorkerList]`` and gets a typed result back.

JSON keys are camelCase upstream and are kept verbatim through aliases;
the Python attribute names are snake_case.

Numeric fields that are missing or ``null`` read as 0.  New miners, for
example, report ``"unconfirmed": null`` until their first block share is
confirmed.  Fields that identify a series (server name, sample time,
worker name) are required.
"""

from __future__ import annotations

from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

NO_DATA = "NO DATA"
STATUS_OK = "OK"

T = TypeVar("T")


def _null_as_zero(value: object) -> object:
    return 0.0 if value is None else value


Number = Annotated[float, BeforeValidator(_null_as_zero)]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class StatusEnvelope(_WireModel):
    """Envelope with the payload discarded; only ``status`` is read."""

    status: str | None = None


class SentinelEnvelope(_WireModel):
    """Envelope whose payload is a bare string, e.g. "NO DATA"."""

    status: str
    data: str


class Envelope(_WireModel, Generic[T]):
    status: str
    data: T


# ---------------------------------------------------------------------------
# Pool payloads
# ---------------------------------------------------------------------------


class PoolStats(_WireModel):
    hash_rate: Number = Field(default=0.0, alias="hashRate")
    miners: Number = 0.0
    workers: Number = 0.0


class PoolPrice(_WireModel):
    usd: Number = 0.0
    btc: Number = 0.0


class PoolBasicStats(_WireModel):
    """Payload of ``/poolStats``."""

    pool_stats: PoolStats = Field(default_factory=PoolStats, alias="poolStats")
    price: PoolPrice = Field(default_factory=PoolPrice)


class ServerSample(_WireModel):
    """One element of ``/servers/history``."""

    server: str
    timestamp_seconds: int = Field(alias="time")
    hash_rate: Number = Field(default=0.0, alias="hashrate")


# ---------------------------------------------------------------------------
# Miner payloads
# ---------------------------------------------------------------------------


class MinerStats(_WireModel):
    """Payload of ``/miner/<address>/currentStats``.

    Balances are in the currency's base units; income rates are whole
    coins (or USD/BTC) per minute.
    """

    timestamp: Number = Field(default=0.0, alias="time")
    last_seen_timestamp: Number = Field(default=0.0, alias="lastSeen")
    reported_hash_rate: Number = Field(default=0.0, alias="reportedHashrate")
    current_hash_rate: Number = Field(default=0.0, alias="currentHashrate")
    average_hash_rate: Number = Field(default=0.0, alias="averageHashrate")
    valid_shares: Number = Field(default=0.0, alias="validShares")
    invalid_shares: Number = Field(default=0.0, alias="invalidShares")
    stale_shares: Number = Field(default=0.0, alias="staleShares")
    active_workers: Number = Field(default=0.0, alias="activeWorkers")
    unpaid_base_units: Number = Field(default=0.0, alias="unpaid")
    unconfirmed_base_units: Number = Field(default=0.0, alias="unconfirmed")
    coins_per_minute: Number = Field(default=0.0, alias="coinsPerMin")
    usd_per_minute: Number = Field(default=0.0, alias="usdPerMin")
    btc_per_minute: Number = Field(default=0.0, alias="btcPerMin")


class WorkerSample(_WireModel):
    """One element of ``/miner/<address>/workers``."""

    name: str = Field(alias="worker")
    timestamp: Number = Field(default=0.0, alias="time")
    last_seen_timestamp: Number = Field(default=0.0, alias="lastSeen")
    reported_hash_rate: Number = Field(default=0.0, alias="reportedHashrate")
    current_hash_rate: Number = Field(default=0.0, alias="currentHashrate")
    valid_shares: Number = Field(default=0.0, alias="validShares")
    invalid_shares: Number = Field(default=0.0, alias="invalidShares")
    stale_shares: Number = Field(default=0.0, alias="staleShares")


# ---------------------------------------------------------------------------
# List payloads
# ---------------------------------------------------------------------------


def _null_as_empty(value: object) -> object:
    return [] if value is None else value


# ``"data": null`` on a list endpoint means no entries, not a schema change.
ServerHistory = Annotated[list[ServerSample], BeforeValidator(_null_as_empty)]
WorkerList = Annotated[list[WorkerSample], BeforeValidator(_null_as_empty)]
