from __future__ import annotations

from collections.abc import Iterable

from ethermine_exporter.models.upstream import ServerSample


def reduce_latest(samples: Iterable[ServerSample]) -> dict[str, ServerSample]:
    """Keep only the newest sample for each server.

    The history endpoint returns a window of samples per server; a
    gauge can only show one value, so the newest wins.  On equal
    timestamps the sample seen first is kept.
    """
    latest: dict[str, ServerSample] = {}
    for sample in samples:
        current = latest.get(sample.server)
        if current is None or sample.timestamp_seconds > current.timestamp_seconds:
            latest[sample.server] = sample
    return latest
