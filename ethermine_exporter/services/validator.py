"""Layered decoding of upstream response bodies.

The pool API wraps three different payload shapes in the same envelope:

  {"status": "OK", "data": {...}}        an object (stats)
  {"status": "OK", "data": [...]}        an array (history, workers)
  {"status": "OK", "data": "NO DATA"}    nothing recorded for this target

A single strict decode into the expected type cannot tell "this miner
has not submitted shares yet" apart from "the API changed its schema":
both fail the same way.  So the body is probed in a fixed order, and
each probe either settles the outcome or hands over to the next one:

  1. status only     not JSON / not an object  -> MalformedPayloadError
                     status != "OK"            -> UpstreamStatusError
  2. sentinel        data == "NO DATA"         -> UpstreamNoDataError
                     (a failed decode here is expected and ignored)
  3. full payload    shape mismatch            -> MalformedPayloadError
"""

from __future__ import annotations

import logging
from typing import TypeVar

from pydantic import ValidationError

from ethermine_exporter.core.errors import (
    MalformedPayloadError,
    UpstreamNoDataError,
    UpstreamStatusError,
)
from ethermine_exporter.models.upstream import (
    NO_DATA,
    STATUS_OK,
    Envelope,
    SentinelEnvelope,
    StatusEnvelope,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _malformed(raw: bytes, exc: ValidationError) -> MalformedPayloadError:
    logger.debug("Failed to unmarshal data from target:\n%s", exc)
    logger.debug("Raw data:\n%s", raw.decode("utf-8", errors="replace"))
    return MalformedPayloadError()


def check_status(raw: bytes) -> None:
    try:
        envelope = StatusEnvelope.model_validate_json(raw)
    except ValidationError as exc:
        raise _malformed(raw, exc) from exc
    if envelope.status != STATUS_OK:
        logger.debug("Upstream status not OK: %r", envelope.status)
        raise UpstreamStatusError(envelope.status)


def is_no_data(raw: bytes) -> bool:
    try:
        sentinel = SentinelEnvelope.model_validate_json(raw)
    except ValidationError:
        return False
    return sentinel.data == NO_DATA


def validate(raw: bytes, payload_type: type[T]) -> T:
    """Decode ``raw`` as ``Envelope[payload_type]`` and return its data.

    ``payload_type`` may be a model class, a parameterized collection
    such as ``list[WorkerSample]``, or an annotated alias like ``WorkerList``.
    """
    check_status(raw)
    if is_no_data(raw):
        raise UpstreamNoDataError()
    try:
        envelope = Envelope[payload_type].model_validate_json(raw)  # type: ignore[valid-type]
    except ValidationError as exc:
        raise _malformed(raw, exc) from exc
    return envelope.data
