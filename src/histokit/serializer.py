"""Compact and persisted JSON encodings of histogram state.

Both encoders read from a :class:`Snapshot`; passing a live histogram takes
one first, so output never reflects a half-applied update.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from histokit.errors import InvalidBoundariesError, SerializationError
from histokit.models import PersistedHistogram, SerializedHistogram
from histokit.ranges import BucketRanges
from histokit.snapshot import Snapshot

if TYPE_CHECKING:
    from histokit.histogram import Histogram

logger = logging.getLogger(__name__)

_DOCUMENT_ADAPTER: TypeAdapter[SerializedHistogram | PersistedHistogram] = (
    TypeAdapter(SerializedHistogram | PersistedHistogram)
)


def _freeze(source: Histogram | Snapshot) -> Snapshot:
    if isinstance(source, Snapshot):
        return source
    return source.snapshot()


def pack_counts(ranges: BucketRanges, counts: Sequence[int]) -> dict[str, int]:
    """Sparse ``{lower bound: count}`` map of the non-empty bucket run.

    Every non-empty bucket is listed.  The bucket preceding the first
    non-empty one and the bucket following the last non-empty one are listed
    with a zero count, when they exist.
    """
    occupied = [index for index, count in enumerate(counts) if count]
    if not occupied:
        return {}

    first, last = occupied[0], occupied[-1]
    packed: dict[str, int] = {}
    if first > 0:
        packed[str(ranges.lower_bound(first - 1))] = 0
    for index in range(first, last + 1):
        if counts[index]:
            packed[str(ranges.lower_bound(index))] = int(counts[index])
    if last + 1 < len(counts):
        packed[str(ranges.lower_bound(last + 1))] = 0
    return packed


def serialize(source: Histogram | Snapshot) -> str:
    """Encode ranges, packed counts and sum in the compact transport form."""
    snapshot = _freeze(source)
    try:
        document = SerializedHistogram(
            range=[snapshot.min, snapshot.max],
            bucket_count=snapshot.bucket_count(),
            ranges=list(snapshot.ranges.as_tuple()),
            values=pack_counts(snapshot.ranges, snapshot.all_counts()),
            sum=snapshot.sum(),
        )
        text = document.model_dump_json()
    except (ValidationError, MemoryError) as exc:
        logger.error("Failed to serialize histogram: %s", exc)
        raise SerializationError("Failed to serialize histogram.") from exc
    logger.debug("Serialized histogram into %d characters.", len(text))
    return text


def serialize_persist(source: Histogram | Snapshot) -> str:
    """Encode metadata and the dense count array in the persisted form."""
    snapshot = _freeze(source)
    try:
        document = PersistedHistogram(
            min=snapshot.min,
            max=snapshot.max,
            bucket_count=snapshot.bucket_count(),
            counts=list(snapshot.all_counts()),
            sum=snapshot.sum(),
        )
        text = document.model_dump_json()
    except (ValidationError, MemoryError) as exc:
        logger.error("Failed to persist histogram: %s", exc)
        raise SerializationError("Failed to persist histogram.") from exc
    logger.debug("Persisted histogram into %d characters.", len(text))
    return text


def parse_serialized(text: str | bytes) -> SerializedHistogram:
    try:
        return SerializedHistogram.model_validate_json(text)
    except ValidationError as exc:
        logger.error("Malformed serialized histogram: %s", exc)
        raise SerializationError("Malformed serialized histogram.") from exc


def parse_persisted(text: str | bytes) -> PersistedHistogram:
    try:
        return PersistedHistogram.model_validate_json(text)
    except ValidationError as exc:
        logger.error("Malformed persisted histogram: %s", exc)
        raise SerializationError("Malformed persisted histogram.") from exc


def parse_document(text: str | bytes) -> SerializedHistogram | PersistedHistogram:
    """Parse a document in either encoding."""
    try:
        return _DOCUMENT_ADAPTER.validate_json(text)
    except ValidationError as exc:
        logger.error("Unrecognised histogram document: %s", exc)
        raise SerializationError("Unrecognised histogram document.") from exc


def snapshot_from_serialized(document: SerializedHistogram) -> Snapshot:
    bounds = document.ranges[: document.bucket_count]
    try:
        ranges = BucketRanges(
            bounds, sentinel=document.ranges[document.bucket_count]
        )
    except InvalidBoundariesError as exc:
        raise SerializationError(f"Serialized ranges are invalid: {exc}") from exc
    low, high = document.range
    return Snapshot(ranges, document.counts(), sum=document.sum, min=low, max=high)


def snapshot_from_persisted(
    document: PersistedHistogram, ranges: BucketRanges
) -> Snapshot:
    """Rebuild a snapshot; the persisted form carries no boundaries."""
    if ranges.bucket_count != document.bucket_count:
        raise SerializationError(
            f"Persisted histogram has {document.bucket_count} buckets but the "
            f"supplied ranges define {ranges.bucket_count}."
        )
    return Snapshot(
        ranges,
        document.counts,
        sum=document.sum,
        min=document.min,
        max=document.max,
    )
