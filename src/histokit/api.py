"""Handle-style functions mirroring the foreign-function contract.

Each function takes the handle returned by :func:`histogram_factory_get` or
:func:`histogram_snapshot`.  The ``*_free`` functions release a handle;
using it afterwards raises HandleReleasedError instead of touching freed
state.
"""

from __future__ import annotations

from collections.abc import Sequence

from histokit.factory import factory_get
from histokit.histogram import Histogram
from histokit.snapshot import Snapshot


def histogram_factory_get(
    min: int, max: int, bucket_count: int, ranges: Sequence[int]
) -> Histogram:
    return factory_get(min, max, bucket_count, ranges)


def histogram_add(histogram: Histogram, sample: int) -> None:
    histogram.add(sample)


def histogram_clear(histogram: Histogram) -> None:
    histogram.clear()


def histogram_bucket_count(histogram: Histogram) -> int:
    return histogram.bucket_count()


def histogram_ranges(histogram: Histogram, index: int) -> int:
    return histogram.ranges(index)


def histogram_is_empty(histogram: Histogram) -> bool:
    return histogram.is_empty()


def histogram_serialize(histogram: Histogram) -> str:
    return histogram.serialize()


def histogram_serialize_persist(histogram: Histogram) -> str:
    return histogram.serialize_persist()


def histogram_snapshot(histogram: Histogram) -> Snapshot:
    return histogram.snapshot()


def snapshot_counts(snapshot: Snapshot, index: int) -> int:
    return snapshot.counts(index)


def snapshot_sum(snapshot: Snapshot) -> int:
    return snapshot.sum()


def histogram_free(histogram: Histogram) -> None:
    histogram.close()


def snapshot_free(snapshot: Snapshot) -> None:
    snapshot.close()


def histogram_free_cstr(text: str) -> None:
    """No-op: strings are reclaimed by the garbage collector."""
