from __future__ import annotations

import logging
import operator
import threading
from array import array
from collections.abc import Iterable, Iterator

import numpy as np
from numpy.typing import NDArray

from histokit import serializer
from histokit.errors import AllocationFailureError, HandleReleasedError
from histokit.ranges import U32_MAX, BucketRanges
from histokit.snapshot import Bucket, Snapshot

logger = logging.getLogger(__name__)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_BIN_CEILING = U32_MAX + 1
"""Every sample at or above this value lands in the last bucket."""


def _allocate_counts(bucket_count: int) -> array[int]:
    try:
        return array("Q", bytes(8 * bucket_count))
    except MemoryError as exc:
        logger.error("Could not allocate %d bucket counters.", bucket_count)
        raise AllocationFailureError(
            f"Could not allocate {bucket_count} bucket counters."
        ) from exc


def _prepare_batch(
    samples: Iterable[int] | NDArray[np.integer],
) -> tuple[NDArray[np.int64], int]:
    """Return samples narrowed to int64 for binning, plus their exact sum.

    Narrowing clamps values into ``[-1, _BIN_CEILING]``, which keeps every
    sample in the bucket :meth:`BucketRanges.index_of` would pick.  The sum
    is taken over the original values as Python ints.
    """
    if isinstance(samples, np.ndarray) and samples.dtype.kind in "iub":
        flat = samples.reshape(-1)
        if flat.dtype == np.uint64:
            binnable = np.minimum(flat, _BIN_CEILING).astype(np.int64)
        else:
            binnable = flat.astype(np.int64)
        return binnable, sum(flat.tolist())
    if isinstance(samples, np.ndarray):
        if samples.dtype.kind != "O":
            raise TypeError(f"Samples must be integers, got dtype {samples.dtype}.")
        samples = samples.reshape(-1).tolist()

    exact = [operator.index(sample) for sample in samples]
    if exact and _INT64_MIN <= min(exact) and max(exact) <= _INT64_MAX:
        return np.array(exact, dtype=np.int64), sum(exact)
    clamped = [min(max(value, -1), _BIN_CEILING) for value in exact]
    return np.array(clamped, dtype=np.int64), sum(exact)


class Histogram:
    """Sample-counting histogram over fixed bucket boundaries.

    ``min`` and ``max`` are descriptive metadata; bucket selection is driven
    purely by ``ranges``.  Every mutation and every snapshot holds the
    instance lock, so concurrent writers never lose increments and readers
    never see a count without its matching sum.
    """

    def __init__(self, min: int, max: int, ranges: BucketRanges) -> None:
        self._min = min
        self._max = max
        self._ranges = ranges
        self._counts: array[int] | None = _allocate_counts(ranges.bucket_count)
        self._sum = 0
        self._count = 0
        self._lock = threading.Lock()
        logger.debug(
            "Created histogram min=%d max=%d buckets=%d.",
            min,
            max,
            ranges.bucket_count,
        )

    def _require_open(self) -> array[int]:
        counts = self._counts
        if counts is None:
            raise HandleReleasedError("Histogram has been released.")
        return counts

    @property
    def min(self) -> int:
        return self._min

    @property
    def max(self) -> int:
        return self._max

    @property
    def bucket_ranges(self) -> BucketRanges:
        return self._ranges

    @property
    def closed(self) -> bool:
        return self._counts is None

    def bucket_count(self) -> int:
        self._require_open()
        return self._ranges.bucket_count

    def ranges(self, index: int) -> int:
        """Lower bound of bucket *index*; raises IndexOutOfRangeError."""
        self._require_open()
        return self._ranges.lower_bound(index)

    def add(self, sample: int) -> None:
        """Record one observation."""
        value = operator.index(sample)
        index = self._ranges.index_of(value)
        with self._lock:
            counts = self._require_open()
            counts[index] += 1
            self._sum += value
            self._count += 1

    def accumulate(self, sample: int, count: int) -> None:
        """Record *sample* ``count`` times."""
        value = operator.index(sample)
        times = operator.index(count)
        if times < 0:
            raise ValueError("count must be non-negative.")
        index = self._ranges.index_of(value)
        with self._lock:
            counts = self._require_open()
            counts[index] += times
            self._sum += value * times
            self._count += times

    def add_many(self, samples: Iterable[int] | NDArray[np.integer]) -> None:
        """Record every sample of an integer iterable or array in one pass."""
        flat, batch_sum = _prepare_batch(samples)
        if flat.size == 0:
            return

        binned = np.bincount(
            self._ranges.indices_of(flat), minlength=self._ranges.bucket_count
        ).astype(np.uint64)
        with self._lock:
            counts = self._require_open()
            counts_view: NDArray[np.uint64] = np.frombuffer(counts, dtype=np.uint64)
            counts_view += binned
            self._sum += batch_sum
            self._count += int(flat.size)

    def clear(self) -> None:
        """Zero every counter and the sum; the bucket layout is kept."""
        with self._lock:
            counts = self._require_open()
            np.frombuffer(counts, dtype=np.uint64).fill(0)
            self._sum = 0
            self._count = 0
        logger.debug("Cleared histogram with %d buckets.", self._ranges.bucket_count)

    def is_empty(self) -> bool:
        with self._lock:
            return not any(self._require_open())

    def sum(self) -> int:
        with self._lock:
            self._require_open()
            return self._sum

    def count(self) -> int:
        """Total number of recorded samples."""
        with self._lock:
            self._require_open()
            return self._count

    def snapshot(self) -> Snapshot:
        with self._lock:
            counts = self._require_open()
            frozen = Snapshot(
                self._ranges,
                counts,
                sum=self._sum,
                min=self._min,
                max=self._max,
            )
        logger.debug(
            "Took snapshot count=%d sum=%d.", frozen.total_count(), frozen.sum()
        )
        return frozen

    def buckets(self) -> Iterator[Bucket]:
        return self.snapshot().buckets()

    def serialize(self) -> str:
        return serializer.serialize(self.snapshot())

    def serialize_persist(self) -> str:
        return serializer.serialize_persist(self.snapshot())

    def close(self) -> None:
        """Release the counters. Further operations raise HandleReleasedError."""
        with self._lock:
            if self._counts is None:
                return
            self._counts = None
        logger.debug("Released histogram with %d buckets.", self._ranges.bucket_count)

    def __enter__(self) -> Histogram:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._counts is None:
            return "Histogram(<released>)"
        return (
            f"Histogram(min={self._min}, max={self._max}, "
            f"buckets={self._ranges.bucket_count}, count={self._count}, "
            f"sum={self._sum})"
        )
