from __future__ import annotations

import builtins
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from histokit.errors import HandleReleasedError, IndexOutOfRangeError
from histokit.ranges import BucketRanges

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bucket:
    """A counted interval ``[start, end)`` of the sample domain."""

    start: int
    end: int
    count: int


class Snapshot:
    """Frozen copy of a histogram's counts and sum.

    Holds its own counter array, so later ``add``/``clear`` calls on the
    source histogram are never observed.  The bucket layout is shared since
    :class:`BucketRanges` is immutable.
    """

    def __init__(
        self,
        ranges: BucketRanges,
        counts: Sequence[int] | NDArray[np.unsignedinteger],
        *,
        sum: int,
        min: int,
        max: int,
    ) -> None:
        frozen = np.array(counts, dtype=np.uint64)
        if frozen.shape != (ranges.bucket_count,):
            raise ValueError(
                f"Expected {ranges.bucket_count} counts, got {frozen.size}."
            )
        frozen.flags.writeable = False
        self._ranges = ranges
        self._counts: NDArray[np.uint64] | None = frozen
        self._sum = int(sum)
        self._total = builtins.sum(frozen.tolist())
        self._min = min
        self._max = max

    def _require_open(self) -> NDArray[np.uint64]:
        if self._counts is None:
            raise HandleReleasedError("Snapshot has been released.")
        return self._counts

    @property
    def ranges(self) -> BucketRanges:
        return self._ranges

    @property
    def min(self) -> int:
        return self._min

    @property
    def max(self) -> int:
        return self._max

    @property
    def closed(self) -> bool:
        return self._counts is None

    def bucket_count(self) -> int:
        self._require_open()
        return self._ranges.bucket_count

    def counts(self, index: int) -> int:
        counts = self._require_open()
        if not 0 <= index < counts.size:
            raise IndexOutOfRangeError(index, int(counts.size))
        return int(counts[index])

    def all_counts(self) -> tuple[int, ...]:
        return tuple(self._require_open().tolist())

    def sum(self) -> int:
        self._require_open()
        return self._sum

    def total_count(self) -> int:
        """Number of samples recorded when the snapshot was taken."""
        self._require_open()
        return self._total

    def is_empty(self) -> bool:
        return self.total_count() == 0

    def buckets(self) -> Iterator[Bucket]:
        counts = self.all_counts()
        for index, count in enumerate(counts):
            yield Bucket(
                start=self._ranges.lower_bound(index),
                end=self._ranges.upper_bound(index),
                count=count,
            )

    def close(self) -> None:
        """Release the counter copy. Further reads raise HandleReleasedError."""
        if self._counts is not None:
            logger.debug(
                "Released snapshot of %d buckets.", self._ranges.bucket_count
            )
        self._counts = None

    def __enter__(self) -> Snapshot:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._counts is None:
            return "Snapshot(<released>)"
        return (
            f"Snapshot(buckets={self.bucket_count()}, count={self._total}, "
            f"sum={self._sum})"
        )
