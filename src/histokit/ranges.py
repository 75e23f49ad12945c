from __future__ import annotations

import operator
from bisect import bisect_right
from collections.abc import Iterable, Iterator

import numpy as np
from numpy.typing import NDArray

from histokit.errors import IndexOutOfRangeError, InvalidBoundariesError

U32_MAX = 2**32 - 1
INT32_MAX = 2**31 - 1
"""Implicit overflow threshold closing the last bucket."""


class BucketRanges:
    """Immutable ascending lower bounds of ``bucket_count`` buckets.

    Bucket ``i`` covers ``[bounds[i], bounds[i + 1])``; the last bucket ends
    at the overflow *sentinel*.  Samples below the first bound are clamped
    into bucket 0 and samples at or above the last bound land in the last
    bucket, so every integer maps to a real bucket.
    """

    __slots__ = ("_bounds", "_array", "_sentinel")

    def __init__(self, bounds: Iterable[int], sentinel: int | None = None) -> None:
        try:
            values = tuple(operator.index(bound) for bound in bounds)
        except TypeError as exc:
            raise InvalidBoundariesError("Boundaries must be integers.") from exc
        if not values:
            raise InvalidBoundariesError("At least one bucket boundary is required.")
        for bound in values:
            if not 0 <= bound <= U32_MAX:
                raise InvalidBoundariesError(
                    f"Boundary {bound} is outside the unsigned 32-bit domain."
                )
        for index in range(1, len(values)):
            if values[index] <= values[index - 1]:
                raise InvalidBoundariesError(
                    "Boundaries must be strictly increasing: "
                    f"ranges[{index - 1}]={values[index - 1]} >= "
                    f"ranges[{index}]={values[index]}."
                )

        resolved_sentinel = INT32_MAX if sentinel is None else operator.index(sentinel)
        if not values[-1] < resolved_sentinel <= U32_MAX:
            raise InvalidBoundariesError(
                f"Overflow sentinel {resolved_sentinel} must exceed the last "
                f"boundary {values[-1]} and fit in 32 bits."
            )

        array = np.array(values, dtype=np.int64)
        array.flags.writeable = False
        self._bounds = values
        self._array = array
        self._sentinel = resolved_sentinel

    @property
    def bucket_count(self) -> int:
        return len(self._bounds)

    @property
    def sentinel(self) -> int:
        return self._sentinel

    @property
    def array(self) -> NDArray[np.int64]:
        """Read-only view of the lower bounds."""
        return self._array

    def __len__(self) -> int:
        return len(self._bounds)

    def __iter__(self) -> Iterator[int]:
        return iter(self._bounds)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BucketRanges):
            return NotImplemented
        return self._bounds == other._bounds and self._sentinel == other._sentinel

    def __hash__(self) -> int:
        return hash((self._bounds, self._sentinel))

    def __repr__(self) -> str:
        return f"BucketRanges({list(self._bounds)!r}, sentinel={self._sentinel})"

    def lower_bound(self, index: int) -> int:
        if not 0 <= index < len(self._bounds):
            raise IndexOutOfRangeError(index, len(self._bounds))
        return self._bounds[index]

    def upper_bound(self, index: int) -> int:
        if not 0 <= index < len(self._bounds):
            raise IndexOutOfRangeError(index, len(self._bounds))
        if index + 1 == len(self._bounds):
            return self._sentinel
        return self._bounds[index + 1]

    def as_tuple(self) -> tuple[int, ...]:
        """Lower bounds followed by the sentinel (``bucket_count + 1`` values)."""
        return (*self._bounds, self._sentinel)

    def index_of(self, sample: int) -> int:
        """Return the largest ``i`` with ``bounds[i] <= sample``, clamped."""
        return max(bisect_right(self._bounds, sample) - 1, 0)

    def indices_of(self, samples: NDArray[np.integer]) -> NDArray[np.intp]:
        """Vectorised :meth:`index_of` over an integer array."""
        positions = np.searchsorted(self._array, samples, side="right") - 1
        return np.clip(positions, 0, len(self._bounds) - 1)
