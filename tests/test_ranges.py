from __future__ import annotations

import numpy as np
import pytest

from histokit.errors import IndexOutOfRangeError, InvalidBoundariesError
from histokit.ranges import INT32_MAX, U32_MAX, BucketRanges

BOUNDS = [0, 1, 2, 4, 7, 13, 24, 44, 80, 146]


def test_bucket_ranges_exposes_layout() -> None:
    ranges = BucketRanges(BOUNDS)

    assert ranges.bucket_count == len(BOUNDS)
    assert len(ranges) == len(BOUNDS)
    assert list(ranges) == BOUNDS
    assert ranges.sentinel == INT32_MAX
    assert ranges.as_tuple() == (*BOUNDS, INT32_MAX)


def test_bucket_ranges_copies_input() -> None:
    bounds = list(BOUNDS)
    ranges = BucketRanges(bounds)
    bounds[3] = 999

    assert ranges.lower_bound(3) == 4
    with pytest.raises(ValueError):
        ranges.array[0] = 5


def test_upper_bound_uses_next_lower_bound_then_sentinel() -> None:
    ranges = BucketRanges([0, 10, 20], sentinel=100)

    assert ranges.upper_bound(0) == 10
    assert ranges.upper_bound(1) == 20
    assert ranges.upper_bound(2) == 100


@pytest.mark.parametrize("index", [-1, len(BOUNDS), len(BOUNDS) + 5])
def test_bound_lookup_rejects_out_of_range_index(index: int) -> None:
    ranges = BucketRanges(BOUNDS)

    with pytest.raises(IndexOutOfRangeError):
        ranges.lower_bound(index)
    with pytest.raises(IndexError):
        ranges.upper_bound(index)


@pytest.mark.parametrize(
    ("sample", "expected"),
    [
        (0, 0),
        (1, 1),
        (3, 2),
        (4, 3),
        (12, 4),
        (13, 5),
        (23, 5),
        (24, 6),
        (145, 8),
        (146, 9),
        (10_000, 9),
        (INT32_MAX + 10, 9),
    ],
)
def test_index_of_finds_largest_bound_not_above_sample(
    sample: int, expected: int
) -> None:
    assert BucketRanges(BOUNDS).index_of(sample) == expected


def test_index_of_clamps_underflow_into_first_bucket() -> None:
    ranges = BucketRanges([10, 20, 30])

    assert ranges.index_of(0) == 0
    assert ranges.index_of(-5) == 0
    assert ranges.index_of(9) == 0


def test_indices_of_matches_scalar_lookup() -> None:
    ranges = BucketRanges([10, 20, 30, 1000])
    samples = np.array([-3, 0, 9, 10, 19, 20, 999, 1000, 5000], dtype=np.int64)

    expected = [ranges.index_of(int(sample)) for sample in samples]
    np.testing.assert_array_equal(ranges.indices_of(samples), expected)


@pytest.mark.parametrize(
    "bounds",
    [
        [],
        [0, 0, 1],
        [0, 5, 3],
        [-1, 2],
        [0, U32_MAX + 1],
    ],
)
def test_bucket_ranges_rejects_invalid_bounds(bounds: list[int]) -> None:
    with pytest.raises(InvalidBoundariesError):
        BucketRanges(bounds)


def test_bucket_ranges_rejects_non_integer_bounds() -> None:
    with pytest.raises(InvalidBoundariesError):
        BucketRanges([0, 1.5, 3])  # type: ignore[list-item]


def test_bucket_ranges_rejects_sentinel_not_above_last_bound() -> None:
    with pytest.raises(InvalidBoundariesError):
        BucketRanges([0, 10], sentinel=10)
    with pytest.raises(InvalidBoundariesError):
        BucketRanges([0, INT32_MAX])


def test_bucket_ranges_equality() -> None:
    assert BucketRanges([0, 1]) == BucketRanges([0, 1])
    assert BucketRanges([0, 1]) != BucketRanges([0, 1], sentinel=50)
    assert hash(BucketRanges([0, 1])) == hash(BucketRanges([0, 1]))
