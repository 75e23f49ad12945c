from __future__ import annotations

import pytest

from histokit.errors import HandleReleasedError, IndexOutOfRangeError
from histokit.histogram import Histogram
from histokit.ranges import BucketRanges
from histokit.snapshot import Snapshot


def make_histogram() -> Histogram:
    return Histogram(1, 500, BucketRanges([0, 10, 20, 30]))


def test_snapshot_copies_counts_and_sum() -> None:
    histogram = make_histogram()
    histogram.add_many([5, 15, 15, 40])

    snapshot = histogram.snapshot()

    assert snapshot.bucket_count() == 4
    assert snapshot.all_counts() == (1, 2, 0, 1)
    assert snapshot.counts(1) == 2
    assert snapshot.sum() == 75
    assert snapshot.total_count() == 4
    assert not snapshot.is_empty()
    assert (snapshot.min, snapshot.max) == (1, 500)


def test_snapshot_is_isolated_from_later_mutation() -> None:
    histogram = make_histogram()
    histogram.add_many([5, 15])
    snapshot = histogram.snapshot()

    histogram.add(25)
    histogram.accumulate(5, 10)
    assert snapshot.all_counts() == (1, 1, 0, 0)
    assert snapshot.sum() == 20

    histogram.clear()
    assert snapshot.all_counts() == (1, 1, 0, 0)
    assert snapshot.sum() == 20

    histogram.close()
    assert snapshot.counts(0) == 1


def test_snapshot_of_empty_histogram() -> None:
    snapshot = make_histogram().snapshot()

    assert snapshot.is_empty()
    assert snapshot.sum() == 0


@pytest.mark.parametrize("index", [-1, 4, 100])
def test_snapshot_counts_rejects_out_of_range_index(index: int) -> None:
    snapshot = make_histogram().snapshot()

    with pytest.raises(IndexOutOfRangeError):
        snapshot.counts(index)


def test_snapshot_counter_array_is_read_only() -> None:
    histogram = make_histogram()
    histogram.add(5)
    snapshot = histogram.snapshot()

    with pytest.raises(ValueError):
        snapshot._counts[0] = 99  # type: ignore[index]
    assert snapshot.counts(0) == 1


def test_snapshot_rejects_mismatched_counts() -> None:
    with pytest.raises(ValueError):
        Snapshot(BucketRanges([0, 10]), [1, 2, 3], sum=0, min=0, max=1)


def test_released_snapshot_rejects_reads() -> None:
    histogram = make_histogram()
    histogram.add(5)

    with histogram.snapshot() as snapshot:
        assert snapshot.sum() == 5

    assert snapshot.closed
    with pytest.raises(HandleReleasedError):
        snapshot.counts(0)
    with pytest.raises(HandleReleasedError):
        snapshot.sum()
    with pytest.raises(HandleReleasedError):
        snapshot.bucket_count()
    snapshot.close()
    assert histogram.sum() == 5
