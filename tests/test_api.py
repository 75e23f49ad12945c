from __future__ import annotations

import pytest

from histokit import api
from histokit.errors import HandleReleasedError, IndexOutOfRangeError
from histokit.ranges import INT32_MAX

BOUNDS = [
    0, 1, 2, 4, 7, 13, 24, 44, 80, 146,
    267, 487, 889, 1623, 2962, 5406, 9867, 18010, 32872, 60000, INT32_MAX,
]


def test_handle_lifecycle_mirrors_foreign_contract() -> None:
    histogram = api.histogram_factory_get(1, 60000, 20, BOUNDS)

    assert api.histogram_bucket_count(histogram) == 20
    assert api.histogram_is_empty(histogram)
    for sample in range(20, 30):
        api.histogram_add(histogram, sample)
    assert not api.histogram_is_empty(histogram)
    assert api.histogram_ranges(histogram, 6) == 24

    serialized = api.histogram_serialize(histogram)
    persisted = api.histogram_serialize_persist(histogram)
    assert serialized.startswith('{"range":[1,60000]')
    assert persisted.startswith('{"min":1,"max":60000,"bucket_count":20')
    api.histogram_free_cstr(serialized)
    api.histogram_free_cstr(persisted)

    snapshot = api.histogram_snapshot(histogram)
    api.histogram_clear(histogram)
    assert api.histogram_is_empty(histogram)
    assert api.snapshot_sum(snapshot) == 245
    assert api.snapshot_counts(snapshot, 5) == 4
    assert api.snapshot_counts(snapshot, 6) == 6

    api.snapshot_free(snapshot)
    api.histogram_free(histogram)


def test_index_checks_are_deterministic() -> None:
    histogram = api.histogram_factory_get(1, 60000, 20, BOUNDS)
    snapshot = api.histogram_snapshot(histogram)

    with pytest.raises(IndexOutOfRangeError):
        api.histogram_ranges(histogram, 20)
    with pytest.raises(IndexOutOfRangeError):
        api.snapshot_counts(snapshot, 20)


def test_freed_handles_reject_use() -> None:
    histogram = api.histogram_factory_get(1, 60000, 20, BOUNDS)
    snapshot = api.histogram_snapshot(histogram)
    api.histogram_free(histogram)
    api.snapshot_free(snapshot)

    with pytest.raises(HandleReleasedError):
        api.histogram_add(histogram, 1)
    with pytest.raises(HandleReleasedError):
        api.snapshot_sum(snapshot)
    with pytest.raises(HandleReleasedError):
        api.histogram_bucket_count(histogram)
    with pytest.raises(HandleReleasedError):
        api.histogram_ranges(histogram, 0)
    api.histogram_free(histogram)
    api.snapshot_free(snapshot)
