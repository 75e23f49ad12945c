from __future__ import annotations


class HistogramError(ValueError):
    """Base class for histogram failures."""


class InvalidBoundariesError(HistogramError):
    """Bucket boundaries or construction parameters are unusable."""


class IndexOutOfRangeError(HistogramError, IndexError):
    """A bucket index outside ``[0, bucket_count)`` was requested."""

    def __init__(self, index: int, bucket_count: int) -> None:
        super().__init__(
            f"Bucket index {index} out of range for {bucket_count} buckets."
        )
        self.index = index
        self.bucket_count = bucket_count


class AllocationFailureError(HistogramError, MemoryError):
    """Counter storage could not be allocated."""


class SerializationError(HistogramError):
    """A histogram could not be encoded, or a payload could not be decoded."""


class HandleReleasedError(HistogramError):
    """An operation was attempted on a closed histogram or snapshot."""
