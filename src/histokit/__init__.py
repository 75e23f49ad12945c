import logging
import sys

from .errors import (
    AllocationFailureError,
    HandleReleasedError,
    HistogramError,
    IndexOutOfRangeError,
    InvalidBoundariesError,
    SerializationError,
)
from .factory import factory_get
from .histogram import Histogram
from .models import HistogramParams, PersistedHistogram, SerializedHistogram
from .ranges import INT32_MAX, BucketRanges
from .serializer import (
    parse_document,
    parse_persisted,
    parse_serialized,
    serialize,
    serialize_persist,
)
from .snapshot import Bucket, Snapshot

__all__ = [
    "AllocationFailureError",
    "Bucket",
    "BucketRanges",
    "HandleReleasedError",
    "Histogram",
    "HistogramError",
    "HistogramParams",
    "INT32_MAX",
    "IndexOutOfRangeError",
    "InvalidBoundariesError",
    "PersistedHistogram",
    "SerializationError",
    "SerializedHistogram",
    "Snapshot",
    "factory_get",
    "parse_document",
    "parse_persisted",
    "parse_serialized",
    "serialize",
    "serialize_persist",
]

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
