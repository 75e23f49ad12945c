from __future__ import annotations

import logging
import operator
from collections.abc import Sequence

from pydantic import ValidationError

from histokit.errors import InvalidBoundariesError
from histokit.histogram import Histogram
from histokit.models import HistogramParams
from histokit.ranges import BucketRanges

logger = logging.getLogger(__name__)


def factory_get(
    min: int,
    max: int,
    bucket_count: int,
    ranges: Sequence[int],
) -> Histogram:
    """Validate construction parameters and build an empty histogram.

    *ranges* holds the ``bucket_count`` lower bounds, optionally followed by
    the overflow sentinel (``INT32_MAX`` is implied when it is absent).
    Entries past ``bucket_count + 1`` are ignored.  The boundaries are
    copied, so the caller may reuse or discard its sequence.

    Raises InvalidBoundariesError for any unusable parameter and
    AllocationFailureError if the counters cannot be allocated.
    """
    try:
        params = HistogramParams(
            min=operator.index(min),
            max=operator.index(max),
            bucket_count=operator.index(bucket_count),
            ranges=[operator.index(bound) for bound in ranges],
        )
    except (TypeError, ValidationError) as exc:
        logger.error("Rejected histogram parameters: %s", exc)
        raise InvalidBoundariesError(f"Invalid histogram parameters: {exc}") from exc

    try:
        bucket_ranges = BucketRanges(params.bounds, sentinel=params.sentinel)
    except InvalidBoundariesError as exc:
        logger.error("Rejected bucket boundaries: %s", exc)
        raise

    return Histogram(params.min, params.max, bucket_ranges)
