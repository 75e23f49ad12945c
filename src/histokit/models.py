from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from histokit.ranges import U32_MAX

COUNTER_MAX = 2**64 - 1
"""Largest count a single bucket can hold."""


class HistogramParams(BaseModel):
    """Validated construction parameters for a histogram."""

    model_config = ConfigDict(extra="forbid", strict=True)

    min: int = Field(ge=0, le=U32_MAX)
    max: int = Field(ge=0, le=U32_MAX)
    bucket_count: int = Field(ge=1)
    ranges: list[int]

    @model_validator(mode="after")
    def _check_layout(self) -> HistogramParams:
        if self.min >= self.max:
            raise ValueError(f"min ({self.min}) must be less than max ({self.max}).")
        if len(self.ranges) < self.bucket_count:
            raise ValueError(
                f"{self.bucket_count} buckets need at least {self.bucket_count} "
                f"boundaries, got {len(self.ranges)}."
            )
        return self

    @property
    def bounds(self) -> list[int]:
        """Lower bounds of the buckets."""
        return self.ranges[: self.bucket_count]

    @property
    def sentinel(self) -> int | None:
        """Explicit overflow threshold, when the caller supplied one."""
        if len(self.ranges) > self.bucket_count:
            return self.ranges[self.bucket_count]
        return None


class PersistedHistogram(BaseModel):
    """Long-term storage form: metadata plus the dense count array."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    min: int = Field(ge=0)
    max: int = Field(ge=0)
    bucket_count: int = Field(ge=1)
    counts: list[int]
    sum: int

    @model_validator(mode="after")
    def _check_counts(self) -> PersistedHistogram:
        if len(self.counts) != self.bucket_count:
            raise ValueError(
                f"Expected {self.bucket_count} counts, got {len(self.counts)}."
            )
        if any(not 0 <= count <= COUNTER_MAX for count in self.counts):
            raise ValueError(f"Counts must lie in [0, {COUNTER_MAX}].")
        return self


class SerializedHistogram(BaseModel):
    """Compact transport form.

    ``ranges`` holds every lower bound followed by the overflow sentinel.
    ``values`` is sparse: it maps the decimal lower bound of each non-empty
    bucket to its count, padded with a zero entry on either side of the
    non-empty run.  Buckets missing from ``values`` are empty.
    """

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    range: list[int] = Field(min_length=2, max_length=2)
    bucket_count: int = Field(ge=1)
    ranges: list[int]
    values: dict[str, int]
    sum: int

    @model_validator(mode="after")
    def _check_layout(self) -> SerializedHistogram:
        if len(self.ranges) != self.bucket_count + 1:
            raise ValueError(
                f"Expected {self.bucket_count + 1} boundaries including the "
                f"sentinel, got {len(self.ranges)}."
            )
        starts = {str(bound) for bound in self.ranges[: self.bucket_count]}
        for key, count in self.values.items():
            if key not in starts:
                raise ValueError(f"Value key {key!r} is not a bucket lower bound.")
            if not 0 <= count <= COUNTER_MAX:
                raise ValueError(
                    f"Count for bucket {key} must lie in [0, {COUNTER_MAX}]."
                )
        return self

    def counts(self) -> list[int]:
        """Expand ``values`` into a dense per-bucket count list."""
        return [
            self.values.get(str(bound), 0)
            for bound in self.ranges[: self.bucket_count]
        ]
