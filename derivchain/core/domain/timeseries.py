"""
Time Series Domain Models - Processors, descriptions and locations.

These mirror the AQUARIUS Publish payloads (PascalCase on the wire) and are
treated as immutable facts once fetched.
"""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_pascal

SeriesId = str

# AQUARIUS emits 7 fractional digits (100ns ticks); datetime holds 6.
_EXCESS_FRACTION = re.compile(r"(\.\d{6})(\d+)")


class AquariusModel(BaseModel):
    """Base for models deserialized from AQUARIUS responses."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="ignore",
    )


class TimeRange(AquariusModel):
    """
    Active period of a processor.

    AQUARIUS timestamps carry 100ns ticks while datetime stops at microseconds;
    the nanoseconds past the microsecond are kept in start_nanos/end_nanos so
    equivalence stays exact.
    """

    model_config = ConfigDict(frozen=True)

    start_time: datetime
    end_time: datetime
    start_nanos: int = Field(default=0, ge=0, lt=1000)
    end_nanos: int = Field(default=0, ge=0, lt=1000)

    @model_validator(mode="before")
    @classmethod
    def split_ticks(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, nanos in (("start_time", "start_nanos"), ("end_time", "end_nanos")):
            for key in (name, to_pascal(name)):
                value = data.get(key)
                if not isinstance(value, str):
                    continue
                match = _EXCESS_FRACTION.search(value)
                if match:
                    data[key] = value[:match.start()] + match.group(1) + value[match.end():]
                    data[nanos] = int(match.group(2)[:3].ljust(3, "0"))
        return data

    def is_equivalent(self, other: "TimeRange") -> bool:
        """Exact match on both endpoints, down to the tick."""
        return (
            self.start_time == other.start_time
            and self.start_nanos == other.start_nanos
            and self.end_time == other.end_time
            and self.end_nanos == other.end_nanos
        )


class Processor(AquariusModel):
    """
    A single derivation: one output series computed from one or more inputs
    over an active period.
    """

    model_config = ConfigDict(frozen=True)

    output_time_series_unique_id: SeriesId
    input_time_series_unique_ids: tuple[SeriesId, ...]
    processor_period: TimeRange
    processor_type: str | None = None
    description: str | None = None
    input_rating_model_identifier: str | None = None

    @field_validator("input_time_series_unique_ids")
    @classmethod
    def require_inputs(cls, value: tuple[SeriesId, ...]) -> tuple[SeriesId, ...]:
        if not value:
            raise ValueError("Processor must have at least one input time series")
        return value


class TimeSeriesDescription(AquariusModel):
    """Identity and metadata of a time series."""

    unique_id: SeriesId
    identifier: str
    location_identifier: str
    parameter: str | None = None
    label: str | None = None
    unit: str | None = None
    utc_offset: float | None = None
    computation_identifier: str | None = None
    computation_period_identifier: str | None = None
    sub_location_identifier: str | None = None
    time_series_type: str | None = None
    publish: bool | None = None
    description: str | None = None


class LocationDescription(AquariusModel):
    """Station/location header."""

    identifier: str
    name: str
    unique_id: str | None = None
    primary_folder: str | None = None


ProcessorMap = dict[SeriesId, list[Processor]]
SiteSeriesSet = frozenset[SeriesId]
ReverseDerivationMap = dict[SeriesId, set[SeriesId]]
