"""
Report Domain Models - Output structures of a derivation chain report.
"""

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from derivchain.core.domain.timeseries import (
    Processor,
    SeriesId,
    TimeSeriesDescription,
)

REPORT_TYPE = "derivationchain"


class ReportModel(BaseModel):
    """Base for report models, serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class DerivationChainRequestParameters(ReportModel):
    """Parameters of a report request."""

    primary_timeseries_identifier: SeriesId


class DerivationNode(ReportModel):
    """
    One row of the report.

    A node either carries the processor that computes its series, or has no
    processor at all (a raw input series).
    """

    processor: Processor | None = None
    description: TimeSeriesDescription | None = None
    derived_time_series_unique_ids: set[SeriesId] = Field(default_factory=set)

    @property
    def is_raw(self) -> bool:
        return self.processor is None

    @field_serializer("derived_time_series_unique_ids")
    def serialize_derived(self, value: set[SeriesId]) -> list[SeriesId]:
        return sorted(value)


class DerivationChainReportMetadata(ReportModel):
    """Header fields of the report."""

    title: str
    report_type: str = REPORT_TYPE
    requesting_user: str
    request_parameters: DerivationChainRequestParameters
    station_id: str
    station_name: str | None = None
    timezone: float | None = None
    primary_series_label: str


class DerivationChainReport(ReportModel):
    """Complete derivation chain report."""

    report_metadata: DerivationChainReportMetadata
    derivations_in_chain: list[DerivationNode] = Field(default_factory=list)
