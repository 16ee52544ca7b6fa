"""
Tests for Core Domain Models.
"""
import pytest
from datetime import datetime, timezone

from derivchain.core.domain.report import (
    REPORT_TYPE,
    DerivationChainReport,
    DerivationChainReportMetadata,
    DerivationChainRequestParameters,
    DerivationNode,
)
from derivchain.core.domain.timeseries import Processor, TimeRange, TimeSeriesDescription


def test_processor_from_aquarius_payload():
    """PascalCase payload with 100ns ticks parses into a frozen processor."""
    payload = {
        "ProcessorType": "correction",
        "InputTimeSeriesUniqueIds": ["a1", "b2"],
        "OutputTimeSeriesUniqueId": "c3",
        "ProcessorPeriod": {
            "StartTime": "2020-01-01T00:00:00.0000000Z",
            "EndTime": "9999-12-31T23:59:59.9999999Z",
        },
        "Settings": {"ignored": True},
    }

    proc = Processor.model_validate(payload)

    assert proc.output_time_series_unique_id == "c3"
    assert proc.input_time_series_unique_ids == ("a1", "b2")
    assert proc.processor_period.start_time == datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert proc.processor_period.end_time.microsecond == 999999
    assert proc.processor_period.end_nanos == 900
    assert proc.processor_period.start_nanos == 0
    with pytest.raises(Exception):
        proc.processor_type = "other"


def test_processor_requires_inputs():
    with pytest.raises(Exception):
        Processor(
            output_time_series_unique_id="c3",
            input_time_series_unique_ids=(),
            processor_period=TimeRange(
                start_time=datetime(2020, 1, 1, tzinfo=timezone.utc),
                end_time=datetime(2021, 1, 1, tzinfo=timezone.utc),
            ),
        )


def test_time_range_equivalence_is_exact():
    start = datetime(2020, 1, 1, tzinfo=timezone.utc)
    end = datetime(2021, 1, 1, tzinfo=timezone.utc)
    a = TimeRange(start_time=start, end_time=end)

    assert a.is_equivalent(TimeRange(start_time=start, end_time=end))
    assert not a.is_equivalent(TimeRange(start_time=start, end_time=end.replace(microsecond=1)))


def test_time_range_keeps_sub_microsecond_ticks():
    """Periods differing by one 100ns tick are distinct."""
    a = TimeRange.model_validate({"StartTime": "2020-01-01T00:00:00Z", "EndTime": "2021-01-01T00:00:00.0000001Z"})
    b = TimeRange.model_validate({"StartTime": "2020-01-01T00:00:00Z", "EndTime": "2021-01-01T00:00:00.0000002Z"})
    same_as_a = TimeRange.model_validate({"StartTime": "2020-01-01T00:00:00.0000000Z", "EndTime": "2021-01-01T00:00:00.0000001Z"})

    assert a.end_time == b.end_time
    assert (a.end_nanos, b.end_nanos) == (100, 200)
    assert not a.is_equivalent(b)
    assert a.is_equivalent(same_as_a)


def test_derived_ids_serialize_sorted():
    node = DerivationNode(derived_time_series_unique_ids={"gamma", "alpha", "beta"})

    assert node.model_dump()["derived_time_series_unique_ids"] == ["alpha", "beta", "gamma"]
    assert node.model_dump(mode="json", by_alias=True)["derivedTimeSeriesUniqueIds"] == ["alpha", "beta", "gamma"]


def test_description_ignores_unknown_fields():
    desc = TimeSeriesDescription.model_validate({
        "UniqueId": "abc",
        "Identifier": "Discharge.Working@01234567",
        "LocationIdentifier": "01234567",
        "UtcOffset": -5,
        "ExtendedAttributes": [],
    })

    assert desc.unique_id == "abc"
    assert desc.utc_offset == -5.0


def test_report_serializes_camel_case():
    report = DerivationChainReport(
        report_metadata=DerivationChainReportMetadata(
            title="Derivation Chain",
            requesting_user="hydro",
            request_parameters=DerivationChainRequestParameters(primary_timeseries_identifier="abc"),
            station_id="01234567",
            primary_series_label="Discharge.Working@01234567",
        ),
        derivations_in_chain=[DerivationNode(derived_time_series_unique_ids={"x"})],
    )

    data = report.model_dump(mode="json", by_alias=True)

    metadata = data["reportMetadata"]
    assert metadata["reportType"] == REPORT_TYPE
    assert metadata["requestParameters"] == {"primaryTimeseriesIdentifier": "abc"}
    assert data["derivationsInChain"][0]["derivedTimeSeriesUniqueIds"] == ["x"]
    assert data["derivationsInChain"][0]["processor"] is None
