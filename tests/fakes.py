"""
In-memory fakes for the core ports.
"""
import asyncio
from collections import Counter
from datetime import datetime, timezone

from derivchain.core.domain.timeseries import (
    Processor,
    TimeRange,
    TimeSeriesDescription,
)
from derivchain.core.exceptions import RetrievalFailure
from derivchain.core.ports.metadata_source import MetadataSource
from derivchain.core.ports.processor_source import ProcessorSource

T0 = datetime(2020, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2021, 1, 1, tzinfo=timezone.utc)
T2 = datetime(2022, 1, 1, tzinfo=timezone.utc)


def make_processor(output, inputs, start=T0, end=T1, processor_type="pass-through"):
    return Processor(
        output_time_series_unique_id=output,
        input_time_series_unique_ids=tuple(inputs),
        processor_period=TimeRange(start_time=start, end_time=end),
        processor_type=processor_type,
    )


def make_description(unique_id, location="STATION-1", utc_offset=-5.0):
    return TimeSeriesDescription(
        unique_id=unique_id,
        identifier=f"Param.{unique_id}@{location}",
        location_identifier=location,
        utc_offset=utc_offset,
    )


class FakeProcessorSource(ProcessorSource):
    """Processor graph held in memory; records every lookup."""

    def __init__(self, processors, fail_on=(), delay=0.0):
        self.processors = list(processors)
        self.fail_on = set(fail_on)
        self.delay = delay
        self.upchain_calls = Counter()
        self.downchain_calls = Counter()
        self.active = 0
        self.max_active = 0

    async def _lookup(self, series_id, predicate):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if series_id in self.fail_on:
                raise RuntimeError(f"lookup failed for {series_id}")
            return [p for p in self.processors if predicate(p)]
        finally:
            self.active -= 1

    async def get_upchain_processors(self, series_id):
        self.upchain_calls[series_id] += 1
        return await self._lookup(
            series_id, lambda p: p.output_time_series_unique_id == series_id
        )

    async def get_downchain_processors(self, series_id):
        self.downchain_calls[series_id] += 1
        return await self._lookup(
            series_id, lambda p: series_id in p.input_time_series_unique_ids
        )


class FakeMetadataSource(MetadataSource):
    """Descriptions, site membership and locations held in memory."""

    def __init__(self, descriptions, site_series, locations=None):
        self.descriptions = {d.unique_id: d for d in descriptions}
        self.site_series = site_series
        self.locations = locations or {}
        self.batches = []

    async def get_time_series_description(self, series_id):
        if series_id not in self.descriptions:
            raise RetrievalFailure(f"Time series '{series_id}' not found")
        return self.descriptions[series_id]

    async def get_time_series_descriptions(self, series_ids):
        self.batches.append(list(series_ids))
        return [self.descriptions[i] for i in series_ids if i in self.descriptions]

    async def get_site_series_ids(self, location_identifier):
        return list(self.site_series.get(location_identifier, []))

    async def get_location_description(self, location_identifier):
        if location_identifier not in self.locations:
            raise RetrievalFailure(f"Location '{location_identifier}' not found")
        return self.locations[location_identifier]


