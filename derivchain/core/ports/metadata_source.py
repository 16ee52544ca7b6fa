"""
MetadataSource Port - Interface for time series and location metadata.
"""

from abc import ABC, abstractmethod

from derivchain.core.domain.timeseries import (
    LocationDescription,
    SeriesId,
    TimeSeriesDescription,
)


class MetadataSource(ABC):
    """
    Abstract interface for time series descriptions, site membership and
    location descriptions.
    """

    @abstractmethod
    async def get_time_series_description(self, series_id: SeriesId) -> TimeSeriesDescription:
        """
        Get the description of a single time series.

        Raises:
            RetrievalFailure: if the series is unknown
        """
        ...

    @abstractmethod
    async def get_time_series_descriptions(
        self,
        series_ids: list[SeriesId],
    ) -> list[TimeSeriesDescription]:
        """
        Get descriptions for a batch of time series.

        The backend caps the batch size; callers are responsible for chunking.
        The result may be shorter than the request if ids are unknown.
        """
        ...

    @abstractmethod
    async def get_site_series_ids(self, location_identifier: str) -> list[SeriesId]:
        """
        List the unique ids of all time series at a location.
        """
        ...

    @abstractmethod
    async def get_location_description(self, location_identifier: str) -> LocationDescription:
        """
        Get the description of a location.

        Raises:
            RetrievalFailure: if the location is unknown
        """
        ...
