"""
ProcessorSource Port - Interface for looking up processors by time series.

Both lookups are remote and latency bound; callers fan them out concurrently.
"""

from abc import ABC, abstractmethod

from derivchain.core.domain.timeseries import Processor, SeriesId


class ProcessorSource(ABC):
    """
    Abstract interface for processor retrieval.

    Implementations:
    - AquariusAdapter: AQUARIUS Publish API
    """

    @abstractmethod
    async def get_upchain_processors(self, series_id: SeriesId) -> list[Processor]:
        """
        Get the processors whose output is the given series.

        Args:
            series_id: Time series unique id

        Returns:
            List of Processor objects (empty for raw series)
        """
        ...

    @abstractmethod
    async def get_downchain_processors(self, series_id: SeriesId) -> list[Processor]:
        """
        Get the processors that consume the given series as an input.

        Args:
            series_id: Time series unique id

        Returns:
            List of Processor objects
        """
        ...
