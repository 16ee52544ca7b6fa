"""
Frontier Traversal Service - Discovers every processor connected to a root series.

The walk is breadth-first and level-synchronized:
1. Drain the frontier, starting one upchain request per unexplored id
   (plus one downchain request for ids at the root's site)
2. Wait for all upchain requests, merge processors, queue site-local inputs
3. Wait for all downchain requests, queue the series they feed
4. Repeat until a round queues nothing new
"""

import asyncio
import logging
from collections.abc import Iterable

from derivchain.core.domain.timeseries import (
    Processor,
    ProcessorMap,
    SeriesId,
    SiteSeriesSet,
)
from derivchain.core.exceptions import RetrievalFailure
from derivchain.core.ports.processor_source import ProcessorSource

logger = logging.getLogger(__name__)


def contains_equivalent_processor(processors: Iterable[Processor], candidate: Processor) -> bool:
    """Whether any processor in the list covers exactly the same period as the candidate."""
    return any(
        proc.processor_period.is_equivalent(candidate.processor_period)
        for proc in processors
    )


def downchain_output_ids(processors: Iterable[Processor]) -> set[SeriesId]:
    """Series produced by the given downchain processors."""
    return {proc.output_time_series_unique_id for proc in processors}


def _discard_result(future: asyncio.Future) -> None:
    # Marks a late sibling failure as retrieved so it is dropped silently.
    if not future.cancelled():
        future.exception()


class FrontierTraversal:
    """
    Level-synchronized discovery of the processors around a root series.
    """

    def __init__(self, processor_source: ProcessorSource):
        """
        Initialize the traversal.

        Args:
            processor_source: Port to look up upchain/downchain processors
        """
        self.processor_source = processor_source

    async def discover(self, root: SeriesId, site_series: SiteSeriesSet) -> ProcessorMap:
        """
        Walk the derivation graph outward from the root.

        Args:
            root: Unique id of the primary time series
            site_series: Unique ids at the root's location; only these expand
                further upchain or downchain

        Returns:
            Map of every visited series to the processors that output it

        Raises:
            RetrievalFailure: if any request in a round fails
        """
        proc_map: ProcessorMap = {}
        explored: set[SeriesId] = set()
        frontier: set[SeriesId] = {root}

        while frontier:
            upchain_ids: list[SeriesId] = []
            downchain_ids: list[SeriesId] = []

            for series_id in sorted(frontier):
                if series_id in explored:
                    continue
                explored.add(series_id)
                proc_map.setdefault(series_id, [])
                upchain_ids.append(series_id)
                if series_id in site_series:
                    downchain_ids.append(series_id)

            logger.debug(f"Launching {len(upchain_ids) + len(downchain_ids)} async requests.")

            # Both groups are in flight before either is awaited
            upchain = asyncio.gather(
                *(self.processor_source.get_upchain_processors(i) for i in upchain_ids)
            )
            downchain = asyncio.gather(
                *(self.processor_source.get_downchain_processors(i) for i in downchain_ids)
            )

            next_frontier: set[SeriesId] = set()

            upchain_results = await self._join(upchain, "upchain", sibling=downchain)
            for processors in upchain_results:
                for proc in processors:
                    self._merge(proc_map, proc)
                    if proc.output_time_series_unique_id in site_series:
                        next_frontier.update(proc.input_time_series_unique_ids)

            downchain_results = await self._join(downchain, "downchain")
            for processors in downchain_results:
                next_frontier.update(downchain_output_ids(processors))

            frontier = next_frontier - explored

        logger.debug(f"Discovered {len(proc_map)} time series from root '{root}'")
        return proc_map

    async def _join(
        self,
        barrier: asyncio.Future,
        direction: str,
        sibling: asyncio.Future | None = None,
    ) -> list[list[Processor]]:
        """Wait for one group of requests; any failure aborts the walk."""
        try:
            logger.debug(f"Waiting for {direction} results...")
            return await barrier
        except Exception as e:
            if sibling is not None:
                sibling.add_done_callback(_discard_result)
            logger.error(f"Failed to retrieve {direction} processors: {e}")
            raise RetrievalFailure(
                f"Failed to retrieve all requested {direction} processors."
            ) from e

    @staticmethod
    def _merge(proc_map: ProcessorMap, proc: Processor) -> None:
        # Same output may have several processors as long as their periods differ
        existing = proc_map.setdefault(proc.output_time_series_unique_id, [])
        if not contains_equivalent_processor(existing, proc):
            existing.append(proc)


async def discover(
    root: SeriesId,
    site_series: SiteSeriesSet,
    processor_source: ProcessorSource,
) -> ProcessorMap:
    """Convenience wrapper around FrontierTraversal.discover."""
    return await FrontierTraversal(processor_source).discover(root, site_series)
