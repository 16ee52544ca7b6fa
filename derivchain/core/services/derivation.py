"""
Derivation Services - Turn a discovered processor map into report nodes.
"""

import logging
from collections.abc import Sequence

from derivchain.core.domain.report import DerivationNode
from derivchain.core.domain.timeseries import (
    ProcessorMap,
    ReverseDerivationMap,
    SeriesId,
    TimeSeriesDescription,
)
from derivchain.core.exceptions import RetrievalFailure
from derivchain.core.ports.metadata_source import MetadataSource

logger = logging.getLogger(__name__)

# AQUARIUS documents "roughly" 60 ids per description request
DEFAULT_MAX_BATCH_SIZE = 30


async def fetch_descriptions(
    series_ids: Sequence[SeriesId],
    metadata_source: MetadataSource,
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
) -> dict[SeriesId, TimeSeriesDescription]:
    """
    Fetch descriptions for all ids in consecutive batches.

    Args:
        series_ids: Ids to describe
        metadata_source: Port to fetch descriptions from
        max_batch_size: Largest number of ids per request

    Returns:
        Descriptions keyed by their own unique id

    Raises:
        RetrievalFailure: if fewer or more descriptions arrive than were requested
    """
    if max_batch_size < 1:
        raise ValueError(f"max_batch_size must be positive, got {max_batch_size}")

    descriptions: list[TimeSeriesDescription] = []
    for start in range(0, len(series_ids), max_batch_size):
        batch = list(series_ids[start:start + max_batch_size])
        remaining = len(series_ids) - start - len(batch)
        logger.debug(f"Fetching {len(batch)} time series descriptions. Remaining to fetch: {remaining}")
        descriptions.extend(await metadata_source.get_time_series_descriptions(batch))

    if len(descriptions) != len(series_ids):
        raise RetrievalFailure(
            "Did not receive all requested time series descriptions! "
            f"Requested: {len(series_ids)} | Received: {len(descriptions)}"
        )

    return {desc.unique_id: desc for desc in descriptions}


def build_reverse_map(proc_map: ProcessorMap) -> ReverseDerivationMap:
    """
    For each time series, collect the series derived from it (period agnostic).
    """
    derived: ReverseDerivationMap = {}
    for processors in proc_map.values():
        for proc in processors:
            for input_id in proc.input_time_series_unique_ids:
                derived.setdefault(input_id, set()).add(proc.output_time_series_unique_id)
    return derived


def assemble_nodes(
    proc_map: ProcessorMap,
    descriptions: dict[SeriesId, TimeSeriesDescription],
    reverse_map: ReverseDerivationMap,
) -> list[DerivationNode]:
    """
    Build one node per (series, processor) pair, or one raw node for a series
    without processors. Missing descriptions or derived sets stay empty.
    """
    nodes: list[DerivationNode] = []
    for series_id in sorted(proc_map):
        description = descriptions.get(series_id)
        if description is None:
            logger.debug(f"No description for time series '{series_id}'")
        derived = set(reverse_map.get(series_id, ()))

        processors = proc_map[series_id]
        if processors:
            for proc in processors:
                nodes.append(DerivationNode(
                    processor=proc,
                    description=description,
                    derived_time_series_unique_ids=set(derived),
                ))
        else:
            nodes.append(DerivationNode(
                processor=None,
                description=description,
                derived_time_series_unique_ids=derived,
            ))
    return nodes
