"""
Report Builder Service - Orchestrates a derivation chain report.

1. Describe the primary time series and its station
2. Collect the time series at the station
3. Discover the connected processors
4. Describe every discovered series, index what derives from what
5. Assemble the report nodes
"""

import logging

from derivchain.core.domain.report import (
    DerivationChainReport,
    DerivationChainReportMetadata,
    DerivationChainRequestParameters,
)
from derivchain.core.domain.timeseries import TimeSeriesDescription
from derivchain.core.ports.metadata_source import MetadataSource
from derivchain.core.ports.processor_source import ProcessorSource
from derivchain.core.services.derivation import (
    DEFAULT_MAX_BATCH_SIZE,
    assemble_nodes,
    build_reverse_map,
    fetch_descriptions,
)
from derivchain.core.services.traversal import FrontierTraversal

logger = logging.getLogger(__name__)

DEFAULT_REPORT_TITLE = "Derivation Chain"


class DerivationChainReportBuilder:
    """
    Core service that builds a single derivation chain report.
    """

    def __init__(
        self,
        processor_source: ProcessorSource,
        metadata_source: MetadataSource,
        max_description_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        report_title: str = DEFAULT_REPORT_TITLE,
    ):
        """
        Initialize the report builder.

        Args:
            processor_source: Port to look up processors
            metadata_source: Port to look up descriptions and site membership
            max_description_batch_size: Ids per description request
            report_title: Title written into the report metadata
        """
        self.processor_source = processor_source
        self.metadata_source = metadata_source
        self.max_description_batch_size = max_description_batch_size
        self.report_title = report_title
        self.traversal = FrontierTraversal(processor_source)

    async def build_report(
        self,
        request_parameters: DerivationChainRequestParameters,
        requesting_user: str,
    ) -> DerivationChainReport:
        """
        Build the report for the requested primary time series.

        Raises:
            RetrievalFailure: if any remote lookup fails
        """
        root_id = request_parameters.primary_timeseries_identifier
        logger.info(f"Building derivation chain report for '{root_id}' requested by '{requesting_user}'")

        primary = await self.metadata_source.get_time_series_description(root_id)
        metadata = await self._build_metadata(request_parameters, requesting_user, primary)

        site_series = frozenset(
            await self.metadata_source.get_site_series_ids(primary.location_identifier)
        )

        proc_map = await self.traversal.discover(root_id, site_series)
        descriptions = await fetch_descriptions(
            sorted(proc_map),
            self.metadata_source,
            self.max_description_batch_size,
        )
        reverse_map = build_reverse_map(proc_map)
        nodes = assemble_nodes(proc_map, descriptions, reverse_map)

        logger.info(f"Derivation chain for '{root_id}' has {len(proc_map)} time series and {len(nodes)} nodes")
        return DerivationChainReport(report_metadata=metadata, derivations_in_chain=nodes)

    async def _build_metadata(
        self,
        request_parameters: DerivationChainRequestParameters,
        requesting_user: str,
        primary: TimeSeriesDescription,
    ) -> DerivationChainReportMetadata:
        location = await self.metadata_source.get_location_description(primary.location_identifier)
        return DerivationChainReportMetadata(
            title=self.report_title,
            requesting_user=requesting_user,
            request_parameters=request_parameters,
            station_id=primary.location_identifier,
            station_name=location.name,
            timezone=primary.utc_offset,
            primary_series_label=primary.identifier,
        )
