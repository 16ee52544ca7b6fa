"""
AQUARIUS Adapter - Processor and metadata source backed by the AQUARIUS Publish API.

Implements both core ports over a shared httpx client. Every HTTP or payload
error surfaces as RetrievalFailure.
"""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import BaseModel, PrivateAttr, ValidationError

from derivchain.core.domain.timeseries import (
    LocationDescription,
    Processor,
    SeriesId,
    TimeSeriesDescription,
)
from derivchain.core.exceptions import RetrievalFailure
from derivchain.core.ports.metadata_source import MetadataSource
from derivchain.core.ports.processor_source import ProcessorSource

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Authentication-Token"


class AquariusAdapter(BaseModel, ProcessorSource, MetadataSource):
    """
    Adapter for the AQUARIUS Publish v2 REST API.
    Configured via Pydantic model fields.
    """
    publish_url: str
    username: str | None = None
    password: str | None = None
    token: str | None = None
    timeout: float = 30.0
    headers: dict[str, str] = {}

    _client: httpx.AsyncClient | None = PrivateAttr(default=None)
    _client_lock: asyncio.Lock = PrivateAttr(default_factory=asyncio.Lock)

    def model_post_init(self, __context):
        """Normalize URL after initialization."""
        self.publish_url = self.publish_url.rstrip("/")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the authenticated HTTP client."""
        # Concurrent first requests share one client and one session
        async with self._client_lock:
            if self._client is None:
                client = httpx.AsyncClient(
                    timeout=self.timeout,
                    headers=self.headers,
                )
                token = self.token
                if token is None and self.username:
                    token = await self._open_session(client)
                if token:
                    client.headers[TOKEN_HEADER] = token
                self._client = client
        return self._client

    async def _open_session(self, client: httpx.AsyncClient) -> str:
        logger.info(f"Opening AQUARIUS session for '{self.username}'")
        try:
            response = await client.post(
                f"{self.publish_url}/session",
                json={"Username": self.username, "EncryptedPassword": self.password},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            await client.aclose()
            raise RetrievalFailure(f"Failed to open AQUARIUS session: {e}") from e
        return response.text.strip().strip('"')

    async def _request(
        self,
        method: str,
        operation: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Call one Publish operation and return the decoded body."""
        client = await self._get_client()
        try:
            response = await client.request(
                method,
                f"{self.publish_url}/{operation}",
                params=params,
                json=payload,
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RetrievalFailure(f"AQUARIUS request {operation} failed: {e}") from e

    async def _get_processors(self, operation: str, series_id: SeriesId) -> list[Processor]:
        data = await self._request("GET", operation, params={"TimeSeriesUniqueId": series_id})
        try:
            return [Processor.model_validate(p) for p in data.get("Processors", [])]
        except ValidationError as e:
            raise RetrievalFailure(f"Malformed processor returned for '{series_id}': {e}") from e

    async def get_upchain_processors(self, series_id: SeriesId) -> list[Processor]:
        return await self._get_processors("GetUpchainProcessorListByTimeSeries", series_id)

    async def get_downchain_processors(self, series_id: SeriesId) -> list[Processor]:
        return await self._get_processors("GetDownchainProcessorListByTimeSeries", series_id)

    async def get_time_series_descriptions(
        self,
        series_ids: list[SeriesId],
    ) -> list[TimeSeriesDescription]:
        data = await self._request(
            "POST",
            "GetTimeSeriesDescriptionListByUniqueId",
            payload={"TimeSeriesUniqueIds": list(series_ids)},
        )
        try:
            return [
                TimeSeriesDescription.model_validate(d)
                for d in data.get("TimeSeriesDescriptions", [])
            ]
        except ValidationError as e:
            raise RetrievalFailure(f"Malformed time series description: {e}") from e

    async def get_time_series_description(self, series_id: SeriesId) -> TimeSeriesDescription:
        descriptions = await self.get_time_series_descriptions([series_id])
        if not descriptions:
            raise RetrievalFailure(f"Time series '{series_id}' not found")
        return descriptions[0]

    async def get_site_series_ids(self, location_identifier: str) -> list[SeriesId]:
        data = await self._request(
            "GET",
            "GetTimeSeriesUniqueIdList",
            params={"LocationIdentifier": location_identifier},
        )
        return [entry["UniqueId"] for entry in data.get("TimeSeriesUniqueIds", []) if "UniqueId" in entry]

    async def get_location_description(self, location_identifier: str) -> LocationDescription:
        data = await self._request(
            "GET",
            "GetLocationDescriptionList",
            params={"LocationIdentifier": location_identifier},
        )
        locations = data.get("LocationDescriptions", [])
        if not locations:
            raise RetrievalFailure(f"Location '{location_identifier}' not found")
        try:
            return LocationDescription.model_validate(locations[0])
        except ValidationError as e:
            raise RetrievalFailure(f"Malformed location description: {e}") from e

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
