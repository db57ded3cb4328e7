"""HTTP client for the metadata enrichment endpoint."""

import asyncio
from typing import Optional

import httpx

from org_enrichment.core import (
    MetadataClient,
    MetadataRecord,
    ParseError,
    UpstreamConnectionError,
    UpstreamHttpError,
    UpstreamTimeoutError,
)


class EndpointMetadataClient(MetadataClient):
    """Call GET /metadata on a running enrichment server."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch_metadata(self, raw_url: str) -> MetadataRecord:
        """Request metadata for a raw URL.

        The raw URL is sent unchanged; the server keys its cache by it.
        """
        endpoint = f"{self.base_url}/metadata"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await asyncio.wait_for(
                    client.get(endpoint, params={"url": raw_url}), self.timeout
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise UpstreamTimeoutError(endpoint, self.timeout) from e
        except httpx.HTTPError as e:
            raise UpstreamConnectionError(endpoint, str(e)) from e

        if not response.is_success:
            raise UpstreamHttpError(response.status_code, endpoint)

        try:
            return MetadataRecord.from_dict(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise ParseError(f"Malformed response from {endpoint}: {e}") from e
