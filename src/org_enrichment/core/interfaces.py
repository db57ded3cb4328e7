"""Core interfaces for adapters."""

from abc import ABC, abstractmethod

from org_enrichment.core.entities import MetadataRecord, NormalizedUrl


class MetadataExtractor(ABC):
    """Interface for fetching a page and extracting its metadata."""

    @abstractmethod
    async def extract(self, target: NormalizedUrl) -> MetadataRecord:
        """Fetch and extract metadata. Raises EnrichmentError subclasses."""
        pass


class MetadataClient(ABC):
    """Interface for requesting metadata from the enrichment endpoint."""

    @abstractmethod
    async def fetch_metadata(self, raw_url: str) -> MetadataRecord:
        """Request metadata for a raw URL. Raises EnrichmentError subclasses."""
        pass
