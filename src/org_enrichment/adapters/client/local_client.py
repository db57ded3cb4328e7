"""In-process metadata client, used when no enrichment server is running."""

from org_enrichment.core import MetadataClient, MetadataRecord
from org_enrichment.use_cases import MetadataLookupService


class LocalMetadataClient(MetadataClient):
    """Serve requests straight from a MetadataLookupService."""

    def __init__(self, service: MetadataLookupService) -> None:
        self.service = service

    async def fetch_metadata(self, raw_url: str) -> MetadataRecord:
        return await self.service.lookup(raw_url)
