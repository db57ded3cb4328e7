"""Enrichment endpoint clients."""

from org_enrichment.adapters.client.endpoint_client import EndpointMetadataClient
from org_enrichment.adapters.client.local_client import LocalMetadataClient

__all__ = ["EndpointMetadataClient", "LocalMetadataClient"]
