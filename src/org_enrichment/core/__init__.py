"""Core domain layer."""

from org_enrichment.core.cache import MetadataCache
from org_enrichment.core.entities import (
    BatchPlan,
    BatchResult,
    CacheEntry,
    EnrichmentProgress,
    MetadataRecord,
    NormalizedUrl,
    Organization,
    RetryOutcome,
    RetryState,
)
from org_enrichment.core.errors import (
    AggregateSweepError,
    EnrichmentError,
    InvalidUrlError,
    ParseError,
    UpstreamConnectionError,
    UpstreamHttpError,
    UpstreamTimeoutError,
)
from org_enrichment.core.fallback import FallbackSynthesizer
from org_enrichment.core.interfaces import MetadataClient, MetadataExtractor
from org_enrichment.core.state_store import EnrichmentStateStore
from org_enrichment.core.url_normalizer import best_effort_domain, normalize_url

__all__ = [
    "MetadataRecord",
    "CacheEntry",
    "NormalizedUrl",
    "Organization",
    "RetryState",
    "RetryOutcome",
    "BatchResult",
    "BatchPlan",
    "EnrichmentProgress",
    "EnrichmentError",
    "InvalidUrlError",
    "UpstreamHttpError",
    "UpstreamTimeoutError",
    "UpstreamConnectionError",
    "ParseError",
    "AggregateSweepError",
    "MetadataExtractor",
    "MetadataClient",
    "MetadataCache",
    "FallbackSynthesizer",
    "EnrichmentStateStore",
    "normalize_url",
    "best_effort_domain",
]
