"""In-memory metadata cache with a fixed time-to-live."""

import time
from typing import Callable, Optional

from org_enrichment.core.entities import CacheEntry, MetadataRecord

DEFAULT_TTL_MS = 24 * 60 * 60 * 1000


def epoch_ms() -> float:
    return time.time() * 1000


class MetadataCache:
    """Process-lifetime cache keyed by the raw input URL.

    Expiry is lazy: stale entries stay in the map until overwritten, but
    are reported as misses. There is no eviction.
    """

    def __init__(
        self,
        ttl_ms: float = DEFAULT_TTL_MS,
        clock: Callable[[], float] = epoch_ms,
    ) -> None:
        self.ttl_ms = ttl_ms
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, raw_url: str) -> Optional[MetadataRecord]:
        """Return the cached record, or None on miss or expiry."""
        entry = self._entries.get(raw_url)
        if entry is None:
            return None
        if self.clock() - entry.fetched_at_epoch_ms >= self.ttl_ms:
            return None
        return entry.data

    def put(self, raw_url: str, record: MetadataRecord) -> None:
        self._entries[raw_url] = CacheEntry(data=record, fetched_at_epoch_ms=self.clock())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, raw_url: str) -> bool:
        return self.get(raw_url) is not None
