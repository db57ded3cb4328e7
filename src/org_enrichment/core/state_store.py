"""Single-writer state shared by all asynchronous enrichment completions."""

import time
from typing import Callable, Iterable, Optional

from org_enrichment.core.entities import EnrichmentProgress, MetadataRecord, Organization


class EnrichmentStateStore:
    """Per-organization metadata, loading flags and retry counters.

    Invariants:
        - An org id is in the loading map only while a fetch is in flight;
          completion removes it rather than storing False.
        - Each mark_loading issues a new ticket. Writes carrying an older
          ticket are ignored so a superseded request cannot overwrite a
          fresher one.
        - A URL's retry counter is removed once a fetch for it succeeds.
    """

    def __init__(
        self,
        error_display_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.error_display_seconds = error_display_seconds
        self.clock = clock
        self.metadata_by_org_id: dict[str, MetadataRecord] = {}
        self.loading_by_org_id: dict[str, int] = {}
        self.retry_count_by_url: dict[str, int] = {}
        self._generation: dict[str, int] = {}
        self._error: Optional[str] = None
        self._error_set_at = 0.0

    # Writes

    def mark_loading(self, org_id: str) -> int:
        """Flag an org as in flight and return its ticket."""
        ticket = self._generation.get(org_id, 0) + 1
        self._generation[org_id] = ticket
        self.loading_by_org_id[org_id] = ticket
        return ticket

    def clear_loading(self, org_id: str, ticket: Optional[int] = None) -> None:
        if not self._is_current(org_id, ticket):
            return
        self.loading_by_org_id.pop(org_id, None)

    def write_one(
        self, org_id: str, record: MetadataRecord, ticket: Optional[int] = None
    ) -> bool:
        """Store a record. Returns False when the ticket is stale."""
        if not self._is_current(org_id, ticket):
            return False
        self.metadata_by_org_id[org_id] = record
        return True

    def settle(self, org_id: str, record: MetadataRecord, ticket: Optional[int] = None) -> bool:
        """Write a record and clear the loading flag in one step."""
        written = self.write_one(org_id, record, ticket)
        if written:
            self.clear_loading(org_id, ticket)
        return written

    def clear(self, org_id: str) -> None:
        """Forget an org's metadata and loading flag, invalidating in-flight writes."""
        self.metadata_by_org_id.pop(org_id, None)
        self.loading_by_org_id.pop(org_id, None)
        self._generation[org_id] = self._generation.get(org_id, 0) + 1

    def clear_all(self) -> None:
        for org_id in list(self.metadata_by_org_id) + list(self.loading_by_org_id):
            self.clear(org_id)

    def record_retry(self, url: str) -> int:
        count = self.retry_count_by_url.get(url, 0) + 1
        self.retry_count_by_url[url] = count
        return count

    def reset_retries(self, url: str) -> None:
        self.retry_count_by_url.pop(url, None)

    def set_error(self, message: Optional[str]) -> None:
        self._error = message
        self._error_set_at = self.clock()

    # Reads

    def read_one(self, org_id: str) -> Optional[MetadataRecord]:
        return self.metadata_by_org_id.get(org_id)

    def is_loading(self, org_id: str) -> bool:
        return org_id in self.loading_by_org_id

    def has_metadata(self, org_id: str) -> bool:
        return org_id in self.metadata_by_org_id

    def retry_count(self, url: str) -> int:
        return self.retry_count_by_url.get(url, 0)

    @property
    def error(self) -> Optional[str]:
        """Last error message, or None once its display time has passed."""
        if self._error is None:
            return None
        if self.clock() - self._error_set_at >= self.error_display_seconds:
            self._error = None
        return self._error

    def read_aggregate_progress(self, organizations: Iterable[Organization]) -> EnrichmentProgress:
        """Progress over the organizations that have a website."""
        with_website = [org for org in organizations if org.has_website]
        total = len(with_website)
        loaded = sum(1 for org in with_website if org.id in self.metadata_by_org_id)
        in_flight = sum(1 for org in with_website if org.id in self.loading_by_org_id)
        percentage = round(loaded / total * 100) if total else 100
        return EnrichmentProgress(
            loaded_count=loaded,
            total_with_website=total,
            in_flight_count=in_flight,
            percentage=percentage,
        )

    def _is_current(self, org_id: str, ticket: Optional[int]) -> bool:
        return ticket is None or self._generation.get(org_id, 0) == ticket
