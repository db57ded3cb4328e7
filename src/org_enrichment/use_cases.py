"""Business logic use cases."""

import asyncio
from contextlib import aclosing
from typing import AsyncIterator, Awaitable, Callable, Optional

from org_enrichment.config import Settings
from org_enrichment.core import (
    AggregateSweepError,
    BatchPlan,
    BatchResult,
    EnrichmentError,
    EnrichmentProgress,
    EnrichmentStateStore,
    FallbackSynthesizer,
    InvalidUrlError,
    MetadataCache,
    MetadataClient,
    MetadataExtractor,
    MetadataRecord,
    Organization,
    ParseError,
    RetryOutcome,
    RetryState,
    normalize_url,
)

Sleep = Callable[[float], Awaitable[None]]


def _short(value: Optional[str], limit: int = 100) -> Optional[str]:
    if value is None or len(value) <= limit:
        return value
    return value[:limit] + "..."


def build_fallbacks(settings: Settings) -> FallbackSynthesizer:
    cfg = settings.fallback
    return FallbackSynthesizer(
        placeholder_base=cfg.placeholder_base,
        favicon_service=cfg.favicon_service,
        description=cfg.description,
        banner_size=cfg.banner_size,
        banner_color=cfg.banner_color,
        text_color=cfg.text_color,
        favicon_size=cfg.favicon_size,
    )


class MetadataLookupService:
    """Server-side lookup: cache, then extractor, then fallback.

    Never raises except InvalidUrlError for input that cannot be
    normalized. Only successful extractions are cached.
    """

    def __init__(
        self,
        extractor: MetadataExtractor,
        cache: Optional[MetadataCache] = None,
        fallbacks: Optional[FallbackSynthesizer] = None,
    ) -> None:
        self.extractor = extractor
        self.cache = cache or MetadataCache()
        self.fallbacks = fallbacks or FallbackSynthesizer()

    async def lookup(self, raw_url: str) -> MetadataRecord:
        """Return metadata for a raw URL as entered for an organization."""
        cached = self.cache.get(raw_url)
        if cached is not None:
            print(f"📦 Cached metadata for {raw_url}")
            return cached

        target = normalize_url(raw_url)

        try:
            record = await self.extractor.extract(target)
        except EnrichmentError as e:
            print(f"⚠️  Metadata fetch failed for {raw_url}: {e}")
            return self.fallbacks.synthesize(
                raw_url, error_note=e.note, tls=getattr(e, "tls", False)
            )
        except Exception as e:
            print(f"⚠️  Unexpected error extracting {raw_url}: {type(e).__name__}: {e}")
            return self.fallbacks.synthesize(raw_url, error_note=ParseError.note)

        self.cache.put(raw_url, record)
        print(f"🔍 Metadata for {raw_url}: {record.title!r}")
        print(f"  └─ image: {_short(record.image)}")
        print(f"  └─ favicon: {_short(record.favicon)}")
        return record


class RetryController:
    """Request one URL's metadata with exponential backoff.

    Idle -> Requesting -> Success
                       -> Retrying -> Requesting
                       -> ExhaustedFallback

    Never raises: exhausted or invalid input settles into a synthesized record.
    """

    def __init__(
        self,
        client: MetadataClient,
        store: EnrichmentStateStore,
        fallbacks: Optional[FallbackSynthesizer] = None,
        cache: Optional[MetadataCache] = None,
        max_retries: int = 2,
        backoff_base: float = 1.0,
        sleep: Sleep = asyncio.sleep,
        on_transition: Optional[Callable[[str, RetryState], None]] = None,
    ) -> None:
        self.client = client
        self.store = store
        self.fallbacks = fallbacks or FallbackSynthesizer()
        self.cache = cache
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.sleep = sleep
        self.on_transition = on_transition

    def backoff_delay(self, retry_index: int) -> float:
        """Delay before retry number retry_index (0-based): 1s, 2s, 4s..."""
        return self.backoff_base * (2 ** retry_index)

    async def run(self, raw_url: str, use_cache: bool = True) -> RetryOutcome:
        self._transition(raw_url, RetryState.IDLE)

        try:
            normalize_url(raw_url)
        except InvalidUrlError as e:
            print(f"⚠️  Invalid URL: {raw_url!r}")
            return self._settle_fallback(raw_url, attempts=0, error=e)

        if use_cache and self.cache is not None:
            cached = self.cache.get(raw_url)
            if cached is not None:
                self._transition(raw_url, RetryState.SUCCESS)
                return RetryOutcome(record=cached, state=RetryState.SUCCESS, attempts=0)

        attempts = 0
        retries = 0
        while True:
            self._transition(raw_url, RetryState.REQUESTING)
            attempts += 1
            try:
                record = await self.client.fetch_metadata(raw_url)
            except Exception as e:
                if retries >= self.max_retries:
                    return self._settle_fallback(raw_url, attempts=attempts, error=e)

                delay = self.backoff_delay(retries)
                retries += 1
                self.store.record_retry(raw_url)
                self._transition(raw_url, RetryState.RETRYING)
                print(
                    f"  └─ Retrying {raw_url} in {delay:g}s "
                    f"(attempt {retries}/{self.max_retries}): {e}"
                )
                await self.sleep(delay)
                continue

            self.store.reset_retries(raw_url)
            if self.cache is not None:
                self.cache.put(raw_url, record)
            self._transition(raw_url, RetryState.SUCCESS)
            return RetryOutcome(record=record, state=RetryState.SUCCESS, attempts=attempts)

    def _settle_fallback(self, raw_url: str, attempts: int, error: Exception) -> RetryOutcome:
        note = error.note if isinstance(error, EnrichmentError) else str(error)
        self._transition(raw_url, RetryState.EXHAUSTED_FALLBACK)
        return RetryOutcome(
            record=self.fallbacks.synthesize(raw_url, error_note=note),
            state=RetryState.EXHAUSTED_FALLBACK,
            attempts=attempts,
            last_error=str(error),
        )

    def _transition(self, raw_url: str, state: RetryState) -> None:
        if self.on_transition:
            self.on_transition(raw_url, state)


class BatchScheduler:
    """Enrich organizations in sequential fixed-size groups.

    Members of a group run concurrently; the next group starts only after
    every member of the current one has settled and been written.
    """

    def __init__(
        self,
        controller: RetryController,
        store: EnrichmentStateStore,
        fallbacks: Optional[FallbackSynthesizer] = None,
        batch_size: int = 3,
        batch_delay: float = 0.5,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.controller = controller
        self.store = store
        self.fallbacks = fallbacks or FallbackSynthesizer()
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.sleep = sleep

    def select_candidates(self, organizations: list[Organization]) -> list[Organization]:
        """Organizations with a website, no stored metadata and no fetch in flight."""
        candidates: list[Organization] = []
        seen: set[str] = set()
        for org in organizations:
            if not org.has_website or org.id in seen:
                continue
            if self.store.has_metadata(org.id) or self.store.is_loading(org.id):
                continue
            seen.add(org.id)
            candidates.append(org)
        return candidates

    async def stream(self, organizations: list[Organization]) -> AsyncIterator[list[BatchResult]]:
        """Run one sweep, yielding each group's results as it settles.

        Closing the stream early releases the loading flags of every
        organization that has not settled yet.
        """
        candidates = self.select_candidates(organizations)
        if not candidates:
            return

        # Claim before the first await so overlapping sweeps skip these ids
        tickets = {org.id: self.store.mark_loading(org.id) for org in candidates}
        plan = BatchPlan.partition(candidates, self.batch_size)

        try:
            for index, group in enumerate(plan.groups, 1):
                print(f"📦 Processing metadata batch {index}/{len(plan)} ({len(group)} orgs)")
                yield await self._run_group(group, tickets)

                if index < len(plan):
                    print(f"⏳ Waiting {self.batch_delay * 1000:.0f}ms before next batch...")
                    await self.sleep(self.batch_delay)
        except Exception as e:
            print(f"❌ Batch processing error: {e}")
            self.store.set_error(AggregateSweepError.note)
        finally:
            # Settled and superseded tickets are no-ops here
            for org in candidates:
                self.store.clear_loading(org.id, tickets[org.id])

    async def sweep(
        self,
        organizations: list[Organization],
        on_batch: Optional[Callable[[list[BatchResult]], None]] = None,
    ) -> list[BatchResult]:
        """Run one sweep to completion and return every member's result.

        An exception from on_batch stops the sweep and is reported through
        the store's error message instead of propagating.
        """
        results: list[BatchResult] = []
        async with aclosing(self.stream(organizations)) as batches:
            try:
                async for batch in batches:
                    results.extend(batch)
                    if on_batch:
                        on_batch(batch)
            except Exception as e:
                print(f"❌ Batch callback error: {e}")
                self.store.set_error(AggregateSweepError.note)
        return results

    async def _run_group(
        self, group: list[Organization], tickets: dict[str, int]
    ) -> list[BatchResult]:
        settled = await asyncio.gather(
            *(self._run_member(org, tickets[org.id]) for org in group),
            return_exceptions=True,
        )

        results: list[BatchResult] = []
        for org, outcome in zip(group, settled):
            if isinstance(outcome, BaseException):
                print(f"❌ Failed to fetch metadata for {org.org_name}: {outcome}")
                record = self.fallbacks.for_organization(org.org_name, org.website)
                self.store.settle(org.id, record, tickets[org.id])
                self.store.set_error(f"Failed to fetch metadata for {org.org_name}")
                outcome = BatchResult(org_id=org.id, record=record, success=False, error=str(outcome))
            results.append(outcome)
        return results

    async def _run_member(self, org: Organization, ticket: int) -> BatchResult:
        outcome = await self.controller.run(org.website or "")
        self.store.settle(org.id, outcome.record, ticket)

        mark = "✓" if outcome.succeeded else "⚠️ "
        print(f"  {mark} {org.org_name[:60]} → {outcome.record.title[:60]}")
        return BatchResult(
            org_id=org.id,
            record=outcome.record,
            success=outcome.succeeded,
            error=outcome.last_error,
        )


class EnrichmentService:
    """Client-side orchestration over the state store.

    The only writer of the store: sweeps, single fetches and manual
    refreshes all funnel their results through it.
    """

    def __init__(
        self,
        client: MetadataClient,
        store: Optional[EnrichmentStateStore] = None,
        fallbacks: Optional[FallbackSynthesizer] = None,
        cache: Optional[MetadataCache] = None,
        max_retries: int = 2,
        backoff_base: float = 1.0,
        batch_size: int = 3,
        batch_delay: float = 0.5,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.store = store or EnrichmentStateStore()
        self.fallbacks = fallbacks or FallbackSynthesizer()
        self.controller = RetryController(
            client=client,
            store=self.store,
            fallbacks=self.fallbacks,
            cache=cache,
            max_retries=max_retries,
            backoff_base=backoff_base,
            sleep=sleep,
        )
        self.scheduler = BatchScheduler(
            controller=self.controller,
            store=self.store,
            fallbacks=self.fallbacks,
            batch_size=batch_size,
            batch_delay=batch_delay,
            sleep=sleep,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, client: MetadataClient, sleep: Sleep = asyncio.sleep
    ) -> "EnrichmentService":
        cache = None
        if settings.client.use_cache:
            cache = MetadataCache(ttl_ms=settings.cache_ttl_ms)
        return cls(
            client=client,
            store=EnrichmentStateStore(error_display_seconds=settings.error_display_seconds),
            fallbacks=build_fallbacks(settings),
            cache=cache,
            max_retries=settings.max_retries,
            backoff_base=settings.client.backoff_base,
            batch_size=settings.batch_size,
            batch_delay=settings.batch_delay,
            sleep=sleep,
        )

    async def reconcile(
        self,
        organizations: list[Organization],
        on_batch: Optional[Callable[[list[BatchResult]], None]] = None,
    ) -> list[BatchResult]:
        """Enrich every organization that still needs metadata.

        Safe to call on any trigger: the candidate set is recomputed each
        time and organizations already loaded or in flight are skipped.
        """
        return await self.scheduler.sweep(organizations, on_batch=on_batch)

    async def fetch_one(self, org: Organization, use_cache: bool = True) -> Optional[MetadataRecord]:
        """Fetch one organization's metadata outside the batch sweep."""
        if not org.has_website:
            return None

        ticket = self.store.mark_loading(org.id)
        try:
            outcome = await self.controller.run(org.website or "", use_cache=use_cache)
            self.store.write_one(org.id, outcome.record, ticket)
            if outcome.succeeded:
                self.store.set_error(None)
            else:
                self.store.set_error(f"Failed to fetch metadata for {org.org_name}")
            return outcome.record
        finally:
            self.store.clear_loading(org.id, ticket)

    async def refresh(self, org: Organization) -> Optional[MetadataRecord]:
        """Drop stored metadata and fetch it again, bypassing the client cache."""
        if not org.has_website:
            return None
        self.store.clear(org.id)
        return await self.fetch_one(org, use_cache=False)

    def clear(self, org_id: str) -> None:
        self.store.clear(org_id)

    def clear_all(self) -> None:
        self.store.clear_all()

    def progress(self, organizations: list[Organization]) -> EnrichmentProgress:
        return self.store.read_aggregate_progress(organizations)

    def get_metadata(self, org_id: str) -> Optional[MetadataRecord]:
        return self.store.read_one(org_id)

    def is_loading(self, org_id: str) -> bool:
        return self.store.is_loading(org_id)

    @property
    def error(self) -> Optional[str]:
        return self.store.error

    def metadata_with_fallback(self, org: Organization) -> MetadataRecord:
        """Stored metadata, or an org-name based record. Never empty."""
        existing = self.store.read_one(org.id)
        if existing is not None:
            return existing
        return self.fallbacks.for_organization(org.org_name, org.website)

    def favicon_url(self, org: Organization) -> str:
        existing = self.store.read_one(org.id)
        if existing is not None and not self.is_placeholder_favicon(existing.favicon):
            return existing.favicon
        if org.has_website:
            domain, _ = self.fallbacks.resolve_domain(org.website or "")
            return self.fallbacks.favicon_for(domain)
        return self.fallbacks.generic_favicon

    @staticmethod
    def is_placeholder_image(image_url: Optional[str]) -> bool:
        if not image_url:
            return True
        return "placeholder" in image_url

    @staticmethod
    def is_placeholder_favicon(favicon_url: Optional[str]) -> bool:
        if not favicon_url:
            return True
        return "placeholder" in favicon_url
