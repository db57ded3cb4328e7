"""Enrichment error taxonomy."""

from typing import Optional


class EnrichmentError(Exception):
    """Base class for enrichment failures."""

    note = "Failed to fetch metadata, using fallbacks"

    def __init__(self, message: str = "", note: Optional[str] = None) -> None:
        super().__init__(message or self.note)
        if note is not None:
            self.note = note


class InvalidUrlError(EnrichmentError):
    """Input cannot be normalized into an absolute URL. Never retried."""

    note = "Invalid URL format"

    def __init__(self, raw_url: str) -> None:
        super().__init__(f"Invalid URL: {raw_url!r}")
        self.raw_url = raw_url


class UpstreamHttpError(EnrichmentError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str = "") -> None:
        super().__init__(f"HTTP {status_code} for {url}", note=f"HTTP {status_code}")
        self.status_code = status_code
        self.url = url


class UpstreamTimeoutError(EnrichmentError):
    """Upstream did not answer within its time bound."""

    def __init__(self, url: str = "", timeout: Optional[float] = None) -> None:
        detail = f" after {timeout:.0f}s" if timeout is not None else ""
        super().__init__(f"Timed out{detail} fetching {url}", note="Request timed out")
        self.url = url
        self.timeout = timeout


class UpstreamConnectionError(EnrichmentError):
    """Network failure other than a timeout."""

    def __init__(self, url: str = "", reason: str = "", tls: bool = False) -> None:
        note = (
            "TLS certificate configuration issue on target website"
            if tls else "HTTP connection failed"
        )
        super().__init__(f"Connection to {url} failed: {reason}", note=note)
        self.url = url
        self.tls = tls


class ParseError(EnrichmentError):
    """Document was fetched but could not be parsed."""

    note = "Failed to parse page"


class AggregateSweepError(EnrichmentError):
    """Unexpected failure while orchestrating a batch sweep."""

    note = "Failed to load website metadata"
