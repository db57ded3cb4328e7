"""Website metadata extraction from HTML pages."""

import asyncio
from typing import Callable, Optional
from urllib.parse import urljoin, urlsplit

import httpx
from bs4 import BeautifulSoup, Tag

from org_enrichment.config import ExtractorConfig
from org_enrichment.core import (
    FallbackSynthesizer,
    MetadataExtractor,
    MetadataRecord,
    NormalizedUrl,
    ParseError,
    UpstreamConnectionError,
    UpstreamHttpError,
    UpstreamTimeoutError,
)

# Lazy-load placeholders that are not real assets
PLACEHOLDER_PATTERNS = (
    "data:image/gif",
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAA",
    "R0lGODlhAQABAIAAAAAAAP",
    "placeholder",
    "loading.gif",
    "spinner",
)

TITLE_META = (
    ("property", "og:title"),
    ("name", "twitter:title"),
)

DESCRIPTION_META = (
    ("property", "og:description"),
    ("name", "twitter:description"),
    ("name", "description"),
    ("property", "description"),
)

IMAGE_META = (
    ("property", "og:image"),
    ("name", "twitter:image"),
    ("name", "twitter:image:src"),
    ("property", "og:image:url"),
)

# (rel, extra attribute filter)
FAVICON_LINKS: tuple[tuple[str, dict[str, str]], ...] = (
    ("icon", {"type": "image/svg+xml"}),
    ("icon", {"sizes": "32x32"}),
    ("icon", {"sizes": "16x16"}),
    ("icon", {}),
    ("shortcut icon", {}),
    ("apple-touch-icon", {}),
    ("apple-touch-icon-precomposed", {}),
    ("mask-icon", {}),
)


def clean_text(value: Optional[str]) -> Optional[str]:
    """Stripped value, or None when blank."""
    if value is None:
        return None
    value = " ".join(value.split())
    return value or None


def clean_asset(value: Optional[str]) -> Optional[str]:
    """Like clean_text, but also rejects lazy-load placeholders."""
    value = clean_text(value)
    if value is None:
        return None
    if any(pattern in value for pattern in PLACEHOLDER_PATTERNS):
        return None
    return value


class HtmlMetadataExtractor(MetadataExtractor):
    """Fetch a page over HTTP and extract title, description, banner and favicon."""

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        fallbacks: Optional[FallbackSynthesizer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or ExtractorConfig()
        self.fallbacks = fallbacks or FallbackSynthesizer()
        self.transport = transport

    async def extract(self, target: NormalizedUrl) -> MetadataRecord:
        """Fetch the page and extract metadata from it."""
        html = await self._fetch(target.url)

        try:
            soup = BeautifulSoup(html, "html.parser")
            return self._extract_from_soup(soup, target)
        except Exception as e:
            raise ParseError(f"Could not parse {target.url}: {e}") from e

    async def _fetch(self, url: str) -> str:
        """Single GET with a browser-like signature and a hard timeout.

        httpx applies its timeout per connect/read, so the whole request,
        body included, is also bounded by one overall deadline.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=self.config.follow_redirects,
                headers=self._get_headers(),
                transport=self.transport,
            ) as client:
                response = await asyncio.wait_for(client.get(url), self.config.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise UpstreamTimeoutError(url, self.config.timeout) from e
        except httpx.ConnectError as e:
            reason = str(e)
            raise UpstreamConnectionError(url, reason, tls="CERTIFICATE" in reason.upper()) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamConnectionError(url, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise UpstreamHttpError(response.status_code, url)

        return response.text

    def _get_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": self.config.accept,
            "Accept-Language": self.config.accept_language,
        }

    def _extract_from_soup(self, soup: BeautifulSoup, target: NormalizedUrl) -> MetadataRecord:
        hostname = target.hostname

        title = (
            self._first_meta(soup, TITLE_META, clean_text)
            or self._tag_text(soup, "title")
            or self._tag_text(soup, "h1")
            or hostname
        )
        description = (
            self._first_meta(soup, DESCRIPTION_META, clean_text)
            or self.fallbacks.description
        )

        image = self._resolve(self._first_meta(soup, IMAGE_META, clean_asset), target.url)
        if image is None:
            image = self.fallbacks.placeholder_image(hostname)

        favicon = self._resolve(self._find_favicon(soup), target.url)
        if favicon is None:
            favicon = self.fallbacks.favicon_lookup(hostname)

        return MetadataRecord(
            title=title,
            description=description,
            image=image,
            favicon=favicon,
            source_url=target.url,
            domain=hostname,
        )

    def _first_meta(
        self,
        soup: BeautifulSoup,
        sources: tuple[tuple[str, str], ...],
        cleaner: Callable[[Optional[str]], Optional[str]],
    ) -> Optional[str]:
        """First non-empty meta content, in priority order."""
        for attr, value in sources:
            for tag in soup.find_all("meta", attrs={attr: value}):
                content = cleaner(tag.get("content"))
                if content:
                    return content
        return None

    def _tag_text(self, soup: BeautifulSoup, name: str) -> Optional[str]:
        tag = soup.find(name)
        if not isinstance(tag, Tag):
            return None
        return clean_text(tag.get_text(" "))

    def _find_favicon(self, soup: BeautifulSoup) -> Optional[str]:
        links = soup.find_all("link", href=True)
        for rel, extra in FAVICON_LINKS:
            for link in links:
                if self._rel_of(link) != rel:
                    continue
                if any((link.get(key) or "").lower() != val for key, val in extra.items()):
                    continue
                href = clean_asset(link.get("href"))
                if href:
                    return href
        return None

    @staticmethod
    def _rel_of(link: Tag) -> str:
        # bs4 splits rel into a list
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        return " ".join(part.lower() for part in rel)

    @staticmethod
    def _resolve(value: Optional[str], base_url: str) -> Optional[str]:
        """Make an asset URL absolute. None when it cannot be resolved."""
        if value is None:
            return None
        if value.startswith("data:"):
            return value
        try:
            resolved = urljoin(base_url, value)
            parts = urlsplit(resolved)
        except ValueError:
            return None
        if parts.scheme not in ("http", "https") or not parts.netloc:
            return None
        return resolved
