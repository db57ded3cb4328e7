"""Deterministic fallback metadata, built without network access."""

from typing import Optional
from urllib.parse import quote

from org_enrichment.core.entities import MetadataRecord
from org_enrichment.core.errors import InvalidUrlError
from org_enrichment.core.url_normalizer import (
    best_effort_domain,
    looks_like_hostname,
    normalize_url,
)

DEFAULT_DESCRIPTION = "Climate organization working for environmental justice"
BRAZILIAN_DESCRIPTION = (
    "Organização brasileira trabalhando pela justiça climática e sustentabilidade ambiental"
)
TLS_DESCRIPTION = "Climate organization (TLS certificate issue - content not accessible)"

PLACEHOLDER_BASE = "https://via.placeholder.com"
FAVICON_SERVICE = "https://www.google.com/s2/favicons"
GENERIC_FAVICON = f"{PLACEHOLDER_BASE}/64x64/666666/ffffff?text=?"


def is_brazilian_domain(domain: str) -> bool:
    lowered = domain.lower()
    return ".br" in lowered or "brasil" in lowered


class FallbackSynthesizer:
    """Build complete metadata records from a URL or domain alone.

    Every public method is pure and total: it never touches the network
    and never raises.
    """

    def __init__(
        self,
        placeholder_base: str = PLACEHOLDER_BASE,
        favicon_service: str = FAVICON_SERVICE,
        description: str = DEFAULT_DESCRIPTION,
        banner_size: str = "1200x630",
        banner_color: str = "059669",
        text_color: str = "ffffff",
        favicon_size: int = 64,
    ) -> None:
        self.placeholder_base = placeholder_base.rstrip("/")
        self.favicon_service = favicon_service
        self.description = description
        self.banner_size = banner_size
        self.banner_color = banner_color
        self.text_color = text_color
        self.favicon_size = favicon_size

    @property
    def generic_favicon(self) -> str:
        return f"{self.placeholder_base}/64x64/666666/ffffff?text=?"

    def placeholder_image(self, text: str) -> str:
        """Placeholder banner URL with the given display text."""
        return (
            f"{self.placeholder_base}/{self.banner_size}/{self.banner_color}/"
            f"{self.text_color}?text={quote(text, safe='')}"
        )

    def favicon_lookup(self, domain: str) -> str:
        """Third-party favicon lookup URL for a hostname."""
        return f"{self.favicon_service}?domain={domain}&sz={self.favicon_size}"

    def favicon_for(self, domain: str) -> str:
        if looks_like_hostname(domain):
            return self.favicon_lookup(domain)
        return self.generic_favicon

    def describe(self, domain: str) -> str:
        if is_brazilian_domain(domain):
            return BRAZILIAN_DESCRIPTION
        return self.description

    def resolve_domain(self, raw: str) -> tuple[str, Optional[str]]:
        """Return (domain, normalized url or None) for a raw URL or domain."""
        try:
            target = normalize_url(raw)
        except InvalidUrlError:
            return best_effort_domain(raw), None
        return target.hostname, target.url

    def synthesize(
        self,
        raw: str,
        org_name: Optional[str] = None,
        error_note: Optional[str] = None,
        tls: bool = False,
    ) -> MetadataRecord:
        """Synthesize a record for a raw URL or domain string.

        Args:
            raw: Raw URL or domain as entered for the organization.
            org_name: Display name, used for title and banner text when given.
            error_note: Reason the record was synthesized, if any.
            tls: Whether the failure was a certificate problem.
        """
        domain, normalized = self.resolve_domain(raw or "")
        label = (org_name or "").strip() or domain or "Organization"
        description = TLS_DESCRIPTION if tls else self.describe(domain)

        return MetadataRecord(
            title=label,
            description=description,
            image=self.placeholder_image(label),
            favicon=self.favicon_for(domain),
            source_url=normalized or (raw or "").strip() or label,
            domain=domain or label,
            error_note=error_note,
        )

    def for_organization(self, org_name: str, website: Optional[str]) -> MetadataRecord:
        """Fallback keyed by organization name, used for display and batch failures."""
        if website and website.strip():
            return self.synthesize(website, org_name=org_name)
        label = org_name.strip() or "Organization"
        return MetadataRecord(
            title=label,
            description=self.description,
            image=self.placeholder_image(label),
            favicon=self.generic_favicon,
            source_url=label,
            domain=label,
        )
