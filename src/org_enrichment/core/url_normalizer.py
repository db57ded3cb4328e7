"""URL normalization and validation."""

import re
from urllib.parse import urlsplit

from org_enrichment.core.entities import NormalizedUrl
from org_enrichment.core.errors import InvalidUrlError

SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
# Hostname characters; IDN labels pass, whitespace and delimiters do not
HOST_RE = re.compile(r"^[^\s/\\?#@:\[\]<>\"'`{}|^%]+$")
IPV6_RE = re.compile(r"^\[[0-9A-Fa-f:.]+\]$")

DEFAULT_SCHEME = "https"


def has_scheme(raw_url: str) -> bool:
    return bool(SCHEME_RE.match(raw_url))


def ensure_scheme(raw_url: str) -> str:
    """Prepend https:// unless the string already carries a scheme."""
    return raw_url if has_scheme(raw_url) else f"{DEFAULT_SCHEME}://{raw_url}"


def _is_valid_host(host: str) -> bool:
    if IPV6_RE.match(host):
        return True
    if not HOST_RE.match(host):
        return False
    if host.startswith(".") or ".." in host:
        return False
    return True


def normalize_url(raw_url: str) -> NormalizedUrl:
    """Turn a raw, possibly protocol-less string into an absolute URL.

    Raises:
        InvalidUrlError: If the input cannot be parsed as an absolute URL.
    """
    if raw_url is None or not raw_url.strip():
        raise InvalidUrlError(raw_url or "")

    text = raw_url.strip()
    scheme = SCHEME_RE.match(text)
    if scheme:
        # Whitespace after the scheme trims the same as without one
        text = scheme.group(0) + text[scheme.end():].strip()

    candidate = ensure_scheme(text)
    try:
        parts = urlsplit(candidate)
        # Accessing .port validates it
        parts.port
    except ValueError:
        raise InvalidUrlError(raw_url)

    netloc = parts.netloc.rsplit("@", 1)[-1]
    if netloc.startswith("["):
        host = netloc[:netloc.find("]") + 1] or netloc
    else:
        host = netloc.split(":", 1)[0]

    if not parts.scheme or not host or not _is_valid_host(host):
        raise InvalidUrlError(raw_url)

    return NormalizedUrl(url=candidate, hostname=(parts.hostname or host).lower())


def best_effort_domain(raw_url: str) -> str:
    """Domain-ish string for inputs that may not be valid URLs.

    Strips a leading scheme and keeps the segment before the first slash.
    """
    text = (raw_url or "").strip()
    return SCHEME_RE.sub("", text, count=1).split("/")[0]


def looks_like_hostname(domain: str) -> bool:
    """Whether a best-effort domain is usable for a favicon lookup."""
    if not domain:
        return False
    return _is_valid_host(domain.split(":", 1)[0]) and any(ch.isalnum() for ch in domain)
