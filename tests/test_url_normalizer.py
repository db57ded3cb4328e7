"""Tests for URL normalization."""

import pytest

from org_enrichment.core import InvalidUrlError, best_effort_domain, normalize_url
from org_enrichment.core.url_normalizer import looks_like_hostname


@pytest.mark.parametrize("raw", [
    "example.org",
    "www.example.org/about",
    "350.org/canada?ref=x",
    "sub.example.com:8080/path",
])
def test_missing_scheme_gets_https(raw: str) -> None:
    """Test protocol-less input equals the https-prefixed form."""
    assert normalize_url(raw) == normalize_url(f"https://{raw}")
    assert normalize_url(raw).url == f"https://{raw}"


def test_existing_scheme_kept() -> None:
    result = normalize_url("http://Example.org/Path")

    assert result.url == "http://Example.org/Path"
    assert result.hostname == "example.org"


def test_whitespace_trimmed() -> None:
    assert normalize_url("  example.org  ").url == "https://example.org"


@pytest.mark.parametrize("raw", [" example.org", "example.org\t", "  www.example.org/about "])
def test_padded_input_equals_https_prefixed_form(raw: str) -> None:
    assert normalize_url(raw) == normalize_url(f"https://{raw}")
    assert normalize_url(f"https://{raw}").url == f"https://{raw.strip()}"


@pytest.mark.parametrize("raw", [
    "",
    "   ",
    "not a url",
    "https://",
    "https://exa mple.org",
    "example.org:notaport",
    "https://..example.org",
])
def test_invalid_urls_rejected(raw: str) -> None:
    """Test unparseable input fails with InvalidUrlError."""
    with pytest.raises(InvalidUrlError):
        normalize_url(raw)


def test_best_effort_domain() -> None:
    assert best_effort_domain("https://example.org/about") == "example.org"
    assert best_effort_domain("http://example.org") == "example.org"
    assert best_effort_domain("example.org/a/b") == "example.org"
    assert best_effort_domain("not a url") == "not a url"


def test_looks_like_hostname() -> None:
    assert looks_like_hostname("example.org")
    assert looks_like_hostname("localhost:3000")
    assert not looks_like_hostname("not a url")
    assert not looks_like_hostname("")
