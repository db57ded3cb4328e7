"""Tests for the fallback synthesizer."""

from org_enrichment.core import FallbackSynthesizer
from org_enrichment.core.fallback import (
    BRAZILIAN_DESCRIPTION,
    DEFAULT_DESCRIPTION,
    GENERIC_FAVICON,
    TLS_DESCRIPTION,
)


def test_synthesize_from_url() -> None:
    """Test a complete record derived from the hostname."""
    record = FallbackSynthesizer().synthesize("https://example.org/about", error_note="HTTP 500")

    assert record.title == "example.org"
    assert record.domain == "example.org"
    assert record.description == DEFAULT_DESCRIPTION
    assert record.image == "https://via.placeholder.com/1200x630/059669/ffffff?text=example.org"
    assert record.favicon == "https://www.google.com/s2/favicons?domain=example.org&sz=64"
    assert record.source_url == "https://example.org/about"
    assert record.error_note == "HTTP 500"


def test_synthesize_invalid_url_uses_generic_favicon() -> None:
    """Test that unresolvable input keeps its raw text and gets the generic favicon."""
    record = FallbackSynthesizer().synthesize("not a url")

    assert record.title == "not a url"
    assert record.favicon == GENERIC_FAVICON
    assert "not%20a%20url" in record.image
    assert record.domain == "not a url"


def test_synthesize_with_org_name() -> None:
    record = FallbackSynthesizer().synthesize("example.org", org_name="Climate Action Now")

    assert record.title == "Climate Action Now"
    assert record.image.endswith("?text=Climate%20Action%20Now")
    assert "domain=example.org" in record.favicon


def test_synthesize_is_total_for_empty_input() -> None:
    """Test that even empty input produces a complete record."""
    record = FallbackSynthesizer().synthesize("")

    assert record.title
    assert record.description
    assert record.image
    assert record.favicon == GENERIC_FAVICON
    assert record.source_url
    assert record.domain


def test_synthesize_is_deterministic() -> None:
    synth = FallbackSynthesizer()
    assert synth.synthesize("example.org") == synth.synthesize("example.org")


def test_brazilian_description() -> None:
    record = FallbackSynthesizer().synthesize("https://www.oc.eco.br")
    assert record.description == BRAZILIAN_DESCRIPTION


def test_tls_description() -> None:
    record = FallbackSynthesizer().synthesize("example.org", tls=True)
    assert record.description == TLS_DESCRIPTION


def test_for_organization_without_website() -> None:
    record = FallbackSynthesizer().for_organization("Grassroots Collective", None)

    assert record.title == "Grassroots Collective"
    assert record.favicon == GENERIC_FAVICON
    assert record.image.endswith("?text=Grassroots%20Collective")


def test_custom_placeholder_settings() -> None:
    synth = FallbackSynthesizer(
        placeholder_base="https://placehold.example/",
        banner_color="000000",
        favicon_size=32,
    )
    record = synth.synthesize("example.org")

    assert record.image == "https://placehold.example/1200x630/000000/ffffff?text=example.org"
    assert record.favicon.endswith("&sz=32")
    assert synth.generic_favicon.startswith("https://placehold.example/64x64")
