"""Tests for the metadata HTTP endpoint."""

import httpx
import pytest
from fastapi.testclient import TestClient

from org_enrichment.adapters.extractor import HtmlMetadataExtractor
from org_enrichment.api import create_app
from org_enrichment.config import Settings
from org_enrichment.use_cases import MetadataLookupService

REQUIRED_FIELDS = ("title", "description", "image", "favicon", "url", "domain")


def site_handler(request: httpx.Request) -> httpx.Response:
    host = request.url.host
    if host == "down.example":
        raise httpx.ConnectError("connection refused", request=request)
    if host == "broken.example":
        return httpx.Response(500, text="error")
    if host == "slow.example":
        raise httpx.ReadTimeout("timed out", request=request)
    return httpx.Response(200, text='<title>Working Site</title>')


@pytest.fixture
def client() -> TestClient:
    extractor = HtmlMetadataExtractor(transport=httpx.MockTransport(site_handler))
    service = MetadataLookupService(extractor=extractor)
    return TestClient(create_app(Settings(), lookup_service=service))


def test_missing_url_parameter(client: TestClient) -> None:
    response = client.get("/metadata")

    assert response.status_code == 400
    assert response.json() == {"error": "URL parameter is required"}


def test_empty_url_parameter(client: TestClient) -> None:
    response = client.get("/metadata", params={"url": ""})

    assert response.status_code == 400
    assert response.json() == {"error": "URL parameter is required"}


def test_malformed_url(client: TestClient) -> None:
    response = client.get("/metadata", params={"url": "not a url"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid URL format"}


@pytest.mark.parametrize("url", [
    "working.example",
    "https://down.example",
    "broken.example/page",
    "slow.example",
])
def test_always_complete_record(client: TestClient, url: str) -> None:
    """Test every reachable failure mode still yields 200 and all fields."""
    response = client.get("/metadata", params={"url": url})

    assert response.status_code == 200
    body = response.json()
    for field in REQUIRED_FIELDS:
        assert body[field], f"{field} empty for {url}"


def test_successful_lookup_shape(client: TestClient) -> None:
    body = client.get("/metadata", params={"url": "working.example"}).json()

    assert body["title"] == "Working Site"
    assert body["url"] == "https://working.example"
    assert body["domain"] == "working.example"
    assert "errorNote" not in body


def test_failed_lookup_has_error_note(client: TestClient) -> None:
    body = client.get("/metadata", params={"url": "slow.example"}).json()

    assert body["errorNote"] == "Request timed out"
    assert body["title"] == "slow.example"


def test_health_reports_cache_size(client: TestClient) -> None:
    client.get("/metadata", params={"url": "working.example"})

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "cached": 1}
