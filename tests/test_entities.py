"""Tests for core entities."""

import pytest

from org_enrichment.core import BatchPlan, MetadataRecord, Organization


def make_record(**overrides) -> MetadataRecord:
    data = {
        "title": "Example Org",
        "description": "An example",
        "image": "https://example.org/banner.jpg",
        "favicon": "https://example.org/favicon.ico",
        "source_url": "https://example.org",
        "domain": "example.org",
    }
    data.update(overrides)
    return MetadataRecord(**data)


def test_record_to_dict_uses_endpoint_shape() -> None:
    """Test serialization to the endpoint JSON shape."""
    record = make_record()

    assert record.to_dict() == {
        "title": "Example Org",
        "description": "An example",
        "image": "https://example.org/banner.jpg",
        "favicon": "https://example.org/favicon.ico",
        "url": "https://example.org",
        "domain": "example.org",
    }
    assert not record.is_fallback


def test_record_error_note_serialized_only_when_set() -> None:
    """Test errorNote is present only on synthesized records."""
    record = make_record(error_note="HTTP 503")

    assert record.to_dict()["errorNote"] == "HTTP 503"
    assert record.is_fallback


def test_record_from_dict() -> None:
    """Test building a record from an endpoint payload."""
    record = MetadataRecord.from_dict({
        "title": "T",
        "description": "D",
        "image": None,
        "favicon": "https://example.org/f.ico",
        "url": "https://example.org",
        "domain": "example.org",
        "errorNote": "Request timed out",
    })

    assert record.image is None
    assert record.source_url == "https://example.org"
    assert record.error_note == "Request timed out"


def test_record_validation() -> None:
    """Test records cannot be built without title or favicon."""
    with pytest.raises(ValueError, match="Title cannot be empty"):
        make_record(title="")

    with pytest.raises(ValueError, match="Favicon cannot be empty"):
        make_record(favicon="")


def test_organization_has_website() -> None:
    assert Organization(id="a", org_name="A", website="example.org").has_website
    assert not Organization(id="b", org_name="B", website="  ").has_website
    assert not Organization(id="c", org_name="C").has_website


def test_batch_plan_partition() -> None:
    """Test seven organizations split into groups of 3, 3 and 1."""
    orgs = [Organization(id=str(i), org_name=f"Org {i}", website=f"org{i}.org") for i in range(7)]

    plan = BatchPlan.partition(orgs, 3)

    assert len(plan) == 3
    assert [len(group) for group in plan.groups] == [3, 3, 1]
    assert plan.total == 7
    assert plan.groups[2][0].id == "6"


def test_batch_plan_rejects_zero_size() -> None:
    with pytest.raises(ValueError):
        BatchPlan.partition([], 0)
