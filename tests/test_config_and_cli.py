"""Tests for configuration loading and the CLI helpers."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from org_enrichment.cli import app, load_organizations
from org_enrichment.config import Settings, get_settings


def test_defaults() -> None:
    settings = Settings()

    assert settings.extractor.timeout == 10.0
    assert settings.client.timeout == 15.0
    assert settings.max_retries == 2
    assert settings.batch_size == 3
    assert settings.batch_delay == 0.5
    assert settings.cache_ttl_ms == 24 * 60 * 60 * 1000
    assert settings.error_display_seconds == 5.0


def test_missing_config_file_uses_defaults(tmp_path: Path) -> None:
    settings = get_settings(tmp_path / "missing.yaml")
    assert settings.batch_size == 3


def test_yaml_and_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "scheduler:\n  batch_size: 5\ncache:\n  ttl_hours: 1\nerror_display_seconds: 2\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("ENRICHMENT_ENDPOINT_URL", "http://enricher:9000")
    monkeypatch.setenv("ENRICHMENT_PORT", "9001")

    settings = get_settings(config_path)

    assert settings.batch_size == 5
    assert settings.cache_ttl_ms == 60 * 60 * 1000
    assert settings.error_display_seconds == 2.0
    assert settings.endpoint_url == "http://enricher:9000"
    assert settings.server.port == 9001


def test_unknown_setting_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("scheduler:\n  batch_sise: 5\n", encoding="utf-8")

    with pytest.raises(ValueError, match="scheduler.batch_sise"):
        get_settings(config_path)


def test_load_organizations_from_mapping(tmp_path: Path) -> None:
    path = tmp_path / "orgs.yaml"
    path.write_text(
        "organizations:\n"
        "  - id: 1\n    org_name: Example Org\n    website: example.org\n"
        "  - id: 2\n    org_name: No Site\n",
        encoding="utf-8",
    )

    orgs = load_organizations(path)

    assert [org.id for org in orgs] == ["1", "2"]
    assert orgs[0].website == "example.org"
    assert not orgs[1].has_website


def test_load_organizations_from_list(tmp_path: Path) -> None:
    path = tmp_path / "orgs.yaml"
    path.write_text("- id: a\n  website: a.org\n", encoding="utf-8")

    orgs = load_organizations(path)

    assert orgs[0].org_name == "a"


def test_lookup_command_rejects_invalid_url(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["lookup", "not a url", "--config", str(tmp_path / "none.yaml")])

    assert result.exit_code == 1
    assert "Invalid URL format" in result.output
