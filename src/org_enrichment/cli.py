"""CLI entry point for organization metadata enrichment."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
import yaml

from org_enrichment.adapters.client import EndpointMetadataClient, LocalMetadataClient
from org_enrichment.api.app import build_lookup_service, create_app
from org_enrichment.config import Settings, get_settings
from org_enrichment.core import BatchResult, InvalidUrlError, Organization
from org_enrichment.use_cases import EnrichmentService

app = typer.Typer(help="Website metadata enrichment for climate organizations.")

CONFIG_OPTION = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to YAML config")


def load_organizations(path: Path) -> list[Organization]:
    """Load organizations from a YAML list, or a mapping with an 'organizations' key."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("organizations") or []
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of organizations in {path}")

    organizations = []
    for entry in data:
        organizations.append(Organization(
            id=str(entry["id"]),
            org_name=str(entry.get("org_name") or entry["id"]),
            website=entry.get("website"),
        ))
    return organizations


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind host"),
    port: Optional[int] = typer.Option(None, help="Bind port"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Run the GET /metadata endpoint."""
    import uvicorn

    settings = get_settings(config)
    if host:
        settings.server.host = host
    if port:
        settings.server.port = port

    uvicorn.run(create_app(settings), host=settings.server.host, port=settings.server.port)


@app.command()
def lookup(url: str, config: Path = CONFIG_OPTION) -> None:
    """Look up one website in-process and print the JSON record."""
    settings = get_settings(config)
    service = build_lookup_service(settings)

    try:
        record = asyncio.run(service.lookup(url))
    except InvalidUrlError:
        print(f"❌ Invalid URL format: {url}")
        raise typer.Exit(code=1)

    print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))


@app.command()
def enrich(
    orgs_file: Path = typer.Argument(..., help="YAML file with id/org_name/website entries"),
    endpoint: Optional[str] = typer.Option(None, help="Enrichment endpoint base URL"),
    local: bool = typer.Option(False, "--local", help="Extract in-process instead of calling the endpoint"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Run one enrichment sweep over an organization list."""
    settings = get_settings(config)
    if endpoint:
        settings.client.endpoint_url = endpoint

    organizations = load_organizations(orgs_file)
    asyncio.run(async_enrich(settings, organizations, local))


async def async_enrich(settings: Settings, organizations: list[Organization], local: bool) -> None:
    """Async implementation of the enrich command."""
    print("\n" + "=" * 70)
    print("🌍 ORGANIZATION METADATA ENRICHMENT")
    print("=" * 70)

    if local:
        client = LocalMetadataClient(build_lookup_service(settings))
        print("  • Mode: in-process extraction")
    else:
        client = EndpointMetadataClient(settings.endpoint_url, timeout=settings.client.timeout)
        print(f"  • Endpoint: {settings.endpoint_url}")

    print(f"  • Organizations: {len(organizations)}")
    print(f"  • Batch size: {settings.batch_size}, delay {settings.batch_delay:g}s")
    print(f"  • Retries: {settings.max_retries}")

    service = EnrichmentService.from_settings(settings, client)

    def report(batch: list[BatchResult]) -> None:
        progress = service.progress(organizations)
        print(
            f"  └─ Progress: {progress.loaded_count}/{progress.total_with_website} "
            f"({progress.percentage}%)"
        )

    results = await service.reconcile(organizations, on_batch=report)

    print("\n" + "=" * 70)
    print("📊 RESULTS")
    print("=" * 70)

    for org in organizations:
        record = service.metadata_with_fallback(org)
        status = "✓" if record.error_note is None else "⚠️ "
        print(f"\n{status} {org.org_name}")
        print(f"  • Title: {record.title}")
        print(f"  • Image: {record.image}")
        print(f"  • Favicon: {service.favicon_url(org)}")
        if record.error_note:
            print(f"  • Note: {record.error_note}")

    failed = sum(1 for r in results if not r.success)
    print(f"\n✅ Enriched {len(results) - failed}/{len(results)} organizations")
    if failed:
        print(f"⚠️  {failed} used fallback metadata")
    if service.error:
        print(f"⚠️  {service.error}")
    print()


if __name__ == "__main__":
    app()
