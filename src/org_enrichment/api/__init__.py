"""HTTP API for metadata lookups."""

from org_enrichment.api.app import create_app

__all__ = ["create_app"]
