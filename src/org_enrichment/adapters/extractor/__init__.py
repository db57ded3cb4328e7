"""Metadata extractor adapters."""

from org_enrichment.adapters.extractor.html_extractor import HtmlMetadataExtractor

__all__ = ["HtmlMetadataExtractor"]
