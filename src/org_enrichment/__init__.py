"""Website metadata enrichment for the climate organization directory."""

__version__ = "0.1.0"
