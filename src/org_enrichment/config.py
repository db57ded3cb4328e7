"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class ExtractorConfig:
    """Upstream page fetch settings."""
    timeout: float = 10.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36"
    )
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    accept_language: str = "en-US,en;q=0.9,pt-BR;q=0.8"
    follow_redirects: bool = True


@dataclass
class CacheConfig:
    """Server-side response cache settings."""
    ttl_hours: float = 24.0


@dataclass
class ClientConfig:
    """Enrichment endpoint client settings."""
    endpoint_url: str = "http://127.0.0.1:8000"
    timeout: float = 15.0
    max_retries: int = 2
    backoff_base: float = 1.0
    use_cache: bool = True


@dataclass
class SchedulerConfig:
    """Batch scheduler settings."""
    batch_size: int = 3
    batch_delay: float = 0.5


@dataclass
class ServerConfig:
    """HTTP server settings."""
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class FallbackConfig:
    """Synthesized metadata settings."""
    placeholder_base: str = "https://via.placeholder.com"
    favicon_service: str = "https://www.google.com/s2/favicons"
    description: str = "Climate organization working for environmental justice"
    banner_size: str = "1200x630"
    banner_color: str = "059669"
    text_color: str = "ffffff"
    favicon_size: int = 64


@dataclass
class Settings:
    """Application settings."""

    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    error_display_seconds: float = 5.0

    @property
    def cache_ttl_ms(self) -> float:
        return self.cache.ttl_hours * 60 * 60 * 1000

    @property
    def endpoint_url(self) -> str:
        return self.client.endpoint_url

    @property
    def max_retries(self) -> int:
        return self.client.max_retries

    @property
    def batch_size(self) -> int:
        return self.scheduler.batch_size

    @property
    def batch_delay(self) -> float:
        return self.scheduler.batch_delay


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)
    settings = Settings()

    sections = {
        "extractor": settings.extractor,
        "cache": settings.cache,
        "client": settings.client,
        "scheduler": settings.scheduler,
        "server": settings.server,
        "fallback": settings.fallback,
    }
    for name, section in sections.items():
        for key, value in (config.get(name) or {}).items():
            if not hasattr(section, key):
                raise ValueError(f"Unknown setting {name}.{key}")
            setattr(section, key, value)

    if "error_display_seconds" in config:
        settings.error_display_seconds = float(config["error_display_seconds"])

    # Environment overrides
    if os.getenv("ENRICHMENT_ENDPOINT_URL"):
        settings.client.endpoint_url = os.environ["ENRICHMENT_ENDPOINT_URL"]
    if os.getenv("ENRICHMENT_HOST"):
        settings.server.host = os.environ["ENRICHMENT_HOST"]
    if os.getenv("ENRICHMENT_PORT"):
        settings.server.port = int(os.environ["ENRICHMENT_PORT"])

    return settings
