"""Core domain entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class MetadataRecord:
    """Normalized website metadata for one organization."""

    title: str
    description: str
    image: Optional[str]
    favicon: str
    source_url: str
    domain: str
    error_note: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Title cannot be empty")
        if not self.favicon:
            raise ValueError("Favicon cannot be empty")

    @property
    def is_fallback(self) -> bool:
        return self.error_note is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape returned by the metadata endpoint."""
        data: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "favicon": self.favicon,
            "url": self.source_url,
            "domain": self.domain,
        }
        if self.error_note is not None:
            data["errorNote"] = self.error_note
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MetadataRecord":
        """Build a record from an endpoint JSON payload."""
        return cls(
            title=data["title"],
            description=data.get("description") or "",
            image=data.get("image"),
            favicon=data["favicon"],
            source_url=data.get("url") or "",
            domain=data.get("domain") or "",
            error_note=data.get("errorNote"),
        )


@dataclass(frozen=True)
class CacheEntry:
    """Cached record with the time it was fetched."""

    data: MetadataRecord
    fetched_at_epoch_ms: float


@dataclass(frozen=True)
class NormalizedUrl:
    """Absolute URL plus its hostname."""

    url: str
    hostname: str


@dataclass
class Organization:
    """Organization as supplied by the directory list."""

    id: str
    org_name: str
    website: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Organization id cannot be empty")

    @property
    def has_website(self) -> bool:
        return bool(self.website and self.website.strip())


class RetryState(str, Enum):
    """States of a single (organization, url) metadata request."""

    IDLE = "idle"
    REQUESTING = "requesting"
    RETRYING = "retrying"
    SUCCESS = "success"
    EXHAUSTED_FALLBACK = "exhausted_fallback"


@dataclass
class RetryOutcome:
    """Settled result of the retry controller."""

    record: MetadataRecord
    state: RetryState
    attempts: int
    last_error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == RetryState.SUCCESS


@dataclass
class BatchResult:
    """Outcome for one member of a batch."""

    org_id: str
    record: MetadataRecord
    success: bool
    error: Optional[str] = None


@dataclass
class BatchPlan:
    """Ordered groups of organizations for one enrichment sweep."""

    groups: list[list[Organization]] = field(default_factory=list)

    @classmethod
    def partition(cls, organizations: list[Organization], batch_size: int) -> "BatchPlan":
        if batch_size < 1:
            raise ValueError("Batch size must be positive")
        groups = [
            organizations[i:i + batch_size]
            for i in range(0, len(organizations), batch_size)
        ]
        return cls(groups=groups)

    def __len__(self) -> int:
        return len(self.groups)

    @property
    def total(self) -> int:
        return sum(len(group) for group in self.groups)


@dataclass(frozen=True)
class EnrichmentProgress:
    """Aggregate progress exposed to the UI."""

    loaded_count: int
    total_with_website: int
    in_flight_count: int
    percentage: int
