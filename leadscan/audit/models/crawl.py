"""Pydantic models for URL discovery and page selection."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DiscoverySource(str, Enum):
    """How the candidate URL list for a run was obtained."""
    SITEMAP = "sitemap"       # First sitemap location that yielded URLs
    FALLBACK = "fallback"     # No sitemap found, root URL only


class CandidateUrlSet(BaseModel):
    """Ordered page URLs discovered for one site at one point in time."""

    model_config = ConfigDict(frozen=True)

    urls: List[str] = Field(description="Discovered page URLs in discovery order")
    source: DiscoverySource = Field(description="Provenance of the URL list")
    sitemap_url: Optional[str] = Field(
        default=None,
        description="Sitemap location that produced the URLs"
    )
    discovered_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When discovery finished"
    )

    @model_validator(mode='after')
    def validate_not_empty(self):
        if not self.urls:
            raise ValueError("candidate URL set cannot be empty")
        return self


class FilteredUrls(BaseModel):
    """URLs selected for scanning after filtering and truncation."""

    model_config = ConfigDict(frozen=True)

    urls: List[str] = Field(default_factory=list, description="URLs to scan, in scan order")
    total_found: int = Field(default=0, ge=0, description="URLs before filtering")
    html_count: int = Field(default=0, ge=0, description="URLs surviving the deny-list")
    max_pages: int = Field(ge=1, description="Page cap that was applied")

    @property
    def selected(self) -> int:
        return len(self.urls)
