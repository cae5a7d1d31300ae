"""
Core data types for the resolution + extraction pipeline.

This module defines the data structures that flow between stages:
- CandidateItem: A feed or search-result entry prior to resolution
- ResolvedArticle: The outcome of de-indirecting an aggregator link
- ExtractedContent: Structured article fields derived from a page
- ItemResult: Per-candidate outcome within a batch
- PipelineResponse: The JSON-ready object relayed to callers
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class CandidateItem:
    """A candidate article discovered by the feed or search reader.

    Attributes:
        title: The headline as listed by the aggregator
        feed_link: The aggregator-hosted link to the item
        published_at: Optional ISO 8601 timestamp from the listing
        source_name: Optional publisher name from the listing
        description: Optional plain-text snippet
        origin: Which reader produced it ("rss" or "search")
    """
    title: str
    feed_link: str
    published_at: str | None = None
    source_name: str | None = None
    description: str | None = None
    origin: str = "rss"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ResolvedArticle:
    """Result of running the redirect resolution cascade.

    Frozen so the canonical URL cannot change once resolution completes.

    Attributes:
        canonical_url: The publisher URL, or the input link when unresolved
        original_url: The aggregator link that was resolved, if any
        resolved: True iff canonical_url is off the aggregator's host
        strategy: Name of the cascade step that produced canonical_url
    """
    canonical_url: str
    original_url: str | None = None
    resolved: bool = False
    strategy: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ExtractedContent:
    """Structured fields extracted from an article page.

    body_text is either None or at least the configured body threshold
    long; images are absolute, unique and capped.
    """
    url: str
    source_host: str
    title: str | None = None
    subtitle: str | None = None
    body_text: str | None = None
    images: list[str] = field(default_factory=list)
    published_at: str | None = None
    location: str | None = None
    category: str | None = None
    word_count: int = 0
    body_method: str | None = None

    @property
    def is_sufficient(self) -> bool:
        return bool(self.body_text)

    def to_dict(self, include_body: bool = True) -> dict[str, Any]:
        data = asdict(self)
        if not include_body:
            data.pop("body_text", None)
        return data


@dataclass
class ItemResult:
    """Outcome of resolving and extracting one batch candidate.

    A failed item never carries content.
    """
    candidate: CandidateItem
    success: bool
    resolution: ResolvedArticle | None = None
    content: ExtractedContent | None = None
    error: str | None = None
    error_type: str | None = None

    def __post_init__(self) -> None:
        if not self.success:
            self.content = None

    @classmethod
    def failed(
        cls,
        candidate: CandidateItem,
        error: BaseException,
        resolution: ResolvedArticle | None = None,
    ) -> "ItemResult":
        return cls(
            candidate=candidate,
            success=False,
            resolution=resolution,
            error=str(error),
            error_type=type(error).__name__,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "candidate": self.candidate.to_dict(),
            "resolution": self.resolution.to_dict() if self.resolution else None,
        }
        if self.success:
            data["content"] = self.content.to_dict() if self.content else None
        else:
            data["error"] = self.error
            data["error_type"] = self.error_type
        return data


@dataclass
class PipelineResponse:
    """Response object relayed to the caller.

    Attributes:
        success: Whether the request produced its payload
        data: JSON-ready payload on success (or partial context on soft failure)
        error: Human-readable error message on failure
        status_code: HTTP status the route layer should use
    """
    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    status_code: int = 200

    @classmethod
    def ok(cls, data: dict[str, Any]) -> "PipelineResponse":
        return cls(success=True, data=data, status_code=200)

    @classmethod
    def fail(cls, error: str, status_code: int) -> "PipelineResponse":
        return cls(success=False, error=error, status_code=status_code)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}
