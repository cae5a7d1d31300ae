"""
Core domain models and shared helpers.

This package contains data types and logic that is independent of any
specific pipeline stage.
"""

from .cascade import first_match
from .dates import normalize_timestamp, parse_datetime, to_iso_instant
from .dedup import best_title_match, dedup_candidates
from .types import CandidateItem, ExtractedContent, ItemResult, PipelineResponse, ResolvedArticle

__all__ = [
    "CandidateItem",
    "ResolvedArticle",
    "ExtractedContent",
    "ItemResult",
    "PipelineResponse",
    "first_match",
    "dedup_candidates",
    "best_title_match",
    "normalize_timestamp",
    "parse_datetime",
    "to_iso_instant",
]
