"""
Candidate deduplication using link matching and fuzzy title comparison.

This module removes duplicate candidates based on:
1. Exact link matches
2. Fuzzy title similarity (same story listed twice with different links)
"""

from __future__ import annotations

from rapidfuzz import fuzz

from .types import CandidateItem


def dedup_candidates(items: list[CandidateItem], threshold: int = 92) -> list[CandidateItem]:
    """Remove duplicate candidates, preserving original order.

    Args:
        items: Candidates in discovery order
        threshold: Similarity threshold (0-100) for fuzzy title matching

    Returns:
        Deduplicated list of candidates
    """
    seen_links: set[str] = set()
    kept: list[CandidateItem] = []
    titles: list[str] = []

    for item in items:
        if item.feed_link in seen_links:
            continue
        if _is_similar_title(item.title, titles, threshold):
            continue
        seen_links.add(item.feed_link)
        titles.append(item.title)
        kept.append(item)

    return kept


def best_title_match(title: str, options: list[str], threshold: int) -> int | None:
    """Return the index of the option most similar to title, if any clears threshold."""
    best_index: int | None = None
    best_score = float(threshold)
    for index, option in enumerate(options):
        score = fuzz.token_set_ratio(title.lower(), option.lower())
        if score >= best_score and (best_index is None or score > best_score):
            best_index = index
            best_score = score
    return best_index


def _is_similar_title(title: str, titles: list[str], threshold: int) -> bool:
    for existing in titles:
        if fuzz.ratio(title, existing) >= threshold:
            return True
    return False
