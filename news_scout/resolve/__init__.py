"""
Aggregator link resolution.

This package de-indirects aggregator item links to canonical publisher
URLs through an ordered cascade of strategies.
"""

from .resolver import CASCADE, is_aggregator_url, resolve_link
from .strategies import ResolutionContext, rss_to_article_form

__all__ = [
    "resolve_link",
    "is_aggregator_url",
    "CASCADE",
    "ResolutionContext",
    "rss_to_article_form",
]
