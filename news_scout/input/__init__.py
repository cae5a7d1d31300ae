"""
Candidate discovery.

This package reads candidate items for a query from the aggregator's RSS
feed and its rendered search page.
"""

from .feed import feed_url, parse_feed
from .reader import read_candidates
from .search_page import parse_search_page, search_page_url

__all__ = [
    "read_candidates",
    "feed_url",
    "parse_feed",
    "parse_search_page",
    "search_page_url",
]
