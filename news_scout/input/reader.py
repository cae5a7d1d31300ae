"""
Candidate discovery for a query.

Two interchangeable sources produce CandidateItem lists: the RSS search
feed and the rendered search-results page. The requested source is read
first; when it yields too few usable entries the other one is read and
appended. Results are de-duplicated and capped at the requested limit.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..config import FeedConfig, FetchConfig
from ..core.dedup import dedup_candidates
from ..core.types import CandidateItem
from ..errors import DiscoveryError, NewsScoutError
from ..fetch.fetcher import fetch_url
from ..logging_utils import get_logger, log_event
from .feed import feed_url, parse_feed
from .search_page import parse_search_page, search_page_url

SOURCES = ("rss", "article")


def read_candidates(
    query: str,
    fetch_cfg: FetchConfig,
    feed_cfg: FeedConfig,
    *,
    lang: str | None = None,
    country: str | None = None,
    limit: int = 5,
    source: str = "rss",
    transport=None,
    logger: logging.Logger | None = None,
) -> list[CandidateItem]:
    """Discover up to limit candidate items for a query.

    Args:
        query: Search terms
        fetch_cfg: Fetch configuration
        feed_cfg: Aggregator base URL, defaults and dedup threshold
        lang: Interface language (defaults to feed_cfg.lang)
        country: Edition country (defaults to feed_cfg.country)
        limit: Maximum number of candidates returned
        source: "rss" to read the feed first, "article" for the search page
        transport: Optional httpx transport (used by tests)
        logger: Optional logger

    Returns:
        Ordered, de-duplicated candidates, at most limit of them

    Raises:
        DiscoveryError: every source failed to fetch
    """
    logger = get_logger(logger)
    lang = lang or feed_cfg.lang
    country = country or feed_cfg.country

    def read_feed() -> list[CandidateItem]:
        result = fetch_url(
            feed_url(feed_cfg.base_url, query, lang, country),
            fetch_cfg,
            check_markers=False,
            transport=transport,
            logger=logger,
        ).raise_for_error()
        return parse_feed(result.text or "")

    def read_search_page() -> list[CandidateItem]:
        result = fetch_url(
            search_page_url(feed_cfg.base_url, query, lang, country),
            fetch_cfg,
            check_markers=False,
            transport=transport,
            logger=logger,
        ).raise_for_error()
        return parse_search_page(result.text or "", feed_cfg.base_url)

    readers: list[tuple[str, Callable[[], list[CandidateItem]]]] = [
        ("rss", read_feed),
        ("article", read_search_page),
    ]
    if source == "article":
        readers.reverse()

    wanted = min(limit, feed_cfg.min_feed_entries)
    collected: list[CandidateItem] = []
    errors: list[NewsScoutError] = []
    for name, reader in readers:
        try:
            items = reader()
        except NewsScoutError as exc:
            errors.append(exc)
            log_event(
                logger,
                "Candidate source failed",
                level=logging.WARNING,
                event="discovery_source_failed",
                source=name,
                query=query,
                error=str(exc),
            )
            continue
        collected = dedup_candidates(collected + items, feed_cfg.title_similarity_threshold)
        log_event(
            logger,
            "Candidate source read",
            event="discovery_source_read",
            source=name,
            query=query,
            count=len(items),
            total=len(collected),
        )
        if len(collected) >= wanted:
            break

    if not collected and len(errors) == len(readers):
        raise DiscoveryError(f"Candidate discovery failed for query {query!r}: {errors[-1]}") from errors[-1]
    return collected[:limit]
