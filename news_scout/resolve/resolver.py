"""
Aggregator redirect resolution.

resolve_link turns an aggregator item link into the publisher's canonical
URL by running an ordered cascade of strategies through first_match:

1. query_param      - url=/q=/u= parameter (offline)
2. encoded_token    - legacy base64 article token (offline)
3. location_header  - 3xx Location from a redirect-less fetch
4. meta_refresh     - <meta http-equiv="refresh">
5. canonical_link   - <link rel="canonical"> / og:url
6. script_scan      - article-looking URLs in inline scripts
7. search_fallback  - find the item on the aggregator's search page and
                      re-run steps 3-6 on that anchor

A step wins only with a URL off the aggregator's host. resolve_link never
raises; exhausting the cascade returns resolved=False.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable

from ..config import FetchConfig, ResolverConfig
from ..core.cascade import first_match
from ..core.dedup import best_title_match
from ..core.types import ResolvedArticle
from ..core.urls import host_matches, host_of, is_http_url
from ..input.search_page import parse_search_page, search_page_url
from ..logging_utils import get_logger, log_event
from .strategies import (
    ResolutionContext,
    canonical_link,
    encoded_token,
    location_header,
    meta_refresh,
    query_param,
    script_scan,
)

Step = Callable[[ResolutionContext], "str | None"]


def _guarded(step: Step) -> Step:
    """Wrap a step so an unexpected exception counts as "no result"."""

    @functools.wraps(step)
    def wrapper(ctx: ResolutionContext) -> str | None:
        try:
            result = step(ctx)
        except Exception as exc:  # noqa: BLE001
            log_event(
                ctx.logger,
                "Resolver step error",
                level=logging.WARNING,
                event="resolve_step_error",
                step=step.__name__,
                url=ctx.link,
                error=f"{type(exc).__name__}: {exc}",
            )
            return None
        log_event(
            ctx.logger,
            "Resolver step",
            level=logging.DEBUG,
            event="resolve_step",
            step=step.__name__,
            url=ctx.link,
            result=result,
        )
        return result

    return wrapper


NETWORK_STEPS: list[Step] = [
    _guarded(location_header),
    _guarded(meta_refresh),
    _guarded(canonical_link),
    _guarded(script_scan),
]


def search_fallback(ctx: ResolutionContext) -> str | None:
    """Locate the item on the rendered search page and resolve that anchor."""
    if not ctx.title:
        return None
    base_url = ctx.resolver_cfg.search_base_url
    result = ctx.fetch(search_page_url(base_url, ctx.title))
    if not result.ok or not result.text:
        return None
    items = parse_search_page(result.text, base_url)
    index = best_title_match(
        ctx.title, [item.title for item in items], ctx.resolver_cfg.search_match_threshold
    )
    if index is None:
        return None
    anchor = items[index].feed_link
    if ctx.is_foreign(anchor):
        return anchor
    if anchor == ctx.link:
        return None
    hit = first_match(NETWORK_STEPS, ctx.for_link(anchor), accept=ctx.is_foreign)
    return hit[1] if hit else None


CASCADE: list[Step] = [
    _guarded(query_param),
    _guarded(encoded_token),
    *NETWORK_STEPS,
    _guarded(search_fallback),
]


def is_aggregator_url(url: str, cfg: ResolverConfig) -> bool:
    return host_matches(host_of(url), cfg.aggregator_hosts)


def resolve_link(
    link: str,
    fetch_cfg: FetchConfig,
    resolver_cfg: ResolverConfig,
    *,
    title: str | None = None,
    link_form: str | None = None,
    transport=None,
    logger: logging.Logger | None = None,
) -> ResolvedArticle:
    """Resolve an aggregator link to its canonical publisher URL.

    Args:
        link: The aggregator (or already canonical) link
        fetch_cfg: Fetch configuration used for network steps
        resolver_cfg: Aggregator hosts, search page and heuristics
        title: Item title, enables the search-page fallback
        link_form: Syntactic hint, "rss" or "article"
        transport: Optional httpx transport (used by tests)
        logger: Optional logger for resolution events

    Returns:
        ResolvedArticle; non-aggregator links come back unchanged and
        resolved without any network call.
    """
    logger = get_logger(logger)
    if not is_http_url(link):
        return ResolvedArticle(canonical_url=link, original_url=link, resolved=False)
    if not is_aggregator_url(link, resolver_cfg):
        return ResolvedArticle(canonical_url=link, resolved=True, strategy="canonical")

    ctx = ResolutionContext(
        link,
        fetch_cfg,
        resolver_cfg,
        title=title,
        link_form=link_form,
        transport=transport,
        logger=logger,
    )
    hit = first_match(CASCADE, ctx, accept=ctx.is_foreign)
    if hit is None:
        log_event(
            logger,
            "Resolution failed",
            level=logging.WARNING,
            event="resolve_done",
            url=link,
            resolved=False,
        )
        return ResolvedArticle(canonical_url=link, original_url=link, resolved=False)

    strategy, canonical = hit
    log_event(
        logger,
        "Resolved",
        event="resolve_done",
        url=link,
        canonical_url=canonical,
        strategy=strategy,
        resolved=True,
    )
    return ResolvedArticle(
        canonical_url=canonical,
        original_url=link,
        resolved=True,
        strategy=strategy,
    )
