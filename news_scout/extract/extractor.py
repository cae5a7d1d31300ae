"""
Article content extraction.

extract_article fetches a canonical URL and hands the HTML to
extract_from_html, which:
1. strips boilerplate (always first),
2. picks the host's selector profile,
3. runs the per-field selector cascades,
4. falls back to whole-document extractors for the body.

Insufficient content is reported through ExtractedContent.is_sufficient
rather than an exception; fetch failures propagate as FetchError.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from ..config import ExtractConfig, FetchConfig
from ..core.types import ExtractedContent
from ..core.urls import host_of
from ..fetch.fetcher import fetch_url
from ..logging_utils import get_logger, log_event
from .cleaner import strip_boilerplate
from .fallback import extract_paragraphs
from .fields import (
    extract_body,
    extract_category,
    extract_images,
    extract_location,
    extract_published_at,
    extract_subtitle,
    extract_title,
    filter_paragraphs,
)
from .selectors import profile_for


def extract_article(
    url: str,
    fetch_cfg: FetchConfig,
    extract_cfg: ExtractConfig,
    *,
    minimal_headers: bool = False,
    transport=None,
    logger: logging.Logger | None = None,
) -> ExtractedContent:
    """Fetch url and extract structured article fields.

    Args:
        url: Canonical publisher URL
        fetch_cfg: Fetch configuration
        extract_cfg: Extraction thresholds and filters
        minimal_headers: Use the reduced header profile for the fetch
        transport: Optional httpx transport (used by tests)
        logger: Optional logger for extraction events

    Returns:
        ExtractedContent; check is_sufficient for the soft failure case

    Raises:
        InputError: url is malformed
        FetchError: the page could not be fetched after retries
    """
    logger = get_logger(logger)
    result = fetch_url(
        url,
        fetch_cfg,
        minimal_headers=minimal_headers,
        transport=transport,
        logger=logger,
    ).raise_for_error()

    content = extract_from_html(result.text or "", result.final_url or url, extract_cfg)
    log_event(
        logger,
        "Extracted" if content.is_sufficient else "Extraction insufficient",
        level=logging.INFO if content.is_sufficient else logging.WARNING,
        event="extract_done",
        url=url,
        title=content.title,
        word_count=content.word_count,
        images=len(content.images),
        body_method=content.body_method,
        sufficient=content.is_sufficient,
        minimal_headers=minimal_headers,
    )
    return content


def extract_from_html(html: str, url: str, cfg: ExtractConfig) -> ExtractedContent:
    """Extract structured fields from an HTML document fetched from url."""
    soup = BeautifulSoup(html, "html.parser")
    strip_boilerplate(soup)

    host = host_of(url)
    profile = profile_for(host)

    title = extract_title(soup, profile, cfg)
    body = extract_body(soup, profile, cfg)
    if body is None:
        body = _fallback_body(soup, cfg)
    body_text, body_method = body if body else (None, None)

    return ExtractedContent(
        url=url,
        source_host=host,
        title=title,
        subtitle=extract_subtitle(soup, profile, cfg, title=title),
        body_text=body_text,
        images=extract_images(soup, profile, cfg, url),
        published_at=extract_published_at(soup, profile),
        location=extract_location(soup, profile, body_text),
        category=extract_category(soup, url),
        word_count=len(body_text.split()) if body_text else 0,
        body_method=body_method,
    )


def _fallback_body(soup: BeautifulSoup, cfg: ExtractConfig) -> tuple[str, str] | None:
    """Run the whole-document extractors on the cleaned page."""
    if not cfg.fallback:
        return None
    extracted = extract_paragraphs(str(soup), cfg.fallback)
    if extracted is None:
        return None
    method, paragraphs = extracted
    text = "\n\n".join(filter_paragraphs(paragraphs, cfg))
    if len(text) < cfg.body_min_chars:
        return None
    return text, method
