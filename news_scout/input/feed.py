"""
Syndication feed parsing.

The aggregator's search feed is RSS: ordered <item> entries with a title
(suffixed with " - Source"), an item link, a publish date and a
<source> element. Entries are turned into CandidateItem objects.
"""

from __future__ import annotations

from urllib.parse import urlencode

from bs4 import BeautifulSoup
import feedparser

from ..core.dates import normalize_timestamp, struct_time_to_iso
from ..core.types import CandidateItem
from ..core.urls import is_http_url


def feed_url(base_url: str, query: str, lang: str, country: str) -> str:
    """Build the RSS search feed URL for a query and edition."""
    params = {
        "q": query,
        "hl": f"{lang}-{country}",
        "gl": country,
        "ceid": f"{country}:{lang}",
    }
    return f"{base_url.rstrip('/')}/rss/search?{urlencode(params)}"


def parse_feed(text: str) -> list[CandidateItem]:
    """Parse RSS text into candidates in feed order.

    Entries without a title or an http(s) link are skipped.
    """
    parsed = feedparser.parse(text)
    items: list[CandidateItem] = []
    for entry in parsed.entries:
        link = (entry.get("link") or "").strip()
        source_name = _source_name(entry)
        title = _strip_source_suffix(" ".join((entry.get("title") or "").split()), source_name)
        if not title or not is_http_url(link):
            continue
        items.append(
            CandidateItem(
                title=title,
                feed_link=link,
                published_at=_published(entry),
                source_name=source_name,
                description=_plain_text(entry.get("summary")),
                origin="rss",
            )
        )
    return items


def _source_name(entry) -> str | None:
    source = entry.get("source")
    if source is None:
        return None
    title = source.get("title") if hasattr(source, "get") else None
    return title.strip() if title else None


def _published(entry) -> str | None:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if parsed:
        return struct_time_to_iso(parsed)
    return normalize_timestamp(entry.get("published") or entry.get("updated"))


def _strip_source_suffix(title: str, source_name: str | None) -> str:
    if source_name:
        suffix = f" - {source_name}"
        if title.endswith(suffix):
            return title[: -len(suffix)].strip()
    return title


def _plain_text(html: str | None) -> str | None:
    if not html:
        return None
    text = BeautifulSoup(html, "html.parser").get_text(" ", strip=True)
    return " ".join(text.split()) or None
