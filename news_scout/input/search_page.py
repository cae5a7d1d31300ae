"""
Parser for the aggregator's rendered search-results page.

Result blocks are <article> elements holding an anchor to the
aggregator's item page (./articles/..., /articles/... or ./read/...), a
heading, a source name and an optional <time datetime>.
"""

from __future__ import annotations

from urllib.parse import urlencode

from bs4 import BeautifulSoup, Tag

from ..core.dates import normalize_timestamp
from ..core.types import CandidateItem
from ..core.urls import absolutize

_ITEM_HREF_PREFIXES = ("./articles/", "/articles/", "./read/", "/read/")


def search_page_url(base_url: str, query: str, lang: str | None = None, country: str | None = None) -> str:
    """Build the rendered search page URL for a query."""
    params = {"q": query}
    params.update(_locale_params(lang, country))
    return f"{base_url.rstrip('/')}/search?{urlencode(params)}"


def parse_search_page(html: str, base_url: str) -> list[CandidateItem]:
    """Parse result blocks into candidates, in page order.

    Blocks without a title or an item anchor are skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    items: list[CandidateItem] = []
    for block in soup.find_all("article"):
        anchor = _item_anchor(block)
        if anchor is None:
            continue
        link = absolutize(anchor.get("href"), base_url.rstrip("/") + "/")
        title = _block_title(block, anchor)
        if not link or not title:
            continue
        time_tag = block.find("time")
        published = normalize_timestamp(time_tag.get("datetime")) if time_tag else None
        items.append(
            CandidateItem(
                title=title,
                feed_link=link,
                published_at=published,
                source_name=_block_source(block),
                origin="search",
            )
        )
    return items


def _item_anchor(block: Tag) -> Tag | None:
    for anchor in block.find_all("a", href=True):
        if anchor["href"].startswith(_ITEM_HREF_PREFIXES):
            return anchor
    return None


def _block_title(block: Tag, anchor: Tag) -> str:
    heading = block.find(["h3", "h4", "h2"])
    if heading is not None:
        text = heading.get_text(" ", strip=True)
        if text:
            return text
    text = anchor.get_text(" ", strip=True)
    if text:
        return text
    for other in block.find_all("a", href=True):
        if other["href"] == anchor["href"]:
            text = other.get_text(" ", strip=True)
            if text:
                return text
    return ""


def _block_source(block: Tag) -> str | None:
    tagged = block.find(attrs={"data-n-tid": True})
    if tagged is not None:
        text = tagged.get_text(" ", strip=True)
        if text:
            return text
    for div in block.find_all("div"):
        span = div.find("span")
        if span is not None:
            text = span.get_text(" ", strip=True)
            if text:
                return text
    return None


def _locale_params(lang: str | None, country: str | None) -> dict[str, str]:
    if not lang or not country:
        return {}
    return {"hl": f"{lang}-{country}", "gl": country, "ceid": f"{country}:{lang}"}
