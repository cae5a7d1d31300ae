"""
Field extractors for the selector cascade.

Each public function takes an already-cleaned BeautifulSoup document and
returns one field. Single-valued fields are evaluated through first_match
over ordered strategies: host-specific selectors first, then generic
selectors, then meta-tag fallbacks.
"""

from __future__ import annotations

import re
from typing import Callable
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from ..config import ExtractConfig
from ..core.cascade import first_match
from ..core.dates import normalize_timestamp
from ..core.urls import absolutize
from .cleaner import is_breadcrumb
from .gazetteer import PLACES, TAXONOMY
from .selectors import SelectorProfile, selectors_for

_TITLE_SEPARATORS = (" | ", " - ", " – ", " — ", " :: ")
_DATELINE_CUT_RE = re.compile(r"[:,(—–]| - ")
_CRUMB_SEPARATORS = {">", "/", "»", "›", "|", "•"}
_IMAGE_ATTRS = ("src", "data-src", "data-lazy-src", "data-original")
_META_DATE_KEYS = (
    "article:published_time",
    "publishdate",
    "pubdate",
    "date",
    "datepublished",
    "og:published_time",
    "dc.date.issued",
    "sailthru.date",
)
_PLACES_RE = re.compile(
    r"\b(" + "|".join(re.escape(place) for place in sorted(PLACES, key=len, reverse=True)) + r")\b"
)


class _Select:
    """Strategy: first element matched by a CSS selector whose value is accepted."""

    def __init__(self, selector: str, read: Callable[[Tag], str | None], accept: Callable[[str], bool]):
        self.selector = selector
        self.read = read
        self.accept = accept
        self.__name__ = selector

    def __call__(self, soup: BeautifulSoup) -> str | None:
        for element in soup.select(self.selector):
            value = self.read(element)
            if value and self.accept(value):
                return value
        return None


def clean_text(text: str | None) -> str:
    return " ".join((text or "").split())


def element_text(element: Tag) -> str | None:
    return clean_text(element.get_text(" ", strip=True)) or None


def meta_content(soup: BeautifulSoup, *keys: str) -> str | None:
    """Content of the first <meta> whose property/name/itemprop matches a key."""
    wanted = {key.lower() for key in keys}
    for meta in soup.find_all("meta"):
        for attr in ("property", "name", "itemprop"):
            value = (meta.get(attr) or "").strip().lower()
            if value in wanted:
                content = clean_text(meta.get("content"))
                if content:
                    return content
    return None


def extract_title(soup: BeautifulSoup, profile: SelectorProfile, cfg: ExtractConfig) -> str | None:
    def accept(value: str) -> bool:
        return len(value) >= cfg.title_min_chars

    def og_title(doc: BeautifulSoup) -> str | None:
        return meta_content(doc, "og:title")

    def twitter_title(doc: BeautifulSoup) -> str | None:
        return meta_content(doc, "twitter:title")

    def document_title(doc: BeautifulSoup) -> str | None:
        if doc.title is None:
            return None
        return _strip_site_suffix(clean_text(doc.title.get_text()), cfg.title_min_chars)

    strategies = [_Select(selector, element_text, accept) for selector in selectors_for(profile, "title")]
    strategies += [og_title, twitter_title, document_title]
    hit = first_match(strategies, soup, accept=accept)
    return hit[1] if hit else None


def extract_subtitle(
    soup: BeautifulSoup, profile: SelectorProfile, cfg: ExtractConfig, title: str | None = None
) -> str | None:
    def accept(value: str) -> bool:
        return len(value) >= cfg.subtitle_min_chars and value != title

    def og_description(doc: BeautifulSoup) -> str | None:
        return meta_content(doc, "og:description", "twitter:description")

    def description(doc: BeautifulSoup) -> str | None:
        return meta_content(doc, "description")

    strategies = [_Select(selector, element_text, accept) for selector in selectors_for(profile, "subtitle")]
    strategies += [og_description, description]
    hit = first_match(strategies, soup, accept=accept)
    return hit[1] if hit else None


def filter_paragraphs(texts: list[str], cfg: ExtractConfig) -> list[str]:
    """Keep paragraphs above the length threshold without exclusion keywords, de-duplicated."""
    kept: list[str] = []
    seen: set[str] = set()
    keywords = [keyword.lower() for keyword in cfg.exclude_keywords]
    for raw in texts:
        text = clean_text(raw)
        if len(text) < cfg.paragraph_min_chars:
            continue
        lowered = text.lower()
        if any(keyword in lowered for keyword in keywords):
            continue
        if text in seen:
            continue
        seen.add(text)
        kept.append(text)
    return kept


def paragraphs_in(containers: list[Tag]) -> list[str]:
    """Text of <p> nodes inside containers, in order, each node once."""
    seen: set[int] = set()
    texts: list[str] = []
    for container in containers:
        nodes = [container] if container.name == "p" else container.find_all("p")
        for node in nodes:
            if id(node) in seen:
                continue
            seen.add(id(node))
            texts.append(node.get_text(" ", strip=True))
    return texts


def extract_body(
    soup: BeautifulSoup, profile: SelectorProfile, cfg: ExtractConfig
) -> tuple[str, str] | None:
    """Assemble body text from the first container reaching the body threshold.

    Every element matched by a selector counts as part of the same
    container. When no container qualifies, all paragraphs on the page are
    used under the same filter.

    Returns:
        (body text, winning selector or "all_paragraphs"), or None
    """

    def container_body(selector: str) -> Callable[[BeautifulSoup], str | None]:
        def strategy(doc: BeautifulSoup) -> str | None:
            containers = doc.select(selector)
            if not containers:
                return None
            return "\n\n".join(filter_paragraphs(paragraphs_in(containers), cfg)) or None

        strategy.__name__ = selector
        return strategy

    def all_paragraphs(doc: BeautifulSoup) -> str | None:
        texts = [p.get_text(" ", strip=True) for p in doc.find_all("p")]
        return "\n\n".join(filter_paragraphs(texts, cfg)) or None

    strategies = [container_body(selector) for selector in selectors_for(profile, "body")]
    strategies.append(all_paragraphs)
    hit = first_match(strategies, soup, accept=lambda text: len(text) >= cfg.body_min_chars)
    if hit is None:
        return None
    method, text = hit
    return text, method


def extract_images(
    soup: BeautifulSoup, profile: SelectorProfile, cfg: ExtractConfig, base_url: str
) -> list[str]:
    """Collect article images in selector order: absolute, unique, filtered and capped."""
    base = _document_base(soup, base_url)
    images: list[str] = []
    seen: set[str] = set()

    def add(url: str | None) -> None:
        if not url or url in seen or not _acceptable_image(url, cfg):
            return
        seen.add(url)
        images.append(url)

    for selector in selectors_for(profile, "images"):
        for img in soup.select(selector):
            if len(images) >= cfg.max_images:
                return images
            add(image_source(img, base))
    if len(images) < cfg.max_images:
        add(absolutize(meta_content(soup, "og:image", "twitter:image"), base))
    return images[: cfg.max_images]


def image_source(img: Tag, base_url: str) -> str | None:
    """Absolute URL from src, data-src, data-lazy-src, data-original or srcset."""
    for attr in _IMAGE_ATTRS:
        value = (img.get(attr) or "").strip()
        if not value or value.startswith("data:"):
            continue
        url = absolutize(value, base_url)
        if url:
            return url
    srcset = (img.get("srcset") or img.get("data-srcset") or "").strip()
    if srcset:
        first = srcset.split(",")[0].strip().split(" ")[0]
        return absolutize(first, base_url)
    return None


def extract_published_at(soup: BeautifulSoup, profile: SelectorProfile) -> str | None:
    """First parseable publish timestamp, normalized to an ISO 8601 UTC instant."""

    def time_element(doc: BeautifulSoup) -> str | None:
        for tag in doc.find_all("time"):
            value = normalize_timestamp(tag.get("datetime"))
            if value:
                return value
        return None

    def meta_date(doc: BeautifulSoup) -> str | None:
        for key in _META_DATE_KEYS:
            value = normalize_timestamp(meta_content(doc, key))
            if value:
                return value
        return None

    def read_date(element: Tag) -> str | None:
        for attr in ("datetime", "content", "data-timestamp"):
            value = normalize_timestamp(element.get(attr))
            if value:
                return value
        text = element_text(element)
        if text and len(text) <= 120:
            return normalize_timestamp(text)
        return None

    strategies = [time_element, meta_date]
    strategies += [_Select(selector, read_date, bool) for selector in selectors_for(profile, "date")]
    hit = first_match(strategies, soup)
    return hit[1] if hit else None


def extract_location(soup: BeautifulSoup, profile: SelectorProfile, body_text: str | None) -> str | None:
    """Dateline element, else the earliest gazetteer place named in the body."""

    def read_dateline(element: Tag) -> str | None:
        text = element_text(element)
        if not text:
            return None
        place = _DATELINE_CUT_RE.split(text, maxsplit=1)[0].strip(" .-")
        if not 2 <= len(place) <= 60 or not any(ch.isalpha() for ch in place):
            return None
        return place.title() if place.isupper() else place

    def gazetteer(_: BeautifulSoup) -> str | None:
        return match_place(body_text)

    strategies = [_Select(selector, read_dateline, bool) for selector in selectors_for(profile, "location")]
    strategies.append(gazetteer)
    hit = first_match(strategies, soup)
    return hit[1] if hit else None


def match_place(text: str | None) -> str | None:
    """Earliest gazetteer place in text; the longest name wins at equal position."""
    if not text:
        return None
    match = _PLACES_RE.search(text)
    return match.group(1) if match else None


def extract_category(soup: BeautifulSoup, url: str) -> str | None:
    """Breadcrumb second-to-last crumb, else a taxonomy URL segment, else article:section."""

    def breadcrumb(doc: BeautifulSoup) -> str | None:
        for container in doc.find_all(is_breadcrumb):
            crumbs = _crumbs(container)
            if len(crumbs) >= 2:
                candidate = crumbs[-2]
                if candidate.lower() not in ("home", "homepage"):
                    return candidate
        return None

    def url_segment(_: BeautifulSoup) -> str | None:
        for segment in urlparse(url).path.lower().split("/"):
            if segment in TAXONOMY:
                return segment
        return None

    def section_meta(doc: BeautifulSoup) -> str | None:
        return meta_content(doc, "article:section")

    hit = first_match([breadcrumb, url_segment, section_meta], soup)
    return hit[1] if hit else None


def _crumbs(container: Tag) -> list[str]:
    items = container.find_all("li") or container.find_all("a")
    crumbs = []
    for item in items:
        text = element_text(item)
        if text and text not in _CRUMB_SEPARATORS:
            crumbs.append(text)
    return crumbs


def _strip_site_suffix(title: str, min_chars: int) -> str | None:
    if not title:
        return None
    for separator in _TITLE_SEPARATORS:
        if separator in title:
            head = title.rsplit(separator, 1)[0].strip()
            if len(head) >= min_chars:
                return head
    return title


def _document_base(soup: BeautifulSoup, page_url: str) -> str:
    base = soup.find("base", href=True)
    if base is not None:
        resolved = absolutize(base["href"], page_url)
        if resolved:
            return resolved
    return page_url


def _acceptable_image(url: str, cfg: ExtractConfig) -> bool:
    if len(url) < cfg.image_min_url_chars:
        return False
    lowered = url.lower()
    return not any(token in lowered for token in cfg.image_blacklist)
