"""
Boilerplate removal.

strip_boilerplate must run before any field extraction so selectors never
see text from scripts, navigation, ads, share bars, comment threads or
embedded players. Breadcrumb trails are kept: they are page metadata used
for category detection, not chrome.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

REMOVE_TAGS = (
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "video",
    "audio",
    "embed",
    "object",
    "svg",
    "canvas",
    "button",
    "input",
    "select",
    "textarea",
)

CHROME_TAGS = ("nav", "aside", "footer", "header")

PROTECTED_TAGS = ("html", "body", "main", "article")

BOILERPLATE_TOKENS = {
    "ad",
    "ads",
    "adv",
    "advert",
    "adverts",
    "advertisement",
    "advertising",
    "adslot",
    "sponsor",
    "sponsored",
    "promo",
    "promoted",
    "social",
    "share",
    "sharing",
    "sharebar",
    "comment",
    "comments",
    "disqus",
    "related",
    "recommended",
    "newsletter",
    "subscribe",
    "subscription",
    "cookie",
    "cookies",
    "consent",
    "popup",
    "modal",
    "sidebar",
    "menu",
    "navbar",
    "player",
    "outbrain",
    "taboola",
}

# Always removed, even on elements whose class also names article content.
STRONG_TOKENS = {
    "ad",
    "ads",
    "adv",
    "advert",
    "advertisement",
    "adslot",
    "sponsored",
    "social",
    "share",
    "sharing",
    "sharebar",
    "comment",
    "comments",
    "disqus",
    "outbrain",
    "taboola",
    "cookie",
    "consent",
    "newsletter",
}

# Page-wide form wrappers (ASP.NET WebForms) hold the article itself.
FORM_CONTENT_TAGS = ("article", "main", "h1", "p")

CONTENT_TOKENS = {"article", "story", "content", "body", "post", "entry", "main", "text"}

_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def strip_boilerplate(soup: BeautifulSoup) -> int:
    """Remove boilerplate nodes from soup in place.

    Returns:
        Number of elements removed (nested removals are counted once)
    """
    removed = 0
    for tag in soup.find_all(REMOVE_TAGS):
        if not tag.decomposed:
            tag.decompose()
            removed += 1

    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        if _should_remove(tag):
            tag.decompose()
            removed += 1
    return removed


def is_breadcrumb(tag: Tag) -> bool:
    marker = " ".join(
        [
            " ".join(tag.get("class") or []),
            tag.get("id") or "",
            tag.get("aria-label") or "",
            tag.get("itemtype") or "",
        ]
    ).lower()
    return "breadcrumb" in marker


def _contains_breadcrumb(tag: Tag) -> bool:
    if is_breadcrumb(tag):
        return True
    return any(is_breadcrumb(child) for child in tag.find_all(True))


def _should_remove(tag: Tag) -> bool:
    if tag.name in PROTECTED_TAGS:
        return False
    if tag.name in CHROME_TAGS:
        return _is_chrome(tag)
    if tag.name == "form" and tag.find(FORM_CONTENT_TAGS) is None:
        return True
    tokens = _class_tokens(tag)
    if not tokens & BOILERPLATE_TOKENS:
        return False
    if is_breadcrumb(tag):
        return False
    if tokens & STRONG_TOKENS:
        return True
    return not tokens & CONTENT_TOKENS


def _is_chrome(tag: Tag) -> bool:
    if _contains_breadcrumb(tag):
        return False
    if tag.name == "header":
        # Article headers carry the headline and byline.
        return tag.find("h1") is None and tag.find_parent("article") is None
    return True


def _class_tokens(tag: Tag) -> set[str]:
    raw = " ".join(tag.get("class") or []) + " " + (tag.get("id") or "")
    return {token for token in _TOKEN_SPLIT_RE.split(raw.lower()) if token}
