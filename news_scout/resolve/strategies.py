"""
Individual steps of the redirect resolution cascade.

Each step takes a ResolutionContext and returns a candidate URL or None.
Steps never raise on network trouble: the context swallows fetch errors
and simply has no page to offer. The resolver accepts a step's result
only when it points off the aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass
import base64
import binascii
import logging
import re
from urllib.parse import parse_qs, unquote, urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup

from ..config import FetchConfig, ResolverConfig
from ..core.urls import absolutize, host_matches, host_of, is_http_url
from ..fetch.fetcher import fetch_url
from ..logging_utils import log_event

_REDIRECT_PARAMS = ("url", "q", "u")
_TOKEN_SEGMENTS = ("articles", "read")
_META_REFRESH_URL_RE = re.compile(r"url\s*=\s*['\"]?([^'\";]+)", re.IGNORECASE)
_SCRIPT_URL_RE = re.compile(r"https?://[^\s\"'<>()\\\[\]{}]+")
_TOKEN_URL_RE = re.compile(rb"https?://[\x21-\x7e]+")
_ASSET_EXTENSIONS = (
    ".js",
    ".css",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".webp",
    ".ico",
    ".woff",
    ".woff2",
    ".ttf",
    ".json",
    ".xml",
)
_NON_ARTICLE_HOSTS = [
    "gstatic.com",
    "googleapis.com",
    "googletagmanager.com",
    "google-analytics.com",
    "googleusercontent.com",
    "doubleclick.net",
    "schema.org",
    "w3.org",
    "youtube.com",
    "facebook.com",
    "twitter.com",
    "x.com",
]


@dataclass
class ProbedPage:
    """What direct fetching of an aggregator link produced.

    location is set when a redirect pointed off the aggregator; otherwise
    html holds the last same-site page reached.
    """
    final_url: str
    location: str | None = None
    html: str | None = None


class ResolutionContext:
    """Per-link state shared by the cascade steps.

    The direct probe is performed at most once and its outcome cached, so
    steps 2-5 share one network round trip.
    """

    def __init__(
        self,
        link: str,
        fetch_cfg: FetchConfig,
        resolver_cfg: ResolverConfig,
        *,
        title: str | None = None,
        link_form: str | None = None,
        transport=None,
        logger: logging.Logger | None = None,
    ):
        self.link = link
        self.fetch_cfg = fetch_cfg
        self.resolver_cfg = resolver_cfg
        self.title = title
        self.link_form = link_form
        self.transport = transport
        self.logger = logger
        self._probe: ProbedPage | None = None
        self._probed = False
        self._soup: BeautifulSoup | None = None

    def for_link(self, link: str) -> "ResolutionContext":
        """A fresh context for another aggregator link, without a title."""
        return ResolutionContext(
            link,
            self.fetch_cfg,
            self.resolver_cfg,
            link_form=None,
            transport=self.transport,
            logger=self.logger,
        )

    def is_aggregator(self, url: str) -> bool:
        return host_matches(host_of(url), self.resolver_cfg.aggregator_hosts)

    def is_foreign(self, url: str | None) -> bool:
        return bool(url) and is_http_url(url) and not self.is_aggregator(url)

    def fetch(self, url: str, follow_redirects: bool = True):
        return fetch_url(
            url,
            self.fetch_cfg,
            follow_redirects=follow_redirects,
            transport=self.transport,
            logger=self.logger,
        )

    def probe(self) -> ProbedPage | None:
        if not self._probed:
            self._probed = True
            for url in _probe_urls(self.link, self.link_form):
                self._probe = self._follow(url)
                if self._probe is not None and (self._probe.location or self._probe.html):
                    break
        return self._probe

    def soup(self) -> BeautifulSoup | None:
        page = self.probe()
        if page is None or not page.html:
            return None
        if self._soup is None:
            self._soup = BeautifulSoup(page.html, "html.parser")
        return self._soup

    def _follow(self, url: str) -> ProbedPage | None:
        """Fetch without auto-redirects, following same-site hops by hand."""
        current = url
        for _ in range(self.fetch_cfg.max_redirects + 1):
            result = self.fetch(current, follow_redirects=False)
            if not result.ok:
                log_event(
                    self.logger,
                    "Resolver probe failed",
                    level=logging.DEBUG,
                    event="resolve_probe_failed",
                    url=current,
                    error_type=type(result.error).__name__,
                    error=str(result.error),
                )
                return None
            location = result.location
            if not location:
                return ProbedPage(final_url=result.final_url or current, html=result.text)
            target = urljoin(current, location.strip())
            if self.is_foreign(target):
                return ProbedPage(final_url=current, location=target)
            current = target
        return None


def query_param(ctx: ResolutionContext) -> str | None:
    """Step 1: target encoded in a url=/q=/u= query parameter (no network)."""
    params = parse_qs(urlparse(ctx.link).query)
    for key in _REDIRECT_PARAMS:
        for value in params.get(key, []):
            candidate = value.strip()
            if candidate.lower().startswith(("http%3a", "https%3a")):
                candidate = unquote(candidate)
            if ctx.is_foreign(candidate):
                return candidate
    return None


def encoded_token(ctx: ResolutionContext) -> str | None:
    """Publisher URL embedded in a legacy base64 article token (no network)."""
    token = _article_token(ctx.link)
    if not token:
        return None
    payload = _b64decode(token)
    if not payload:
        return None
    start = payload.find(b"http")
    if start < 0:
        return None
    # Legacy tokens length-prefix the URL with a single byte.
    if start > 0 and payload[start - 1] < 0x80:
        length = payload[start - 1]
        chunk = payload[start:start + length]
        candidate = chunk.decode("ascii", errors="ignore")
        if len(chunk) == length and ctx.is_foreign(candidate):
            return candidate
    match = _TOKEN_URL_RE.search(payload, start)
    if match is None:
        return None
    candidate = match.group(0).decode("ascii", errors="ignore")
    return candidate if ctx.is_foreign(candidate) else None


def location_header(ctx: ResolutionContext) -> str | None:
    """Step 2: a 3xx Location header pointing off the aggregator."""
    page = ctx.probe()
    return page.location if page else None


def meta_refresh(ctx: ResolutionContext) -> str | None:
    """Step 3: the url= part of a <meta http-equiv="refresh"> directive."""
    soup = ctx.soup()
    if soup is None:
        return None
    base = ctx.probe().final_url
    for meta in soup.find_all("meta"):
        if (meta.get("http-equiv") or "").strip().lower() != "refresh":
            continue
        match = _META_REFRESH_URL_RE.search(meta.get("content") or "")
        if match:
            candidate = absolutize(match.group(1), base)
            if ctx.is_foreign(candidate):
                return candidate
    return None


def canonical_link(ctx: ResolutionContext) -> str | None:
    """Step 4: <link rel="canonical">, then og:url."""
    soup = ctx.soup()
    if soup is None:
        return None
    base = ctx.probe().final_url
    for link in soup.find_all("link", href=True):
        rels = link.get("rel") or []
        if isinstance(rels, str):
            rels = rels.split()
        if "canonical" in [rel.lower() for rel in rels]:
            candidate = absolutize(link["href"], base)
            if ctx.is_foreign(candidate):
                return candidate
    og_url = soup.find("meta", attrs={"property": "og:url"})
    if og_url is not None:
        candidate = absolutize(og_url.get("content"), base)
        if ctx.is_foreign(candidate):
            return candidate
    return None


def script_scan(ctx: ResolutionContext) -> str | None:
    """Step 5: an article-looking absolute URL inside inline script text."""
    soup = ctx.soup()
    if soup is None:
        return None
    keywords = [keyword.lower() for keyword in ctx.resolver_cfg.news_keywords]
    fallback: str | None = None
    for script in soup.find_all("script"):
        if script.get("src"):
            continue
        text = _unescape_script(script.string or script.get_text() or "")
        for raw in _SCRIPT_URL_RE.findall(text):
            candidate = raw.rstrip(".,;")
            if not _is_article_candidate(ctx, candidate):
                continue
            if _has_keyword(candidate, keywords):
                return candidate
            if fallback is None and _looks_like_slug(candidate):
                fallback = candidate
    return fallback


def rss_to_article_form(link: str) -> str | None:
    """Map /rss/articles/<token> to /articles/<token>, or None if not RSS form."""
    parsed = urlparse(link)
    if "/rss/articles/" not in parsed.path:
        return None
    return urlunparse(parsed._replace(path=parsed.path.replace("/rss/articles/", "/articles/", 1)))


def _probe_urls(link: str, link_form: str | None) -> list[str]:
    urls = [link]
    article_form = rss_to_article_form(link)
    if article_form and (link_form in (None, "rss")):
        urls.append(article_form)
    return urls


def _article_token(link: str) -> str | None:
    segments = [segment for segment in urlparse(link).path.split("/") if segment]
    for index, segment in enumerate(segments[:-1]):
        if segment in _TOKEN_SEGMENTS:
            return segments[index + 1]
    return None


def _b64decode(token: str) -> bytes | None:
    padded = token + "=" * (-len(token) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError):
        return None


def _unescape_script(text: str) -> str:
    return (
        text.replace("\\/", "/")
        .replace("\\u002F", "/")
        .replace("\\u002f", "/")
        .replace("\\u003d", "=")
        .replace("\\u003D", "=")
        .replace("\\u0026", "&")
    )


def _is_article_candidate(ctx: ResolutionContext, url: str) -> bool:
    if not ctx.is_foreign(url):
        return False
    if host_matches(host_of(url), _NON_ARTICLE_HOSTS):
        return False
    path = urlparse(url).path.lower()
    if path in ("", "/"):
        return False
    return not path.endswith(_ASSET_EXTENSIONS)


def _has_keyword(url: str, keywords: list[str]) -> bool:
    parsed = urlparse(url)
    haystack = f"{parsed.hostname or ''}{parsed.path}".lower()
    return any(keyword in haystack for keyword in keywords)


def _looks_like_slug(url: str) -> bool:
    segments = [segment for segment in urlparse(url).path.split("/") if segment]
    return any(segment.count("-") >= 3 for segment in segments)
