"""URL helpers shared by the fetcher, resolver, reader and extractor."""

from __future__ import annotations

from urllib.parse import urljoin, urlparse


def is_http_url(url: str | None) -> bool:
    """True for absolute http/https URLs with a host."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def host_of(url: str) -> str:
    """Lowercase hostname without a leading "www.", or "" when absent."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def host_matches(host: str, domains: list[str]) -> bool:
    """True when host equals, or is a subdomain of, any of domains."""
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    for domain in domains:
        domain = domain.lower()
        if domain.startswith("www."):
            domain = domain[4:]
        if host == domain or host.endswith("." + domain):
            return True
    return False


def absolutize(href: str | None, base_url: str) -> str | None:
    """Resolve href against base_url; None for empty, fragment or non-http links."""
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith(("#", "javascript:", "mailto:", "data:")):
        return None
    absolute = urljoin(base_url, href)
    return absolute if is_http_url(absolute) else None
