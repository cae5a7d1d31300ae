"""
HTTP fetching with bounded retries, user-agent rotation and blocking detection.

fetch_url is the only network primitive used by the resolver, extractor
and reader. Every attempt uses a fresh httpx.Client with a randomly drawn
user agent. Failures are classified into the error taxonomy in
news_scout.errors; retriable ones (timeouts, network errors, blocking
pages, 429/5xx) are retried with linearly increasing backoff, fatal ones
(malformed URL, 404, other 4xx) abort on the first occurrence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
import time

import httpx

from ..config import FetchConfig
from ..core.urls import is_http_url
from ..errors import (
    BlockedError,
    FetchError,
    FetchTimeoutError,
    HttpStatusError,
    InputError,
    NetworkError,
    NewsScoutError,
    NotFoundError,
)
from ..logging_utils import log_event
from .headers import build_headers


_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)

_DNS_HINTS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo",
    "name resolution",
    "no address associated",
    "name does not resolve",
)


@dataclass
class FetchResult:
    """Result of a fetch operation.

    Either text will be populated (success) or error will be populated
    (failure), but never both. status_code may be None for network-level
    failures.

    Attributes:
        url: The URL that was requested
        final_url: The URL of the last response after redirects
        status_code: HTTP status code, or None if no response was received
        headers: Response headers (lowercase keys)
        text: The response body text, or None on error
        attempts: Number of attempts made
        error: The classified error if the fetch failed, None on success
    """
    url: str
    final_url: str | None = None
    status_code: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    text: str | None = None
    attempts: int = 0
    error: NewsScoutError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def location(self) -> str | None:
        """The Location header of a redirect response, if any."""
        if self.status_code is None or not 300 <= self.status_code < 400:
            return None
        return self.headers.get("location")

    def raise_for_error(self) -> "FetchResult":
        if self.error is not None:
            raise self.error
        return self


def detect_blocking(text: str | None, markers: list[str]) -> str | None:
    """Return the first blocking marker found in the page text, if any.

    Script and style contents are ignored; single-word markers must match
    on word boundaries. This is a heuristic and can match legitimate pages
    that mention the marker words.
    """
    if not text:
        return None
    visible = _SCRIPT_STYLE_RE.sub(" ", text).lower()
    for marker in markers:
        marker = marker.lower().strip()
        if not marker:
            continue
        if re.search(r"(?<![a-z])" + re.escape(marker) + r"(?![a-z])", visible):
            return marker
    return None


def fetch_url(
    url: str,
    cfg: FetchConfig,
    *,
    follow_redirects: bool = True,
    minimal_headers: bool = False,
    check_markers: bool = True,
    transport: httpx.BaseTransport | None = None,
    logger: logging.Logger | None = None,
) -> FetchResult:
    """Fetch a URL with retry, user-agent rotation and blocking detection.

    Args:
        url: The URL to fetch
        cfg: Fetch configuration (timeout, retries, backoff, markers)
        follow_redirects: When False, 3xx responses are returned as successes
            so the caller can inspect the Location header
        minimal_headers: Send only a bare User-Agent instead of a browser profile
        check_markers: Scan the body for blocking markers. Feeds and result
            listings turn this off since their headlines are not page chrome
        transport: Optional httpx transport (used by tests)
        logger: Optional logger for fetch events

    Returns:
        FetchResult with text on success or a classified error on failure.
        The error's __cause__ is the underlying httpx exception, if any.
    """
    if not is_http_url(url):
        return FetchResult(url=url, error=InputError(f"Malformed URL: {url!r}"))

    max_attempts = max(1, cfg.retries + 1)
    last_error: NewsScoutError | None = None
    last_status: int | None = None

    for attempt in range(1, max_attempts + 1):
        headers = build_headers(cfg, minimal=minimal_headers)
        try:
            with httpx.Client(
                timeout=cfg.timeout_seconds,
                headers=headers,
                follow_redirects=follow_redirects,
                max_redirects=cfg.max_redirects,
                trust_env=cfg.trust_env,
                transport=transport,
            ) as client:
                resp = client.get(url)
            last_status = resp.status_code
            error = _classify_response(resp, url, cfg, follow_redirects, check_markers)
            if error is None:
                log_event(
                    logger,
                    "Fetch ok",
                    level=logging.DEBUG,
                    event="fetch_ok",
                    url=url,
                    status_code=resp.status_code,
                    attempt=attempt,
                )
                return FetchResult(
                    url=url,
                    final_url=str(resp.url),
                    status_code=resp.status_code,
                    headers=dict(resp.headers),
                    text=resp.text,
                    attempts=attempt,
                )
        except httpx.TimeoutException as exc:
            error = FetchTimeoutError(f"Timed out fetching {url}: {exc}", url)
            error.__cause__ = exc
        except httpx.UnsupportedProtocol as exc:
            input_error = InputError(f"Unsupported URL {url!r}: {exc}")
            input_error.__cause__ = exc
            return FetchResult(url=url, attempts=attempt, error=input_error)
        except httpx.RequestError as exc:
            error = NetworkError(
                f"{type(exc).__name__} fetching {url}: {exc}",
                url,
                dns_failure=_is_dns_failure(exc),
            )
            error.__cause__ = exc
        except httpx.InvalidURL as exc:
            input_error = InputError(f"Malformed URL {url!r}: {exc}")
            input_error.__cause__ = exc
            return FetchResult(url=url, attempts=attempt, error=input_error)

        if isinstance(error, FetchError):
            error.attempts = attempt
        last_error = error
        log_event(
            logger,
            "Fetch attempt failed",
            level=logging.DEBUG,
            event="fetch_attempt",
            url=url,
            attempt=attempt,
            error_type=type(error).__name__,
            error=str(error),
        )
        if not error.retriable or attempt >= max_attempts:
            break
        time.sleep(cfg.backoff_seconds * attempt)

    log_event(
        logger,
        "Fetch failed",
        level=logging.WARNING,
        event="fetch_failed",
        url=url,
        attempts=getattr(last_error, "attempts", None),
        error_type=type(last_error).__name__,
        error=str(last_error),
    )
    return FetchResult(url=url, status_code=last_status, attempts=getattr(last_error, "attempts", 1), error=last_error)


def _classify_response(
    resp: httpx.Response,
    url: str,
    cfg: FetchConfig,
    follow_redirects: bool,
    check_markers: bool = True,
) -> FetchError | None:
    """Map a received response to an error, or None when it is usable."""
    status = resp.status_code
    if status == 404:
        return NotFoundError(f"Not found: {url}", url)
    if status == 403:
        return BlockedError(f"Blocked by target site (HTTP 403): {url}", url)
    if 300 <= status < 400:
        if not follow_redirects:
            return None
        return HttpStatusError(f"Unfollowed redirect (HTTP {status}): {url}", url, status)
    if status >= 400:
        return HttpStatusError(f"HTTP {status} fetching {url}", url, status)

    if not check_markers:
        return None
    marker = detect_blocking(resp.text, cfg.blocking_markers)
    if marker:
        return BlockedError(f"Blocking page detected ({marker!r}): {url}", url, marker=marker)
    return None


def _is_dns_failure(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _DNS_HINTS)
