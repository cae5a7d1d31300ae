"""
Request header profiles for the fetch executor.

Every attempt draws a fresh user agent from USER_AGENT_POOL. The minimal
profile is the reduced strategy used when a full browser profile gets a
near-empty page back.
"""

from __future__ import annotations

import random

from ..config import FetchConfig

USER_AGENT_POOL: tuple[str, ...] = (
    # Chrome on Windows
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/129.0.0.0 Safari/537.36"
    ),
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/128.0.0.0 Safari/537.36"
    ),
    # Chrome on macOS
    (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/129.0.0.0 Safari/537.36"
    ),
    # Chrome on Linux
    (
        "Mozilla/5.0 (X11; Linux x86_64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/129.0.0.0 Safari/537.36"
    ),
    # Firefox
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:131.0) "
        "Gecko/20100101 Firefox/131.0"
    ),
    (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:130.0) "
        "Gecko/20100101 Firefox/130.0"
    ),
    # Safari on macOS
    (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/605.1.15 (KHTML, like Gecko) "
        "Version/17.6 Safari/605.1.15"
    ),
    # Edge
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/129.0.0.0 Safari/537.36 Edg/129.0.0.0"
    ),
)

MINIMAL_USER_AGENT = "Mozilla/5.0"


def pick_user_agent(rng: random.Random | None = None) -> str:
    return (rng or random).choice(USER_AGENT_POOL)


def build_headers(cfg: FetchConfig, minimal: bool = False) -> dict[str, str]:
    """Build the header set for one fetch attempt."""
    if minimal:
        return {"User-Agent": MINIMAL_USER_AGENT}
    return {
        "User-Agent": pick_user_agent(),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": cfg.accept_language,
        "Cache-Control": "no-cache",
        "Upgrade-Insecure-Requests": "1",
    }
