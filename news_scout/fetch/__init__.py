"""
Network access for the pipeline.

This package holds the fetch/retry executor and the request header
profiles it rotates through.
"""

from .fetcher import FetchResult, detect_blocking, fetch_url
from .headers import USER_AGENT_POOL, build_headers

__all__ = [
    "fetch_url",
    "FetchResult",
    "detect_blocking",
    "USER_AGENT_POOL",
    "build_headers",
]
