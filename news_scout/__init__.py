"""
News Scout - aggregator link resolution and article extraction.

This package discovers news articles for a query or a direct link,
resolves aggregator redirect links to the publisher's canonical URL and
extracts structured article content (title, body, images, timestamp,
location, category) from heterogeneous publisher pages.

Main entry points are build_request/run_request for embedding and the
`news-scout` CLI.

Example:
    $ news-scout search "technology" --limit 3
    $ news-scout article https://example.com/some-story
"""

__all__ = [
    "__version__",
    "AppConfig",
    "load_config",
    "build_request",
    "run_request",
    "resolve_link",
    "extract_article",
    "read_candidates",
]
__version__ = "0.1.0"

from .config import AppConfig, load_config
from .extract.extractor import extract_article
from .input.reader import read_candidates
from .resolve.resolver import resolve_link
from .runner import build_request, run_request
