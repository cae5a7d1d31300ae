"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: HTTP fetching, retry and blocking-detection settings
- ResolverConfig: Aggregator redirect resolution settings
- ExtractConfig: Content extraction thresholds and filters
- FeedConfig: Feed/search candidate discovery settings
- PipelineConfig: Request limits and batch pacing
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import copy
import os
from typing import Any

import yaml


CONFIG_ENV_VAR = "NEWS_SCOUT_CONFIG"


@dataclass
class FetchConfig:
    """Configuration for the fetch/retry executor.

    Attributes:
        timeout_seconds: Per-attempt HTTP timeout
        retries: Number of retry attempts after the initial one
        backoff_seconds: Base delay; attempt N waits N * backoff_seconds
        max_redirects: Redirect hops followed by the HTTP client
        trust_env: Whether to respect system proxy settings
        accept_language: Accept-Language header sent with browser headers
        blocking_markers: Lowercase substrings that mark a blocking page
    """

    timeout_seconds: float = 15.0
    retries: int = 2
    backoff_seconds: float = 1.0
    max_redirects: int = 5
    trust_env: bool = True
    accept_language: str = "en-US,en;q=0.9"
    blocking_markers: list[str] = field(
        default_factory=lambda: ["access denied", "blocked", "captcha"]
    )


@dataclass
class ResolverConfig:
    """Configuration for aggregator link resolution.

    Attributes:
        aggregator_hosts: Hosts whose links need de-indirection
        search_base_url: Rendered search page used by the search fallback
        news_keywords: Tokens that make a scripted URL look like an article
        search_match_threshold: Minimum title similarity (0-100) for the
            search fallback to accept a result anchor
    """

    aggregator_hosts: list[str] = field(
        default_factory=lambda: ["news.google.com", "google.com"]
    )
    search_base_url: str = "https://news.google.com"
    news_keywords: list[str] = field(
        default_factory=lambda: [
            "news",
            "article",
            "story",
            "stories",
            "times",
            "post",
            "herald",
            "tribune",
            "express",
            "today",
        ]
    )
    search_match_threshold: int = 80


@dataclass
class ExtractConfig:
    """Configuration for HTML content extraction.

    Attributes:
        title_min_chars: Minimum length of an accepted title
        subtitle_min_chars: Minimum length of an accepted subtitle
        paragraph_min_chars: Paragraphs shorter than this are dropped
        body_min_chars: Minimum accumulated body length
        max_images: Cap on returned image URLs
        image_min_url_chars: Image URLs shorter than this are rejected
        exclude_keywords: Paragraphs containing any of these are dropped
        image_blacklist: Image URLs containing any of these are rejected
        fallback: Whole-document extractors tried after the selector cascade
    """

    title_min_chars: int = 10
    subtitle_min_chars: int = 20
    paragraph_min_chars: int = 20
    body_min_chars: int = 200
    max_images: int = 8
    image_min_url_chars: int = 20
    exclude_keywords: list[str] = field(
        default_factory=lambda: [
            "advertisement",
            "subscribe",
            "sign up for",
            "all rights reserved",
            "follow us on",
            "click here",
        ]
    )
    image_blacklist: list[str] = field(
        default_factory=lambda: [
            "logo",
            "icon",
            "avatar",
            "placeholder",
            "sprite",
            "spinner",
            "pixel",
        ]
    )
    fallback: list[str] = field(default_factory=lambda: ["trafilatura", "readability"])


@dataclass
class FeedConfig:
    """Configuration for candidate discovery.

    Attributes:
        base_url: Aggregator base URL for the RSS feed and search page
        lang: Default interface language
        country: Default edition country
        min_feed_entries: Below this many usable entries the other source is read
        title_similarity_threshold: Fuzzy match threshold (0-100) for duplicate titles
    """

    base_url: str = "https://news.google.com"
    lang: str = "en"
    country: str = "IN"
    min_feed_entries: int = 3
    title_similarity_threshold: int = 92


@dataclass
class PipelineConfig:
    """Configuration for request handling.

    Attributes:
        default_limit: Items processed when the request gives no limit
        max_limit: Upper bound on the requested limit
        item_delay_seconds: Pause between batch items
        retry_insufficient: Retry extraction once with minimal headers
    """

    default_limit: int = 5
    max_limit: int = 20
    item_delay_seconds: float = 1.0
    retry_insufficient: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "news_scout.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS = {
    "fetch": FetchConfig,
    "resolver": ResolverConfig,
    "extract": ExtractConfig,
    "feed": FeedConfig,
    "pipeline": PipelineConfig,
    "logging": LoggingConfig,
}


def load_config(path: str | None = None) -> AppConfig:
    """Load configuration from a YAML file with defaults.

    Falls back to the file named by NEWS_SCOUT_CONFIG, then to defaults.
    """
    path = path or os.getenv(CONFIG_ENV_VAR)
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown sections and unknown keys inside a section are ignored.
    """
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            known = {k: v for k, v in value.items() if k in data[key]}
            data[key].update(known)
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, dict[str, Any]]:
    """Convert AppConfig to nested dictionary."""
    data: dict[str, dict[str, Any]] = {}
    for name in _SECTIONS:
        section = getattr(cfg, name)
        data[name] = {f.name: copy.deepcopy(getattr(section, f.name)) for f in fields(section)}
    return data


def _fromdict(data: dict[str, dict[str, Any]]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(**{name: cls(**data.get(name, {})) for name, cls in _SECTIONS.items()})
