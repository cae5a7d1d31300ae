"""
Request orchestration for the news_scout pipeline.

This module coordinates the per-request workflow:
1. Validate request parameters
2. Batch mode: discover candidates, then resolve and extract each one
   sequentially with a politeness delay between items
3. Single-URL mode: resolve aggregator links, then extract

Every outcome is returned as a PipelineResponse; errors are mapped to
status codes here and nowhere else. One item's failure never affects its
siblings; a batch only fails when candidate discovery fails.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any, Mapping

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .config import AppConfig
from .core.types import CandidateItem, ExtractedContent, ItemResult, PipelineResponse, ResolvedArticle
from .core.urls import is_http_url
from .errors import ExtractionInsufficient, InputError, ResolutionFailure, status_for_error
from .extract.extractor import extract_article
from .input.reader import SOURCES, read_candidates
from .logging_utils import get_logger, log_event, truncate_text
from .resolve.resolver import is_aggregator_url, resolve_link

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class PipelineRequest:
    """Validated request parameters.

    Exactly one of url and query is set.
    """
    url: str | None = None
    query: str | None = None
    lang: str | None = None
    country: str | None = None
    type: str = "rss"
    include_content: bool = True
    limit: int = 5


@dataclass
class BatchStats:
    """Counters collected while processing a batch.

    Attributes:
        total: Candidates processed
        resolved: Candidates whose link was de-indirected
        extracted: Candidates with sufficient extracted content
        failed: Candidates recorded as failures
        retried: Extractions retried with minimal headers
    """
    total: int = 0
    resolved: int = 0
    extracted: int = 0
    failed: int = 0
    retried: int = 0


def build_request(params: Mapping[str, Any], cfg: AppConfig | None = None) -> PipelineRequest:
    """Validate raw request parameters.

    Raises:
        InputError: missing/conflicting url and query, bad scheme, bad type,
            bad boolean or non-positive limit
    """
    cfg = cfg or AppConfig()
    url = _clean(params.get("url"))
    query = _clean(params.get("query"))
    if not url and not query:
        raise InputError("Either 'url' or 'query' is required")
    if url and query:
        raise InputError("Provide either 'url' or 'query', not both")
    if url and not is_http_url(url):
        raise InputError(f"Invalid URL (must be http or https): {url!r}")

    link_type = (_clean(params.get("type")) or "rss").lower()
    if link_type not in SOURCES:
        raise InputError(f"Invalid type {link_type!r}; expected one of {', '.join(SOURCES)}")

    return PipelineRequest(
        url=url,
        query=query,
        lang=_clean(params.get("lang")) or cfg.feed.lang,
        country=(_clean(params.get("country")) or cfg.feed.country).upper(),
        type=link_type,
        include_content=_parse_bool(params.get("include_content"), default=True),
        limit=_parse_limit(params.get("limit"), cfg.pipeline.default_limit, cfg.pipeline.max_limit),
    )


def run_request(
    request: PipelineRequest,
    cfg: AppConfig,
    *,
    transport=None,
    logger: logging.Logger | None = None,
    show_progress: bool = False,
    console: Console | None = None,
) -> PipelineResponse:
    """Dispatch a validated request to single-URL or batch mode."""
    if request.url:
        return run_single(request, cfg, transport=transport, logger=logger)
    return run_batch(
        request,
        cfg,
        transport=transport,
        logger=logger,
        show_progress=show_progress,
        console=console,
    )


def run_single(
    request: PipelineRequest,
    cfg: AppConfig,
    *,
    transport=None,
    logger: logging.Logger | None = None,
) -> PipelineResponse:
    """Resolve (if aggregator-hosted) and extract a single URL."""
    logger = get_logger(logger)
    url = request.url or ""
    if not is_http_url(url):
        return _error_response(InputError(f"Invalid URL (must be http or https): {url!r}"), logger)

    if is_aggregator_url(url, cfg.resolver):
        resolution = resolve_link(
            url,
            cfg.fetch,
            cfg.resolver,
            link_form=request.type,
            transport=transport,
            logger=logger,
        )
        if not resolution.resolved:
            failure = ResolutionFailure(f"Could not resolve aggregator link to a publisher URL: {url}")
            return _error_response(failure, logger)
    else:
        resolution = ResolvedArticle(canonical_url=url, resolved=True, strategy="canonical")

    if not request.include_content:
        return PipelineResponse.ok({"resolution": resolution.to_dict(), "content": None})

    try:
        content, _ = _extract_with_retry(resolution.canonical_url, cfg, transport, logger)
    except Exception as exc:  # noqa: BLE001
        return _error_response(exc, logger)
    return PipelineResponse.ok({"resolution": resolution.to_dict(), "content": content.to_dict()})


def run_batch(
    request: PipelineRequest,
    cfg: AppConfig,
    *,
    transport=None,
    logger: logging.Logger | None = None,
    show_progress: bool = False,
    console: Console | None = None,
) -> PipelineResponse:
    """Discover candidates for a query and process each one independently."""
    logger = get_logger(logger)
    query = request.query or ""
    try:
        candidates = read_candidates(
            query,
            cfg.fetch,
            cfg.feed,
            lang=request.lang,
            country=request.country,
            limit=request.limit,
            source=request.type,
            transport=transport,
            logger=logger,
        )
    except Exception as exc:  # noqa: BLE001
        return _error_response(exc, logger)

    candidates = candidates[: request.limit]
    stats = BatchStats(total=len(candidates))
    log_event(logger, "Batch start", event="batch_start", query=query, count=len(candidates))

    results: list[ItemResult] = []
    if show_progress and candidates:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Resolving and extracting", total=len(candidates))
            for index, candidate in enumerate(candidates):
                results.append(_process_item(candidate, request, cfg, stats, transport, logger))
                progress.advance(task, 1)
                _pause_between(index, len(candidates), cfg)
    else:
        for index, candidate in enumerate(candidates):
            results.append(_process_item(candidate, request, cfg, stats, transport, logger))
            _pause_between(index, len(candidates), cfg)

    log_event(
        logger,
        "Batch done",
        event="batch_done",
        query=query,
        total=stats.total,
        resolved=stats.resolved,
        extracted=stats.extracted,
        failed=stats.failed,
        retried=stats.retried,
    )
    return PipelineResponse.ok(
        {
            "query": query,
            "count": len(results),
            "items": [result.to_dict() for result in results],
        }
    )


def _process_item(
    candidate: CandidateItem,
    request: PipelineRequest,
    cfg: AppConfig,
    stats: BatchStats,
    transport,
    logger: logging.Logger,
) -> ItemResult:
    """Resolve and extract one candidate; every failure becomes a failed ItemResult."""
    resolution: ResolvedArticle | None = None
    try:
        resolution = resolve_link(
            candidate.feed_link,
            cfg.fetch,
            cfg.resolver,
            title=candidate.title,
            link_form="rss" if candidate.origin == "rss" else "article",
            transport=transport,
            logger=logger,
        )
        if not resolution.resolved:
            raise ResolutionFailure(f"Could not resolve {candidate.feed_link}")
        stats.resolved += 1

        if not request.include_content:
            return ItemResult(candidate=candidate, success=True, resolution=resolution)

        content, retried = _extract_with_retry(resolution.canonical_url, cfg, transport, logger)
        if retried:
            stats.retried += 1
        stats.extracted += 1
        return ItemResult(candidate=candidate, success=True, resolution=resolution, content=content)
    except Exception as exc:  # noqa: BLE001
        stats.failed += 1
        log_event(
            logger,
            "Item failed",
            level=logging.WARNING,
            event="item_failed",
            title=candidate.title,
            url=candidate.feed_link,
            error_type=type(exc).__name__,
            error=truncate_text(str(exc)),
        )
        return ItemResult.failed(candidate, exc, resolution=resolution)


def _extract_with_retry(
    url: str, cfg: AppConfig, transport, logger: logging.Logger
) -> tuple[ExtractedContent, bool]:
    """Extract url, retrying once with minimal headers on insufficient content.

    Returns:
        (sufficient content, whether the minimal-header retry was used)

    Raises:
        ExtractionInsufficient: content stayed below threshold
        FetchError / InputError: from the fetch layer
    """
    content = extract_article(url, cfg.fetch, cfg.extract, transport=transport, logger=logger)
    if content.is_sufficient:
        return content, False
    if cfg.pipeline.retry_insufficient:
        log_event(logger, "Retrying with minimal headers", event="extract_retry", url=url)
        content = extract_article(
            url,
            cfg.fetch,
            cfg.extract,
            minimal_headers=True,
            transport=transport,
            logger=logger,
        )
        if content.is_sufficient:
            return content, True
    raise ExtractionInsufficient(
        f"Insufficient content extracted from {url} (possible paywall or blocking)"
    )


def _pause_between(index: int, total: int, cfg: AppConfig) -> None:
    if index < total - 1 and cfg.pipeline.item_delay_seconds > 0:
        time.sleep(cfg.pipeline.item_delay_seconds)


def _error_response(exc: BaseException, logger: logging.Logger) -> PipelineResponse:
    status = status_for_error(exc)
    log_event(
        logger,
        "Request failed",
        level=logging.WARNING if status < 500 else logging.ERROR,
        event="request_failed",
        error_type=type(exc).__name__,
        error=str(exc),
        status_code=status,
    )
    return PipelineResponse.fail(str(exc), status)


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_bool(value: Any, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise InputError(f"Invalid boolean value: {value!r}")


def _parse_limit(value: Any, default: int, maximum: int) -> int:
    if value is None or value == "":
        return min(default, maximum)
    if isinstance(value, bool):
        raise InputError(f"Invalid limit: {value!r}")
    try:
        limit = int(str(value).strip())
    except ValueError as exc:
        raise InputError(f"Invalid limit: {value!r}") from exc
    if limit < 1:
        raise InputError(f"Limit must be a positive integer, got {limit}")
    return min(limit, maximum)
