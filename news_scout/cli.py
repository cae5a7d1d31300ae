"""
Command-line interface for News Scout.

Uses Typer to drive the pipeline locally: `search` runs batch mode for a
query and `article` runs single-URL mode. Both print the JSON response
object. Supports loading .env files for configuration overrides.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from .config import load_config
from .errors import InputError
from .logging_utils import setup_logging
from .runner import build_request, run_request

try:
    from dotenv import load_dotenv
except Exception:  # noqa: BLE001
    load_dotenv = None

app = typer.Typer(add_completion=False)
console = Console()


def _run(params: dict, config: Path | None, log_level: str | None, log_dir: Path | None, progress: bool) -> None:
    if load_dotenv is not None:
        load_dotenv()

    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    if log_dir is not None:
        cfg.logging.file = True
    logger = setup_logging(cfg.logging, log_dir)

    try:
        request = build_request(params, cfg)
    except InputError as exc:
        console.print_json(json.dumps({"success": False, "error": str(exc)}))
        raise typer.Exit(code=2)

    response = run_request(request, cfg, logger=logger, show_progress=progress, console=console)
    console.print_json(json.dumps(response.to_dict(), ensure_ascii=False))
    if not response.success and response.status_code >= 400:
        raise typer.Exit(code=1)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search terms."),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Maximum items to process."),
    lang: str | None = typer.Option(None, "--lang", help="Interface language, e.g. en."),
    country: str | None = typer.Option(None, "--country", help="Edition country, e.g. IN."),
    source: str = typer.Option("rss", "--type", help="Primary candidate source: rss or article."),
    include_content: bool = typer.Option(
        True, "--content/--no-content", help="Extract article content for each item."
    ),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, help="YAML config file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_dir: Path | None = typer.Option(None, "--log-dir", help="Write a log file to this directory."),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
):
    """Discover articles for a query, resolve and extract each one."""
    _run(
        {
            "query": query,
            "limit": limit,
            "lang": lang,
            "country": country,
            "type": source,
            "include_content": include_content,
        },
        config,
        log_level,
        log_dir,
        progress,
    )


@app.command()
def article(
    url: str = typer.Argument(..., help="Publisher or aggregator article URL."),
    link_type: str = typer.Option("rss", "--type", help="Aggregator link form: rss or article."),
    include_content: bool = typer.Option(True, "--content/--no-content"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, help="YAML config file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_dir: Path | None = typer.Option(None, "--log-dir", help="Write a log file to this directory."),
):
    """Resolve (if needed) and extract a single article URL."""
    _run(
        {"url": url, "type": link_type, "include_content": include_content},
        config,
        log_level,
        log_dir,
        False,
    )


if __name__ == "__main__":
    app()
