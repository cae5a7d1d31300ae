"""Shared fixtures: fast configuration and a routing httpx mock transport."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from news_scout.config import AppConfig


class Router:
    """Route mock requests by exact URL or by host + path prefix.

    Every request is recorded in `calls` so tests can count attempts and
    inspect headers.
    """

    def __init__(self) -> None:
        self.routes: list[tuple[Callable[[httpx.Request], bool], Callable[[httpx.Request], httpx.Response]]] = []
        self.calls: list[httpx.Request] = []

    def add(self, match, responder) -> "Router":
        if isinstance(match, str):
            url = match
            self.routes.append((lambda request: str(request.url) == url, responder))
        else:
            self.routes.append((match, responder))
        return self

    def html(self, url: str, body: str, status: int = 200) -> "Router":
        return self.add(url, lambda request: httpx.Response(status, text=body, headers={"content-type": "text/html"}))

    def redirect(self, url: str, location: str, status: int = 302) -> "Router":
        return self.add(url, lambda request: httpx.Response(status, headers={"location": location}))

    def prefix(self, host: str, path_prefix: str, responder) -> "Router":
        return self.add(
            lambda request: request.url.host == host and request.url.path.startswith(path_prefix),
            responder,
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        for match, responder in self.routes:
            if match(request):
                return responder(request)
        return httpx.Response(404, text="not found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [request for request in self.calls if request.url.host == host]


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def cfg() -> AppConfig:
    config = AppConfig()
    config.fetch.backoff_seconds = 0.0
    config.fetch.timeout_seconds = 5.0
    config.fetch.trust_env = False
    config.pipeline.item_delay_seconds = 0.0
    return config


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    """Record time.sleep calls instead of sleeping."""
    recorded: list[float] = []
    monkeypatch.setattr("time.sleep", lambda seconds: recorded.append(seconds))
    return recorded


def _article_html(
    title: str = "Scientists unveil a new battery design",
    paragraphs: int = 4,
    extra_head: str = "",
    extra_body: str = "",
) -> str:
    """A small, well-formed article page whose body clears the 200-char threshold."""
    body = "\n".join(
        f"<p>Paragraph {index} explains the findings of the research team in careful detail, "
        f"covering methods, results and what comes next for the field.</p>"
        for index in range(1, paragraphs + 1)
    )
    return f"""
    <html>
      <head><title>{title} | Example News</title>{extra_head}</head>
      <body>
        <nav class="site-nav"><a href="/">Home</a><a href="/tech">Tech</a></nav>
        <article>
          <h1 class="article-title">{title}</h1>
          <div class="article-body">
            {body}
          </div>
        </article>
        {extra_body}
        <footer><p>Copyright Example News and all of its partners worldwide.</p></footer>
      </body>
    </html>
    """


@pytest.fixture
def article_html():
    return _article_html
