import httpx
import pytest

from news_scout.errors import InputError
from news_scout.fetch.headers import MINIMAL_USER_AGENT
from news_scout.runner import build_request, run_request

FEED_TITLES = [
    "Startups race to build cheaper solar panels",
    "Parliament passes new data protection bill",
    "Chipmaker opens its first plant in Gujarat",
    "Researchers map the coral reefs of the Andamans",
]

THIN_PAGE = """
<html><head><title>Members only</title></head>
<body><article><h1>Premium analysis of the quarterly results</h1><p>Short teaser.</p></article></body></html>
"""


def _rss(count: int) -> str:
    items = "".join(
        f"""
        <item>
          <title>{title} - Ledger</title>
          <link>https://news.google.com/rss/articles/X{index}?oc=5</link>
          <pubDate>Tue, 02 Jan 2024 09:00:00 GMT</pubDate>
          <source url="https://ledger.example">Ledger</source>
        </item>
        """
        for index, title in enumerate(FEED_TITLES[:count])
    )
    return f'<?xml version="1.0"?><rss version="2.0"><channel><title>Search</title>{items}</channel></rss>'


def _wire_batch(router, article_html, count: int = 4, failing: int | None = None):
    router.prefix("news.google.com", "/rss/search", lambda request: httpx.Response(200, text=_rss(count)))
    for index, title in enumerate(FEED_TITLES[:count]):
        publisher = f"https://publisher.example/news/story-{index}"
        router.redirect(f"https://news.google.com/rss/articles/X{index}?oc=5", publisher)
        if index == failing:
            router.html(publisher, "server exploded", status=500)
        else:
            router.html(publisher, article_html(title=title))


def _run(params, cfg, router):
    return run_request(build_request(params, cfg), cfg, transport=router.transport())


def test_build_request_requires_exactly_one_target(cfg):
    with pytest.raises(InputError):
        build_request({}, cfg)
    with pytest.raises(InputError):
        build_request({"url": "https://example.com/a", "query": "news"}, cfg)


@pytest.mark.parametrize(
    "params",
    [
        {"url": "ftp://example.com/file"},
        {"url": "not a url"},
        {"query": "news", "type": "xml"},
        {"query": "news", "include_content": "maybe"},
        {"query": "news", "limit": "0"},
        {"query": "news", "limit": "many"},
    ],
)
def test_build_request_rejects_bad_params(cfg, params):
    with pytest.raises(InputError):
        build_request(params, cfg)


def test_build_request_defaults_and_coercion(cfg):
    request = build_request({"query": " climate ", "limit": "100", "country": "us", "include_content": "false"}, cfg)

    assert request.query == "climate"
    assert request.limit == cfg.pipeline.max_limit
    assert request.country == "US"
    assert request.lang == "en"
    assert request.type == "rss"
    assert request.include_content is False
    assert build_request({"query": "x"}, cfg).limit == 5


def test_batch_returns_at_most_limit_items_with_titles(cfg, router, sleeps, article_html):
    _wire_batch(router, article_html)

    response = _run({"query": "technology", "limit": 3}, cfg, router)

    assert response.success
    data = response.to_dict()["data"]
    assert data["query"] == "technology"
    assert data["count"] == len(data["items"]) <= 3
    for item in data["items"]:
        assert item["success"]
        assert item["content"]["title"]
        assert item["resolution"]["canonical_url"].startswith("https://publisher.example/news/")
        assert item["resolution"]["strategy"] == "location_header"


def test_one_failing_item_does_not_affect_siblings(cfg, router, sleeps, article_html):
    _wire_batch(router, article_html, failing=1)

    response = _run({"query": "technology", "limit": 3}, cfg, router)

    items = response.data["items"]
    assert response.success
    assert [item["success"] for item in items] == [True, False, True]
    failed = items[1]
    assert "content" not in failed
    assert failed["error_type"] == "HttpStatusError"
    assert failed["candidate"]["title"] == FEED_TITLES[1]


def test_batch_pauses_between_items_only(cfg, router, sleeps, article_html):
    cfg.pipeline.item_delay_seconds = 0.25
    _wire_batch(router, article_html)

    _run({"query": "technology", "limit": 3}, cfg, router)

    assert sleeps.count(0.25) == 2


def test_batch_without_content_skips_publisher_fetch(cfg, router, sleeps, article_html):
    _wire_batch(router, article_html)

    response = _run({"query": "technology", "limit": 2, "include_content": "false"}, cfg, router)

    assert all(item["content"] is None for item in response.data["items"])
    assert router.calls_to("publisher.example") == []


def test_batch_discovery_failure_is_reported(cfg, router, sleeps):
    cfg.fetch.retries = 0
    router.prefix("news.google.com", "/", lambda request: httpx.Response(503, text="down"))

    response = _run({"query": "technology"}, cfg, router)

    assert not response.success
    assert response.status_code == 500
    assert response.to_dict() == {"success": False, "error": response.error}


def test_single_publisher_url(cfg, router, sleeps, article_html):
    url = "https://publisher.example/science/battery"
    router.html(url, article_html())

    response = _run({"url": url}, cfg, router)

    assert response.success
    assert response.data["resolution"]["canonical_url"] == url
    assert response.data["resolution"]["strategy"] == "canonical"
    assert response.data["content"]["title"] == "Scientists unveil a new battery design"
    assert response.data["content"]["category"] == "science"


def test_single_not_found_maps_to_404(cfg, router, sleeps):
    response = _run({"url": "https://publisher.example/missing"}, cfg, router)

    assert not response.success
    assert response.status_code == 404
    assert len(router.calls) == 1


def test_single_unresolvable_aggregator_link_is_soft_failure(cfg, router, sleeps):
    response = _run({"url": "https://news.google.com/articles/ZZ"}, cfg, router)

    assert not response.success
    assert response.status_code == 200
    assert "resolve" in response.error.lower()


def test_single_aggregator_link_is_resolved_first(cfg, router, sleeps, article_html):
    publisher = "https://publisher.example/news/resolved-story"
    router.redirect("https://news.google.com/articles/CAIQ", publisher)
    router.html(publisher, article_html())

    response = _run({"url": "https://news.google.com/articles/CAIQ", "type": "article"}, cfg, router)

    assert response.success
    assert response.data["resolution"]["canonical_url"] == publisher
    assert response.data["resolution"]["original_url"] == "https://news.google.com/articles/CAIQ"


def test_insufficient_content_retried_with_minimal_headers(cfg, router, sleeps, article_html):
    url = "https://publisher.example/business/results"

    def page(request):
        if request.headers["user-agent"] == MINIMAL_USER_AGENT:
            return httpx.Response(200, text=article_html())
        return httpx.Response(200, text=THIN_PAGE)

    router.add(url, page)

    response = _run({"url": url}, cfg, router)

    assert response.success
    assert [call.headers["user-agent"] == MINIMAL_USER_AGENT for call in router.calls] == [False, True]


def test_insufficient_content_is_soft_failure(cfg, router, sleeps):
    url = "https://publisher.example/business/results"
    router.html(url, THIN_PAGE)

    response = _run({"url": url}, cfg, router)

    assert not response.success
    assert response.status_code == 200
    assert "insufficient" in response.error.lower()
    assert len(router.calls) == 2


def test_single_without_content(cfg, router, sleeps):
    url = "https://publisher.example/business/results"

    response = _run({"url": url, "include_content": "0"}, cfg, router)

    assert response.success
    assert response.data == {
        "resolution": {"canonical_url": url, "original_url": None, "resolved": True, "strategy": "canonical"},
        "content": None,
    }
    assert router.calls == []
