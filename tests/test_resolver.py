import base64

import httpx

from news_scout.resolve.resolver import is_aggregator_url, resolve_link
from news_scout.resolve.strategies import rss_to_article_form

AGGREGATOR = "news.google.com"
RSS_LINK = "https://news.google.com/rss/articles/CBMiTOKEN?oc=5"
ARTICLE_LINK = "https://news.google.com/articles/CBMiTOKEN?oc=5"
PUBLISHER = "https://www.publisher.example/world/leaders-meet-for-climate-summit"


def _resolve(cfg, router, link, **kwargs):
    return resolve_link(link, cfg.fetch, cfg.resolver, transport=router.transport(), **kwargs)


def test_query_parameter_resolves_without_network(cfg, router, sleeps):
    result = _resolve(cfg, router, "https://news.google.com/redirect?url=https%3A%2F%2Fexample.com%2Fa")

    assert result.resolved
    assert result.canonical_url == "https://example.com/a"
    assert result.strategy == "query_param"
    assert router.calls == []


def test_non_aggregator_link_is_canonical(cfg, router, sleeps):
    result = _resolve(cfg, router, PUBLISHER)

    assert result.resolved
    assert result.canonical_url == PUBLISHER
    assert router.calls == []


def test_resolving_canonical_url_is_idempotent(cfg, router, sleeps):
    first = _resolve(cfg, router, "https://news.google.com/redirect?url=https%3A%2F%2Fexample.com%2Fa")
    second = _resolve(cfg, router, first.canonical_url)

    assert second.canonical_url == first.canonical_url
    assert second.resolved


def test_encoded_token_resolves_without_network(cfg, router, sleeps):
    target = PUBLISHER.encode("ascii")
    payload = b"\x08\x13\x22" + bytes([len(target)]) + target + b"\xd2\x01\x00"
    token = base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")

    result = _resolve(cfg, router, f"https://news.google.com/rss/articles/{token}?oc=5")

    assert result.canonical_url == PUBLISHER
    assert result.strategy == "encoded_token"
    assert router.calls == []


def test_location_header(cfg, router, sleeps):
    router.redirect(RSS_LINK, PUBLISHER)

    result = _resolve(cfg, router, RSS_LINK)

    assert result.resolved
    assert result.canonical_url == PUBLISHER
    assert result.strategy == "location_header"
    assert result.original_url == RSS_LINK


def test_same_host_redirect_then_meta_refresh(cfg, router, sleeps):
    router.redirect(RSS_LINK, "/interstitial?x=1")
    router.html(
        "https://news.google.com/interstitial?x=1",
        f'<html><head><meta http-equiv="refresh" content="0;url={PUBLISHER}"></head><body></body></html>',
    )

    result = _resolve(cfg, router, RSS_LINK)

    assert result.canonical_url == PUBLISHER
    assert result.strategy == "meta_refresh"


def test_canonical_link_element(cfg, router, sleeps):
    router.html(
        RSS_LINK,
        f'<html><head><link rel="canonical" href="{PUBLISHER}"></head><body>Loading</body></html>',
    )

    result = _resolve(cfg, router, RSS_LINK)

    assert result.canonical_url == PUBLISHER
    assert result.strategy == "canonical_link"


def test_script_scan_skips_assets_and_prefers_article_urls(cfg, router, sleeps):
    script = (
        'window.data = {"img":"https:\\/\\/cdn.example\\/static\\/app.js",'
        '"analytics":"https://www.googletagmanager.com/gtag/js?id=1",'
        '"target":"https:\\/\\/dailynews.example\\/2024\\/05\\/markets-rally-after-rate-cut"};'
    )
    router.html(RSS_LINK, f"<html><head><script>{script}</script></head><body></body></html>")

    result = _resolve(cfg, router, RSS_LINK)

    assert result.canonical_url == "https://dailynews.example/2024/05/markets-rally-after-rate-cut"
    assert result.strategy == "script_scan"


def test_rss_form_falls_back_to_article_form(cfg, router, sleeps):
    router.html(RSS_LINK, "<html><body>Opening</body></html>", status=500)
    router.redirect(ARTICLE_LINK, PUBLISHER)

    result = _resolve(cfg, router, RSS_LINK, link_form="rss")

    assert result.canonical_url == PUBLISHER
    assert any(str(call.url) == ARTICLE_LINK for call in router.calls)


def test_search_fallback_resolves_matching_anchor(cfg, router, sleeps):
    title = "Leaders meet for climate summit in Geneva"
    router.html(RSS_LINK, "<html><body>Opening</body></html>")
    router.html(ARTICLE_LINK, "<html><body>Opening</body></html>")
    router.prefix(
        AGGREGATOR,
        "/search",
        lambda request: httpx.Response(
            200,
            text=f"""
            <html><body>
              <article><a href="./articles/OTHER">x</a><h3>Cricket final goes to extra overs</h3></article>
              <article><a href="./articles/MATCH">x</a><h3>{title}</h3>
                <div><span>Publisher Daily</span></div></article>
            </body></html>
            """,
        ),
    )
    router.redirect("https://news.google.com/articles/MATCH", PUBLISHER)

    result = _resolve(cfg, router, RSS_LINK, title=title)

    assert result.resolved
    assert result.canonical_url == PUBLISHER
    assert result.strategy == "search_fallback"


def test_unresolvable_link_reports_unresolved(cfg, router, sleeps):
    cfg.fetch.retries = 0

    def refused(request):
        raise httpx.ConnectError("Connection refused", request=request)

    router.add(lambda request: True, refused)

    result = _resolve(cfg, router, RSS_LINK, title="Some headline nobody else has")

    assert not result.resolved
    assert result.canonical_url == RSS_LINK
    assert result.strategy is None


def test_redirect_back_to_aggregator_is_not_accepted(cfg, router, sleeps):
    router.html(
        RSS_LINK,
        '<html><head><link rel="canonical" href="https://news.google.com/home"></head></html>',
    )

    result = _resolve(cfg, router, RSS_LINK)

    assert not result.resolved


def test_aggregator_host_detection(cfg):
    assert is_aggregator_url("https://news.google.com/rss/articles/x", cfg.resolver)
    assert is_aggregator_url("https://www.google.com/url?q=x", cfg.resolver)
    assert not is_aggregator_url("https://example.com/a", cfg.resolver)


def test_rss_to_article_form():
    assert rss_to_article_form(RSS_LINK) == ARTICLE_LINK
    assert rss_to_article_form(ARTICLE_LINK) is None
