from bs4 import BeautifulSoup
import pytest

from news_scout.errors import NotFoundError
from news_scout.extract.cleaner import strip_boilerplate
from news_scout.extract.extractor import extract_article, extract_from_html
from news_scout.extract.fields import match_place
from news_scout.extract.selectors import PROFILES, profile_for, selectors_for

URL = "https://www.publisher.example/technology/2024/01/01/new-battery-design"

LONG_PARAGRAPH = (
    "The research team spent three years refining the chemistry before the first "
    "prototype cell survived a full thousand charge cycles in the laboratory."
)


def test_publish_time_is_normalized(cfg, article_html):
    html = article_html().replace(
        '<h1 class="article-title">',
        '<time datetime="2024-01-01T10:00:00Z">Jan 1</time><h1 class="article-title">',
    )

    content = extract_from_html(html, URL, cfg.extract)

    assert content.published_at == "2024-01-01T10:00:00.000Z"


def test_publish_time_offset_converted_to_utc(cfg, article_html):
    html = article_html(extra_head='<meta property="article:published_time" content="2024-03-05T15:30:00+05:30">')

    content = extract_from_html(html, URL, cfg.extract)

    assert content.published_at == "2024-03-05T10:00:00.000Z"


def test_sufficient_article_fields(cfg, article_html):
    content = extract_from_html(article_html(), URL, cfg.extract)

    assert content.is_sufficient
    assert content.title == "Scientists unveil a new battery design"
    assert content.source_host == "publisher.example"
    assert content.body_method == "[class*=article-body]"
    assert len(content.body_text) >= cfg.extract.body_min_chars
    assert content.body_text.count("\n\n") == 3
    assert content.word_count == len(content.body_text.split())


def test_short_paragraphs_are_insufficient(cfg):
    html = """
    <html><head><title>Tiny</title></head><body><article>
      <h1>A headline that is long enough</h1>
      <p>Too short.</p><p>Also short.</p><p>Nope.</p>
    </article></body></html>
    """

    content = extract_from_html(html, URL, cfg.extract)

    assert content.title == "A headline that is long enough"
    assert content.body_text is None
    assert not content.is_sufficient
    assert content.word_count == 0


def test_boilerplate_is_removed_before_selection(cfg, article_html):
    ad = (
        '<div class="ad-slot"><p>Limited time offer on premium kitchen knives, '
        "shipped free to your door this week only.</p></div>"
    )
    comments = (
        '<section class="comments"><p>Reader comment that is definitely long enough '
        "to pass the paragraph filter.</p></section>"
    )
    html = article_html().replace("</div>\n        </article>", f"{ad}{comments}</div>\n        </article>")
    html = html.replace("<body>", '<body><script>var story = "hidden script text";</script>')

    content = extract_from_html(html, URL, cfg.extract)

    assert "kitchen knives" not in content.body_text
    assert "Reader comment" not in content.body_text
    assert "hidden script text" not in content.body_text
    assert "Paragraph 1" in content.body_text


def test_share_and_ad_blocks_inside_article_are_removed():
    soup = BeautifulSoup(
        """
        <body><article>
          <div class="article-share">Share this on Facebook Twitter WhatsApp now please</div>
          <div class="story-social"><a href="#">Tweet</a></div>
          <div class="article-ad">Sponsored placement for a credit card offer</div>
          <div class="article-body"><p>The body paragraph stays put.</p></div>
        </article></body>
        """,
        "html.parser",
    )

    strip_boilerplate(soup)

    text = soup.get_text()
    assert "Share this on Facebook" not in text
    assert "Tweet" not in text
    assert "credit card offer" not in text
    assert "The body paragraph stays put." in text


def test_form_wrapped_page_keeps_article(cfg):
    paragraphs = "".join(f"<p>Paragraph {index}. {LONG_PARAGRAPH}</p>" for index in range(1, 6))
    html = (
        "<html><body><form id='form1' method='post' action='./story.aspx'>"
        "<input type='hidden' name='__VIEWSTATE' value='abc'>"
        f"<article><h1>Scientists unveil new battery</h1>{paragraphs}</article>"
        "</form></body></html>"
    )

    content = extract_from_html(html, URL, cfg.extract)

    assert content.title == "Scientists unveil new battery"
    assert "Paragraph 5" in content.body_text
    assert content.is_sufficient


def test_strip_boilerplate_keeps_breadcrumbs_and_article_header():
    soup = BeautifulSoup(
        """
        <body>
          <header class="masthead"><a href="/">Site</a></header>
          <nav aria-label="breadcrumb"><ol><li>Home</li><li>Science</li><li>Story</li></ol></nav>
          <article><header><h1>Headline stays here</h1></header><p>Body</p></article>
          <aside class="sidebar"><p>Trending</p></aside>
        </body>
        """,
        "html.parser",
    )

    strip_boilerplate(soup)

    assert soup.find("nav") is not None
    assert soup.find("h1").get_text() == "Headline stays here"
    assert soup.find("aside") is None
    assert "Site" not in soup.get_text()


def test_exclusion_keywords_and_duplicates_filtered(cfg, article_html):
    extra = (
        "<p>Subscribe to our newsletter for the latest updates every single morning.</p>"
        "<p>Paragraph 1 explains the findings of the research team in careful detail, "
        "covering methods, results and what comes next for the field.</p>"
    )
    html = article_html().replace("</div>\n        </article>", f"{extra}</div>\n        </article>")

    content = extract_from_html(html, URL, cfg.extract)

    assert "newsletter" not in content.body_text
    assert content.body_text.count("Paragraph 1 explains") == 1


def test_images_absolute_unique_filtered_and_capped(cfg, article_html):
    images = "".join(f'<img src="/media/photos/story-{index}.jpg">' for index in range(10))
    images += '<img src="/media/photos/story-0.jpg">'
    images += '<img src="https://cdn.publisher.example/assets/site-logo.png">'
    images += '<img src="data:image/gif;base64,R0lGOD" data-src="https://cdn.publisher.example/lazy/photo-lazy.jpg">'
    html = article_html().replace("</article>", f"<figure>{images}</figure></article>")

    content = extract_from_html(html, URL, cfg.extract)

    assert len(content.images) == cfg.extract.max_images
    assert len(set(content.images)) == len(content.images)
    assert all(image.startswith("https://www.publisher.example/media/photos/") for image in content.images)
    assert not any("logo" in image for image in content.images)


def test_og_image_used_when_page_has_none(cfg, article_html):
    html = article_html(extra_head='<meta property="og:image" content="https://cdn.publisher.example/og/lead-photo.jpg">')

    content = extract_from_html(html, URL, cfg.extract)

    assert content.images == ["https://cdn.publisher.example/og/lead-photo.jpg"]


def test_lazy_image_attribute(cfg, article_html):
    html = article_html().replace(
        "</article>",
        '<img src="data:image/gif;base64,R0lGOD" data-src="https://cdn.publisher.example/lazy/photo-lazy.jpg"></article>',
    )

    content = extract_from_html(html, URL, cfg.extract)

    assert content.images == ["https://cdn.publisher.example/lazy/photo-lazy.jpg"]


def test_host_profile_selectors_take_priority(cfg):
    story = "".join(f"<p>{LONG_PARAGRAPH} ({index})</p>" for index in range(3))
    html = f"""
    <html><body>
      <h1 class="sp-ttl">Monsoon arrives early across the southern coast</h1>
      <div class="sp-cn">{story}</div>
      <article><p>{LONG_PARAGRAPH} Generic copy.</p><p>{LONG_PARAGRAPH} More generic copy.</p></article>
    </body></html>
    """

    content = extract_from_html(html, "https://www.ndtv.com/india-news/monsoon-arrives-early", cfg.extract)

    assert content.body_method == "div.sp-cn"
    assert "Generic copy" not in content.body_text
    assert content.title == "Monsoon arrives early across the southern coast"


def test_profile_lookup_walks_parent_domains():
    assert profile_for("edition.cnn.com") is PROFILES["cnn.com"]
    assert profile_for("www.ndtv.com") is PROFILES["ndtv.com"]
    assert profile_for("unknown.example") is PROFILES["default"]
    body = selectors_for(PROFILES["ndtv.com"], "body")
    assert body[0] == "div.sp-cn"
    assert "article" in body


def test_title_falls_back_to_document_title(cfg, article_html):
    html = article_html().replace('<h1 class="article-title">Scientists unveil a new battery design</h1>', "")

    content = extract_from_html(html, URL, cfg.extract)

    assert content.title == "Scientists unveil a new battery design"


def test_location_from_dateline(cfg, article_html):
    html = article_html().replace(
        '<div class="article-body">',
        '<div class="article-body"><span class="dateline">NEW DELHI:</span>',
    )

    content = extract_from_html(html, URL, cfg.extract)

    assert content.location == "New Delhi"


def test_location_from_gazetteer(cfg, article_html):
    html = article_html().replace("Paragraph 2 explains", "Paragraph 2 from Mumbai explains")

    content = extract_from_html(html, URL, cfg.extract)

    assert content.location == "Mumbai"


def test_match_place_prefers_earliest_then_longest():
    assert match_place("Officials in London spoke to Paris") == "London"
    assert match_place("Talks in New Delhi continued") == "New Delhi"
    assert match_place("no places here") is None


def test_category_from_breadcrumb(cfg, article_html):
    crumbs = '<nav class="breadcrumb"><ul><li><a href="/">Home</a></li><li><a href="/science">Science</a></li><li>Battery</li></ul></nav>'
    html = article_html().replace("<article>", f"{crumbs}<article>")

    content = extract_from_html(html, URL, cfg.extract)

    assert content.category == "Science"


def test_category_from_url_segment(cfg, article_html):
    content = extract_from_html(article_html(), URL, cfg.extract)

    assert content.category == "technology"


def test_category_from_section_meta(cfg, article_html):
    html = article_html(extra_head='<meta property="article:section" content="Energy">')

    content = extract_from_html(html, "https://publisher.example/2024/story", cfg.extract)

    assert content.category == "Energy"


def test_extract_article_fetches_page(cfg, article_html, router, sleeps):
    router.html(URL, article_html())

    content = extract_article(URL, cfg.fetch, cfg.extract, transport=router.transport())

    assert content.is_sufficient
    assert content.url == URL


def test_extract_article_propagates_fetch_errors(cfg, router, sleeps):
    router.html(URL, "missing", status=404)

    with pytest.raises(NotFoundError):
        extract_article(URL, cfg.fetch, cfg.extract, transport=router.transport())
