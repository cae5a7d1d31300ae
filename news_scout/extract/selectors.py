"""
Selector profiles for the extraction cascade.

PROFILES maps a publisher host to a SelectorProfile of curated, ordered
CSS selector lists. Host-specific lists are always tried before the
GENERIC lists; a "default" entry covers every other host. Adding a
publisher means adding an entry here, not touching extraction logic.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SelectorProfile:
    """Ordered CSS selector lists for each extracted field."""

    title: tuple[str, ...] = ()
    subtitle: tuple[str, ...] = ()
    body: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    date: tuple[str, ...] = ()
    location: tuple[str, ...] = ()


GENERIC = SelectorProfile(
    title=(
        "h1[itemprop=headline]",
        "h1[class*=headline]",
        "h1[class*=title]",
        "article h1",
        "main h1",
        "h1",
        "[itemprop=headline]",
    ),
    subtitle=(
        "[class*=subtitle]",
        "[class*=sub-title]",
        "[class*=subhead]",
        "[class*=standfirst]",
        "[class*=synopsis]",
        "[class*=article-summary]",
        "[itemprop=description]",
        "article h2",
    ),
    body=(
        "[itemprop=articleBody]",
        "[class*=article-body]",
        "[class*=article__body]",
        "[class*=articleBody]",
        "[class*=story-body]",
        "[class*=story-content]",
        "[class*=article-content]",
        "[class*=post-content]",
        "[class*=entry-content]",
        "[class*=content-body]",
        "article",
        "main",
        "#content",
        "[role=main]",
    ),
    images=(
        "img[class*=article]",
        "img[class*=featured]",
        "img[class*=hero]",
        "article figure img",
        "figure img",
        "article img",
        "img",
    ),
    date=(
        "[class*=publish]",
        "[class*=dateline-date]",
        "[class*=date]",
        "[class*=timestamp]",
        "[class*=posted]",
    ),
    location=(
        "[class*=dateline]",
        "[itemprop=contentLocation]",
        "[class*=location]",
        "[class*=place]",
    ),
)


PROFILES: dict[str, SelectorProfile] = {
    "default": SelectorProfile(),
    "timesofindia.indiatimes.com": SelectorProfile(
        title=("h1.HNMDR", "h1._1Y-96"),
        body=("div._s30J", "div.Normal", "div.ga-headlines"),
        images=("div.wJnIp img", "section.leadmedia img"),
        date=("div.xf8Pm span", "div.byline span"),
    ),
    "hindustantimes.com": SelectorProfile(
        title=("h1.hdg1",),
        subtitle=("h2.sortDec",),
        body=("div.storyDetails", "div.detail"),
        images=("div.storyParagraphFigure img", "figure img"),
        date=("div.dateTime",),
    ),
    "ndtv.com": SelectorProfile(
        title=("h1.sp-ttl",),
        subtitle=("h2.sp-descp",),
        body=("div.sp-cn", "div[itemprop=articleBody]"),
        images=("div.ins_instory_dv img",),
        date=("span.pst-by_lnk",),
        location=("span.place_cont",),
    ),
    "thehindu.com": SelectorProfile(
        title=("h1.title",),
        subtitle=("h2.sub-title",),
        body=("div.articlebodycontent", "div[id^=content-body]"),
        images=("div.article-picture img", "picture img"),
        date=("p.publish-time",),
        location=("span.dateline",),
    ),
    "indianexpress.com": SelectorProfile(
        title=("h1.native_story_title",),
        subtitle=("h2.synopsis",),
        body=("div.story_details", "div#pcl-full-content"),
        images=("span.custom-caption img",),
        date=("span[itemprop=dateModified]",),
    ),
    "bbc.com": SelectorProfile(
        title=("h1#main-heading", "h1[data-testid=headline]"),
        body=("div[data-component=text-block]", "article"),
        images=("div[data-component=image-block] img",),
        date=("time[data-testid=timestamp]",),
    ),
    "bbc.co.uk": SelectorProfile(
        title=("h1#main-heading",),
        body=("div[data-component=text-block]", "article"),
        images=("div[data-component=image-block] img",),
    ),
    "reuters.com": SelectorProfile(
        title=("h1[data-testid=Heading]",),
        body=("div[class*=article-body__content]", "div[data-testid=ArticleBody]"),
        images=("div[data-testid=Image] img",),
        date=("time[data-testid=Body]",),
        location=("span[class*=dateline]",),
    ),
    "theguardian.com": SelectorProfile(
        title=("div[data-gu-name=headline] h1",),
        subtitle=("div[data-gu-name=standfirst]",),
        body=("div#maincontent", "div.article-body-commercial-selector"),
        images=("div[data-gu-name=media] img",),
    ),
    "cnn.com": SelectorProfile(
        title=("h1.headline__text", "h1#maincontent"),
        body=("div.article__content", "div.zn-body__paragraph"),
        images=("div.image__container img",),
        date=("div.timestamp",),
    ),
    "nytimes.com": SelectorProfile(
        title=("h1[data-testid=headline]",),
        subtitle=("p#article-summary",),
        body=("section[name=articleBody]",),
        images=("div[data-testid=imageblock-wrapper] img",),
    ),
    "apnews.com": SelectorProfile(
        title=("h1.Page-headline",),
        body=("div.RichTextStoryBody",),
        images=("div.Figure img", "picture img"),
        date=("bsp-timestamp",),
    ),
}


def profile_for(host: str) -> SelectorProfile:
    """Return the selector profile for host.

    The lookup strips "www." and walks up parent domains, so
    "edition.cnn.com" uses the "cnn.com" entry. Unknown hosts get the
    "default" profile.
    """
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    parts = host.split(".")
    for index in range(len(parts) - 1):
        candidate = ".".join(parts[index:])
        if candidate in PROFILES:
            return PROFILES[candidate]
    return PROFILES["default"]


def selectors_for(profile: SelectorProfile, field_name: str) -> list[str]:
    """Host-specific selectors followed by the generic ones for a field."""
    specific = list(getattr(profile, field_name))
    generic = [selector for selector in getattr(GENERIC, field_name) if selector not in specific]
    return specific + generic
