from __future__ import annotations

import io
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urljoin, urlparse

import feedparser
from dateutil import parser as dateparser

from news_archive_scraper.concurrency import gather_within
from news_archive_scraper.http import HttpClient
from news_archive_scraper.logging_utils import log_event
from news_archive_scraper.types import Article, HarvestStats


def _parse_dt(value: str | None) -> Optional[datetime]:
    if not value:
        return None
    try:
        dt = dateparser.parse(value)
        if dt is None:
            return None
        # Ensure tz-aware for consistent comparisons
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def detect_format(feed: Any) -> Optional[str]:
    """Return "rss", "atom" or None for a parsed feedparser result."""

    version = str(getattr(feed, "version", "") or "")
    if version.startswith("rss"):
        return "rss"
    if version.startswith("atom"):
        return "atom"
    return None


def _entry_link(e: Any, kind: str) -> str:
    link = str(e.get("link") or "").strip()
    if link or kind != "atom":
        return link
    # Atom <link> elements without rel=alternate only show up in e.links
    for l in e.get("links") or []:
        href = str(l.get("href") or "").strip()
        if href:
            return href
    return ""


def _entry_date(e: Any) -> Optional[datetime]:
    # feedparser maps RSS pubDate and Atom published onto "published",
    # and dc:date / Atom updated onto "updated"; an unparseable published
    # date drops the item rather than falling back
    if e.get("published"):
        return _parse_dt(e.get("published"))
    return _parse_dt(e.get("updated"))


def parse_feed(body: str, base_url: str, logger: logging.Logger | None = None) -> tuple[list[Article], int]:
    """Parse an RSS 2.0 or Atom document into feed-sourced Articles.

    Returns the articles and the number of items skipped for a missing title,
    link or parseable date. A body that is not a recognizable feed yields
    nothing.
    """

    if not body:
        return [], 0

    # bytes keep feedparser from treating the body as a URL or filename,
    # and let it sniff a leading byte-order mark
    feed = feedparser.parse(io.BytesIO(body.encode("utf-8")))
    kind = detect_format(feed)
    if kind is None:
        log_event(logger, "  Not an RSS or Atom document", level=logging.DEBUG)
        return [], 0

    articles: list[Article] = []
    discarded = 0
    for e in feed.entries or []:
        title = str(e.get("title") or "").strip()
        link = _entry_link(e, kind)
        published_at = _entry_date(e)
        if not title or not link or published_at is None:
            discarded += 1
            log_event(logger, f"  Skipping feed item without title, link or date: {link or title!r}", level=logging.DEBUG, url=link)
            continue
        if not urlparse(link).scheme:
            link = urljoin(base_url.rstrip("/") + "/", link)
        articles.append(Article(title=title, link=link, published_at=published_at, source="feed"))
    return articles, discarded


def _feed_label(url: str) -> str:
    parts = [p for p in urlparse(url).path.split("/") if p]
    # /tech/rss/index.xml -> tech, /rss/index.xml -> rss
    return parts[-3] if len(parts) >= 3 else (parts[0] if parts else url)


async def harvest_feeds(
    client: HttpClient,
    feed_urls: list[str],
    base_url: str,
    *,
    deadline: float | None = None,
    logger: logging.Logger | None = None,
) -> HarvestStats:
    results = await gather_within((client.fetch(u) for u in feed_urls), deadline)

    stats = HarvestStats()
    for url, res in zip(feed_urls, results):
        if res is None or not res.ok:
            stats.pages_failed += 1
            error = "deadline" if res is None else res.error
            log_event(logger, f"  {_feed_label(url)}: fetch failed ({error})", level=logging.DEBUG, url=url)
            continue
        stats.pages_fetched += 1
        items, discarded = parse_feed(res.body or "", base_url, logger)
        stats.discarded += discarded
        log_event(logger, f"  {_feed_label(url)}: {len(items)} articles, {discarded} skipped", level=logging.DEBUG, url=url, count=len(items), discarded=discarded)
        stats.articles.extend(items)
    return stats
