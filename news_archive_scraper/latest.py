from __future__ import annotations

import asyncio
import logging
from datetime import date

from news_archive_scraper.concurrency import expired, time_left
from news_archive_scraper.discover import DATED_PATH_PATTERN, LinkPattern, discover_dated_links, looks_like_nav_title
from news_archive_scraper.http import HttpClient
from news_archive_scraper.logging_utils import log_event
from news_archive_scraper.types import Article, HarvestStats


def touches_recent_years(end_year: int, today: date) -> bool:
    """Listing pages only surface fresh content, so skip them for old ranges."""

    return end_year >= today.year - 1


def latest_page_urls(base_url: str, max_pages: int = 10) -> list[str]:
    base_url = base_url.rstrip("/")
    urls = [base_url, base_url + "/archives"]
    urls.extend(f"{base_url}/archives?page={n}" for n in range(1, max_pages + 1))
    return urls


async def harvest_latest_pages(
    client: HttpClient,
    base_url: str,
    *,
    today: date,
    max_pages: int = 10,
    min_title_chars: int = 10,
    pattern: LinkPattern = DATED_PATH_PATTERN,
    deadline: float | None = None,
    logger: logging.Logger | None = None,
) -> HarvestStats:
    """Scrape the homepage and the paginated archive listing.

    Pages are walked in order because an empty paginated page marks the end
    of the listing and stops the walk.
    """

    stats = HarvestStats()
    min_year = today.year - 1

    for url in latest_page_urls(base_url, max_pages):
        if expired(deadline):
            log_event(logger, "  Deadline reached, stopping latest pages", level=logging.WARNING)
            break
        log_event(logger, f"  Scraping latest: {url}", level=logging.DEBUG, url=url)
        try:
            res = await asyncio.wait_for(client.fetch(url), timeout=time_left(deadline))
        except asyncio.TimeoutError:
            log_event(logger, "  Deadline reached, stopping latest pages", level=logging.WARNING)
            break
        if not res.ok:
            stats.pages_failed += 1
            continue
        stats.pages_fetched += 1

        found = 0
        for link in discover_dated_links(base_url=base_url, html=res.body or "", pattern=pattern):
            if link.year < min_year:
                continue
            if looks_like_nav_title(link.title, min_title_chars):
                stats.discarded += 1
                continue
            stats.articles.append(
                Article(title=link.title, link=link.url, published_at=link.published_at, source="latest")
            )
            found += 1

        log_event(logger, f"    Found {found} articles", level=logging.DEBUG, url=url, count=found)

        if found == 0 and "page=" in url:
            break

    return stats
