from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from news_archive_scraper.concurrency import gather_within
from news_archive_scraper.discover import DATED_PATH_PATTERN, LinkPattern, discover_dated_links, looks_like_nav_title
from news_archive_scraper.http import HttpClient
from news_archive_scraper.logging_utils import log_event
from news_archive_scraper.types import Article, HarvestStats


SAMPLE_DAYS: tuple[int, ...] = (1, 4, 7, 10, 13, 16, 19, 22, 25, 28)

NAV_PHRASES: tuple[str, ...] = ("next page", "previous", "load more", "view all")


def archive_days(year: int, month: int, today: date, sample_days: Sequence[int] = SAMPLE_DAYS) -> list[int]:
    """Days of (year, month) whose archive page should be fetched.

    The in-progress month is covered day by day up to today. Months that
    have not started yet are skipped. Past months use a sparse sample, on
    the assumption that neighbouring archive days list overlapping articles.
    """

    if year > today.year:
        return []
    if year == today.year:
        if month == today.month:
            return list(range(1, today.day + 1))
        if month > today.month:
            return []
    return list(sample_days)


def archive_plan(
    start_year: int,
    end_year: int,
    today: date,
    sample_days: Sequence[int] = SAMPLE_DAYS,
) -> list[tuple[int, int, int]]:
    """(year, month, day) triples, newest year and month first."""

    plan: list[tuple[int, int, int]] = []
    for year in range(end_year, start_year - 1, -1):
        for month in range(12, 0, -1):
            for day in archive_days(year, month, today, sample_days):
                plan.append((year, month, day))
    return plan


def archive_day_url(base_url: str, year: int, month: int, day: int) -> str:
    return f"{base_url.rstrip('/')}/archives/{year}/{month}/{day}"


def extract_archive_articles(
    html: str,
    base_url: str,
    year: int,
    month: int,
    *,
    min_title_chars: int = 10,
    nav_phrases: tuple[str, ...] = NAV_PHRASES,
    pattern: LinkPattern = DATED_PATH_PATTERN,
) -> tuple[list[Article], int]:
    """Pull articles published in (year, month) out of one archive page.

    Returns the articles and the number of candidates rejected by the title
    checks. Links are deduplicated within the page.
    """

    seen: set[str] = set()
    articles: list[Article] = []
    discarded = 0
    for link in discover_dated_links(base_url=base_url, html=html, pattern=pattern):
        if link.url in seen:
            continue
        seen.add(link.url)

        if link.year != year or link.month != month:
            continue
        if looks_like_nav_title(link.title, min_title_chars, nav_phrases):
            discarded += 1
            continue
        articles.append(Article(title=link.title, link=link.url, published_at=link.published_at, source="archive"))
    return articles, discarded


async def scrape_archive_day(
    client: HttpClient,
    base_url: str,
    year: int,
    month: int,
    day: int,
    *,
    max_pages: int = 1,
    min_title_chars: int = 10,
    nav_phrases: tuple[str, ...] = NAV_PHRASES,
    pattern: LinkPattern = DATED_PATH_PATTERN,
    logger: logging.Logger | None = None,
) -> HarvestStats:
    """Fetch one day's archive page, plus /2../max_pages until a page comes back empty."""

    stats = HarvestStats()
    day_url = archive_day_url(base_url, year, month, day)

    for page in range(1, max(1, max_pages) + 1):
        url = day_url if page == 1 else f"{day_url}/{page}"
        res = await client.fetch(url)
        if not res.ok:
            stats.pages_failed += 1
            log_event(logger, f"  Failed to fetch {url} ({res.error})", level=logging.DEBUG, url=url, status=res.status)
            break
        stats.pages_fetched += 1

        articles, discarded = extract_archive_articles(
            res.body or "",
            base_url,
            year,
            month,
            min_title_chars=min_title_chars,
            nav_phrases=nav_phrases,
            pattern=pattern,
        )
        stats.discarded += discarded
        stats.articles.extend(articles)
        log_event(logger, f"  Scraped {url}: {len(articles)} articles", level=logging.DEBUG, url=url, count=len(articles))

        if not articles:
            break

    return stats


async def harvest_archive_pages(
    client: HttpClient,
    base_url: str,
    start_year: int,
    end_year: int,
    *,
    today: date,
    sample_days: Sequence[int] = SAMPLE_DAYS,
    max_pages: int = 1,
    min_title_chars: int = 10,
    nav_phrases: tuple[str, ...] = NAV_PHRASES,
    pattern: LinkPattern = DATED_PATH_PATTERN,
    deadline: float | None = None,
    logger: logging.Logger | None = None,
) -> HarvestStats:
    plan = archive_plan(start_year, end_year, today, sample_days)
    log_event(logger, f"  Archive plan: {len(plan)} day pages", level=logging.DEBUG, count=len(plan))

    results = await gather_within(
        (
            scrape_archive_day(
                client,
                base_url,
                y,
                m,
                d,
                max_pages=max_pages,
                min_title_chars=min_title_chars,
                nav_phrases=nav_phrases,
                pattern=pattern,
                logger=logger,
            )
            for (y, m, d) in plan
        ),
        deadline,
    )

    # merge in plan order so the output does not depend on scheduling
    stats = HarvestStats()
    skipped = 0
    for r in results:
        if r is None:
            skipped += 1
            continue
        stats.merge(r)

    if skipped:
        log_event(logger, f"  Deadline reached, {skipped} archive days not scraped", level=logging.WARNING, count=skipped)
    return stats
