from __future__ import annotations

import asyncio
import logging
from datetime import date

import aiohttp

from news_archive_scraper.archive import harvest_archive_pages
from news_archive_scraper.concurrency import deadline_after
from news_archive_scraper.config import Config, make_config
from news_archive_scraper.dedup import dedup_by_link, filter_by_year_range, sort_by_date_desc
from news_archive_scraper.http import HttpClient, build_client, build_connector
from news_archive_scraper.latest import harvest_latest_pages, touches_recent_years
from news_archive_scraper.logging_utils import log_event
from news_archive_scraper.rss import harvest_feeds
from news_archive_scraper.types import Article, HarvestStats


def _report(logger: logging.Logger | None, stage: str, stats: HarvestStats) -> None:
    log_event(
        logger,
        f"{stage}: Found {len(stats.articles)} articles "
        f"(pages ok={stats.pages_fetched} failed={stats.pages_failed} discarded={stats.discarded})",
        stage=stage,
        count=len(stats.articles),
        pages_fetched=stats.pages_fetched,
        pages_failed=stats.pages_failed,
        discarded=stats.discarded,
    )


async def _scrape_with_client(
    client: HttpClient,
    cfg: Config,
    start_year: int,
    end_year: int,
    today: date,
    logger: logging.Logger | None,
) -> list[Article]:
    base_url = cfg.base_url
    deadline = deadline_after(cfg.deadline_seconds)
    articles: list[Article] = []
    pages_fetched = 0

    log_event(logger, f"Starting scrape from {start_year} to {end_year}", start_year=start_year, end_year=end_year)

    # Stages run one after another: dedup is first-wins, so feed entries
    # must be merged before listing and archive entries.
    log_event(logger, "Fetching RSS feeds...")
    feeds = await harvest_feeds(client, cfg.feed_urls, base_url, deadline=deadline, logger=logger)
    articles.extend(feeds.articles)
    pages_fetched += feeds.pages_fetched
    _report(logger, "RSS", feeds)

    if touches_recent_years(end_year, today):
        log_event(logger, "Recent year detected - scraping latest pages...")
        latest = await harvest_latest_pages(
            client,
            base_url,
            today=today,
            max_pages=int(cfg.raw["latest"]["max_pages"]),
            min_title_chars=cfg.min_title_chars,
            deadline=deadline,
            logger=logger,
        )
        articles.extend(latest.articles)
        pages_fetched += latest.pages_fetched
        _report(logger, "Latest pages", latest)

    log_event(logger, "Scraping archive pages...")
    archive = await harvest_archive_pages(
        client,
        base_url,
        start_year,
        end_year,
        today=today,
        sample_days=[int(d) for d in cfg.raw["archive"]["sample_days"]],
        max_pages=int(cfg.raw["archive"].get("max_pages", 1)),
        min_title_chars=cfg.min_title_chars,
        nav_phrases=cfg.nav_phrases,
        deadline=deadline,
        logger=logger,
    )
    articles.extend(archive.articles)
    pages_fetched += archive.pages_fetched
    _report(logger, "Archive", archive)

    if pages_fetched == 0:
        log_event(logger, f"No page could be fetched from {base_url}", level=logging.WARNING, url=base_url)

    articles = dedup_by_link(articles)
    log_event(logger, f"Total unique: {len(articles)}", count=len(articles))

    articles = filter_by_year_range(articles, start_year, end_year)
    log_event(logger, f"After year filter: {len(articles)}", count=len(articles))

    return sort_by_date_desc(articles)


async def scrape_site(
    start_year: int,
    end_year: int,
    *,
    cfg: Config | None = None,
    logger: logging.Logger | None = None,
    today: date | None = None,
    client: HttpClient | None = None,
) -> list[Article]:
    """Collect articles published between start_year and end_year, newest first.

    Harvests feeds, then listing pages (recent ranges only), then the per-day
    archive. Fetch and parse failures only shrink the result; if nothing can
    be fetched the result is an empty list.
    """

    if start_year > end_year:
        raise ValueError(f"start_year {start_year} is after end_year {end_year}")

    cfg = cfg or make_config()
    today = today or date.today()

    if client is not None:
        return await _scrape_with_client(client, cfg, start_year, end_year, today, logger)

    async with aiohttp.ClientSession(connector=build_connector(cfg)) as session:
        return await _scrape_with_client(build_client(session, cfg), cfg, start_year, end_year, today, logger)


def run_scrape(
    start_year: int,
    end_year: int,
    *,
    cfg: Config | None = None,
    logger: logging.Logger | None = None,
    today: date | None = None,
) -> list[Article]:
    return asyncio.run(scrape_site(start_year, end_year, cfg=cfg, logger=logger, today=today))
