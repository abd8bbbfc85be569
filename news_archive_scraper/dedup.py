from __future__ import annotations

from datetime import datetime, timezone

from news_archive_scraper.types import Article


def dedup_by_link(articles: list[Article]) -> list[Article]:
    """Keep the first Article seen for each link, preserving input order."""

    seen: set[str] = set()
    unique: list[Article] = []
    for a in articles:
        if a.link in seen:
            continue
        seen.add(a.link)
        unique.append(a)
    return unique


def year_range_bounds(start_year: int, end_year: int) -> tuple[datetime, datetime]:
    start = datetime(start_year, 1, 1, tzinfo=timezone.utc)
    end = datetime(end_year, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    return start, end


def filter_by_year_range(articles: list[Article], start_year: int, end_year: int) -> list[Article]:
    start, end = year_range_bounds(start_year, end_year)
    return [a for a in articles if start <= a.published_at <= end]


def sort_by_date_desc(articles: list[Article]) -> list[Article]:
    return sorted(articles, key=lambda a: a.published_at, reverse=True)
