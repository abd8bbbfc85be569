from __future__ import annotations

import math
from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from news_archive_scraper.cache import ResultCache
from news_archive_scraper.config import load_config
from news_archive_scraper.logging_utils import setup_logging
from news_archive_scraper.pipeline import run_scrape
from news_archive_scraper.storage import export_articles
from news_archive_scraper.types import Article

app = typer.Typer(add_completion=False)
console = Console()


def clamp_years(start_year: int | None, end_year: int | None, min_year: int, current_year: int) -> tuple[int, int]:
    """Clamp a requested range to [min_year, current_year] with start <= end."""

    start = min_year if start_year is None else start_year
    end = current_year if end_year is None else end_year
    start = max(min_year, min(start, current_year))
    end = max(start, min(end, current_year))
    return start, end


def paginate(items: list[Article], page: int, per_page: int) -> tuple[list[Article], int, int]:
    """Return the slice for a 1-based page, the page actually used and the page count."""

    per_page = max(1, per_page)
    total_pages = max(1, math.ceil(len(items) / per_page))
    page = min(max(1, page), total_pages)
    offset = (page - 1) * per_page
    return items[offset : offset + per_page], page, total_pages


def _render(articles: list[Article], page: int, total_pages: int, total: int, from_cache: bool) -> None:
    table = Table(title=f"Articles (page {page}/{total_pages}, {total} total{', cached' if from_cache else ''})")
    table.add_column("Date", no_wrap=True)
    table.add_column("Title")
    table.add_column("Link", overflow="fold")
    for a in articles:
        table.add_row(a.date_formatted, a.title, a.link)
    console.print(table)


@app.callback()
def main() -> None:
    """Aggregate article titles and links for a news site over a year range."""


@app.command()
def scrape(
    start_year: int | None = typer.Option(None, "--start-year", "-s", help="First year to include."),
    end_year: int | None = typer.Option(None, "--end-year", "-e", help="Last year to include."),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Result page to display."),
    per_page: int = typer.Option(50, "--per-page", min=1, help="Articles per page."),
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the cache and scrape again."),
    config: Path | None = typer.Option(Path("config.yaml"), "--config", "-c", help="Optional YAML config."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Export all results (.csv, .json, .parquet)."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Disable progress logging."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    """Scrape (or load from cache) the articles for a year range."""

    cfg = load_config(config)
    log_cfg = cfg.raw.get("logging", {}) or {}
    logger = setup_logging(
        level=log_level or str(log_cfg.get("level", "INFO")),
        console=bool(log_cfg.get("console", True)) and not quiet,
    )

    start, end = clamp_years(start_year, end_year, cfg.min_year, date.today().year)

    cache = ResultCache(cfg.cache_dir, cfg.cache_ttl_seconds)
    articles = cache.get(start, end, force=refresh)
    from_cache = articles is not None
    if articles is None:
        articles = run_scrape(start, end, cfg=cfg, logger=logger)
        cache.put(start, end, articles)

    if output is not None:
        written = export_articles(output, articles)
        console.print(f"Exported {len(articles)} articles to {written}")

    shown, page, total_pages = paginate(articles, page, per_page)
    _render(shown, page, total_pages, len(articles), from_cache)


if __name__ == "__main__":
    app()
