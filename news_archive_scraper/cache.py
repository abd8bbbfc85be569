from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Optional

from news_archive_scraper.types import Article


class ResultCache:
    """On-disk cache of scrape results, one JSON file per (start_year, end_year).

    An entry is fresh while its file is younger than ttl_seconds. Unreadable
    or malformed files are treated as misses.
    """

    def __init__(self, cache_dir: Path, ttl_seconds: int = 1800) -> None:
        self.cache_dir = Path(cache_dir)
        self.ttl_seconds = ttl_seconds

    def path_for(self, start_year: int, end_year: int) -> Path:
        return self.cache_dir / f"cache_articles_{start_year}_{end_year}.json"

    def is_fresh(self, start_year: int, end_year: int, now: float | None = None) -> bool:
        path = self.path_for(start_year, end_year)
        if not path.exists():
            return False
        now = time.time() if now is None else now
        return (now - path.stat().st_mtime) < self.ttl_seconds

    def get(self, start_year: int, end_year: int, *, force: bool = False, now: float | None = None) -> Optional[list[Article]]:
        if force or not self.is_fresh(start_year, end_year, now=now):
            return None
        path = self.path_for(start_year, end_year)
        try:
            with open(path, "r", encoding="utf-8") as f:
                rows = json.load(f)
            return [Article.from_dict(r) for r in rows]
        except (OSError, ValueError, KeyError, TypeError):
            return None

    def put(self, start_year: int, end_year: int, articles: list[Article]) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(start_year, end_year)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump([a.to_dict() for a in articles], f, ensure_ascii=False)
        tmp.replace(path)
        return path
