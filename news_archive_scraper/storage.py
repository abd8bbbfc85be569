from __future__ import annotations

from pathlib import Path

import pandas as pd

from news_archive_scraper.types import Article


COLUMNS = ["title", "link", "date", "date_formatted"]


def articles_to_frame(articles: list[Article]) -> pd.DataFrame:
    rows = []
    for a in articles:
        d = a.to_dict()
        d["published_at"] = pd.to_datetime(a.published_at, utc=True)
        rows.append(d)
    return pd.DataFrame(rows, columns=COLUMNS + ["published_at"])


def write_frame(path: Path, df: pd.DataFrame) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        try:
            df.to_parquet(path, index=False)
            return path
        except ImportError:
            # fall back to CSV next to parquet
            csv_path = path.with_suffix(".csv")
            df.to_csv(csv_path, index=False, encoding="utf-8")
            return csv_path

    if suffix in {".json", ".jsonl"}:
        df.to_json(path, orient="records", lines=(suffix == ".jsonl"), date_format="iso", force_ascii=False)
        return path

    # default to csv
    df.to_csv(path, index=False, encoding="utf-8")
    return path


def export_articles(path: str | Path, articles: list[Article]) -> Path:
    return write_frame(Path(path), articles_to_frame(articles))
