from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class Article:
    title: str
    link: str
    published_at: datetime
    # "feed" | "latest" | "archive" | "cache"
    source: str = ""

    @property
    def date(self) -> int:
        return int(self.published_at.timestamp())

    @property
    def date_formatted(self) -> str:
        return self.published_at.strftime("%B %d, %Y")

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "date": self.date,
            "date_formatted": self.date_formatted,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any], source: str = "cache") -> "Article":
        published_at = datetime.fromtimestamp(int(d["date"]), tz=timezone.utc)
        return cls(title=str(d["title"]), link=str(d["link"]), published_at=published_at, source=source)


@dataclass
class HarvestStats:
    """Per-harvester counters reported to the diagnostic log."""

    pages_fetched: int = 0
    pages_failed: int = 0
    discarded: int = 0
    articles: list[Article] = field(default_factory=list)

    def merge(self, other: "HarvestStats") -> None:
        self.pages_fetched += other.pages_fetched
        self.pages_failed += other.pages_failed
        self.discarded += other.discarded
        self.articles.extend(other.articles)
