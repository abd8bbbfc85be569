from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG: dict[str, Any] = {
    "site": {
        "base_url": "https://www.theverge.com",
        "min_year": 2022,
        "feed_paths": [
            "/rss/index.xml",
            "/rss/full.xml",
            "/tech/rss/index.xml",
            "/reviews/rss/index.xml",
            "/science/rss/index.xml",
            "/entertainment/rss/index.xml",
            "/policy/rss/index.xml",
            "/apple/rss/index.xml",
            "/google/rss/index.xml",
            "/microsoft/rss/index.xml",
            "/amazon/rss/index.xml",
            "/facebook/rss/index.xml",
            "/gaming/rss/index.xml",
            "/web/rss/index.xml",
            "/ai-artificial-intelligence/rss/index.xml",
        ],
    },
    "http": {
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "timeout_seconds": 30,
        "verify_tls": True,
        "max_connections": 10,
        "headers": {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Connection": "keep-alive",
            "Cache-Control": "no-cache",
        },
    },
    "concurrency": {"max_in_flight_requests": 4},
    "rate_limit": {"max_requests_per_period": 5, "period_seconds": 1.0},
    "latest": {"max_pages": 10},
    "archive": {
        "sample_days": [1, 4, 7, 10, 13, 16, 19, 22, 25, 28],
        "max_pages": 1,
    },
    "filters": {
        "min_title_chars": 10,
        "nav_phrases": ["next page", "previous", "load more", "view all"],
    },
    "pipeline": {"deadline_seconds": None},
    "cache": {"dir": ".cache", "ttl_seconds": 1800},
    "logging": {"level": "INFO", "console": True},
}


@dataclass(frozen=True)
class Config:
    raw: dict[str, Any]

    @property
    def base_url(self) -> str:
        return str(self.raw["site"]["base_url"]).rstrip("/")

    @property
    def feed_urls(self) -> list[str]:
        out: list[str] = []
        for p in self.raw["site"].get("feed_paths") or []:
            p = str(p)
            out.append(p if p.startswith("http") else self.base_url + "/" + p.lstrip("/"))
        return out

    @property
    def min_year(self) -> int:
        return int(self.raw["site"].get("min_year", 2022))

    @property
    def min_title_chars(self) -> int:
        return int(self.raw["filters"]["min_title_chars"])

    @property
    def nav_phrases(self) -> tuple[str, ...]:
        return tuple(str(x).lower() for x in (self.raw["filters"].get("nav_phrases") or []))

    @property
    def deadline_seconds(self) -> float | None:
        v = (self.raw.get("pipeline", {}) or {}).get("deadline_seconds")
        return None if v is None else float(v)

    @property
    def cache_dir(self) -> Path:
        return Path(str(self.raw["cache"]["dir"]))

    @property
    def cache_ttl_seconds(self) -> int:
        return int(self.raw["cache"]["ttl_seconds"])


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_yaml(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def make_config(overrides: dict[str, Any] | None = None) -> Config:
    raw = _deep_merge(DEFAULT_CONFIG, overrides or {})
    if not str((raw.get("site") or {}).get("base_url") or "").startswith(("http://", "https://")):
        raise ValueError("site.base_url must be an absolute http(s) URL")
    return Config(raw=raw)


def load_config(path: str | Path | None = None) -> Config:
    if path is None or not Path(path).exists():
        return make_config()
    return make_config(load_yaml(path))
