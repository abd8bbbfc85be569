from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from urllib.parse import urlparse

import pytest

from news_archive_scraper.archive import archive_day_url
from news_archive_scraper.config import make_config
from news_archive_scraper.pipeline import scrape_site

from fakes import BASE_URL, FakeClient, anchors_page


TODAY = date(2025, 6, 15)

RSS_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel><title>Example</title><link>https://www.example-news.com</link><description>x</description>
  <item>
    <title>Feed</title>
    <link>https://www.example-news.com/2023/3/4/shared-story</link>
    <pubDate>Sat, 04 Mar 2023 12:00:00 +0000</pubDate>
  </item>
  <item>
    <title>Feed story outside the range</title>
    <link>https://www.example-news.com/2021/5/5/too-old</link>
    <pubDate>Wed, 05 May 2021 12:00:00 +0000</pubDate>
  </item>
</channel></rss>
"""


def _site_pages() -> dict[str, str]:
    return {
        f"{BASE_URL}/rss/index.xml": RSS_BODY,
        archive_day_url(BASE_URL, 2023, 3, 4): anchors_page(
            ("/2023/3/4/shared-story", "Archive title for the shared story"),
            ("/2023/3/4/archive-only", "Story only found in the archive"),
            ("/2023/3/4/sixers", "Sixers"),
        ),
        archive_day_url(BASE_URL, 2023, 11, 1): anchors_page(
            ("/2023/11/1/november", "A November archive story"),
        ),
    }


def test_feed_entry_wins_and_results_are_sorted(cfg, logger):
    client = FakeClient(_site_pages())

    out = asyncio.run(scrape_site(2023, 2023, cfg=cfg, logger=logger, today=TODAY, client=client))

    assert [a.title for a in out] == [
        "A November archive story",
        "Feed",
        "Story only found in the archive",
    ]
    shared = out[1]
    assert shared.source == "feed"
    assert shared.published_at == datetime(2023, 3, 4, 12, tzinfo=timezone.utc)


def test_returned_articles_satisfy_the_output_invariants(cfg, logger):
    client = FakeClient(_site_pages())
    out = asyncio.run(scrape_site(2023, 2023, cfg=cfg, logger=logger, today=TODAY, client=client))

    lo = datetime(2023, 1, 1, tzinfo=timezone.utc)
    hi = datetime(2023, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    for a in out:
        assert a.title
        assert urlparse(a.link).scheme in {"http", "https"} and urlparse(a.link).netloc
        assert lo <= a.published_at <= hi
    assert all(out[i].date >= out[i + 1].date for i in range(len(out) - 1))


def test_old_range_skips_listing_pages(cfg, logger):
    client = FakeClient({})
    asyncio.run(scrape_site(2023, 2023, cfg=cfg, logger=logger, today=TODAY, client=client))

    assert BASE_URL not in client.calls
    assert f"{BASE_URL}/archives" not in client.calls
    archive_calls = [u for u in client.calls if u.startswith(f"{BASE_URL}/archives/")]
    assert len(archive_calls) == 120
    assert len(client.calls) == len(cfg.feed_urls) + 120


def test_recent_range_runs_listing_pages(cfg, logger):
    client = FakeClient({})
    asyncio.run(scrape_site(2024, 2024, cfg=cfg, logger=logger, today=TODAY, client=client))

    assert BASE_URL in client.calls
    assert f"{BASE_URL}/archives?page=10" in client.calls


def test_listing_stage_runs_after_feeds_and_before_archive(cfg, logger):
    client = FakeClient({})
    asyncio.run(scrape_site(2025, 2025, cfg=cfg, logger=logger, today=TODAY, client=client))

    n_feeds = len(cfg.feed_urls)
    assert client.calls[:n_feeds] == cfg.feed_urls
    assert client.calls[n_feeds] == BASE_URL
    assert all(u.startswith(f"{BASE_URL}/archives/") for u in client.calls[n_feeds + 12 :])


def test_unreachable_site_returns_empty_list(cfg, logger):
    client = FakeClient(fail_all=True)
    out = asyncio.run(scrape_site(2022, 2025, cfg=cfg, logger=logger, today=TODAY, client=client))
    assert out == []


def test_swapped_bounds_are_rejected(cfg):
    with pytest.raises(ValueError):
        asyncio.run(scrape_site(2025, 2023, cfg=cfg, client=FakeClient({})))


class _SlowClient(FakeClient):
    async def fetch(self, url):
        if "/archives/" in url:
            await asyncio.sleep(10)
        return await super().fetch(url)


def test_deadline_returns_partial_results(logger):
    cfg = make_config({"site": {"base_url": BASE_URL}, "pipeline": {"deadline_seconds": 0.2}})
    client = _SlowClient(_site_pages())

    out = asyncio.run(scrape_site(2023, 2023, cfg=cfg, logger=logger, today=TODAY, client=client))

    assert [a.title for a in out] == ["Feed"]
