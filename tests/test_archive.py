from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone

from news_archive_scraper.archive import (
    SAMPLE_DAYS,
    archive_day_url,
    archive_days,
    archive_plan,
    extract_archive_articles,
    harvest_archive_pages,
    scrape_archive_day,
)

from fakes import BASE_URL, FakeClient, anchors_page


TODAY = date(2025, 6, 15)


def test_past_year_samples_ten_days_per_month():
    plan = archive_plan(2023, 2023, TODAY)
    assert len(plan) == 120
    assert plan[0] == (2023, 12, 1)
    assert plan[-1] == (2023, 1, 28)
    assert {d for (_, _, d) in plan} == set(SAMPLE_DAYS)


def test_current_month_is_fully_covered_and_future_months_skipped():
    plan = archive_plan(2025, 2025, TODAY)
    june = [d for (y, m, d) in plan if m == 6]
    assert june == list(range(1, 16))
    assert not [p for p in plan if p[1] > 6]
    assert [d for (y, m, d) in plan if m == 5] == list(SAMPLE_DAYS)


def test_current_month_only_when_it_is_january():
    plan = archive_plan(2026, 2026, date(2026, 1, 3))
    assert plan == [(2026, 1, 1), (2026, 1, 2), (2026, 1, 3)]


def test_future_years_have_no_days():
    assert archive_days(2030, 5, TODAY) == []


def test_day_url_is_not_zero_padded():
    assert archive_day_url(BASE_URL + "/", 2023, 3, 4) == f"{BASE_URL}/archives/2023/3/4"


def test_extract_keeps_only_target_month_and_real_titles():
    html = anchors_page(
        ("/2023/3/4/march-story", "A story published in March"),
        ("/2023/3/4/march-story", "Duplicate link later on the page"),
        ("/2023/2/27/february-story", "Sidebar story from February"),
        ("/2023/3/5/tiny", "Tiny"),
        ("/2023/3/6/next", "Next page of March stories"),
        ("/2023/3/7/view", "VIEW ALL posts this month"),
    )
    articles, discarded = extract_archive_articles(html, BASE_URL, 2023, 3)

    assert [a.title for a in articles] == ["A story published in March"]
    assert articles[0].published_at == datetime(2023, 3, 4, tzinfo=timezone.utc)
    assert articles[0].source == "archive"
    assert discarded == 3


def test_six_character_archive_title_is_discarded():
    html = anchors_page(("/2023/3/4/sixers", "Sixers"))
    articles, discarded = extract_archive_articles(html, BASE_URL, 2023, 3)
    assert articles == []
    assert discarded == 1


def test_day_pagination_follows_until_empty():
    day = archive_day_url(BASE_URL, 2023, 3, 4)
    client = FakeClient(
        {
            day: anchors_page(("/2023/3/4/first", "First page archive story")),
            f"{day}/2": anchors_page(("/2023/3/3/second", "Second page archive story")),
            f"{day}/3": anchors_page(("/about", "Nothing dated here at all")),
        }
    )
    stats = asyncio.run(scrape_archive_day(client, BASE_URL, 2023, 3, 4, max_pages=5))
    assert client.calls == [day, f"{day}/2", f"{day}/3"]
    assert len(stats.articles) == 2


def test_harvest_requests_every_planned_day_once():
    client = FakeClient(
        {archive_day_url(BASE_URL, 2023, 12, 1): anchors_page(("/2023/12/1/only", "The only archive story found"))}
    )
    stats = asyncio.run(harvest_archive_pages(client, BASE_URL, 2023, 2023, today=TODAY))

    assert len(client.calls) == 120
    assert len(set(client.calls)) == 120
    assert stats.pages_fetched == 1
    assert stats.pages_failed == 119
    assert [a.title for a in stats.articles] == ["The only archive story found"]
