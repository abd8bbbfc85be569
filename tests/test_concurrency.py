from __future__ import annotations

import asyncio

from news_archive_scraper.concurrency import deadline_after, gather_within


async def _value(v: int, delay: float) -> int:
    await asyncio.sleep(delay)
    return v


def test_results_keep_input_order():
    async def run():
        return await gather_within([_value(1, 0.03), _value(2, 0.0), _value(3, 0.01)])

    assert asyncio.run(run()) == [1, 2, 3]


def test_unfinished_work_is_cancelled_at_the_deadline():
    async def run():
        return await gather_within([_value(1, 0.0), _value(2, 5.0)], deadline_after(0.1))

    assert asyncio.run(run()) == [1, None]


def test_empty_input():
    assert asyncio.run(gather_within([])) == []
