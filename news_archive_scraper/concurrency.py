from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, Optional, TypeVar

T = TypeVar("T")


def deadline_after(seconds: float | None) -> Optional[float]:
    """Absolute event-loop time `seconds` from now, or None for no deadline."""

    if seconds is None:
        return None
    return asyncio.get_running_loop().time() + float(seconds)


def time_left(deadline: float | None) -> Optional[float]:
    if deadline is None:
        return None
    return max(0.0, deadline - asyncio.get_running_loop().time())


def expired(deadline: float | None) -> bool:
    return deadline is not None and time_left(deadline) == 0.0


async def gather_within(aws: Iterable[Awaitable[T]], deadline: float | None = None) -> list[Optional[T]]:
    """Run awaitables concurrently and return their results in input order.

    Anything still running when the deadline passes is cancelled and shows up
    as None. Without a deadline this behaves like asyncio.gather.
    """

    tasks = [asyncio.ensure_future(a) for a in aws]
    if not tasks:
        return []

    done, pending = await asyncio.wait(tasks, timeout=time_left(deadline))
    for t in pending:
        t.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    return [t.result() if t in done else None for t in tasks]
