from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import aiohttp

from news_archive_scraper.config import Config


@dataclass(frozen=True)
class FetchResult:
    url: str
    status: Optional[int]
    body: Optional[str]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == 200 and self.body is not None


class DomainRateLimiter:
    """Simple per-domain token bucket implemented with asyncio primitives."""

    def __init__(self, max_requests_per_period: int, period_seconds: float) -> None:
        self._max = max_requests_per_period
        self._period = period_seconds
        self._domain_locks: dict[str, asyncio.Lock] = {}
        self._domain_times: dict[str, list[float]] = {}

    async def acquire(self, url: str) -> None:
        if self._max <= 0 or self._period <= 0:
            return
        domain = urlparse(url).netloc.lower()
        lock = self._domain_locks.setdefault(domain, asyncio.Lock())
        loop = asyncio.get_running_loop()

        while True:
            async with lock:
                now = loop.time()
                times = self._domain_times.setdefault(domain, [])
                cutoff = now - self._period
                while times and times[0] < cutoff:
                    times.pop(0)

                if len(times) < self._max:
                    times.append(now)
                    return

                # wait until the oldest token expires
                wait_for = (times[0] + self._period) - now

            await asyncio.sleep(max(0.0, wait_for))


class HttpClient:
    """Single-shot GET with a fixed transport policy.

    Every failure (transport error, timeout, non-200 status) comes back as a
    failed FetchResult; nothing is raised to the caller and nothing is retried.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        limiter: DomainRateLimiter,
        semaphore: asyncio.Semaphore,
        user_agent: str,
        timeout_seconds: float,
        headers: dict[str, str] | None = None,
        verify_tls: bool = True,
    ) -> None:
        self._session = session
        self._limiter = limiter
        self._sem = semaphore
        self._headers = {str(k): str(v) for k, v in (headers or {}).items()}
        self._headers["User-Agent"] = user_agent
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._ssl = bool(verify_tls)

    async def fetch(self, url: str) -> FetchResult:
        await self._limiter.acquire(url)
        async with self._sem:
            try:
                async with self._session.get(
                    url,
                    headers=self._headers,
                    timeout=self._timeout,
                    allow_redirects=True,
                    ssl=self._ssl,
                ) as r:
                    if r.status != 200:
                        return FetchResult(url=url, status=r.status, body=None, error=f"HTTP_{r.status}")
                    body = await r.text(errors="ignore")
                    return FetchResult(url=url, status=r.status, body=body)
            except asyncio.CancelledError:
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeError) as exc:
                return FetchResult(url=url, status=None, body=None, error=type(exc).__name__)


def build_connector(cfg: Config) -> aiohttp.TCPConnector:
    return aiohttp.TCPConnector(limit=int(cfg.raw["http"].get("max_connections", 10)))


def build_client(session: aiohttp.ClientSession, cfg: Config) -> HttpClient:
    http_cfg = cfg.raw["http"]
    rl_cfg = cfg.raw["rate_limit"]
    limiter = DomainRateLimiter(
        max_requests_per_period=int(rl_cfg["max_requests_per_period"]),
        period_seconds=float(rl_cfg["period_seconds"]),
    )
    sem = asyncio.Semaphore(int(cfg.raw["concurrency"]["max_in_flight_requests"]))
    return HttpClient(
        session=session,
        limiter=limiter,
        semaphore=sem,
        user_agent=str(http_cfg["user_agent"]),
        timeout_seconds=float(http_cfg["timeout_seconds"]),
        headers=dict(http_cfg.get("headers") or {}),
        verify_tls=bool(http_cfg.get("verify_tls", True)),
    )
