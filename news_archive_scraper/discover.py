from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol
from urllib.parse import urljoin

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class DatedLink:
    url: str
    title: str
    year: int
    month: int
    day: int

    @property
    def published_at(self) -> datetime:
        return datetime(self.year, self.month, self.day, tzinfo=timezone.utc)


class LinkPattern(Protocol):
    """Recognizes article hrefs and pulls (year, month, day) out of them."""

    def match(self, href: str) -> Optional[tuple[int, int, int]]:
        ...


class DatedPathPattern:
    """Matches the /{year}/{month}/{day}/{slug} article URL shape."""

    DEFAULT_REGEX = r"/(\d{4})/(\d{1,2})/(\d{1,2})/([^/?#]+)"

    def __init__(self, regex: str = DEFAULT_REGEX) -> None:
        self._re = re.compile(regex)

    def match(self, href: str) -> Optional[tuple[int, int, int]]:
        m = self._re.search(href or "")
        if not m:
            return None
        year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
        try:
            datetime(year, month, day)
        except ValueError:
            return None
        return year, month, day


DATED_PATH_PATTERN = DatedPathPattern()


def _absolute_url(base_url: str, href: str) -> Optional[str]:
    href = (href or "").strip()
    if not href or href.lower().startswith(("mailto:", "tel:", "javascript:")):
        return None
    if href.startswith(("http://", "https://")):
        return href
    try:
        return urljoin(base_url.rstrip("/") + "/", href)
    except ValueError:
        return None


def discover_dated_links(
    *,
    base_url: str,
    html: str,
    pattern: LinkPattern = DATED_PATH_PATTERN,
) -> list[DatedLink]:
    """Extract every anchor whose href matches the dated-article pattern.

    Links come back in document order and are not deduplicated; the
    harvesters decide which of them to keep.
    """

    soup = BeautifulSoup(html or "", "lxml")

    out: list[DatedLink] = []
    for a in soup.find_all("a", href=True):
        href = str(a.get("href") or "")
        ymd = pattern.match(href)
        if ymd is None:
            continue
        url = _absolute_url(base_url, href)
        if not url:
            continue
        title = a.get_text(" ", strip=True)
        out.append(DatedLink(url=url, title=title, year=ymd[0], month=ymd[1], day=ymd[2]))
    return out


def looks_like_nav_title(title: str, min_chars: int, nav_phrases: tuple[str, ...] = ()) -> bool:
    """True for anchor texts that are navigation, not article headlines."""

    t = (title or "").strip()
    if len(t) < min_chars:
        return True
    tl = t.lower()
    return any(p in tl for p in nav_phrases)
