from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from news_api.jobs.scheduler import Clock
from news_api.schemas.news import Feed, Item
from news_api.services.feed_cache import FeedCache

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock(Clock):
    """Manually driven clock.

    Time only moves through `advance`, which fires every due wake-up on the
    calling thread in deadline order (registration order breaks ties).
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or BASE_TIME
        self._lock = Lock()
        self._seq = itertools.count()
        self._pending: Dict[str, Tuple[datetime, int, Callable[[], None]]] = {}

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def after(self, delay: timedelta, callback: Callable[[], None], key: str) -> None:
        with self._lock:
            self._pending[key] = (self._now + max(delay, timedelta(0)), next(self._seq), callback)

    def cancel(self, key: str) -> None:
        with self._lock:
            self._pending.pop(key, None)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def advance(self, delta: timedelta) -> None:
        with self._lock:
            self._now += delta
            due = sorted(
                (deadline, seq, key, callback)
                for key, (deadline, seq, callback) in self._pending.items()
                if deadline <= self._now
            )
            for _, _, key, _ in due:
                del self._pending[key]

        # callbacks take their own locks
        for _, _, _, callback in due:
            callback()


class StubProvider:
    """Provider double: returns a fixed feed (or raises) and records every call."""

    def __init__(self, feed: Optional[Feed] = None, error: Optional[Exception] = None):
        self.feed = feed or Feed()
        self.error = error
        self.calls: List[str] = []

    def fetch(self, category: str) -> Feed:
        self.calls.append(category)
        if self.error is not None:
            raise self.error
        return self.feed


def _make_item(title: str, minutes: int = 0, category: str = "uk", provider: str = "bbc") -> Item:
    return Item(
        category=category,
        provider=provider,
        title=title,
        link=f"https://example.com/{title}",
        date_time=BASE_TIME + timedelta(minutes=minutes),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(start=BASE_TIME)


@pytest.fixture
def cache(clock: FakeClock) -> FeedCache:
    return FeedCache(clock)


@pytest.fixture
def make_item():
    return _make_item


@pytest.fixture
def stub_provider():
    return StubProvider


@pytest.fixture
def fake_clock():
    return FakeClock
