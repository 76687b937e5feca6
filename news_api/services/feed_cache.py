import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock
from typing import Dict, Optional, Tuple

from news_api.core.exceptions.exceptions import InvalidParameterError
from news_api.jobs.scheduler import Clock
from news_api.schemas.news import Feed
from news_api.utils.log import app_logger


@dataclass(frozen=True)
class CacheEntry:
    feed: Feed
    expires_at: datetime


class FeedCache:
    """In-memory cache of fetched feeds keyed by (provider, category).

    Entries expire `feed.ttl` minutes after they were stored. Expiry is
    driven by wake-ups registered on the injected clock, one per key: a new
    `store` for a key replaces the pending wake-up of the previous one, and
    a wake-up only removes the entry it was scheduled for.

    The table lock is held around dict access and wake-up registration,
    never while an expiry callback runs.
    """

    def __init__(self, clock: Optional[Clock]):
        if clock is None:
            raise InvalidParameterError("clock")

        self._clock = clock
        self._lock = Lock()
        self._feeds: Dict[str, CacheEntry] = {}

    @staticmethod
    def _key(provider: str, category: str) -> str:
        # json keeps the pair unambiguous whatever characters the ids contain
        return json.dumps([provider, category])

    def get(self, provider: str, category: str) -> Tuple[Optional[Feed], bool]:
        key = self._key(provider, category)
        now = self._clock.now()

        with self._lock:
            entry = self._feeds.get(key)

        if entry is None or entry.expires_at <= now:
            return None, False
        return entry.feed, True

    def store(self, provider: str, category: str, feed: Feed) -> None:
        key = self._key(provider, category)
        ttl = timedelta(minutes=max(feed.ttl, 0))
        expires_at = self._clock.now() + ttl

        # entry and wake-up are replaced together, so the pending wake-up
        # for a key always carries the stored entry's deadline
        with self._lock:
            self._feeds[key] = CacheEntry(feed=feed.model_copy(deep=True), expires_at=expires_at)
            self._clock.after(ttl, lambda: self._expire(key, expires_at), key)

        app_logger.debug("cache.store", provider=provider, category=category, ttl_minutes=feed.ttl)

    def _expire(self, key: str, expires_at: datetime) -> None:
        with self._lock:
            entry = self._feeds.get(key)
            if entry is None or entry.expires_at != expires_at:
                return
            del self._feeds[key]
        app_logger.debug("cache.expired", key=key)

    def clear(self) -> None:
        with self._lock:
            for key in self._feeds:
                self._clock.cancel(key)
            self._feeds.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._feeds)
