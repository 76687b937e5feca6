import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from news_api.core.exceptions.exceptions import (
    CategoryNotFoundError,
    FeedFetchError,
    InvalidParameterError,
    ProviderNotFoundError,
)
from news_api.schemas.news import PROVIDER_ALL, Feed, FeedResponse, Item
from news_api.utils.log import app_logger


class Provider(Protocol):
    def fetch(self, category: str) -> Feed:
        ...


class Cache(Protocol):
    def get(self, provider: str, category: str) -> Tuple[Optional[Feed], bool]:
        ...

    def store(self, provider: str, category: str, feed: Feed) -> None:
        ...


@dataclass(frozen=True)
class Registry:
    """Providers and categories a NewsService answers for.

    Iteration order of both is registration order, which is also the order
    of the sequential fan-out.
    """
    providers: Mapping[str, Provider] = field(default_factory=dict)
    categories: Sequence[str] = ()


class NewsService:
    """Aggregates provider feeds per category, consulting the cache first."""

    def __init__(self, cache: Optional[Cache], registry: Optional[Registry] = None):
        if cache is None:
            raise InvalidParameterError("cache")

        registry = registry or Registry()
        for provider in registry.providers.values():
            if provider is None:
                raise InvalidParameterError("provider")

        self.cache = cache
        self._providers: Dict[str, Provider] = dict(registry.providers)
        # dict keeps registration order and drops duplicates
        self._categories: Tuple[str, ...] = tuple(dict.fromkeys(registry.categories))

    @property
    def providers(self) -> Tuple[str, ...]:
        return tuple(self._providers)

    @property
    def categories(self) -> Tuple[str, ...]:
        return self._categories

    async def get_feed_by_category(self, provider: str, category: str,
                                   offset: int = 0, limit: int = 0) -> FeedResponse:
        """Items of one registered category, newest first, paginated."""
        if category not in self._categories:
            raise CategoryNotFoundError(category)
        self._check_provider(provider)

        items = await self._resolve_items(provider, category)

        return FeedResponse(
            category=category,
            provider=provider,
            items=self._paginate(self._sort(items), offset, limit),
            limit=limit,
            offset=offset,
        )

    async def get_feed(self, provider: str, offset: int = 0, limit: int = 0) -> FeedResponse:
        """Items of every registered category merged, newest first, paginated."""
        self._check_provider(provider)

        items: List[Item] = []
        for category in self._categories:
            items.extend(await self._resolve_items(provider, category))

        return FeedResponse(
            provider=provider,
            items=self._paginate(self._sort(items), offset, limit),
            limit=limit,
            offset=offset,
        )

    def _check_provider(self, provider: str) -> None:
        if provider != PROVIDER_ALL and provider not in self._providers:
            raise ProviderNotFoundError(provider)

    async def _resolve_items(self, provider: str, category: str) -> List[Item]:
        if provider == PROVIDER_ALL:
            items: List[Item] = []
            # first failure aborts the whole fan-out
            for name in self._providers:
                feed = await self._get_provider_feed(name, category)
                items.extend(feed.items)
            return items

        feed = await self._get_provider_feed(provider, category)
        return list(feed.items)

    async def _get_provider_feed(self, provider: str, category: str) -> Feed:
        news_provider = self._providers.get(provider)
        if news_provider is None:
            raise ProviderNotFoundError(provider)

        feed, ok = self.cache.get(provider, category)
        if ok:
            app_logger.debug("feed.cache_hit", provider=provider, category=category)
            return feed

        app_logger.debug("feed.cache_miss", provider=provider, category=category)
        try:
            feed = await asyncio.to_thread(news_provider.fetch, category)
        except Exception as e:
            raise FeedFetchError(provider, category, str(e)) from e

        self.cache.store(provider, category, feed)

        return feed

    @staticmethod
    def _sort(items: List[Item]) -> List[Item]:
        # stable: equal timestamps keep fetch order
        return sorted(items, key=lambda item: item.date_time, reverse=True)

    @staticmethod
    def _paginate(items: List[Item], offset: int, limit: int) -> List[Item]:
        offset = min(offset, len(items))
        if limit == 0:
            return items[offset:]

        end = min(offset + limit, len(items))
        return items[offset:end]
