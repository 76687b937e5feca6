from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

import feedparser
from feedparser.exceptions import CharacterEncodingOverride, NonXMLContentType

from news_api.clients.base_http_client import BaseHTTPClient
from news_api.core.exceptions.exceptions import ParsingError
from news_api.schemas.news import Feed, Item
from news_api.utils.log import app_logger

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_RECOVERABLE = (CharacterEncodingOverride, NonXMLContentType)


class RSSFeedClient(BaseHTTPClient):
    """Provider for an upstream serving one RSS document per category at `{base_url}/{category}.xml`.

    Subclasses set `provider_id` and decide where an item's thumbnail comes from.
    """

    provider_id: str = ""

    def __init__(self, base_url: str, timeout: float = 1.0, max_retries: int = 0):
        super().__init__(
            base_url=base_url,
            service=self.provider_id,
            timeout=timeout,
            max_retries=max_retries,
        )

    def fetch(self, category: str) -> Feed:
        """Fetch and parse the feed for `category`.

        Raises ExternalAPIError on transport failures or non-200 responses and
        ParsingError when the body is not an RSS document.
        """
        response = self.get(f"{quote(category, safe='')}.xml")

        parsed = feedparser.parse(response.content)
        reason = self._parse_failure(parsed)
        if reason is not None:
            app_logger.error("rss.parse_failed", provider=self.provider_id, category=category, error=str(reason))
            raise ParsingError(f"failed to unmarshal body: {reason}")

        feed = self._to_feed(parsed, category)
        app_logger.debug("rss.fetched", provider=self.provider_id, category=category, items=len(feed.items), ttl=feed.ttl)
        return feed

    @staticmethod
    def _parse_failure(parsed: feedparser.FeedParserDict) -> Optional[str]:
        """Why `parsed` cannot be trusted as a feed, or None when it can."""
        if not parsed.get("version"):
            return str(parsed.get("bozo_exception", "not an RSS document"))
        error = parsed.get("bozo_exception")
        # feedparser recovers from broken markup; only encoding notices are harmless
        if parsed.get("bozo") and not isinstance(error, _RECOVERABLE):
            return str(error)
        return None

    def _to_feed(self, parsed: feedparser.FeedParserDict, category: str) -> Feed:
        channel = parsed.feed
        items = [
            Item(
                category=category,
                provider=self.provider_id,
                title=entry.get("title", ""),
                link=entry.get("link", ""),
                description=entry.get("summary", ""),
                thumbnail=self._thumbnail(channel, entry),
                date_time=self._to_datetime(entry.get("published_parsed")),
            )
            for entry in parsed.entries
        ]

        return Feed(
            title=channel.get("title", ""),
            description=channel.get("subtitle", ""),
            link=channel.get("link", ""),
            language=channel.get("language", ""),
            copyright=channel.get("rights", ""),
            date_time=self._to_datetime(channel.get("updated_parsed") or channel.get("published_parsed")),
            ttl=self._to_ttl(channel.get("ttl")),
            items=items,
        )

    def _thumbnail(self, channel: feedparser.FeedParserDict, entry: feedparser.FeedParserDict) -> str:
        return ""

    @staticmethod
    def _to_datetime(value) -> datetime:
        # feedparser normalises every parsed date to a UTC struct_time
        if not value:
            return _EPOCH
        try:
            return datetime(*value[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            return _EPOCH

    @staticmethod
    def _to_ttl(value: Optional[str]) -> int:
        try:
            return max(int(str(value).strip()), 0)
        except (TypeError, ValueError):
            return 0
