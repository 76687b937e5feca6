from news_api.clients.rss_feed_client import RSSFeedClient
from news_api.schemas.news import PROVIDER_SKY


class SkyClient(RSSFeedClient):
    provider_id = PROVIDER_SKY

    def _thumbnail(self, channel, entry):
        """ first <media:thumbnail> of the item """
        thumbnails = entry.get("media_thumbnail") or []
        if not thumbnails:
            return ""
        return thumbnails[0].get("url", "")
