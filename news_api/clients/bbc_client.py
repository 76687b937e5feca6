from news_api.clients.rss_feed_client import RSSFeedClient
from news_api.schemas.news import PROVIDER_BBC


class BBCClient(RSSFeedClient):
    provider_id = PROVIDER_BBC

    def _thumbnail(self, channel, entry):
        """ BBC items carry no image of their own, the channel logo is used """
        image = channel.get("image") or {}
        return image.get("href", "")
