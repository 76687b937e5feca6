from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest
import requests

from news_api.clients.bbc_client import BBCClient
from news_api.clients.sky_client import SkyClient
from news_api.core.exceptions.exceptions import (
    ExternalAPIError,
    InvalidParameterError,
    ParsingError,
)
from news_api.schemas.news import PROVIDER_BBC, PROVIDER_SKY, Feed, Item

SKY_URL = "https://feeds.skynews.com/feeds/rss"
BBC_URL = "https://feeds.bbci.co.uk/news"

SKY_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>UK News - Sky News</title>
    <link>https://news.sky.com/uk</link>
    <description>Sky News delivers breaking news</description>
    <language>en-gb</language>
    <copyright>Copyright Sky UK</copyright>
    <lastBuildDate>Mon, 01 Jan 2024 10:00:00 GMT</lastBuildDate>
    <ttl>5</ttl>
    <item>
      <title>First story</title>
      <link>https://news.sky.com/story/1</link>
      <description>Story one</description>
      <pubDate>Mon, 01 Jan 2024 09:30:00 GMT</pubDate>
      <media:thumbnail url="https://e3.365dm.com/1.jpg" width="70" height="70"/>
    </item>
    <item>
      <title>Second story</title>
      <link>https://news.sky.com/story/2</link>
      <description>Story two</description>
      <pubDate>Mon, 01 Jan 2024 08:15:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""

BBC_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>BBC News - UK</title>
    <description>BBC News - UK</description>
    <link>https://www.bbc.co.uk/news/uk</link>
    <image>
      <url>https://news.bbcimg.co.uk/nol/shared/img/bbc_news_120x60.gif</url>
      <title>BBC News - UK</title>
      <link>https://www.bbc.co.uk/news/uk</link>
    </image>
    <lastBuildDate>Mon, 01 Jan 2024 10:00:00 GMT</lastBuildDate>
    <copyright>Copyright: (C) British Broadcasting Corporation</copyright>
    <language>en-gb</language>
    <ttl>15</ttl>
    <item>
      <title>BBC story</title>
      <description>Something happened</description>
      <link>https://www.bbc.co.uk/news/uk-1</link>
      <guid isPermaLink="true">https://www.bbc.co.uk/news/uk-1</guid>
      <pubDate>Mon, 01 Jan 2024 07:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""


def _response(status_code: int = 200, body: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    return response


def _stub_session(monkeypatch: pytest.MonkeyPatch, client, *results) -> List[Dict[str, Any]]:
    """Make client.session.request return (or raise) `results` in order; returns the recorded calls."""
    calls: List[Dict[str, Any]] = []
    pending = list(results)

    def fake_request(**kwargs):
        calls.append(kwargs)
        result = pending.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(client.session, "request", fake_request)
    return calls


@pytest.mark.parametrize("url", ["", None, "not a url"])
@pytest.mark.parametrize("client_cls", [BBCClient, SkyClient])
def test_new_with_invalid_url(client_cls, url):
    with pytest.raises(InvalidParameterError) as exc:
        client_cls(url)
    assert exc.value.parameter == "url"


def test_new_success():
    client = SkyClient(SKY_URL, timeout=2.5)

    assert client.base_url == SKY_URL
    assert client.timeout == 2.5
    assert client.service == PROVIDER_SKY
    assert callable(client.fetch)


def test_fetch_requests_category_document(monkeypatch):
    client = SkyClient(SKY_URL + "/", timeout=1.0)
    calls = _stub_session(monkeypatch, client, _response(200, SKY_XML))

    client.fetch("uk")

    assert len(calls) == 1
    assert calls[0]["method"] == "GET"
    assert calls[0]["url"] == f"{SKY_URL}/uk.xml"
    assert calls[0]["timeout"] == 1.0


def test_sky_fetch_maps_feed(monkeypatch):
    client = SkyClient(SKY_URL)
    _stub_session(monkeypatch, client, _response(200, SKY_XML))

    feed = client.fetch("uk")

    assert feed == Feed(
        title="UK News - Sky News",
        description="Sky News delivers breaking news",
        link="https://news.sky.com/uk",
        language="en-gb",
        copyright="Copyright Sky UK",
        date_time=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
        ttl=5,
        items=[
            Item(
                category="uk",
                provider=PROVIDER_SKY,
                title="First story",
                link="https://news.sky.com/story/1",
                description="Story one",
                thumbnail="https://e3.365dm.com/1.jpg",
                date_time=datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc),
            ),
            Item(
                category="uk",
                provider=PROVIDER_SKY,
                title="Second story",
                link="https://news.sky.com/story/2",
                description="Story two",
                thumbnail="",
                date_time=datetime(2024, 1, 1, 8, 15, tzinfo=timezone.utc),
            ),
        ],
    )


def test_bbc_fetch_uses_channel_image_as_thumbnail(monkeypatch):
    client = BBCClient(BBC_URL)
    _stub_session(monkeypatch, client, _response(200, BBC_XML))

    feed = client.fetch("technology")

    assert feed.ttl == 15
    assert feed.title == "BBC News - UK"
    assert feed.language == "en-gb"
    assert len(feed.items) == 1
    item = feed.items[0]
    assert item.category == "technology"
    assert item.provider == PROVIDER_BBC
    assert item.title == "BBC story"
    assert item.thumbnail == "https://news.bbcimg.co.uk/nol/shared/img/bbc_news_120x60.gif"
    assert item.date_time == datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc)


def test_missing_ttl_defaults_to_zero(monkeypatch):
    client = SkyClient(SKY_URL)
    _stub_session(monkeypatch, client, _response(200, SKY_XML.replace("<ttl>5</ttl>", "")))

    assert client.fetch("uk").ttl == 0


def test_fetch_request_error(monkeypatch):
    client = SkyClient(SKY_URL)
    _stub_session(monkeypatch, client, requests.exceptions.ConnectionError("connection refused"))

    with pytest.raises(ExternalAPIError) as exc:
        client.fetch("uk")

    assert "failed to do request" in str(exc.value)
    assert isinstance(exc.value.__cause__, requests.exceptions.ConnectionError)


def test_fetch_unexpected_status(monkeypatch):
    client = SkyClient(SKY_URL)
    _stub_session(monkeypatch, client, _response(418))

    with pytest.raises(ExternalAPIError) as exc:
        client.fetch("uk")

    assert "unexpected status code: 418" in str(exc.value)


@pytest.mark.parametrize("body", ["", "<html><body>maintenance</body></html>"])
def test_fetch_invalid_body(monkeypatch, body):
    client = BBCClient(BBC_URL)
    _stub_session(monkeypatch, client, _response(200, body))

    with pytest.raises(ParsingError) as exc:
        client.fetch("uk")

    assert "failed to unmarshal body" in str(exc.value)


def test_fetch_retries_server_errors_when_configured(monkeypatch):
    client = SkyClient(SKY_URL, max_retries=1)
    client.retry_delay = 0
    calls = _stub_session(monkeypatch, client, _response(503), _response(200, SKY_XML))

    feed = client.fetch("uk")

    assert len(calls) == 2
    assert len(feed.items) == 2


def test_fetch_is_not_retried_by_default(monkeypatch):
    client = SkyClient(SKY_URL)
    calls = _stub_session(monkeypatch, client, _response(503), _response(200, SKY_XML))

    with pytest.raises(ExternalAPIError):
        client.fetch("uk")

    assert len(calls) == 1


def test_fetch_truncated_body(monkeypatch):
    client = SkyClient(SKY_URL)
    truncated = SKY_XML[:SKY_XML.index("Second story")]
    _stub_session(monkeypatch, client, _response(200, truncated))

    with pytest.raises(ParsingError) as exc:
        client.fetch("uk")

    assert "failed to unmarshal body" in str(exc.value)
