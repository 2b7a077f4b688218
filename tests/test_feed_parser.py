"""Tests for feed fetching and parsing."""

import asyncio

import httpx
import pytest

from conftest import SAMPLE_EMPTY_RSS_XML, SAMPLE_NOT_A_FEED
from rssfeed_notifier.extractor import extract_content
from rssfeed_notifier.feed_parser import FetchError, ParseError, fetch_feed, parse_feed
from rssfeed_notifier.formatter import format_notification
from rssfeed_notifier.models import ExtractContent, FeedRecord, Notification


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_parse_rss_keeps_feed_order(sample_rss_xml):
    items = parse_feed(sample_rss_xml)

    assert [i.guid for i in items] == ["g3", "g2", "g1"]
    assert items[1].title == "Second Article"
    assert items[1].link == "https://example.com/article-2"
    assert items[1].description == "Description of the second article"
    assert items[0].description == '<p><img src="http://x/y.png" alt="pic"></p>'


def test_parse_keeps_relative_image_urls():
    data = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xml:base="https://example.com/blog/">
  <channel>
    <title>Relative</title>
    <link>https://example.com/blog/</link>
    <description>Relative links</description>
    <item>
      <title>Pic</title>
      <guid>r1</guid>
      <description>&lt;img class="wide" src="/img/a.png"&gt;</description>
    </item>
  </channel>
</rss>"""

    [item] = parse_feed(data)

    assert extract_content(item.description, ExtractContent.FIND_IMAGE) == "/img/a.png"


def test_parsed_item_formats_with_first_image(sample_rss_xml):
    items = parse_feed(sample_rss_xml)
    record = FeedRecord(url="https://example.com/feed", send_to=1, extract_content=ExtractContent.FIND_IMAGE)

    text = format_notification(Notification.from_item(items[0]), 4242, record)

    assert text == "[4242] Third Article\nhttp://x/y.png\nhttps://example.com/article-3"


def test_parse_atom(sample_atom_xml):
    items = parse_feed(sample_atom_xml)

    assert len(items) == 1
    assert items[0].guid == "urn:uuid:entry-1"
    assert items[0].link == "https://example.com/entry-1"
    assert items[0].description == "Summary of entry 1"


def test_parse_empty_feed_is_not_an_error():
    assert parse_feed(SAMPLE_EMPTY_RSS_XML) == []


def test_parse_rejects_non_feed():
    with pytest.raises(ParseError):
        parse_feed(SAMPLE_NOT_A_FEED)


def test_fetch_returns_body(sample_rss_xml):
    def handler(request):
        assert str(request.url) == "https://example.com/feed.xml"
        return httpx.Response(200, content=sample_rss_xml)

    async def run():
        async with _client(handler) as client:
            return await fetch_feed("https://example.com/feed.xml", client=client)

    assert asyncio.run(run()) == sample_rss_xml


@pytest.mark.parametrize("status", [401, 403, 404, 500])
def test_fetch_error_status(status):
    async def run():
        async with _client(lambda request: httpx.Response(status)) as client:
            await fetch_feed("https://example.com/feed.xml", client=client)

    with pytest.raises(FetchError):
        asyncio.run(run())


def test_fetch_network_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def run():
        async with _client(handler) as client:
            await fetch_feed("https://example.com/feed.xml", client=client)

    with pytest.raises(FetchError, match="Could not reach URL"):
        asyncio.run(run())


@pytest.mark.parametrize("url", ["not a url", "ftp://example.com/feed", "https://"])
def test_fetch_invalid_url(url):
    with pytest.raises(FetchError, match="Invalid URL format"):
        asyncio.run(fetch_feed(url))
