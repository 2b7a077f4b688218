"""Shared test fixtures for RSS Feed Notifier tests."""

import tempfile

import pytest

from rssfeed_notifier.delivery import DeliveryError
from rssfeed_notifier.models import FeedKey, FeedRecord
from rssfeed_notifier.store import FeedStore, StoreError


SAMPLE_RSS_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com</link>
    <description>A test RSS feed</description>
    <item>
      <title>Third Article</title>
      <link>https://example.com/article-3</link>
      <guid>g3</guid>
      <description>&lt;p&gt;&lt;img src="http://x/y.png" alt="pic"&gt;&lt;/p&gt;</description>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/article-2</link>
      <guid>g2</guid>
      <description>Description of the second article</description>
    </item>
    <item>
      <title>First Article</title>
      <link>https://example.com/article-1</link>
      <guid>g1</guid>
      <description>Description of the first article</description>
    </item>
  </channel>
</rss>"""

SAMPLE_ATOM_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Test Atom Feed</title>
  <link href="https://example.com"/>
  <subtitle>A test Atom feed</subtitle>
  <entry>
    <title>Atom Entry 1</title>
    <link href="https://example.com/entry-1"/>
    <id>urn:uuid:entry-1</id>
    <summary>Summary of entry 1</summary>
    <updated>2026-02-13T10:00:00Z</updated>
  </entry>
</feed>"""

SAMPLE_EMPTY_RSS_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Empty Feed</title>
    <link>https://example.com</link>
    <description>Nothing yet</description>
  </channel>
</rss>"""

SAMPLE_NOT_A_FEED = b"""<html>
  <body>This is not a feed</body>
</html>"""


class MemoryFeedStore(FeedStore):
    """In-memory store that can be told to fail on save."""

    def __init__(self):
        self.records: dict[FeedKey, FeedRecord] = {}
        self.fail_save = False
        self.saves = 0

    def load(self, key):
        record = self.records.get(key)
        if record is None:
            return None
        return FeedRecord.from_dict(record.to_dict())

    def save(self, key, record):
        if self.fail_save:
            raise StoreError("disk full")
        self.saves += 1
        self.records[key] = FeedRecord.from_dict(record.to_dict())

    def delete(self, key):
        return self.records.pop(key, None) is not None

    def list_keys(self):
        return list(self.records)


class RecordingSender:
    """Collects sent messages; texts containing a fail_on marker raise DeliveryError."""

    def __init__(self, fail_on: set[str] | None = None):
        self.sent: list[tuple[int, str]] = []
        self.fail_on = fail_on or set()

    async def send(self, recipient_id, text):
        if any(marker in text for marker in self.fail_on):
            raise DeliveryError("chat unreachable")
        self.sent.append((recipient_id, text))


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory."""
    with tempfile.TemporaryDirectory() as path:
        yield path


@pytest.fixture
def memory_store():
    return MemoryFeedStore()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def sample_rss_xml():
    """Sample valid RSS 2.0 XML with guids g3, g2, g1 (newest first)."""
    return SAMPLE_RSS_XML


@pytest.fixture
def sample_atom_xml():
    """Sample valid Atom XML."""
    return SAMPLE_ATOM_XML
