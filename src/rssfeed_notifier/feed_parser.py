"""Fetching feeds over HTTP and parsing them with feedparser."""

from urllib.parse import urlparse

import feedparser
import httpx

from rssfeed_notifier.models import FetchedItem

DEFAULT_TIMEOUT = 30.0
USER_AGENT = "rssfeed-notifier/0.1"


class FetchError(Exception):
    """Raised when a feed cannot be downloaded."""


class ParseError(Exception):
    """Raised when downloaded bytes are not a usable RSS or Atom feed."""


async def fetch_feed(
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> bytes:
    """Download the raw bytes of a feed.

    Args:
        url: The feed URL.
        client: Optional shared client. A short-lived one is created if omitted.
        timeout: Request timeout in seconds, used only for a created client.

    Returns:
        The response body.

    Raises:
        FetchError: If the URL is invalid, unreachable, or answers with an error status.
    """
    _validate_url(url)

    if client is None:
        async with httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as own_client:
            return await _get(own_client, url)
    return await _get(client, url)


async def _get(client: httpx.AsyncClient, url: str) -> bytes:
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise FetchError(f"Could not reach URL: {type(e).__name__}: {e}") from e

    if response.status_code in (401, 403):
        raise FetchError(
            "Feed requires authentication. Ensure the URL is publicly accessible."
        )
    if response.status_code >= 400:
        raise FetchError(f"Could not reach URL: HTTP {response.status_code}")

    return response.content


def parse_feed(data: bytes) -> list[FetchedItem]:
    """Parse RSS or Atom bytes into items, keeping the feed's own order.

    Descriptions are returned as the feed published them, without
    feedparser's sanitizing or relative-URI rewriting.

    Raises:
        ParseError: If the bytes are not a recognizable feed.
    """
    parsed = feedparser.parse(data, sanitize_html=False, resolve_relative_uris=False)

    if not parsed.entries:
        if parsed.bozo:
            raise ParseError(
                f"Feed could not be parsed: {parsed.get('bozo_exception')}"
            )
        if not parsed.get("version"):
            raise ParseError("Content is not a valid RSS or Atom feed")

    return [_entry_to_item(entry) for entry in parsed.entries]


def _validate_url(url: str) -> None:
    """Validate that the URL has a valid format."""
    try:
        result = urlparse(url)
        if not result.scheme or not result.netloc:
            raise FetchError("Invalid URL format")
        if result.scheme not in ("http", "https"):
            raise FetchError("Invalid URL format: only http and https are supported")
    except ValueError:
        raise FetchError("Invalid URL format")


def _entry_to_item(entry: dict) -> FetchedItem:
    """Convert a feedparser entry into a FetchedItem."""
    description = entry.get("summary") or entry.get("description")
    if not description and entry.get("content"):
        description = entry["content"][0].get("value")
    return FetchedItem(
        title=entry.get("title"),
        link=entry.get("link"),
        guid=entry.get("id") or entry.get("guid"),
        description=description,
    )
