"""Background polling loop for RSS Feed Notifier."""

import asyncio
import logging
import threading
import time
from datetime import timedelta
from typing import Awaitable, Callable, Sequence

from rssfeed_notifier.delivery import DeliveryError, Sender
from rssfeed_notifier.diff import diff_items
from rssfeed_notifier.feed_parser import FetchError, ParseError, fetch_feed, parse_feed
from rssfeed_notifier.formatter import format_notification
from rssfeed_notifier.models import FeedKey, FetchedItem
from rssfeed_notifier.store import FeedStore, StoreError

logger = logging.getLogger(__name__)

NOTIFY_INTERVAL = 3600  # 1 hour

FetchFn = Callable[[str], Awaitable[bytes]]
ParseFn = Callable[[bytes], Sequence[FetchedItem]]


class UpdateClock:
    """Start time of the most recent pass, shared with status readers.

    Written once per pass by the scheduler and read by any number of
    concurrent callers; the lock is only held for a single read or write.
    """

    def __init__(self, interval: float = NOTIFY_INTERVAL, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self._clock = clock
        self._lock = threading.Lock()
        self._last_start = clock()

    def mark_pass_start(self) -> float:
        now = self._clock()
        with self._lock:
            self._last_start = now
        return now

    @property
    def last_start(self) -> float:
        with self._lock:
            return self._last_start

    def time_until_next_update(self) -> timedelta:
        """Interval minus time elapsed since the last pass started, never negative."""
        elapsed = self._clock() - self.last_start
        return timedelta(seconds=max(0.0, self.interval - elapsed))


def describe_remaining(remaining: timedelta) -> str:
    seconds = int(remaining.total_seconds())
    if seconds > 60:
        return f"{seconds // 60} minutes"
    return f"{seconds} seconds"


class Scheduler:
    """Polls every tracked feed once per interval and sends new items.

    Feeds are processed one at a time. A failing feed is logged and
    skipped; it never stops the rest of the pass.
    """

    def __init__(
        self,
        store: FeedStore,
        sender: Sender,
        clock: UpdateClock,
        fetch: FetchFn = fetch_feed,
        parse: ParseFn = parse_feed,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.sender = sender
        self.clock = clock
        self._fetch = fetch
        self._parse = parse
        self._sleep = sleep

    async def process_feed(self, key: FeedKey) -> int:
        """Poll one feed, deliver its new items and advance its cursor.

        Returns:
            Number of new items found.

        Raises:
            StoreError: If the record could not be loaded or saved.
        """
        record = self.store.load(key)
        if record is None:
            logger.warning("Feed %s-%s disappeared before it could be polled", key.owner_id, key.pin)
            return 0

        try:
            data = await self._fetch(record.url)
            items = await asyncio.to_thread(self._parse, data)
        except (FetchError, ParseError) as e:
            logger.warning(
                "%s-%s - Could not load RSS feed at %s: %s", key.owner_id, key.pin, record.url, e
            )
            return 0

        result = diff_items(record, items)

        for notification in result.notifications:
            message = format_notification(notification, key.pin, record)
            try:
                await self.sender.send(record.send_to, message)
            except DeliveryError as e:
                logger.warning("Could not send notification to user %s: %s", record.send_to, e)

        result.apply(record)
        self.store.save(key, record)

        if result.notifications:
            logger.info("Feed %s-%s: %d new items", key.owner_id, key.pin, len(result.notifications))
        return len(result.notifications)

    async def run_pass(self) -> int:
        """Poll all feeds once. Returns count of new items found."""
        total_new = 0
        for key in self.store.list_keys():
            try:
                total_new += await self.process_feed(key)
            except StoreError as e:
                logger.error("%s-%s - Store error, cursor not advanced: %s", key.owner_id, key.pin, e)
            except Exception as e:
                logger.warning("%s-%s - Unexpected error: %s", key.owner_id, key.pin, e)
        return total_new

    async def run_forever(self) -> None:
        """Run a pass, then wait out the rest of the interval, indefinitely."""
        logger.info("Scheduler started (interval: %ds)", self.clock.interval)

        while True:
            self.clock.mark_pass_start()
            try:
                new_count = await self.run_pass()
                if new_count > 0:
                    logger.info("Poll cycle complete: %d new items", new_count)
            except Exception as e:
                logger.error("Poll cycle failed: %s", e)

            await self._sleep(self.clock.time_until_next_update().total_seconds())
