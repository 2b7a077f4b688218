"""Entry point for RSS Feed Notifier: python -m rssfeed_notifier"""

import asyncio
import functools
import logging
import sys

import httpx

from rssfeed_notifier.bot import run_bot
from rssfeed_notifier.commands import CommandDispatcher
from rssfeed_notifier.config import ConfigError, build_store, load_settings
from rssfeed_notifier.database import SqliteFeedStore
from rssfeed_notifier.delivery import TelegramClient
from rssfeed_notifier.feed_parser import USER_AGENT, fetch_feed
from rssfeed_notifier.scheduler import Scheduler, UpdateClock

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
# Quiet noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger("rssfeed_notifier")


async def main() -> None:
    """Initialize and run the scheduler and the bot loop."""
    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)

    store = build_store(settings)
    clock = UpdateClock(interval=settings.poll_interval)

    feed_client = httpx.AsyncClient(
        timeout=settings.http_timeout,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )
    telegram = TelegramClient(settings.bot_token, timeout=settings.http_timeout)

    scheduler = Scheduler(
        store=store,
        sender=telegram,
        clock=clock,
        fetch=functools.partial(fetch_feed, client=feed_client),
    )
    dispatcher = CommandDispatcher(store, clock)

    # Start background scheduler
    scheduler_task = asyncio.create_task(scheduler.run_forever())

    try:
        await run_bot(telegram, dispatcher)
    finally:
        scheduler_task.cancel()
        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass
        await telegram.close()
        await feed_client.aclose()
        if isinstance(store, SqliteFeedStore):
            store.close()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == "__main__":
    run()
