"""Chat update loop: receive commands and reply to their senders."""

import asyncio
import logging

from rssfeed_notifier.commands import CommandDispatcher
from rssfeed_notifier.delivery import DeliveryError, TelegramClient, TransportError

logger = logging.getLogger(__name__)

RETRY_DELAY = 5


async def handle_update(update: dict, client: TelegramClient, dispatcher: CommandDispatcher) -> None:
    """Reply to a single update if it carries a text message."""
    message = update.get("message") or {}
    text = message.get("text")
    sender = message.get("from") or {}
    if not text or "id" not in sender:
        return

    sender_id = int(sender["id"])
    reply = await dispatcher.handle(text, sender_id)
    try:
        await client.send(sender_id, reply)
    except DeliveryError as e:
        logger.warning("Could not reply to user %s: %s", sender_id, e)


async def run_bot(client: TelegramClient, dispatcher: CommandDispatcher, poll_timeout: int = 30) -> None:
    """Long-poll for updates and dispatch them, indefinitely."""
    logger.info("Bot started, waiting for commands")
    offset: int | None = None

    while True:
        try:
            updates = await client.get_updates(offset=offset, timeout=poll_timeout)
        except TransportError as e:
            logger.warning("%s; retrying in %ds", e, RETRY_DELAY)
            await asyncio.sleep(RETRY_DELAY)
            continue

        for update in updates:
            offset = update["update_id"] + 1
            try:
                await handle_update(update, client, dispatcher)
            except Exception as e:
                logger.error("Failed to handle update %s: %s", update.get("update_id"), e)
