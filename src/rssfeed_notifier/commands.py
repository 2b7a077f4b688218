"""Chat command handling for RSS Feed Notifier."""

import logging
import random

from rssfeed_notifier.extractor import describe_policy
from rssfeed_notifier.models import ExtractContent, FeedKey, FeedRecord, UniqueBy
from rssfeed_notifier.scheduler import UpdateClock, describe_remaining
from rssfeed_notifier.store import FeedStore, StoreError

logger = logging.getLogger(__name__)

PIN_MIN = 1111
PIN_MAX = 9999
MAX_PIN_ATTEMPTS = 20

START_TEXT = "Hello! Add rss feeds by typing /add <url>"
UNKNOWN_TEXT = (
    "Unknown command.\n"
    "you can list your rss feeds by typing /list.\n"
    "You can add a new rss feed by typing /add <RSS url>"
)
ADD_USAGE = "Usage: /add <RSS url>"
STATUS_USAGE = "Usage: /status <PIN>\nYou can get the PIN by typing /list"
DELETE_USAGE = "Usage: /delete <PIN>\nYou can get the PIN by typing /list"
EDIT_USAGE = "Usage: /edit <PIN> <unique|content> <args>"
EDIT_UNIQUE_USAGE = "Usage: /edit <PIN> unique <link|guid>"
EDIT_CONTENT_USAGE = "Usage: /edit <PIN> content <raw|find image>"
PIN_NOT_FOUND = "PIN not found. You can list all your feeds by typing /list"
NOT_FOUND = "Not found"
STORE_FAILURE = "Sorry, something went wrong while accessing your feeds. Please try again later."

UNIQUE_ARGS = {"link": UniqueBy.LINK, "guid": UniqueBy.GUID}
CONTENT_ARGS = {"raw": ExtractContent.RAW, "find image": ExtractContent.FIND_IMAGE}


def _parse_pin(text: str) -> int | None:
    try:
        return int(text.strip())
    except ValueError:
        return None


class CommandDispatcher:
    """Maps text commands from a chat user to feed store mutations."""

    def __init__(self, store: FeedStore, clock: UpdateClock, rng: random.Random | None = None):
        self.store = store
        self.clock = clock
        self._rng = rng or random.Random()

    async def handle(self, text: str, sender_id: int) -> str:
        """Handle one incoming message and return the reply text."""
        command, _, args = text.strip().partition(" ")
        handlers = {
            "/start": self.start,
            "/add": self.add,
            "/status": self.status,
            "/list": self.list_feeds,
            "/edit": self.edit,
            "/delete": self.delete,
        }
        handler = handlers.get(command.lower())
        if handler is None:
            return UNKNOWN_TEXT

        try:
            return handler(sender_id, args.strip())
        except StoreError as e:
            logger.error("Command %s from %s failed: %s", command, sender_id, e)
            return STORE_FAILURE

    def start(self, sender_id: int, args: str) -> str:
        return START_TEXT

    def add(self, sender_id: int, url: str) -> str:
        if not url:
            return ADD_USAGE

        key = self._new_key(sender_id)
        record = FeedRecord(url=url, send_to=sender_id)
        self.store.save(key, record)
        logger.info("User %s added %s with pin %s", sender_id, url, key.pin)
        return (
            f"Added {url} with pin {key.pin}. "
            f"Type /status {key.pin} for more information."
        )

    def _new_key(self, owner_id: int) -> FeedKey:
        """Pick a pin the owner does not use yet.

        Pins are only unique per owner; after MAX_PIN_ATTEMPTS the last
        candidate is used even if taken.
        """
        taken = {key.pin for key in self.store.keys_for_owner(owner_id)}
        pin = self._rng.randint(PIN_MIN, PIN_MAX)
        for _ in range(MAX_PIN_ATTEMPTS):
            if pin not in taken:
                break
            pin = self._rng.randint(PIN_MIN, PIN_MAX)
        return FeedKey(owner_id=owner_id, pin=pin)

    def status(self, sender_id: int, args: str) -> str:
        pin = _parse_pin(args)
        if pin is None:
            return STATUS_USAGE
        return self._status_pin(FeedKey(owner_id=sender_id, pin=pin))

    def _status_pin(self, key: FeedKey) -> str:
        record = self.store.load(key)
        if record is None:
            return NOT_FOUND
        return (
            f"[{key.pin}] {record.url}\n"
            f" - unique by {record.unique_by.value}\n"
            f" - {describe_policy(record.extract_content)}\n"
        )

    def list_feeds(self, sender_id: int, args: str) -> str:
        result = ""
        for key in self.store.keys_for_owner(sender_id):
            result += self._status_pin(key)
        remaining = describe_remaining(self.clock.time_until_next_update())
        return result + f"Checking for updates in {remaining}"

    def edit(self, sender_id: int, args: str) -> str:
        parts = args.split(" ", 2)
        if len(parts) < 3:
            return EDIT_USAGE
        pin = _parse_pin(parts[0])
        if pin is None:
            return EDIT_USAGE
        sub, value = parts[1].lower(), parts[2].strip().lower()

        key = FeedKey(owner_id=sender_id, pin=pin)
        record = self.store.load(key)
        if record is None:
            return PIN_NOT_FOUND

        if sub == "unique":
            if value not in UNIQUE_ARGS:
                return EDIT_UNIQUE_USAGE
            record.unique_by = UNIQUE_ARGS[value]
        elif sub == "content":
            if value not in CONTENT_ARGS:
                return EDIT_CONTENT_USAGE
            record.extract_content = CONTENT_ARGS[value]
        else:
            return EDIT_USAGE

        self.store.save(key, record)
        remaining = describe_remaining(self.clock.time_until_next_update())
        return f"Saved! Next update will be in {remaining}"

    def delete(self, sender_id: int, args: str) -> str:
        pin = _parse_pin(args)
        if pin is None:
            return DELETE_USAGE
        if not self.store.delete(FeedKey(owner_id=sender_id, pin=pin)):
            return NOT_FOUND
        logger.info("User %s deleted feed %s", sender_id, pin)
        return f"Deleted feed {pin}."
