"""Change detection between a feed record and a freshly fetched snapshot."""

from dataclasses import dataclass, field
from typing import Sequence

from rssfeed_notifier.dedup import identity_token
from rssfeed_notifier.models import FeedRecord, FetchedItem, Notification


@dataclass
class DiffResult:
    """Outcome of diffing one poll against a record's cursor."""

    notifications: list[Notification] = field(default_factory=list)
    updated_token: str | None = None

    def apply(self, record: FeedRecord) -> None:
        """Advance the record's cursor. An empty fetch leaves it untouched."""
        if self.updated_token is not None:
            record.last_post = self.updated_token


def diff_items(record: FeedRecord, items: Sequence[FetchedItem]) -> DiffResult:
    """Compute the items that are new since the record's last poll.

    Args:
        record: The feed record holding the cursor and dedup strategy.
        items: The fetched items, newest first.

    Returns:
        DiffResult with the new items (in feed order) and the token of the
        newest fetched item. A record without a cursor yields no
        notifications; it only gets its baseline set. If the cursor is not
        found in the snapshot, every item counts as new.
    """
    result = DiffResult()

    if record.last_post is not None:
        for item in items:
            if identity_token(item, record.unique_by) == record.last_post:
                break
            result.notifications.append(Notification.from_item(item))

    if items:
        result.updated_token = identity_token(items[0], record.unique_by)

    return result
