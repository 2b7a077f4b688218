"""Identity tokens used to recognize the same item across polls."""

from rssfeed_notifier.models import FetchedItem, UniqueBy

UNKNOWN_TOKEN = "unknown"


def identity_token(item: FetchedItem, strategy: UniqueBy) -> str:
    """Return the token identifying an item under the given strategy.

    Items missing the chosen field all share UNKNOWN_TOKEN and are
    therefore indistinguishable from each other.
    """
    if strategy is UniqueBy.GUID:
        return item.guid or UNKNOWN_TOKEN
    if strategy is UniqueBy.LINK:
        return item.link or UNKNOWN_TOKEN
    raise ValueError(f"Unknown dedup strategy: {strategy!r}")
