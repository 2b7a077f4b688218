"""Data models for RSS Feed Notifier."""

from dataclasses import dataclass
from enum import Enum


class UniqueBy(Enum):
    """Which item field identifies an item across polls."""

    GUID = "Guid"
    LINK = "Link"


class ExtractContent(Enum):
    """How the notification body is derived from an item's description."""

    RAW = "Raw"
    FIND_IMAGE = "FindImage"


@dataclass(frozen=True)
class FeedKey:
    """Identifies one tracked feed: its owner plus a short numeric pin."""

    owner_id: int
    pin: int


@dataclass
class FeedRecord:
    """Durable state of one tracked feed."""

    url: str
    send_to: int
    unique_by: UniqueBy = UniqueBy.LINK
    extract_content: ExtractContent = ExtractContent.RAW
    last_post: str | None = None

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "unique_by": self.unique_by.value,
            "extract_content": self.extract_content.value,
            "last_post": self.last_post,
            "send_to": self.send_to,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeedRecord":
        """Build a record from its stored form.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a policy field holds an unknown value.
        """
        return cls(
            url=data["url"],
            send_to=int(data["send_to"]),
            unique_by=UniqueBy(data["unique_by"]),
            extract_content=ExtractContent(data["extract_content"]),
            last_post=data.get("last_post"),
        )


@dataclass
class FetchedItem:
    """Represents a single entry from the current snapshot of a feed."""

    title: str | None = None
    link: str | None = None
    guid: str | None = None
    description: str | None = None


@dataclass
class Notification:
    """A newly discovered item, ready to be formatted for delivery."""

    title: str
    url: str
    raw_content: str

    @classmethod
    def from_item(cls, item: FetchedItem) -> "Notification":
        return cls(
            title=item.title or "",
            url=item.link or "",
            raw_content=item.description or "",
        )
