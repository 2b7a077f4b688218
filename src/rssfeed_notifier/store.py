"""Keyed persistence for feed records."""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from rssfeed_notifier.models import FeedKey, FeedRecord

logger = logging.getLogger(__name__)

KEY_SUFFIX = ".json"


class StoreError(Exception):
    """Raised when a record cannot be read, written or deleted."""


def encode_key(key: FeedKey) -> str:
    """Return the storage name for a key, e.g. ``123456-4242.json``."""
    return f"{key.owner_id}-{key.pin}{KEY_SUFFIX}"


def decode_key(name: str) -> FeedKey | None:
    """Parse a storage name back into a key. Returns None for foreign names."""
    if not name.endswith(KEY_SUFFIX):
        return None
    stem = name[: -len(KEY_SUFFIX)]
    # Split on the last dash: group chat ids are negative.
    owner, sep, pin = stem.rpartition("-")
    if not sep or not owner:
        return None
    try:
        return FeedKey(owner_id=int(owner), pin=int(pin))
    except ValueError:
        return None


def serialize_record(record: FeedRecord) -> str:
    return json.dumps(record.to_dict(), indent=2)


def deserialize_record(text: str) -> FeedRecord:
    try:
        return FeedRecord.from_dict(json.loads(text))
    except (ValueError, KeyError, TypeError) as e:
        raise StoreError(f"Corrupt feed record: {e}") from e


class FeedStore(ABC):
    """Load/save/delete/enumerate feed records by key."""

    @abstractmethod
    def load(self, key: FeedKey) -> FeedRecord | None:
        """Return the record for key, or None if there is none."""

    @abstractmethod
    def save(self, key: FeedKey, record: FeedRecord) -> None:
        """Create or overwrite the record for key."""

    @abstractmethod
    def delete(self, key: FeedKey) -> bool:
        """Delete the record for key. Returns True if one existed."""

    @abstractmethod
    def list_keys(self) -> list[FeedKey]:
        """Return every stored key."""

    def keys_for_owner(self, owner_id: int) -> list[FeedKey]:
        return [key for key in self.list_keys() if key.owner_id == owner_id]


class FileFeedStore(FeedStore):
    """One JSON file per feed inside a directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: FeedKey) -> Path:
        return self.directory / encode_key(key)

    def load(self, key: FeedKey) -> FeedRecord | None:
        path = self._path(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"Could not read {path}: {e}") from e
        return deserialize_record(text)

    def save(self, key: FeedKey, record: FeedRecord) -> None:
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_text(serialize_record(record), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise StoreError(f"Could not write {path}: {e}") from e

    def delete(self, key: FeedKey) -> bool:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreError(f"Could not delete {path}: {e}") from e
        return True

    def list_keys(self) -> list[FeedKey]:
        keys = []
        try:
            names = sorted(os.listdir(self.directory))
        except OSError as e:
            raise StoreError(f"Could not list {self.directory}: {e}") from e
        for name in names:
            key = decode_key(name)
            if key is None:
                logger.warning("Could not load user id and pin from name %r", name)
                continue
            keys.append(key)
        return keys
