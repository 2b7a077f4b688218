"""Environment-driven settings for RSS Feed Notifier."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from rssfeed_notifier.database import SqliteFeedStore
from rssfeed_notifier.scheduler import NOTIFY_INTERVAL
from rssfeed_notifier.store import FeedStore, FileFeedStore

DEFAULT_SOURCES_DIR = "sources"
DEFAULT_DB_PATH = "rssfeed_notifier.db"
DEFAULT_HTTP_TIMEOUT = 30.0
STORE_BACKENDS = ("files", "sqlite")


class ConfigError(Exception):
    """Raised when the environment does not describe a usable configuration."""


@dataclass
class Settings:
    """Runtime settings.

    Attributes:
        bot_token: Telegram bot token.
        poll_interval: Seconds between the starts of two polling passes.
        store_backend: "files" for one JSON file per feed, "sqlite" for a database.
        sources_dir: Directory used by the files backend.
        db_path: Database path used by the sqlite backend.
        http_timeout: Timeout in seconds for feed downloads and API calls.
    """

    bot_token: str
    poll_interval: int = NOTIFY_INTERVAL
    store_backend: str = "files"
    sources_dir: str = DEFAULT_SOURCES_DIR
    db_path: str = DEFAULT_DB_PATH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def load_settings(environ: dict | None = None, env_file: str = ".env") -> Settings:
    """Read settings from the environment.

    When no explicit environ is given, env_file (``.env`` in the working
    directory by default) is loaded first; variables already set in the
    process win.

    Raises:
        ConfigError: If the token is missing or a value is malformed.
    """
    if environ is None:
        load_dotenv(env_file)
        env = os.environ
    else:
        env = environ

    token = env.get("TELEGRAM_BOT_TOKEN", "").strip()
    if not token:
        raise ConfigError("TELEGRAM_BOT_TOKEN not set")

    backend = env.get("RSS_STORE", "files").strip().lower()
    if backend not in STORE_BACKENDS:
        raise ConfigError(f"RSS_STORE must be one of {', '.join(STORE_BACKENDS)}, got {backend!r}")

    try:
        interval = int(env.get("RSS_POLL_INTERVAL", NOTIFY_INTERVAL))
        timeout = float(env.get("RSS_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT))
    except ValueError as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e
    if interval <= 0:
        raise ConfigError("RSS_POLL_INTERVAL must be positive")

    return Settings(
        bot_token=token,
        poll_interval=interval,
        store_backend=backend,
        sources_dir=env.get("RSS_SOURCES_DIR", DEFAULT_SOURCES_DIR),
        db_path=env.get("RSS_DB_PATH", DEFAULT_DB_PATH),
        http_timeout=timeout,
    )


def build_store(settings: Settings) -> FeedStore:
    """Create the feed store selected by the settings."""
    if settings.store_backend == "sqlite":
        store = SqliteFeedStore(settings.db_path)
        store.connect()
        return store
    return FileFeedStore(settings.sources_dir)
