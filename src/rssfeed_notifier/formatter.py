"""Render notifications as chat message text."""

from rssfeed_notifier.extractor import extract_content
from rssfeed_notifier.models import FeedRecord, Notification

MAX_CONTENT_LENGTH = 1024
TRUNCATION_MARKER = " [..]"


def format_notification(notification: Notification, pin: int, record: FeedRecord) -> str:
    """Format a notification as three lines: pin and title, body, url."""
    content = extract_content(notification.raw_content, record.extract_content)
    if content is None:
        content = notification.raw_content
    if len(content) > MAX_CONTENT_LENGTH:
        content = content[:MAX_CONTENT_LENGTH] + TRUNCATION_MARKER
    return f"[{pin}] {notification.title}\n{content}\n{notification.url}"
