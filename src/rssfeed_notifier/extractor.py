"""Derive notification bodies from raw item descriptions."""

from rssfeed_notifier.models import ExtractContent

IMAGE_MARKER = 'img src="'


def extract_content(content: str, policy: ExtractContent) -> str | None:
    """Apply an extraction policy to an item description.

    No HTML parsing is done: FIND_IMAGE is a plain substring search, so on
    malformed markup it may return an unintended fragment.

    Returns:
        The extracted fragment, or None when the policy found nothing.
        Callers fall back to the raw content on None.
    """
    if policy is ExtractContent.RAW:
        return content
    if policy is ExtractContent.FIND_IMAGE:
        start = content.find(IMAGE_MARKER)
        if start == -1:
            return None
        start += len(IMAGE_MARKER)
        end = content.find('"', start)
        if end == -1:
            return None
        return content[start:end]
    raise ValueError(f"Unknown extraction policy: {policy!r}")


def describe_policy(policy: ExtractContent) -> str:
    if policy is ExtractContent.RAW:
        return "not parsing content"
    if policy is ExtractContent.FIND_IMAGE:
        return "showing first image"
    raise ValueError(f"Unknown extraction policy: {policy!r}")
