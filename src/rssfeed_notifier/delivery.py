"""Telegram Bot API transport: sending notifications and receiving commands."""

import logging
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.telegram.org"


class DeliveryError(Exception):
    """Raised when a message could not be sent."""


class TransportError(Exception):
    """Raised when updates could not be retrieved from the chat service."""


class Sender(Protocol):
    """Delivery channel used by the scheduler and the bot loop."""

    async def send(self, recipient_id: int, text: str) -> None:
        ...


class TelegramClient:
    """Minimal async client for the Telegram Bot API."""

    def __init__(
        self,
        token: str,
        client: httpx.AsyncClient | None = None,
        base_url: str = API_BASE_URL,
        timeout: float = 30.0,
    ):
        self._base = f"{base_url}/bot{token}"
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, payload: dict, timeout: float | None = None) -> object:
        """Invoke an API method and return its ``result`` field.

        Raises:
            httpx.HTTPError: On network failure or an error status.
            ValueError: If the API reports ``ok: false``.
        """
        kwargs = {"json": payload}
        if timeout is not None:
            kwargs["timeout"] = timeout
        response = await self._client.post(f"{self._base}/{method}", **kwargs)
        response.raise_for_status()
        body = response.json()
        if not body.get("ok"):
            raise ValueError(body.get("description", "request rejected"))
        return body.get("result")

    async def send(self, recipient_id: int, text: str) -> None:
        """Send a plain-text message to a chat.

        Raises:
            DeliveryError: If the message was not accepted.
        """
        try:
            await self._call("sendMessage", {"chat_id": recipient_id, "text": text})
        except (httpx.HTTPError, ValueError) as e:
            raise DeliveryError(f"Could not send message to {recipient_id}: {e}") from e

    async def get_updates(self, offset: int | None = None, timeout: int = 30) -> list[dict]:
        """Long-poll for new updates.

        Raises:
            TransportError: If the updates could not be fetched.
        """
        payload: dict = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        try:
            result = await self._call("getUpdates", payload, timeout=timeout + 10)
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(f"Could not fetch updates: {e}") from e
        return list(result or [])
