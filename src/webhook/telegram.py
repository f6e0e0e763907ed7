"""Telegram delivery: push replies through the Bot API ``sendMessage``."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from src.webhook.errors import DeliveryTransportError, PlatformApiError
from src.webhook.models import SendMessageRequest

logger = logging.getLogger(__name__)


class MessageSender(ABC):
    """Sends a text message to a chat on the messaging platform."""

    @abstractmethod
    async def send_message(self, chat_id: int, text: str) -> None:
        """Deliver ``text`` to ``chat_id`` or raise a DeliveryError."""


class TelegramSender(MessageSender):
    """MessageSender backed by the Telegram Bot API. One attempt per message."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, bot_token: str) -> None:
        self._client = client
        self._base_url = base_url
        self._bot_token = bot_token

    async def send_message(self, chat_id: int, text: str) -> None:
        await send_telegram_message(
            self._base_url, self._bot_token, chat_id, text, client=self._client,
        )


async def send_telegram_message(
    base_url: str,
    token: str,
    chat_id: int,
    text: str,
    client: httpx.AsyncClient | None = None,
) -> None:
    """Send ``text`` to ``chat_id`` via ``{base_url}/bot{token}/sendMessage``.

    Works against any base URL, so a mock server can stand in for
    api.telegram.org. A throwaway client is used when none is given.

    Raises:
        PlatformApiError: the API answered with a non-2xx status.
        DeliveryTransportError: the request never got an answer.
    """
    url = f"{base_url.rstrip('/')}/bot{token}/sendMessage"
    payload = SendMessageRequest(chat_id=chat_id, text=text).model_dump()

    if client is None:
        async with httpx.AsyncClient(verify=True) as own_client:
            resp = await _post(own_client, url, payload)
    else:
        resp = await _post(client, url, payload)

    if not resp.is_success:
        raise PlatformApiError(resp.status_code, resp.text)


async def _post(client: httpx.AsyncClient, url: str, payload: dict[str, object]) -> httpx.Response:
    try:
        return await client.post(url, json=payload)
    except httpx.TransportError as exc:
        # The URL embeds the bot token; keep it out of the message.
        logger.debug("sendMessage transport failure: %s", type(exc).__name__)
        raise DeliveryTransportError(f"{type(exc).__name__} calling sendMessage") from None
