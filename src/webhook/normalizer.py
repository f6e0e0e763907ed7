"""Inbound normalization: one prompt (and destination) per request shape."""

from __future__ import annotations

from src.webhook.errors import EmptyPromptError, NoMessageTextError
from src.webhook.models import ChatRequest, DirectAsk, PlatformWebhook, TelegramUpdate


def normalize_ask(request: ChatRequest) -> DirectAsk:
    if not request.prompt.strip():
        raise EmptyPromptError("prompt is empty or whitespace")
    return DirectAsk(prompt=request.prompt)


def normalize_update(update: TelegramUpdate) -> PlatformWebhook:
    """Extract the message text and chat id from a Telegram update.

    Updates without a text message (stickers, joins, edits, blank text) are
    rejected; the prompt itself is passed through untouched.
    """
    message = update.message
    if message is None or message.text is None or not message.text.strip():
        raise NoMessageTextError(f"update {update.update_id} carries no message text")
    chat_id = message.chat.id if message.chat is not None else None
    return PlatformWebhook(prompt=message.text, chat_id=chat_id)
