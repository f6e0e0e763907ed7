"""Data models for the relay pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

# --- Inbound wire models ---


class ChatRequest(BaseModel):
    """Body of a direct ask: ``{"prompt": "..."}``."""

    prompt: str


class TelegramChat(BaseModel):
    id: int


class TelegramMessage(BaseModel):
    """Subset of https://core.telegram.org/bots/api#message used by the relay."""

    message_id: int | None = None
    chat: TelegramChat | None = None
    text: str | None = None


class TelegramUpdate(BaseModel):
    """Subset of https://core.telegram.org/bots/api#update used by the relay."""

    update_id: int | None = None
    message: TelegramMessage | None = None


# --- Outbound wire models ---


class SendMessageRequest(BaseModel):
    chat_id: int
    text: str


# --- Normalized prompts ---


@dataclass(frozen=True)
class DirectAsk:
    """Prompt received on the direct ask route; the reply goes in the response."""

    prompt: str


@dataclass(frozen=True)
class PlatformWebhook:
    """Prompt received from a Telegram update, with the chat to reply to."""

    prompt: str
    chat_id: int | None


@dataclass
class RelayResponse:
    """Pipeline outcome rendered as a plain-text HTTP response."""

    text: str
    status_code: int
