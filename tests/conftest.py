"""Shared test fixtures for tg-ai-relay."""

from __future__ import annotations

from typing import Any

from src.config import RelayConfig
from src.models import AuditEvent, AuditEventType, RiskLevel
from src.webhook.completion import CompletionProvider
from src.webhook.errors import CompletionError, DeliveryError
from src.webhook.telegram import MessageSender

API_TOKEN = "test-secret-token-12345"
AUTH_HEADERS = {"Authorization": f"Bearer {API_TOKEN}"}


class FakeCompletionProvider(CompletionProvider):
    """Returns a canned reply (or raises) and records every prompt."""

    def __init__(self, reply: str = "Hi back!", error: CompletionError | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeMessageSender(MessageSender):
    """Records every delivery; raises ``error`` when set."""

    def __init__(self, error: DeliveryError | None = None) -> None:
        self.error = error
        self.sent: list[tuple[int, str]] = []

    async def send_message(self, chat_id: int, text: str) -> None:
        self.sent.append((chat_id, text))
        if self.error is not None:
            raise self.error


# --- Factory functions for test data ---


def make_config(**kwargs: Any) -> RelayConfig:
    """Factory for RelayConfig with sensible defaults."""
    defaults: dict[str, Any] = {
        "openai_url": "http://localai:8080",
        "openai_model": "mistral",
        "api_token": API_TOKEN,
    }
    defaults.update(kwargs)
    return RelayConfig(**defaults)


def make_audit_event(**kwargs: Any) -> AuditEvent:
    """Factory for AuditEvent with sensible defaults."""
    defaults: dict[str, Any] = {
        "event_type": AuditEventType.AUTH_FAILURE,
        "action": "POST /chat",
        "result": "failure",
        "risk_level": RiskLevel.HIGH,
    }
    defaults.update(kwargs)
    return AuditEvent(**defaults)


def make_telegram_update(
    text: str | None = "Hello bot",
    chat_id: int | None = 987654321,
    update_id: int | None = 1,
) -> dict[str, Any]:
    message: dict[str, Any] = {"message_id": 1}
    if chat_id is not None:
        message["chat"] = {"id": chat_id}
    if text is not None:
        message["text"] = text
    update: dict[str, Any] = {"message": message}
    if update_id is not None:
        update["update_id"] = update_id
    return update
