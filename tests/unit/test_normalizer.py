"""Tests for inbound normalization."""

from __future__ import annotations

import pytest

from src.webhook.errors import EmptyPromptError, NoMessageTextError
from src.webhook.models import ChatRequest, DirectAsk, PlatformWebhook, TelegramUpdate
from src.webhook.normalizer import normalize_ask, normalize_update
from tests.conftest import make_telegram_update


class TestNormalizeAsk:
    def test_returns_prompt_verbatim(self) -> None:
        result = normalize_ask(ChatRequest(prompt="  Hello  "))
        assert result == DirectAsk(prompt="  Hello  ")

    @pytest.mark.parametrize("prompt", ["", " ", "\n\t "])
    def test_blank_prompt_rejected(self, prompt: str) -> None:
        with pytest.raises(EmptyPromptError) as exc_info:
            normalize_ask(ChatRequest(prompt=prompt))
        assert exc_info.value.status_code == 400
        assert exc_info.value.public_message == "Prompt cannot be empty"


class TestNormalizeUpdate:
    def test_extracts_text_and_chat(self) -> None:
        update = TelegramUpdate.model_validate(make_telegram_update())
        assert normalize_update(update) == PlatformWebhook(
            prompt="Hello bot", chat_id=987654321,
        )

    def test_chat_is_optional(self) -> None:
        update = TelegramUpdate.model_validate(make_telegram_update(chat_id=None))
        assert normalize_update(update).chat_id is None

    @pytest.mark.parametrize("payload", [
        {"update_id": 1},
        {"message": {}},
        {"message": {"chat": {"id": 1}}},
        {"message": {"chat": {"id": 1}, "text": "   "}},
        {"message": {"chat": {"id": 1}, "text": ""}},
    ])
    def test_missing_or_blank_text_rejected(self, payload: dict[str, object]) -> None:
        update = TelegramUpdate.model_validate(payload)
        with pytest.raises(NoMessageTextError) as exc_info:
            normalize_update(update)
        assert exc_info.value.status_code == 400
        assert exc_info.value.public_message == "No Message Text"
