"""Tests for relay data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.models import AuditEvent, AuditEventType, RiskLevel
from src.webhook.models import ChatRequest, SendMessageRequest, TelegramUpdate


class TestChatRequest:
    def test_parses_prompt(self) -> None:
        req = ChatRequest.model_validate_json('{"prompt": "Tell me a joke."}')
        assert req.prompt == "Tell me a joke."

    def test_missing_prompt_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ChatRequest.model_validate_json("{}")

    def test_non_string_prompt_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ChatRequest.model_validate_json('{"prompt": 42}')

    def test_invalid_json_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ChatRequest.model_validate_json("not json")


class TestTelegramUpdate:
    def test_full_update(self) -> None:
        update = TelegramUpdate.model_validate({
            "update_id": 10,
            "message": {"message_id": 5, "chat": {"id": 987654321}, "text": "hi"},
        })
        assert update.update_id == 10
        assert update.message is not None
        assert update.message.message_id == 5
        assert update.message.chat is not None
        assert update.message.chat.id == 987654321
        assert update.message.text == "hi"

    def test_ids_are_optional(self) -> None:
        update = TelegramUpdate.model_validate({"message": {"text": "Hello"}})
        assert update.update_id is None
        assert update.message is not None
        assert update.message.chat is None

    def test_unknown_telegram_fields_ignored(self) -> None:
        update = TelegramUpdate.model_validate({
            "update_id": 1,
            "message": {
                "message_id": 1,
                "date": 1700000000,
                "from": {"id": 1, "is_bot": False, "first_name": "A"},
                "chat": {"id": 1, "type": "private"},
                "text": "hi",
            },
        })
        assert update.message is not None
        assert update.message.text == "hi"

    def test_update_without_message(self) -> None:
        update = TelegramUpdate.model_validate({"update_id": 3})
        assert update.message is None

    def test_non_integer_chat_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TelegramUpdate.model_validate({"message": {"chat": {"id": "abc"}, "text": "x"}})


def test_send_message_request_wire_shape() -> None:
    payload = SendMessageRequest(chat_id=123, text="Hello").model_dump()
    assert payload == {"chat_id": 123, "text": "Hello"}


def test_audit_event_defaults_timestamp() -> None:
    event = AuditEvent(
        event_type=AuditEventType.DELIVERY,
        action="relay",
        result="success",
        risk_level=RiskLevel.INFO,
    )
    assert event.timestamp
    assert event.source_ip is None
    assert event.details is None
