"""Relay pipeline: prompt in, completion out, optional Telegram delivery.

Stages, each run at most once per request:
1. Normalize (reject empty input before any outbound call)
2. Complete via the configured CompletionProvider
3. Deliver via the MessageSender (webhook route, when one is wired)
4. Audit log

Whether webhook replies are delivered or returned inline is decided by the
wiring: pass a ``sender`` for deliver-then-acknowledge, omit it to reply in the
HTTP response body.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.models import AuditEvent, AuditEventType, RiskLevel
from src.webhook.errors import (
    ClientError,
    CompletionError,
    DeliveryError,
    MissingChatError,
    PlatformApiError,
)
from src.webhook.models import ChatRequest, RelayResponse, TelegramUpdate
from src.webhook.normalizer import normalize_ask, normalize_update

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.webhook.completion import CompletionProvider
    from src.webhook.telegram import MessageSender

logger = logging.getLogger(__name__)

ACK_TEXT = "OK"


class RelayPipeline:
    """Orchestrates one stateless prompt/response round trip per request."""

    def __init__(
        self,
        completion: CompletionProvider,
        sender: MessageSender | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._completion = completion
        self._sender = sender
        self._audit = audit_logger

    @property
    def delivers(self) -> bool:
        return self._sender is not None

    async def ask(self, request: ChatRequest) -> RelayResponse:
        """Direct ask: the completion text is the response body."""
        try:
            prompt = normalize_ask(request).prompt
        except ClientError as exc:
            return _reject(exc)

        try:
            reply = await self._complete(prompt, source="chat")
        except CompletionError as exc:
            return _fail(exc)
        return RelayResponse(text=reply, status_code=200)

    async def handle_update(self, update: TelegramUpdate) -> RelayResponse:
        """Telegram webhook: deliver and acknowledge, or reply inline."""
        try:
            incoming = normalize_update(update)
            if self._sender is not None and incoming.chat_id is None:
                raise MissingChatError(f"update {update.update_id} has no chat id")
        except ClientError as exc:
            return _reject(exc)

        try:
            reply = await self._complete(incoming.prompt, source="telegram")
        except CompletionError as exc:
            return _fail(exc)

        chat_id = incoming.chat_id
        if self._sender is None or chat_id is None:
            return RelayResponse(text=reply, status_code=200)

        try:
            await self._sender.send_message(chat_id, reply)
        except DeliveryError as exc:
            self._log_delivery(chat_id, exc)
            return _fail(exc)

        self._log_delivery(chat_id, None)
        return RelayResponse(text=ACK_TEXT, status_code=200)

    async def _complete(self, prompt: str, source: str) -> str:
        try:
            reply = await self._completion.complete(prompt)
        except CompletionError as exc:
            logger.error("Error calling chat API: %s", exc, exc_info=exc.__cause__ is not None)
            self._audit_event(AuditEventType.COMPLETION, "failure", {
                "source": source,
                "error": type(exc).__name__,
            })
            raise
        self._audit_event(AuditEventType.COMPLETION, "success", {
            "source": source,
            "reply_chars": len(reply),
        })
        return reply

    def _log_delivery(self, chat_id: int, exc: DeliveryError | None) -> None:
        details: dict[str, object] = {"chat_id": chat_id}
        if exc is None:
            self._audit_event(AuditEventType.DELIVERY, "success", details)
            return

        details["error"] = type(exc).__name__
        if isinstance(exc, PlatformApiError):
            details["platform_status"] = exc.status
            logger.error(
                "Telegram API error %d for chat %d: %s", exc.status, chat_id, exc.body,
            )
        else:
            logger.error("Error sending Telegram message to chat %d: %s", chat_id, exc)
        self._audit_event(AuditEventType.DELIVERY, "failure", details)

    def _audit_event(
        self, event_type: AuditEventType, result: str, details: dict[str, object],
    ) -> None:
        if not self._audit:
            return
        event = AuditEvent(
            event_type=event_type,
            action="relay",
            result=result,
            risk_level=RiskLevel.INFO if result == "success" else RiskLevel.MEDIUM,
            details=details,
        )
        try:
            self._audit.log(event)
        except OSError:
            # The request outcome stands even when the trail cannot be written.
            logger.exception("Failed to write audit event %s", event_type.value)


def _reject(exc: ClientError) -> RelayResponse:
    logger.info("Rejected request: %s", exc)
    return RelayResponse(text=exc.public_message, status_code=exc.status_code)


def _fail(exc: CompletionError | DeliveryError) -> RelayResponse:
    return RelayResponse(text=exc.public_message, status_code=exc.status_code)
