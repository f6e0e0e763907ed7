"""FastAPI relay application."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TypeVar

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ValidationError

from src.audit.logger import AuditLogger
from src.config import RelayConfig
from src.server.auth_middleware import AuthMiddleware
from src.webhook.completion import CompletionProvider, OpenAICompletionClient
from src.webhook.errors import MalformedBodyError, RelayError
from src.webhook.models import ChatRequest, RelayResponse, TelegramUpdate
from src.webhook.relay import RelayPipeline
from src.webhook.telegram import MessageSender, TelegramSender

CHAT_PATH = "/chat"
TELEGRAM_WEBHOOK_PATH = "/telegram/webhook"

_Body = TypeVar("_Body", bound=BaseModel)


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    config = RelayConfig.from_env()
    http_client = httpx.AsyncClient(timeout=config.request_timeout)
    completion = OpenAICompletionClient(
        http_client,
        base_url=config.openai_url,
        model=config.openai_model,
        api_key=config.openai_api_key,
    )
    sender: MessageSender | None = None
    if config.telegram_bot_token:
        sender = TelegramSender(
            http_client,
            base_url=config.telegram_api_base_url,
            bot_token=config.telegram_bot_token,
        )
    audit_logger: AuditLogger | None = None
    if config.audit_log_path:
        audit_logger = AuditLogger(
            config.audit_log_path,
            max_bytes=config.audit_log_max_bytes,
            backup_count=config.audit_log_backup_count,
        )
    return create_app(
        config,
        completion,
        sender=sender,
        audit_logger=audit_logger,
        http_client=http_client,
    )


def create_app(
    config: RelayConfig,
    completion: CompletionProvider,
    sender: MessageSender | None = None,
    audit_logger: AuditLogger | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create the relay app with auth, CORS and both inbound routes.

    ``http_client`` is the pooled outbound client shared by the adapters; it is
    closed when the app shuts down.
    """

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            if http_client is not None:
                await http_client.aclose()

    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None, lifespan=lifespan)
    pipeline = RelayPipeline(completion, sender=sender, audit_logger=audit_logger)
    app.state.pipeline = pipeline

    @app.exception_handler(RelayError)
    async def relay_error(_: Request, exc: RelayError) -> Response:
        return PlainTextResponse(exc.public_message, status_code=exc.status_code)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(CHAT_PATH)
    async def chat(request: Request) -> Response:
        payload = await _parse_body(request, ChatRequest)
        return _render(await pipeline.ask(payload))

    @app.post(TELEGRAM_WEBHOOK_PATH)
    async def telegram_webhook(request: Request) -> Response:
        update = await _parse_body(request, TelegramUpdate)
        return _render(await pipeline.handle_update(update))

    open_paths: frozenset[str] = frozenset()
    if not config.telegram_webhook_require_auth:
        open_paths = frozenset({TELEGRAM_WEBHOOK_PATH})
    app.add_middleware(
        AuthMiddleware,
        token=config.api_token,
        audit_logger=audit_logger,
        open_paths=open_paths,
    )
    # Added last so it wraps auth: preflight requests carry no token.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["null"],
        allow_origin_regex=config.cors_origin_regex,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Accept", "Content-Type"],
        allow_credentials=True,
        max_age=3600,
    )

    return app


async def _parse_body(request: Request, model: type[_Body]) -> _Body:
    body = await request.body()
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise MalformedBodyError(f"{model.__name__}: {exc.error_count()} validation error(s)") from exc


def _render(result: RelayResponse) -> Response:
    return PlainTextResponse(result.text, status_code=result.status_code)
