"""Completion provider: OpenAI-compatible chat completions client."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from src.webhook.errors import (
    BadResponseFormatError,
    CompletionTransportError,
    MissingContentError,
)

logger = logging.getLogger(__name__)


class CompletionProvider(ABC):
    """Turns a single user prompt into the assistant's reply text."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the model's reply, or raise a CompletionError."""


class OpenAICompletionClient(CompletionProvider):
    """Calls ``POST {base_url}/v1/chat/completions`` (OpenAI, LocalAI, ...).

    Exactly one request per call: no retry, no caching.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        model: str,
        api_key: str | None = None,
    ) -> None:
        self._client = client
        self._url = f"{base_url.rstrip('/')}/v1/chat/completions"
        self._model = model
        self._api_key = api_key

    def build_request(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def complete(self, prompt: str) -> str:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            resp = await self._client.post(
                self._url, json=self.build_request(prompt), headers=headers,
            )
        except httpx.TransportError as exc:
            raise CompletionTransportError(
                f"{type(exc).__name__} calling {self._url}: {exc}",
            ) from exc

        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise BadResponseFormatError(resp.status_code, resp.text) from exc

        return _extract_content(data, resp)


def _extract_content(data: Any, resp: httpx.Response) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MissingContentError(resp.status_code, resp.text) from exc
    if not isinstance(content, str):
        raise MissingContentError(resp.status_code, resp.text)
    logger.debug("Completion received (status %d, %d chars)", resp.status_code, len(content))
    return content
