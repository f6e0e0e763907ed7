"""Process-wide relay configuration, resolved once from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_TELEGRAM_API_BASE_URL = "https://api.telegram.org"
DEFAULT_CORS_ORIGIN_REGEX = r"^http://localhost(:\d+)?$"

_REQUIRED = ("OPEN_AI_URL", "OPEN_AI_MODEL", "API_TOKEN")
_ENV_NAMES = {
    "openai_url": "OPEN_AI_URL",
    "openai_model": "OPEN_AI_MODEL",
    "openai_api_key": "OPEN_AI_API_KEY",
    "api_token": "API_TOKEN",
    "telegram_bot_token": "TELEGRAM_BOT_TOKEN",
    "telegram_api_base_url": "TELEGRAM_API_BASE_URL",
    "telegram_webhook_require_auth": "TELEGRAM_WEBHOOK_REQUIRE_AUTH",
    "request_timeout": "REQUEST_TIMEOUT_SECONDS",
    "host": "SERVER_HOST_NAME",
    "port": "SERVER_HOST_PORT",
    "cors_origin_regex": "CORS_ALLOWED_ORIGIN_REGEX",
    "audit_log_path": "AUDIT_LOG_PATH",
    "audit_log_max_bytes": "AUDIT_LOG_MAX_BYTES",
    "audit_log_backup_count": "AUDIT_LOG_BACKUP_COUNT",
}


class ConfigError(Exception):
    """Raised when the environment cannot produce a valid configuration."""


class RelayConfig(BaseModel):
    """Immutable credentials and settings shared by every request."""

    model_config = ConfigDict(frozen=True)

    openai_url: str
    openai_model: str
    openai_api_key: str | None = None
    api_token: str
    telegram_bot_token: str | None = None
    telegram_api_base_url: str = DEFAULT_TELEGRAM_API_BASE_URL
    telegram_webhook_require_auth: bool = True
    request_timeout: float = Field(default=30.0, gt=0)
    host: str = "127.0.0.1"
    port: int = Field(default=80, ge=0, le=65535)
    cors_origin_regex: str = DEFAULT_CORS_ORIGIN_REGEX
    audit_log_path: str | None = None
    audit_log_max_bytes: int = Field(default=10_485_760, gt=0)
    audit_log_backup_count: int = Field(default=5, ge=0)

    @property
    def delivery_enabled(self) -> bool:
        """Webhook replies are pushed via sendMessage instead of returned inline."""
        return self.telegram_bot_token is not None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelayConfig:
        """Build the config from environment strings.

        Values are stripped and an empty value counts as unset, so the field
        default applies. Type conversion and range checks are left to the
        model; any failure is reported against the variable name.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        missing = [name for name in _REQUIRED if get(name) is None]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        values = {
            field: value
            for field, name in _ENV_NAMES.items()
            if (value := get(name)) is not None
        }
        try:
            return cls(**values)
        except ValidationError as exc:
            problems = "; ".join(
                f"{_ENV_NAMES.get(str(err['loc'][0]), err['loc'][0])}: {err['msg']}"
                for err in exc.errors()
            )
            raise ConfigError(f"Invalid configuration: {problems}") from exc

    def redacted(self) -> dict[str, object]:
        """Config as a dict with every secret masked, safe to print."""
        data = self.model_dump()
        for key in ("openai_api_key", "api_token", "telegram_bot_token"):
            if data[key] is not None:
                data[key] = "***"
        return data
