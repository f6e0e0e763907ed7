"""Click CLI for running and inspecting the relay."""

from __future__ import annotations

import json
import logging
import os

import click
import uvicorn
from dotenv import load_dotenv

from src.config import ConfigError, RelayConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_config(env_file: str | None) -> RelayConfig:
    if env_file:
        load_dotenv(env_file, override=False)
    try:
        return RelayConfig.from_env()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
def cli() -> None:
    """Telegram / OpenAI-compatible chat relay."""


@cli.command()
@click.option("--host", default=None, help="Bind host (default: SERVER_HOST_NAME or 127.0.0.1).")
@click.option("--port", type=int, default=None, help="Bind port (default: SERVER_HOST_PORT or 80).")
@click.option("--env-file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Load variables from a .env file before reading the environment.")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None,
              help="Logging level (default: LOG_LEVEL or INFO).")
def serve(host: str | None, port: int | None, env_file: str | None, log_level: str | None) -> None:
    """Run the relay HTTP server."""
    config = _load_config(env_file)
    level = (log_level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    if level not in LOG_LEVELS:
        raise click.ClickException(
            f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}",
        )
    logging.basicConfig(level=level, format=LOG_FORMAT)

    bind_host = host or config.host
    bind_port = config.port if port is None else port
    click.echo(f"Server running at {bind_host}:{bind_port}", err=True)
    uvicorn.run(
        "src.server.app:create_app_from_env",
        factory=True,
        host=bind_host,
        port=bind_port,
        log_level=level.lower(),
    )


@cli.command("show-config")
@click.option("--env-file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Load variables from a .env file before reading the environment.")
def show_config(env_file: str | None) -> None:
    """Print the resolved configuration with secrets redacted."""
    config = _load_config(env_file)
    output = config.redacted()
    output["delivery_enabled"] = config.delivery_enabled
    click.echo(json.dumps(output, indent=2))
