"""Shared helpers for CLI commands — option aliases, settings and client factories."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ttn_exporter.client.stats import StatsClient
from ttn_exporter.config.manager import load_settings
from ttn_exporter.config.models import ExporterSettings
from ttn_exporter.log import configure_logging

# Shared Typer option type aliases
EnvFileOpt = Annotated[
    Path | None,
    typer.Option("--env-file", "-e", help="Dotenv file to seed settings from"),
]
FormatOpt = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format (table, json, yaml, csv)"),
]
LogLevelOpt = Annotated[
    str | None,
    typer.Option("--log-level", help="Override LOG_LEVEL"),
]


def load(env_file: Path | None, log_level: str | None = None) -> ExporterSettings:
    """Resolve settings and configure logging from them."""
    settings = load_settings(env_file=env_file)
    if log_level:
        settings = ExporterSettings.model_validate(
            {**settings.model_dump(), "log_level": log_level},
        )
    configure_logging(settings.log_level)
    return settings


def make_client(settings: ExporterSettings) -> StatsClient:
    return StatsClient(settings.stats_url, settings.api_key, timeout=settings.timeout)


def mask_secret(secret: str) -> str:
    return secret[:8] + "..." if len(secret) > 8 else "***"
