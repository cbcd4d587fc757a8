"""Configuration loading — environment variables, optionally seeded from a dotenv file."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError

from ttn_exporter.client.errors import ConfigurationError
from ttn_exporter.config.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_ENV_FILE,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_READ_INTERVAL,
    DEFAULT_URL_SUFFIX,
    ENV_API_KEY,
    ENV_APP_METRICS,
    ENV_BASE_URL,
    ENV_GATEWAY_ID,
    ENV_LISTEN_ADDRESS,
    ENV_LOG_LEVEL,
    ENV_POLL_ON_STARTUP,
    ENV_READ_INTERVAL,
    ENV_RUNTIME_METRICS,
    ENV_URL_SUFFIX,
    USER_ENV_FILE,
)
from ttn_exporter.config.models import ExporterSettings

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)


def key_exists(env: Mapping[str, str], name: str) -> bool:
    """Return True if *name* is set to a non-empty value."""
    return bool(env.get(name))


def get_env_string(env: Mapping[str, str], name: str, default: str) -> str:
    return env.get(name) or default


def get_env_int(env: Mapping[str, str], name: str, default: int) -> int:
    val = env.get(name)
    if not val:
        return default
    if not _INTEGER.fullmatch(val):
        raise ConfigurationError(f"Invalid {name}: {val!r} is not an integer")
    digits = val.lstrip("+-").lstrip("0")
    if len(digits) > 19 or not -(2**63) <= int(val) < 2**63:
        raise ConfigurationError(f"Invalid {name}: {val!r} is out of range")
    return int(val)


def get_env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    val = env.get(name)
    if not val:
        return default
    if val in _TRUE_VALUES:
        return True
    if val in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid {name}: {val!r} is not a boolean")


def resolve_env_file(env_file: Path | None = None) -> Path | None:
    """Pick the dotenv file to seed from.

    Precedence: explicit path > ./.env > user config dir.
    """
    if env_file is not None:
        if not env_file.is_file():
            raise ConfigurationError(f"Env file not found: {env_file}")
        return env_file
    for candidate in (Path(DEFAULT_ENV_FILE), USER_ENV_FILE):
        if candidate.is_file():
            return candidate
    return None


def collect_environment(
    environ: Mapping[str, str] | None = None,
    env_file: Path | None = None,
) -> dict[str, str]:
    """Merge dotenv values under the process environment (real env wins)."""
    merged: dict[str, str] = {}
    path = resolve_env_file(env_file)
    if path is not None:
        for name, value in dotenv_values(dotenv_path=path).items():
            if value is not None:
                merged[name] = value
    merged.update(os.environ if environ is None else environ)
    return merged


def load_settings(
    environ: Mapping[str, str] | None = None,
    env_file: Path | None = None,
) -> ExporterSettings:
    """Load and validate exporter settings.

    Raises ConfigurationError for missing required keys or malformed values.
    """
    env = collect_environment(environ, env_file)

    for required in (ENV_GATEWAY_ID, ENV_API_KEY):
        if not key_exists(env, required):
            raise ConfigurationError(f"{required} is required but not set")

    values: dict[str, Any] = {
        "gateway_id": env[ENV_GATEWAY_ID],
        "api_key": env[ENV_API_KEY],
        "base_url": get_env_string(env, ENV_BASE_URL, DEFAULT_BASE_URL),
        "url_suffix": get_env_string(env, ENV_URL_SUFFIX, DEFAULT_URL_SUFFIX),
        "read_interval": get_env_int(env, ENV_READ_INTERVAL, DEFAULT_READ_INTERVAL),
        "listen_address": get_env_string(env, ENV_LISTEN_ADDRESS, DEFAULT_LISTEN_ADDRESS),
        "enable_runtime_metrics": get_env_bool(env, ENV_RUNTIME_METRICS, True),
        "enable_app_metrics": get_env_bool(env, ENV_APP_METRICS, True),
        "poll_on_startup": get_env_bool(env, ENV_POLL_ON_STARTUP, False),
        "log_level": get_env_string(env, ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
    }
    try:
        return ExporterSettings(**values)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {errors}") from exc
