"""Pydantic models for exporter configuration."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

from ttn_exporter.config.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_READ_INTERVAL,
    DEFAULT_TIMEOUT,
    DEFAULT_URL_SUFFIX,
)


class ExporterSettings(BaseModel):
    """Resolved exporter settings, loaded once at startup."""

    gateway_id: str = Field(min_length=1, description="TTN gateway identifier")
    api_key: str = Field(min_length=1, description="TTN API key used as bearer token")
    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Gateway Server base URL, gateway id is appended",
    )
    url_suffix: str = Field(default=DEFAULT_URL_SUFFIX, description="Path appended after the gateway id")
    read_interval: int = Field(
        default=DEFAULT_READ_INTERVAL, gt=0, description="Poll interval in seconds",
    )
    listen_address: str = Field(default=DEFAULT_LISTEN_ADDRESS, description="Scrape server address")
    enable_runtime_metrics: bool = Field(default=True, description="Export process/runtime metrics")
    enable_app_metrics: bool = Field(default=True, description="Export API call metrics")
    poll_on_startup: bool = Field(default=False, description="Poll once before the first tick")
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Logging level name")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, le=600, description="Request timeout in seconds",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    @field_validator("listen_address")
    @classmethod
    def validate_listen_address(cls, v: str) -> str:
        parse_listen_address(v)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def stats_url(self) -> str:
        return f"{self.base_url}{self.gateway_id}{self.url_suffix}"


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``:port``) into a bindable tuple."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must be [host]:port, got {address!r}")
    try:
        port_num = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {address!r}") from None
    if not 0 <= port_num <= 65535:
        raise ValueError(f"Port out of range in listen address {address!r}")
    return host.strip("[]"), port_num
