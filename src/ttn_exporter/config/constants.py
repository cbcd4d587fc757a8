"""Default paths, environment variable names, and constants."""

from __future__ import annotations

import platformdirs

APP_NAME = "ttn-exporter"
APP_AUTHOR = "ttn-exporter"

CONFIG_DIR = platformdirs.user_config_path(APP_NAME, APP_AUTHOR)
DEFAULT_ENV_FILE = ".env"
USER_ENV_FILE = CONFIG_DIR / "exporter.env"

# Environment variable names
ENV_GATEWAY_ID = "TTN_GATEWAY_ID"
ENV_API_KEY = "TTN_API_KEY"
ENV_BASE_URL = "TTN_BASE_URL"
ENV_URL_SUFFIX = "TTN_URL_STATS_SUFFIX"
ENV_READ_INTERVAL = "READ_INTERVAL"
ENV_LISTEN_ADDRESS = "LISTEN_ADDRESS"
ENV_RUNTIME_METRICS = "ENABLE_RUNTIME_METRICS"
ENV_APP_METRICS = "ENABLE_APP_METRICS"
ENV_POLL_ON_STARTUP = "POLL_ON_STARTUP"
ENV_LOG_LEVEL = "LOG_LEVEL"

# API defaults
DEFAULT_BASE_URL = "https://eu1.cloud.thethings.network/api/v3/gs/gateways/"
DEFAULT_URL_SUFFIX = "/connection/stats"
DEFAULT_TIMEOUT = 10.0

# Exporter defaults
DEFAULT_READ_INTERVAL = 600
DEFAULT_LISTEN_ADDRESS = ":2112"
DEFAULT_LOG_LEVEL = "INFO"
