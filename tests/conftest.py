"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from ttn_exporter.config import constants
from ttn_exporter.config.models import ExporterSettings
from ttn_exporter.metrics.registry import ExporterMetrics

GATEWAY_ID = "test-gateway"


def pytest_addoption(parser):
    group = parser.getgroup("e2e", "live TTN gateway")
    group.addoption("--gateway-id", action="store", default=None)
    group.addoption("--api-key", action="store", default=None)
    group.addoption("--base-url", action="store", default=None)


_ENV_NAMES = (
    constants.ENV_GATEWAY_ID,
    constants.ENV_API_KEY,
    constants.ENV_BASE_URL,
    constants.ENV_URL_SUFFIX,
    constants.ENV_READ_INTERVAL,
    constants.ENV_LISTEN_ADDRESS,
    constants.ENV_RUNTIME_METRICS,
    constants.ENV_APP_METRICS,
    constants.ENV_POLL_ON_STARTUP,
    constants.ENV_LOG_LEVEL,
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test in an empty directory with no exporter env vars set."""
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "ttn_exporter.config.manager.USER_ENV_FILE", tmp_path / "user-config" / "exporter.env",
    )
    return tmp_path


@pytest.fixture
def base_env() -> dict[str, str]:
    """Minimal environment with the required keys."""
    return {
        constants.ENV_GATEWAY_ID: GATEWAY_ID,
        constants.ENV_API_KEY: "NNSXS.TESTKEY.SECRET",
    }


@pytest.fixture
def settings() -> ExporterSettings:
    return ExporterSettings(
        gateway_id=GATEWAY_ID,
        api_key="NNSXS.TESTKEY.SECRET",
        listen_address="127.0.0.1:0",
    )


@pytest.fixture
def metrics() -> ExporterMetrics:
    """Isolated registry without runtime collectors."""
    return ExporterMetrics(enable_runtime_metrics=False)


@pytest.fixture
def stats_payload() -> dict:
    """Sample ``connection/stats`` response."""
    return {
        "connected_at": "2024-05-01T08:15:30.123456789Z",
        "protocol": "udp",
        "last_status_received_at": "2024-05-01T10:00:00.5Z",
        "last_status": {
            "time": "2024-05-01T10:00:00Z",
            "versions": {
                "package": "",
                "platform": "IMST + Rpi - Firmware 1.0 - Protocol 2",
                "station": "2.0.6",
                "firmware": "1.0",
            },
            "advanced": {"features": "rmtsh", "model": "ttig"},
        },
        "last_uplink_received_at": "2024-05-01T10:01:02.987654321Z",
        "uplink_count": "42",
        "round_trip_times": {
            "min": "10ms",
            "max": "100ms",
            "median": "50ms",
            "count": 10,
        },
        "gateway_remote_address": {"ip": "203.0.113.7"},
    }
