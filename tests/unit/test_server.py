"""Tests for the scrape server."""

from __future__ import annotations

import socket
from collections.abc import Iterator

import httpx
import pytest

from ttn_exporter.client.errors import ConfigurationError
from ttn_exporter.metrics.registry import API_CALLS_TOTAL, UPLINK_MESSAGES, ExporterMetrics
from ttn_exporter.server.http import MetricsServer, RouteResponse, build_server


@pytest.fixture
def http() -> Iterator[httpx.Client]:
    with httpx.Client(trust_env=False, timeout=5) as client:
        yield client


@pytest.fixture
def server(metrics: ExporterMetrics) -> Iterator[MetricsServer]:
    with build_server(metrics, "127.0.0.1:0") as srv:
        yield srv


def url(server: MetricsServer, path: str) -> str:
    return f"http://127.0.0.1:{server.server_port}{path}"


def _ipv6_loopback_available() -> bool:
    if not socket.has_ipv6:
        return False
    try:
        with socket.socket(socket.AF_INET6, socket.SOCK_STREAM) as sock:
            sock.bind(("::1", 0))
    except OSError:
        return False
    return True


class TestMetricsServer:
    def test_health(self, server: MetricsServer, http: httpx.Client):
        resp = http.get(url(server, "/health"))
        assert resp.status_code == 200
        assert resp.text == "ok"

    def test_metrics(self, server: MetricsServer, metrics: ExporterMetrics, http: httpx.Client):
        metrics.inc_counter(API_CALLS_TOTAL)
        metrics.set_gateway_gauge(UPLINK_MESSAGES, "gw-1", 7.0)
        resp = http.get(url(server, "/metrics"))
        assert resp.status_code == 200
        assert resp.headers["content-type"] == metrics.content_type
        assert "api_calls_total 1.0" in resp.text
        assert 'gw_number_of_uplink_messages{gateway_id="gw-1"} 7.0' in resp.text

    def test_metrics_reflect_updates(
        self, server: MetricsServer, metrics: ExporterMetrics, http: httpx.Client,
    ):
        http.get(url(server, "/metrics"))
        metrics.set_gateway_gauge(UPLINK_MESSAGES, "gw-1", 8.0)
        assert 'gw_number_of_uplink_messages{gateway_id="gw-1"} 8.0' in http.get(
            url(server, "/metrics"),
        ).text

    def test_query_string_ignored(self, server: MetricsServer, http: httpx.Client):
        assert http.get(url(server, "/health?verbose=1")).status_code == 200

    def test_unknown_path(self, server: MetricsServer, http: httpx.Client):
        resp = http.get(url(server, "/nope"))
        assert resp.status_code == 404

    def test_failing_route(self, server: MetricsServer, http: httpx.Client):
        def boom() -> RouteResponse:
            raise RuntimeError("broken")

        server.register_route("/boom", boom)
        resp = http.get(url(server, "/boom"))
        assert resp.status_code == 500
        assert http.get(url(server, "/health")).status_code == 200

    def test_port_requires_running_server(self, metrics: ExporterMetrics):
        with pytest.raises(RuntimeError):
            _ = build_server(metrics, "127.0.0.1:0").server_port

    def test_invalid_address(self):
        with pytest.raises(ConfigurationError, match="host"):
            MetricsServer("localhost").start()

    def test_unbindable_address(self):
        # TEST-NET-1 is never assigned to a local interface
        with pytest.raises(ConfigurationError, match="Cannot listen"):
            MetricsServer("192.0.2.1:0").start()

    def test_stop_is_idempotent(self, metrics: ExporterMetrics):
        srv = build_server(metrics, "127.0.0.1:0")
        srv.start()
        srv.stop()
        srv.stop()

    @pytest.mark.skipif(not _ipv6_loopback_available(), reason="IPv6 loopback unavailable")
    def test_ipv6_listen_address(self, metrics: ExporterMetrics, http: httpx.Client):
        with build_server(metrics, "[::1]:0") as srv:
            assert srv.server_port > 0
            resp = http.get(f"http://[::1]:{srv.server_port}/health")
        assert resp.status_code == 200
        assert resp.text == "ok"
