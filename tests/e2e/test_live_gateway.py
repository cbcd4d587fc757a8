"""End-to-end tests against the live TTN Gateway Server.

Skipped by default unless gateway credentials are provided.

Run with:
    pytest -m e2e --gateway-id=my-gateway --api-key=NNSXS.XXXX
"""

from __future__ import annotations

import json
import threading

import httpx
import pytest
from typer.testing import CliRunner

from ttn_exporter.app import app
from ttn_exporter.commands.serve import run_exporter
from ttn_exporter.config.manager import load_settings

runner = CliRunner()

pytestmark = pytest.mark.e2e


class TestLiveFetch:
    def test_fetch_json(self, live_env: dict):
        result = runner.invoke(app, ["fetch", "-f", "json"], env=live_env)
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["gateway_id"] == live_env["TTN_GATEWAY_ID"]
        assert data["downlink_count"] >= 0

    def test_wrong_key_is_rejected(self, live_env: dict):
        result = runner.invoke(app, ["fetch"], env={**live_env, "TTN_API_KEY": "NNSXS.INVALID"})
        assert result.exit_code == 3


class TestLiveExporter:
    def test_one_cycle(self, live_env: dict):
        settings = load_settings(
            {**live_env, "LISTEN_ADDRESS": "127.0.0.1:0", "POLL_ON_STARTUP": "true"},
        )
        stop = threading.Event()
        ports: list[int] = []
        ready = threading.Event()

        def on_ready(server) -> None:
            ports.append(server.server_port)
            ready.set()

        thread = threading.Thread(
            target=run_exporter, args=(settings, stop), kwargs={"on_ready": on_ready}, daemon=True,
        )
        thread.start()
        try:
            assert ready.wait(10)
            url = f"http://127.0.0.1:{ports[0]}/metrics"
            body = ""
            for _ in range(100):
                body = httpx.get(url, trust_env=False).text
                if "api_calls_total 1.0" in body:
                    break
                stop.wait(0.1)
            assert "api_calls_total 1.0" in body
            assert "api_call_failures_total 0.0" in body
        finally:
            stop.set()
            thread.join(15)
