"""E2E test configuration — live TTN gateway credentials.

The ``--gateway-id``/``--api-key``/``--base-url`` options are registered in
the top-level conftest.
"""

from __future__ import annotations

import pytest


@pytest.fixture
def live_env(request) -> dict[str, str]:
    gateway_id = request.config.getoption("--gateway-id")
    api_key = request.config.getoption("--api-key")
    if not gateway_id or not api_key:
        pytest.skip("Live gateway credentials not provided")
    env = {"TTN_GATEWAY_ID": gateway_id, "TTN_API_KEY": api_key}
    base_url = request.config.getoption("--base-url")
    if base_url:
        env["TTN_BASE_URL"] = base_url
    return env
