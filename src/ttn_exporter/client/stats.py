"""Gateway Server stats HTTP client."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ttn_exporter.client.auth import BearerTokenAuth
from ttn_exporter.client.errors import (
    BodyReadError,
    DecodeError,
    GatewayAPIError,
    GatewayConnectionError,
    RequestBuildError,
)
from ttn_exporter.config.constants import DEFAULT_TIMEOUT
from ttn_exporter.models.stats import GatewayStats

logger = logging.getLogger(__name__)


class StatsClient:
    """Synchronous client for the TTN gateway ``connection/stats`` endpoint.

    Each :meth:`fetch` issues exactly one GET; retry policy belongs to the
    caller.
    """

    def __init__(
        self,
        url: str,
        token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = httpx.Client(
            auth=BearerTokenAuth(token),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> StatsClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _build_request(self) -> httpx.Request:
        try:
            return self._client.build_request("GET", self.url)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as exc:
            raise RequestBuildError(f"Cannot build request for {self.url}: {exc}") from exc

    def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            return self._client.send(request, stream=True)
        except httpx.UnsupportedProtocol as exc:
            raise RequestBuildError(f"Unsupported URL {self.url}: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise GatewayConnectionError(
                f"Request to {self.url} timed out: {exc}"
            ) from exc
        except httpx.TransportError as exc:
            raise GatewayConnectionError(
                f"Cannot connect to {self.url}: {exc}"
            ) from exc

    def fetch(self) -> GatewayStats:
        """Fetch and decode the current gateway connection stats."""
        request = self._build_request()
        response = self._send(request)
        try:
            if not response.is_success:
                detail = ""
                try:
                    detail = response.read().decode("utf-8", errors="replace").strip()
                except httpx.HTTPError:
                    logger.debug("Could not read error body from %s", self.url)
                raise GatewayAPIError(response.status_code, detail[:200])
            try:
                body = response.read()
            except httpx.HTTPError as exc:
                raise BodyReadError(f"Reading response body from {self.url}: {exc}") from exc
        finally:
            response.close()

        try:
            return GatewayStats.model_validate_json(body)
        except ValidationError as exc:
            raise DecodeError(f"Decoding stats response: {exc}") from exc
