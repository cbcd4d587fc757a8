"""Scrape server — serves registered routes from a background thread."""

from __future__ import annotations

import logging
import socket
import threading
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable
from urllib.parse import urlsplit

from ttn_exporter.client.errors import ConfigurationError
from ttn_exporter.config.constants import DEFAULT_LISTEN_ADDRESS
from ttn_exporter.config.models import parse_listen_address
from ttn_exporter.metrics.registry import ExporterMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteResponse:
    status: int
    body: bytes
    content_type: str = "text/plain; charset=utf-8"


RouteHandler = Callable[[], RouteResponse]


class _RoutingHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], routes: dict[str, RouteHandler]) -> None:
        self.routes = routes
        if ":" in address[0]:
            self.address_family = socket.AF_INET6
        super().__init__(address, _RouteRequestHandler)


class _RouteRequestHandler(BaseHTTPRequestHandler):
    server: _RoutingHTTPServer

    def do_GET(self) -> None:
        path = urlsplit(self.path).path
        handler = self.server.routes.get(path)
        if handler is None:
            self._write(RouteResponse(404, b"Not Found\n"))
            return
        try:
            response = handler()
        except Exception:
            logger.exception("Route %s failed", path)
            response = RouteResponse(500, b"Internal Server Error\n")
        self._write(response)

    def _write(self, response: RouteResponse) -> None:
        self.send_response(response.status)
        self.send_header("Content-Type", response.content_type)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        self.wfile.write(response.body)

    def log_message(self, format: str, *args: object) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class MetricsServer:
    """HTTP server for the scrape and health endpoints."""

    def __init__(self, address: str = DEFAULT_LISTEN_ADDRESS) -> None:
        self.address = address or DEFAULT_LISTEN_ADDRESS
        self._routes: dict[str, RouteHandler] = {}
        self._server: _RoutingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def register_route(self, path: str, handler: RouteHandler) -> None:
        self._routes[path] = handler

    @property
    def server_port(self) -> int:
        if self._server is None:
            raise RuntimeError("Server is not running")
        return self._server.server_address[1]

    def start(self) -> None:
        """Bind and serve in a daemon thread; bind failure is fatal."""
        try:
            bind = parse_listen_address(self.address)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        try:
            self._server = _RoutingHTTPServer(bind, self._routes)
        except OSError as exc:
            raise ConfigurationError(f"Cannot listen on {self.address}: {exc}") from exc
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="metrics-http", daemon=True,
        )
        self._thread.start()
        logger.info("Serving metrics on %s", self.address)

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._server = None
        self._thread = None

    def __enter__(self) -> MetricsServer:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()


def health_route() -> RouteResponse:
    return RouteResponse(200, b"ok")


def metrics_route(metrics: ExporterMetrics) -> RouteHandler:
    """Build the ``/metrics`` handler bound to *metrics*."""

    def handler() -> RouteResponse:
        return RouteResponse(200, metrics.render(), metrics.content_type)

    return handler


def build_server(metrics: ExporterMetrics, address: str = DEFAULT_LISTEN_ADDRESS) -> MetricsServer:
    """Create a server with the standard ``/metrics`` and ``/health`` routes."""
    server = MetricsServer(address)
    server.register_route("/metrics", metrics_route(metrics))
    server.register_route("/health", health_route)
    return server
