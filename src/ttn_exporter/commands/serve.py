"""Serve command — run the scrape server and the poll loop."""

from __future__ import annotations

import logging
import signal
import threading
from types import FrameType
from typing import Callable

import httpx

from ttn_exporter import __version__
from ttn_exporter.client.errors import error_handler
from ttn_exporter.client.stats import StatsClient
from ttn_exporter.commands._common import EnvFileOpt, LogLevelOpt, load
from ttn_exporter.config.models import ExporterSettings
from ttn_exporter.metrics.registry import ExporterMetrics
from ttn_exporter.poller.scheduler import PollScheduler
from ttn_exporter.server.http import MetricsServer, build_server

logger = logging.getLogger(__name__)


def run_exporter(
    settings: ExporterSettings,
    stop: threading.Event,
    *,
    transport: httpx.BaseTransport | None = None,
    on_ready: Callable[[MetricsServer], None] | None = None,
) -> ExporterMetrics:
    """Wire registry, client, server and scheduler; block until *stop* is set.

    Configuration problems (duplicate metrics, bind failures) raise before
    the first poll.
    """
    metrics = ExporterMetrics(
        enable_runtime_metrics=settings.enable_runtime_metrics,
        enable_app_metrics=settings.enable_app_metrics,
    )
    server = build_server(metrics, settings.listen_address)
    with StatsClient(
        settings.stats_url, settings.api_key, timeout=settings.timeout, transport=transport,
    ) as client, server:
        scheduler = PollScheduler(
            client, metrics, settings.gateway_id, settings.read_interval,
        )
        if on_ready is not None:
            on_ready(server)
        scheduler.run_forever(stop, immediate=settings.poll_on_startup)
    return metrics


@error_handler
def serve(
    env_file: EnvFileOpt = None,
    log_level: LogLevelOpt = None,
) -> None:
    """Serve /metrics and /health while polling the gateway stats endpoint."""
    settings = load(env_file, log_level)
    logger.info(
        "ttn-exporter %s starting for gateway %s (%s)",
        __version__, settings.gateway_id, settings.stats_url,
    )

    stop = threading.Event()

    def _request_stop(signum: int, frame: FrameType | None) -> None:
        logger.info("Received %s, shutting down", signal.Signals(signum).name)
        stop.set()

    signal.signal(signal.SIGTERM, _request_stop)
    signal.signal(signal.SIGINT, _request_stop)
    run_exporter(settings, stop)
