"""Exported Prometheus metrics, owned by one explicitly constructed registry."""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from prometheus_client.registry import Collector

from ttn_exporter.client.errors import ConfigurationError

GATEWAY_LABEL = "gateway_id"

# App metrics
API_CALLS_TOTAL = "api_calls_total"
API_CALL_FAILURES_TOTAL = "api_call_failures_total"
LAST_API_CALL_DURATION = "last_api_call_duration_seconds"
FIELD_PARSE_FAILURES_TOTAL = "gw_field_parse_failures_total"

# Gateway metrics
DOWNLINK_MESSAGES = "gw_number_of_downlink_messages"
UPLINK_MESSAGES = "gw_number_of_uplink_messages"
RTT_MIN = "gw_rtt_min"
RTT_MEDIAN = "gw_rtt_median"
RTT_MAX = "gw_rtt_max"


class ExporterMetrics:
    """Counters and gauges exported on the scrape endpoint.

    Lives for the whole process and is passed by reference to the poll
    scheduler (writer) and the scrape route (reader). Each update is atomic
    per metric; no snapshot consistency across metrics is offered.
    """

    def __init__(
        self,
        *,
        enable_runtime_metrics: bool = True,
        enable_app_metrics: bool = True,
    ) -> None:
        self.registry = CollectorRegistry(auto_describe=True)
        self._counters: dict[str, Counter] = {
            API_CALLS_TOTAL: Counter(
                API_CALLS_TOTAL, "Total number of API calls made", registry=None,
            ),
            API_CALL_FAILURES_TOTAL: Counter(
                API_CALL_FAILURES_TOTAL, "Total number of failed API calls", registry=None,
            ),
        }
        self._gauges: dict[str, Gauge] = {
            LAST_API_CALL_DURATION: Gauge(
                LAST_API_CALL_DURATION,
                "The duration of the last API call to the TTN in seconds",
                registry=None,
            ),
        }
        self._gateway_counters: dict[str, Counter] = {
            FIELD_PARSE_FAILURES_TOTAL: Counter(
                FIELD_PARSE_FAILURES_TOTAL,
                "Total number of telemetry fields that could not be parsed",
                [GATEWAY_LABEL, "field"],
                registry=None,
            ),
        }
        self._gateway_gauges: dict[str, Gauge] = {
            name: Gauge(name, doc, [GATEWAY_LABEL], registry=None)
            for name, doc in (
                (DOWNLINK_MESSAGES, "The total number of downlink messages"),
                (UPLINK_MESSAGES, "The total number of uplink messages"),
                (RTT_MIN, "The minimal round trip time in seconds"),
                (RTT_MEDIAN, "The median round trip time in seconds"),
                (RTT_MAX, "The maximal round trip time in seconds"),
            )
        }

        if enable_app_metrics:
            for collector in (
                *self._counters.values(),
                *self._gauges.values(),
                *self._gateway_counters.values(),
            ):
                self.register(collector)

        if enable_runtime_metrics:
            # these collectors register themselves on construction
            try:
                ProcessCollector(registry=self.registry)
                PlatformCollector(registry=self.registry)
                GCCollector(registry=self.registry)
            except ValueError as exc:
                raise ConfigurationError(f"Duplicate metric registration: {exc}") from exc

        for gauge in self._gateway_gauges.values():
            self.register(gauge)

    def register(self, collector: Collector) -> None:
        """Register an extra collector; a name clash is a configuration error."""
        try:
            self.registry.register(collector)
        except ValueError as exc:
            raise ConfigurationError(f"Duplicate metric registration: {exc}") from exc

    def inc_counter(self, name: str) -> None:
        self._counters[name].inc()

    def set_gauge(self, name: str, value: float) -> None:
        self._gauges[name].set(value)

    def set_gateway_gauge(self, name: str, gateway_id: str, value: float) -> None:
        self._gateway_gauges[name].labels(**{GATEWAY_LABEL: gateway_id}).set(value)

    def inc_gateway_counter(self, name: str, gateway_id: str, **labels: str) -> None:
        self._gateway_counters[name].labels(**{GATEWAY_LABEL: gateway_id}, **labels).inc()

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST

    def render(self) -> bytes:
        """Serialize the registry in the Prometheus text exposition format."""
        return generate_latest(self.registry)
