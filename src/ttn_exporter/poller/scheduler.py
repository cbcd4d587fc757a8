"""Fixed-interval poll loop: fetch, parse, publish."""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from ttn_exporter.client.errors import ExporterError, FieldParseError
from ttn_exporter.metrics.registry import (
    API_CALL_FAILURES_TOTAL,
    API_CALLS_TOTAL,
    DOWNLINK_MESSAGES,
    FIELD_PARSE_FAILURES_TOTAL,
    LAST_API_CALL_DURATION,
    RTT_MAX,
    RTT_MEDIAN,
    RTT_MIN,
    UPLINK_MESSAGES,
    ExporterMetrics,
)
from ttn_exporter.models.stats import GatewayStats
from ttn_exporter.telemetry.parser import (
    RTT_SENTINEL,
    SENTINEL,
    Conversion,
    RTTSeconds,
    attempt,
    convert_count,
    convert_rtt,
)

logger = logging.getLogger(__name__)


class StatsSource(Protocol):
    def fetch(self) -> GatewayStats: ...


class CycleState(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    PUBLISHING = "publishing"
    ERROR_SKIP = "error_skip"


@dataclass(frozen=True)
class CycleOutcome:
    """What a single poll cycle did."""

    duration: float
    error: Exception | None = None
    uplink: Conversion[float] | None = None
    rtt: Conversion[RTTSeconds] | None = None

    @property
    def fetched(self) -> bool:
        return self.error is None

    @property
    def field_errors(self) -> list[FieldParseError]:
        return [
            c.error for c in (self.uplink, self.rtt)
            if c is not None and c.error is not None
        ]


def next_tick(scheduled: float, now: float, interval: float) -> float:
    """Return the tick after *scheduled*, coalescing ticks missed by an overrun.

    At most one overdue tick is kept so a slow cycle triggers one immediate
    catch-up run rather than a burst.
    """
    upcoming = scheduled + interval
    if upcoming < now:
        missed = int((now - upcoming) // interval)
        upcoming += missed * interval
    return upcoming


def convert_uplink_count(stats: GatewayStats) -> Conversion[float]:
    return attempt("uplink_count", convert_count, stats.uplink_count, sentinel=SENTINEL)


def convert_round_trip_times(stats: GatewayStats) -> Conversion[RTTSeconds]:
    return attempt("round_trip_times", convert_rtt, stats.round_trip_times, sentinel=RTT_SENTINEL)


class PollScheduler:
    """Drives poll cycles against one gateway and publishes into *metrics*.

    Cycles never overlap. A failed fetch skips the cycle; a malformed field
    only skips that field's gauges.
    """

    def __init__(
        self,
        client: StatsSource,
        metrics: ExporterMetrics,
        gateway_id: str,
        interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be greater than zero")
        self.client = client
        self.metrics = metrics
        self.gateway_id = gateway_id
        self.interval = interval
        self._clock = clock
        self.state = CycleState.IDLE
        self.cycles = 0

    def run_cycle(self) -> CycleOutcome:
        """Run one fetch → parse → publish cycle; never raises ExporterError."""
        start = self._clock()
        self.cycles += 1
        self.state = CycleState.FETCHING
        try:
            stats = self.client.fetch()
        except ExporterError as exc:
            return self._skip(start, exc)
        finally:
            self.metrics.inc_counter(API_CALLS_TOTAL)

        self.state = CycleState.PARSING
        logger.debug(
            "Gateway %s: protocol=%s ip=%s versions=%s",
            self.gateway_id,
            stats.protocol,
            stats.gateway_remote_address.ip,
            stats.last_status.versions.model_dump(),
        )
        uplink = convert_uplink_count(stats)
        rtt = convert_round_trip_times(stats)

        self.state = CycleState.PUBLISHING
        self._publish(stats, uplink, rtt)
        duration = self._finish(start)
        logger.info(
            "Polled gateway %s in %.3fs (uplinks=%s, rtt=%s)",
            self.gateway_id,
            duration,
            uplink.value if uplink.ok else "n/a",
            tuple(rtt.value) if rtt.ok else "n/a",
        )
        return CycleOutcome(duration, uplink=uplink, rtt=rtt)

    def _skip(self, start: float, exc: Exception) -> CycleOutcome:
        self.state = CycleState.ERROR_SKIP
        self.metrics.inc_counter(API_CALL_FAILURES_TOTAL)
        logger.warning("Poll of gateway %s failed, skipping cycle: %s", self.gateway_id, exc)
        duration = self._finish(start)
        return CycleOutcome(duration, error=exc)

    def _finish(self, start: float) -> float:
        duration = self._clock() - start
        self.metrics.set_gauge(LAST_API_CALL_DURATION, duration)
        self.state = CycleState.IDLE
        return duration

    def _publish(
        self,
        stats: GatewayStats,
        uplink: Conversion[float],
        rtt: Conversion[RTTSeconds],
    ) -> None:
        gw = self.gateway_id
        self.metrics.set_gateway_gauge(DOWNLINK_MESSAGES, gw, float(stats.round_trip_times.count))

        if uplink.ok:
            self.metrics.set_gateway_gauge(UPLINK_MESSAGES, gw, uplink.value)
        else:
            self._field_failed(uplink)

        if rtt.ok:
            self.metrics.set_gateway_gauge(RTT_MIN, gw, rtt.value.min)
            self.metrics.set_gateway_gauge(RTT_MEDIAN, gw, rtt.value.median)
            self.metrics.set_gateway_gauge(RTT_MAX, gw, rtt.value.max)
        else:
            self._field_failed(rtt)

    def _field_failed(self, conversion: Conversion) -> None:
        error = conversion.error
        if error is None:
            return
        logger.warning(
            "Gateway %s: skipping %s, field %r has invalid value %r: %s",
            self.gateway_id, conversion.field, error.field, error.raw, error.error,
        )
        self.metrics.inc_gateway_counter(
            FIELD_PARSE_FAILURES_TOTAL, self.gateway_id, field=error.field,
        )

    def run_forever(self, stop: threading.Event, *, immediate: bool = False) -> None:
        """Tick every ``interval`` seconds until *stop* is set."""
        logger.info(
            "Polling gateway %s every %ss", self.gateway_id, self.interval,
        )
        scheduled = self._clock() if immediate else self._clock() + self.interval
        while not stop.is_set():
            delay = scheduled - self._clock()
            if delay > 0 and stop.wait(delay):
                break
            try:
                self.run_cycle()
            except Exception:
                self.state = CycleState.IDLE
                self.metrics.inc_counter(API_CALL_FAILURES_TOTAL)
                logger.exception("Unexpected error in poll cycle for gateway %s", self.gateway_id)
            scheduled = next_tick(scheduled, self._clock(), self.interval)
        logger.info("Poll loop for gateway %s stopped", self.gateway_id)
