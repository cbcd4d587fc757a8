"""Fetch command — poll the stats endpoint once and print the converted values."""

from __future__ import annotations

from typing import Any

from ttn_exporter.client.errors import error_handler
from ttn_exporter.commands._common import EnvFileOpt, FormatOpt, LogLevelOpt, load, make_client
from ttn_exporter.models.stats import GatewayStats
from ttn_exporter.output.formatter import output
from ttn_exporter.poller.scheduler import convert_round_trip_times, convert_uplink_count


def summarize(gateway_id: str, stats: GatewayStats) -> dict[str, Any]:
    """Flatten one stats document into the values the exporter would publish."""
    uplink = convert_uplink_count(stats)
    rtt = convert_round_trip_times(stats)
    versions = stats.last_status.versions
    return {
        "gateway_id": gateway_id,
        "protocol": stats.protocol,
        "remote_ip": stats.gateway_remote_address.ip,
        "connected_at": stats.connected_at,
        "last_uplink_received_at": stats.last_uplink_received_at,
        "station": versions.station,
        "firmware": versions.firmware,
        "downlink_count": stats.round_trip_times.count,
        "uplink_count": uplink.value if uplink.ok else None,
        "rtt_min_seconds": rtt.value.min if rtt.ok else None,
        "rtt_median_seconds": rtt.value.median if rtt.ok else None,
        "rtt_max_seconds": rtt.value.max if rtt.ok else None,
        "parse_errors": "; ".join(
            str(c.error) for c in (uplink, rtt) if c.error is not None
        ) or None,
    }


@error_handler
def fetch(
    env_file: EnvFileOpt = None,
    fmt: FormatOpt = "table",
    log_level: LogLevelOpt = None,
) -> None:
    """Fetch gateway stats once and show the values that would be exported."""
    settings = load(env_file, log_level)
    with make_client(settings) as client:
        stats = client.fetch()
    output(summarize(settings.gateway_id, stats), fmt, title=f"Gateway {settings.gateway_id}")
