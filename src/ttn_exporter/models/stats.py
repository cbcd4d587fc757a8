"""Gateway connection statistics as returned by the TTN Gateway Server."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# RFC 3339 fractions beyond microseconds (TTN sends nanoseconds)
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Versions(_Frozen):
    """Software versions reported in the last gateway status."""

    package: str = ""
    platform: str = ""
    station: str = ""
    firmware: str = ""


class AdvancedStatus(_Frozen):
    features: str = ""
    model: str = ""


class LastStatus(_Frozen):
    """Nested status block; decoded for logging, not exported."""

    versions: Versions = Field(default_factory=Versions)
    advanced: AdvancedStatus = Field(default_factory=AdvancedStatus)


class RemoteAddress(_Frozen):
    ip: str = ""


class RoundTripTimes(_Frozen):
    """Round-trip times as duration strings plus the sample count.

    No ordering between min, median and max is assumed.
    """

    min: str = ""
    max: str = ""
    median: str = ""
    count: int = 0


class GatewayStats(_Frozen):
    """One decoded ``connection/stats`` response."""

    connected_at: datetime | None = None
    protocol: str = ""
    last_status_received_at: datetime | None = None
    last_status: LastStatus = Field(default_factory=LastStatus)
    last_uplink_received_at: datetime | None = None
    uplink_count: str = ""
    round_trip_times: RoundTripTimes = Field(default_factory=RoundTripTimes)
    gateway_remote_address: RemoteAddress = Field(default_factory=RemoteAddress)

    @field_validator(
        "connected_at", "last_status_received_at", "last_uplink_received_at",
        mode="before",
    )
    @classmethod
    def truncate_fraction(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _EXCESS_FRACTION.sub(r"\1", v)
        return v
