"""Pydantic data models for the TTN Gateway Server API."""

from ttn_exporter.models.stats import (
    AdvancedStatus,
    GatewayStats,
    LastStatus,
    RemoteAddress,
    RoundTripTimes,
    Versions,
)

__all__ = [
    "AdvancedStatus",
    "GatewayStats",
    "LastStatus",
    "RemoteAddress",
    "RoundTripTimes",
    "Versions",
]
