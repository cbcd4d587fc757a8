"""Prometheus exporter for The Things Network gateway connection statistics."""

__version__ = "0.1.0"
