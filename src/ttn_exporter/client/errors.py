"""Typed exceptions and error handling decorator."""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from rich.console import Console

F = TypeVar("F", bound=Callable[..., Any])

err_console = Console(stderr=True)


class ExporterError(Exception):
    """Base exception for ttn-exporter."""

    exit_code: int = 1


class ConfigurationError(ExporterError):
    """Missing or malformed startup setting."""

    exit_code = 2


class TransportError(ExporterError):
    """The stats request could not be completed."""

    exit_code = 3


class RequestBuildError(TransportError):
    """The request could not be built (malformed endpoint URL)."""


class GatewayConnectionError(TransportError):
    """Cannot reach the stats endpoint (connect, DNS, timeout)."""


class GatewayAPIError(TransportError):
    """Non-2xx response from the stats endpoint."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        msg = f"Unexpected status code: {status_code}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class BodyReadError(TransportError):
    """The response body could not be read."""


class DecodeError(ExporterError):
    """The response body is not a valid gateway stats document."""

    exit_code = 4


class ValueParseError(ExporterError):
    """A raw telemetry string could not be converted."""

    exit_code = 5

    def __init__(self, raw: str, cause: str = "") -> None:
        self.raw = raw
        self.cause = cause
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f"invalid value {self.raw!r}"


class InvalidDuration(ValueParseError):
    """Malformed duration literal."""

    def _describe(self) -> str:
        msg = f"invalid duration {self.raw!r}"
        return f"{msg}: {self.cause}" if self.cause else msg


class InvalidNumber(ValueParseError):
    """Malformed decimal numeral."""

    def _describe(self) -> str:
        msg = f"invalid number {self.raw!r}"
        return f"{msg}: {self.cause}" if self.cause else msg


class FieldParseError(ExporterError):
    """A named telemetry field failed to convert."""

    exit_code = 5

    def __init__(self, field: str, error: ValueParseError) -> None:
        self.field = field
        self.raw = error.raw
        self.error = error
        super().__init__(f"error parsing {field}: {error}")


def error_handler(func: F) -> F:
    """Decorator that catches ExporterError and prints user-friendly messages."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ExporterError as exc:
            err_console.print(f"[bold red]Error:[/] {exc}")
            raise SystemExit(exc.exit_code)
        except ValueError as exc:
            err_console.print(f"[bold red]Error:[/] {exc}")
            raise SystemExit(1)

    return wrapper  # type: ignore[return-value]
