"""Conversion of string-encoded gateway telemetry into gauge values.

Durations use the Go duration syntax emitted by the TTN API (``"50ms"``,
``"0.2342343454s"``, ``"1m30s"``). Arithmetic is carried out in integer
nanoseconds so that short literals convert to exact decimal seconds.

Every converter raises on malformed input. :func:`attempt` turns a converter
call into a tagged :class:`Conversion` carrying either the value or the
error, with :data:`SENTINEL` standing in for the value on failure.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Generic, NamedTuple, TypeVar

from ttn_exporter.client.errors import (
    FieldParseError,
    InvalidDuration,
    InvalidNumber,
    ValueParseError,
)
from ttn_exporter.models.stats import RoundTripTimes

T = TypeVar("T")

SENTINEL = -1.0

_NANOSECOND = 1
_MICROSECOND = 1000 * _NANOSECOND
_MILLISECOND = 1000 * _MICROSECOND
_SECOND = 1000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

_UNITS: dict[str, int] = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "µs": _MICROSECOND,  # micro sign
    "μs": _MICROSECOND,  # greek mu
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}

_MAX_NANOSECONDS = 2**63 - 1
_MAX_WHOLE_DIGITS = len(str(_MAX_NANOSECONDS))
# fraction digits beyond this are below nanosecond resolution for every unit
_MAX_FRAC_DIGITS = 18

_DIGITS = "0123456789"
_COMPONENT = re.compile(r"(?P<whole>\d*)(?:\.(?P<frac>\d*))?(?P<unit>[^\d.]*)", re.ASCII)
_DECIMAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


class RTTSeconds(NamedTuple):
    """Round-trip times converted to seconds."""

    min: float
    median: float
    max: float


RTT_SENTINEL = RTTSeconds(SENTINEL, SENTINEL, SENTINEL)


def _parse_nanoseconds(raw: str) -> int:
    s = raw
    negative = False
    if s[:1] in ("-", "+"):
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise InvalidDuration(raw)

    total = 0
    pos = 0
    while pos < len(s):
        if s[pos] not in _DIGITS and s[pos] != ".":
            raise InvalidDuration(raw)
        match = _COMPONENT.match(s, pos)
        if match is None:
            raise InvalidDuration(raw)
        whole, frac, unit = match.group("whole"), match.group("frac") or "", match.group("unit")
        if not whole and not frac:
            raise InvalidDuration(raw)
        if not unit:
            raise InvalidDuration(raw, "missing unit")
        scale = _UNITS.get(unit)
        if scale is None:
            raise InvalidDuration(raw, f"unknown unit {unit!r}")
        whole = whole.lstrip("0")
        if len(whole) > _MAX_WHOLE_DIGITS:
            raise InvalidDuration(raw, "overflow")
        value = int(whole or "0") * scale
        frac = frac[:_MAX_FRAC_DIGITS]
        if frac:
            value += int(frac) * scale // 10 ** len(frac)
        total += value
        if total > _MAX_NANOSECONDS:
            raise InvalidDuration(raw, "overflow")
        pos = match.end()
    return -total if negative else total


def parse_duration(raw: str) -> float:
    """Parse a duration literal into fractional seconds.

    Raises InvalidDuration on malformed input. No clamping or defaults.
    """
    nanos = _parse_nanoseconds(raw)
    seconds, remainder = divmod(abs(nanos), _SECOND)
    result = seconds + remainder / 1e9
    return -result if nanos < 0 else result


def convert_rtt(rtt: RoundTripTimes) -> RTTSeconds:
    """Convert min, max and median (in that order) to seconds.

    Stops at the first malformed field and raises FieldParseError naming it.
    """
    converted: dict[str, float] = {}
    for field in ("min", "max", "median"):
        raw = getattr(rtt, field)
        try:
            converted[field] = parse_duration(raw)
        except InvalidDuration as exc:
            raise FieldParseError(field, exc) from exc
    return RTTSeconds(**converted)


def convert_count(raw: str) -> float:
    """Parse a decimal numeral (leading zeros and fractions allowed)."""
    if not _DECIMAL.fullmatch(raw):
        raise InvalidNumber(raw, "invalid syntax")
    value = float(raw)
    if math.isinf(value):
        raise InvalidNumber(raw, "value out of range")
    return value


@dataclass(frozen=True)
class Conversion(Generic[T]):
    """Tagged result of converting one telemetry field."""

    field: str
    value: T
    error: FieldParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def attempt(
    field: str,
    converter: Callable[[Any], T],
    raw: Any,
    *,
    sentinel: T,
) -> Conversion[T]:
    """Run *converter* on *raw*, capturing a parse failure instead of raising."""
    try:
        return Conversion(field, converter(raw))
    except FieldParseError as exc:
        return Conversion(field, sentinel, exc)
    except ValueParseError as exc:
        return Conversion(field, sentinel, FieldParseError(field, exc))
