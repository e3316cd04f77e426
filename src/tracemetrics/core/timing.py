"""Microsecond conversions and score formatting."""

from __future__ import annotations

from enum import Enum

MICROSECONDS_PER_MILLISECOND = 1_000
MICROSECONDS_PER_SECOND = 1_000_000


class TimeUnit(str, Enum):
    MICROSECONDS = "μs"
    MILLISECONDS = "ms"
    SECONDS = "s"


_DIVISORS = {
    TimeUnit.MICROSECONDS: 1,
    TimeUnit.MILLISECONDS: MICROSECONDS_PER_MILLISECOND,
    TimeUnit.SECONDS: MICROSECONDS_PER_SECOND,
}


def milliseconds_to_microseconds(value: float) -> float:
    return value * MICROSECONDS_PER_MILLISECOND


def seconds_to_microseconds(value: float) -> float:
    return value * MICROSECONDS_PER_SECOND


def format_microseconds(
    value: float,
    unit: TimeUnit = TimeUnit.MILLISECONDS,
    *,
    maximum_fraction_digits: int = 2,
) -> str:
    """Render ``value`` (microseconds) in ``unit`` with at most N fraction digits.

    Trailing zeros are dropped and thousands are grouped, e.g. ``1.8s``,
    ``150ms``, ``1,234.5ms``.
    """

    converted = value / _DIVISORS[unit]
    text = f"{converted:,.{maximum_fraction_digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return f"{text}{unit.value}"


__all__ = [
    "MICROSECONDS_PER_MILLISECOND",
    "MICROSECONDS_PER_SECOND",
    "TimeUnit",
    "format_microseconds",
    "milliseconds_to_microseconds",
    "seconds_to_microseconds",
]
